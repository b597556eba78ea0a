### Description ###
# Shakti - Loan Recovery Management Platform
# - Custom Logger Setup -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

# Standard Imports
import logging
from datetime import datetime
from pathlib import Path

LOG_DIR_NAME = "logs"
LOG_FILE_PREFIX = "shakti"

# Loggers handed out by setup_logger, so config reloads can re-level them
_managed_loggers: set[str] = set()


class CustomFormatter(logging.Formatter):
    """12-hour clock formatter; records logged with extra={"request_id": ...} are tagged"""

    def format(self, record):
        timestamp = datetime.fromtimestamp(record.created).strftime("%I:%M:%S %p")
        request_id = getattr(record, "request_id", None)
        tag = f" [{request_id}]" if request_id else ""

        formatted_msg = f"{timestamp} - {record.name}{tag} - {record.levelname}: {record.getMessage()}"
        if record.exc_info:
            formatted_msg += "\n" + self.formatException(record.exc_info)
        return formatted_msg


def get_log_dir() -> Path:
    """logs/ under the project root, created on demand"""
    log_dir = Path(__file__).resolve().parent.parent.parent / LOG_DIR_NAME
    log_dir.mkdir(exist_ok=True)
    return log_dir


def get_log_file(day: datetime | None = None) -> Path:
    """One file per calendar day: logs/shakti_YYYY-MM-DD.log"""
    day = day or datetime.now()
    return get_log_dir() / f"{LOG_FILE_PREFIX}_{day.strftime('%Y-%m-%d')}.log"


def setup_logger(
    name: str,
    level: int | str = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Set up a Shakti logger

    Handlers are attached only once per logger name; later calls return
    the existing logger unchanged.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_to_file: Append to the daily file in logs/
        log_to_console: Write to stderr

    Example:
        logger = setup_logger(__name__)
        logger.info("Tenant created: acme")
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False
    formatter = CustomFormatter()

    handlers: list[logging.Handler] = []
    if log_to_file:
        handlers.append(logging.FileHandler(get_log_file(), encoding="utf-8"))
    if log_to_console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _managed_loggers.add(name)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger using SHAKTI_LOG_LEVEL / SHAKTI_LOG_TO_FILE

    Args:
        name: Logger name (typically __name__)
    """
    from shakti.config import get_api_settings

    settings = get_api_settings()
    return setup_logger(
        name,
        level=settings.log_level.upper(),
        log_to_file=settings.log_to_file,
    )


def apply_logging_config(config: dict) -> str | None:
    """
    Re-level every managed logger from config.yaml application.logging.level.

    Returns:
        The level applied, or None when config.yaml sets none
    """
    level = ((config.get("application") or {}).get("logging") or {}).get("level")
    if not level:
        return None

    level = str(level).upper()
    for name in _managed_loggers:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    return level
