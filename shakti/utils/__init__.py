"""
Utility module for the Shakti API
"""

from .custom_logger import apply_logging_config, get_logger, setup_logger

__all__ = [
    "apply_logging_config",
    "get_logger",
    "setup_logger",
]
