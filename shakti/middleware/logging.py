### Description ###
# Shakti - Loan Recovery Management Platform
# - Request Logging Middleware -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Request Logging Middleware

One log line per request, attributed to the session behind it:

    [a1b2c3d4] POST /api/v1/auth/login | host=acme.yourapp.com | who=anonymous | ip=10.0.0.7 | status=401 | time=84.12ms

Requests are also stored in access_logs. Login attempts are always
stored, so refused and failed logins leave an audit trail.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from shakti.config import get_api_settings
from shakti.database import SessionLocal
from shakti.models.access_log import AccessLog
from shakti.utils import setup_logger

api_logger = setup_logger(
    "shakti_api",
    level=get_api_settings().log_level.upper(),
    log_to_file=get_api_settings().log_to_file,
    log_to_console=False,
)


def describe_principal(identity) -> str:
    """role:id[@tenant] for log lines"""
    if identity is None:
        return "anonymous"
    who = f"{identity.role}:{identity.principal_id}"
    return f"{who}@{identity.tenant_id}" if identity.tenant_id is not None else who


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request ID, file log line and access_logs row for every request

    The session identity is read from request.state.session_identity,
    which the auth dependencies and the login endpoint set.
    """

    # Logged to file only
    EXCLUDE_FROM_DB = (
        "/health",
        "/api/docs",
        "/api/redoc",
        "/api/openapi.json",
        "/favicon.ico",
    )

    def __init__(self, app, session_factory: Callable = SessionLocal):
        super().__init__(app)
        self.session_factory = session_factory

    def _should_log_to_db(self, path: str) -> bool:
        return path != "/" and not path.startswith(self.EXCLUDE_FROM_DB)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        method, path = request.method, request.url.path
        query = request.url.query or ""
        host = request.headers.get("Host", "")
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            api_logger.error(f"{method} {path} | host={host} - {e!s}", extra={"request_id": request_id})
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        identity = getattr(request.state, "session_identity", None)

        line = (
            f"{method} {path}{f'?{query}' if query else ''} "
            f"| host={host} "
            f"| who={describe_principal(identity)} "
            f"| ip={client_ip} "
            f"| status={response.status_code} "
            f"| time={elapsed_ms:.2f}ms"
        )
        if response.status_code >= 500:
            api_logger.error(line, extra={"request_id": request_id})
        elif response.status_code >= 400:
            api_logger.warning(line, extra={"request_id": request_id})
        else:
            api_logger.info(line, extra={"request_id": request_id})

        response.headers["X-Request-ID"] = request_id

        if self._should_log_to_db(path):
            self._save_access_log(
                AccessLog.for_request(
                    request_id,
                    method,
                    path,
                    response.status_code,
                    elapsed_ms,
                    identity=identity,
                    host=host,
                    query_string=query,
                    client_ip=client_ip,
                    user_agent=request.headers.get("User-Agent"),
                )
            )

        return response

    def _save_access_log(self, entry: AccessLog) -> None:
        """Own session per entry; a failed write is logged and never fails the request"""
        db = None
        try:
            db = self.session_factory()
            db.add(entry)
            db.commit()
        except SQLAlchemyError as e:
            api_logger.error(f"Failed to save access log {entry!r}: {e!s}")
        finally:
            if db is not None:
                db.close()
