### Description ###
# Shakti - Loan Recovery Management Platform
# - Rate Limiting Middleware -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Rate Limiting Middleware

Per-client-IP rate limiting using slowapi. Applied to the login endpoint
on top of the per-account lockout.
"""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shakti.config import get_api_settings
from shakti.schemas.responses import ErrorResponse


def get_client_identifier(request: Request) -> str:
    """Rate limit identifier: the client IP"""
    return f"ip:{get_remote_address(request)}"


def get_login_rate_limit() -> str:
    """Login limit string like "10/minute" (SHAKTI_LOGIN_RATE_LIMIT)"""
    return get_api_settings().login_rate_limit


limiter = Limiter(key_func=get_client_identifier, storage_uri="memory://")


def _window_seconds(exc: RateLimitExceeded) -> int:
    """Length of the exceeded window, e.g. 60 for "10/minute" """
    item = getattr(exc.limit, "limit", None)
    return item.get_expiry() if item is not None else 60


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the standard error envelope, Retry-After set to the limit window"""
    retry_after = _window_seconds(exc)
    body = ErrorResponse(
        error=f"Too many requests ({exc.detail}). Please try again later.",
        code="RateLimited",
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=429,
        content=body.model_dump(),
        headers={"Retry-After": str(retry_after)},
    )
