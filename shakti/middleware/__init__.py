### Description ###
# Shakti - Loan Recovery Management Platform
# - Middleware Package -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Middleware Package

Contains middleware for request processing:
- auth: Session token validation and role checks
- logging: Request/response logging
- rate_limit: Per-IP rate limiting for login
"""

from .auth import (
    get_current_session,
    get_request_host,
    require_operator,
    require_role,
    require_tenant_admin,
)
from .logging import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "get_current_session",
    "get_request_host",
    "require_operator",
    "require_role",
    "require_tenant_admin",
]
