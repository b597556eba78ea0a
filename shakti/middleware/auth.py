### Description ###
# Shakti - Loan Recovery Management Platform
# - Session Authentication Middleware -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Session Authentication

Bearer session tokens (issued by POST /auth/login) are decoded into a
SessionIdentity. Role checks and the tenant/host match for tenant-scoped
endpoints are expressed as dependencies.
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from shakti.config import get_api_settings
from shakti.database import get_db
from shakti.dependencies import get_domain_settings
from shakti.errors import NotFound
from shakti.models import Role
from shakti.services import principals
from shakti.services.authenticator import SessionIdentity
from shakti.services.sessions import decode_session_token
from shakti.services.tenant_resolver import resolve_tenant_for_host

# Bearer token for session authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Where each role lands after login
DASHBOARD_PATHS = {
    Role.SUPER_ADMIN.value: "/superadmin",
    Role.COMPANY_ADMIN.value: "/companyadmin",
    Role.TEAM_INCHARGE.value: "/teamincharge",
    Role.TELECALLER.value: "/telecaller",
}

# Roles allowed on each dashboard (higher roles may open lower dashboards)
DASHBOARD_ACCESS = {
    "/superadmin": (Role.SUPER_ADMIN.value,),
    "/companyadmin": (Role.SUPER_ADMIN.value, Role.COMPANY_ADMIN.value),
    "/teamincharge": (Role.SUPER_ADMIN.value, Role.COMPANY_ADMIN.value, Role.TEAM_INCHARGE.value),
    "/telecaller": tuple(DASHBOARD_PATHS),
}


def dashboard_for(role: str) -> str:
    """Landing path for a role ("/" for anything unknown)"""
    return DASHBOARD_PATHS.get(role, "/")


def can_access_dashboard(role: str, path: str) -> bool:
    return role in DASHBOARD_ACCESS.get(path, ())


def get_request_host(request: Request) -> str:
    """
    Host name the client addressed.

    X-Forwarded-Host is only honoured when trust_forwarded_host is set;
    the first value wins when a proxy chain appends several.
    """
    if get_api_settings().trust_forwarded_host:
        forwarded = request.headers.get("X-Forwarded-Host")
        if forwarded:
            return forwarded.split(",")[0].strip()

    host = request.headers.get("Host")
    if host:
        return host
    return request.url.hostname or ""


async def get_current_session(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> SessionIdentity:
    """
    Validate the bearer session token.

    Raises:
        HTTPException: 401 when missing, expired or invalid
    """
    if not bearer or not bearer.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = decode_session_token(bearer.credentials)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Store in request state for access logging
    request.state.session_identity = identity
    return identity


def require_role(*roles: str | Role):
    """
    Dependency factory for role checking

    Usage:
        @router.get("/protected")
        async def protected_route(
            session: SessionIdentity = Depends(require_role(Role.SUPER_ADMIN)),
        ):
            ...
    """
    allowed = {role.value if isinstance(role, Role) else role for role in roles}

    async def check_role(
        session: SessionIdentity = Security(get_current_session),
    ) -> SessionIdentity:
        if session.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {' or '.join(sorted(allowed))} required",
            )
        return session

    return check_role


require_operator = require_role(Role.SUPER_ADMIN)


async def require_tenant_admin(
    request: Request,
    session: SessionIdentity = Depends(require_role(Role.COMPANY_ADMIN)),
    db: Session = Depends(get_db),
) -> SessionIdentity:
    """
    Active CompanyAdmin whose tenant is the (active) tenant behind the
    request host.

    The admin row is reloaded on every request, so a deactivated or deleted
    admin loses access before their token expires.

    Raises:
        HTTPException: 403 when the host belongs to another tenant, the
            tenant is missing or inactive, or the admin is gone or inactive
    """
    context = resolve_tenant_for_host(db, get_request_host(request), get_domain_settings().dev_suffix)
    if not context.is_usable or context.tenant.id != session.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Session does not belong to this organization",
        )

    try:
        admin = principals.get_principal(db, session.role, session.principal_id, session.tenant_id)
    except NotFound:
        admin = None
    if admin is None or not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is inactive. Please contact your administrator.",
        )
    return session
