### Description ###
# Shakti - Loan Recovery Management Platform
# - Authentication Router -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Authentication API Endpoints

- GET  /tenant                 tenant behind the request host
- POST /auth/login             role-scoped login, returns a session token
- GET  /auth/me                current session
- POST /auth/logout            acknowledge logout (tokens are stateless)
- POST /auth/change-password   self-service password change
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shakti.config import AuthSettings, DomainSettings
from shakti.database import get_db
from shakti.dependencies import (
    get_auth_settings,
    get_authenticator,
    get_base_domain_cache,
    get_domain_settings,
)
from shakti.middleware.auth import dashboard_for, get_current_session, get_request_host
from shakti.middleware.rate_limit import get_login_rate_limit, limiter
from shakti.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse, SessionResponse
from shakti.schemas.responses import APIResponse
from shakti.schemas.tenants import TenantContextResponse, TenantSummary
from shakti.services import principals
from shakti.services.authenticator import Authenticator, SessionIdentity
from shakti.services.sessions import issue_session_token
from shakti.services.tenant_resolver import BaseDomainCache, resolve_tenant_for_host

router = APIRouter()


@router.get(
    "/tenant",
    response_model=APIResponse[TenantContextResponse],
    summary="Resolve tenant",
    description="Classify the request host and return its tenant, if any",
)
async def get_tenant_context(
    request: Request,
    db: Session = Depends(get_db),
    domain: DomainSettings = Depends(get_domain_settings),
    cache: BaseDomainCache = Depends(get_base_domain_cache),
) -> APIResponse[TenantContextResponse]:
    """Tenant context for the host the client addressed"""
    hostname = get_request_host(request)
    context = resolve_tenant_for_host(db, hostname, domain.dev_suffix)

    if context.is_root:
        message = f"Platform domain {cache.get(hostname)}"
    elif context.tenant is None:
        message = f"No organization registered for '{context.label}'"
    elif not context.is_usable:
        message = f"Organization '{context.label}' is inactive"
    else:
        message = None

    return APIResponse(
        success=True,
        data=TenantContextResponse(
            hostname=context.hostname,
            is_root=context.is_root,
            label=context.label,
            is_usable=context.is_usable,
            tenant=TenantSummary.model_validate(context.tenant) if context.is_usable else None,
        ),
        message=message,
    )


@router.post(
    "/auth/login",
    response_model=APIResponse[LoginResponse],
    summary="Login",
    description="Authenticate for a role and receive a session token",
)
@limiter.limit(get_login_rate_limit)
async def login(
    request: Request,
    data: LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator),
) -> APIResponse[LoginResponse]:
    """
    Authenticate and return a session token.

    SuperAdmin logs in on any host; every other role needs the host to
    resolve to an active tenant.
    """
    identity = authenticator.authenticate(
        data.identifier, data.password, data.role, get_request_host(request)
    )
    request.state.session_identity = identity

    token, expires_in = issue_session_token(identity)

    return APIResponse(
        success=True,
        data=LoginResponse(
            token=token,
            expires_in=expires_in,
            session=SessionResponse(**identity.to_dict()),
            dashboard=dashboard_for(identity.role),
        ),
        message="Login successful",
    )


@router.get(
    "/auth/me",
    response_model=APIResponse[SessionResponse],
    summary="Current session",
)
async def get_me(
    session: SessionIdentity = Depends(get_current_session),
) -> APIResponse[SessionResponse]:
    return APIResponse(success=True, data=SessionResponse(**session.to_dict()))


@router.post(
    "/auth/logout",
    response_model=APIResponse[None],
    summary="Logout",
    description="Acknowledge logout; the client discards its token",
)
async def logout(
    session: SessionIdentity = Depends(get_current_session),
) -> APIResponse[None]:
    return APIResponse(success=True, message="Logged out")


@router.post(
    "/auth/change-password",
    response_model=APIResponse[None],
    summary="Change password",
    description="Change the password of the signed-in account",
)
async def change_password(
    data: ChangePasswordRequest,
    session: SessionIdentity = Depends(get_current_session),
    db: Session = Depends(get_db),
    auth_settings: AuthSettings = Depends(get_auth_settings),
) -> APIResponse[None]:
    """
    Change the current principal's password.

    Requires the current password for verification.
    """
    principal = principals.get_principal(db, session.role, session.principal_id, session.tenant_id)
    principals.change_password(
        db,
        principal,
        data.current_password,
        data.new_password,
        min_password_length=auth_settings.min_password_length,
    )
    return APIResponse(success=True, message="Password changed successfully")
