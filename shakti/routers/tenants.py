### Description ###
# Shakti - Loan Recovery Management Platform
# - Tenant Management Router -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Tenant Management API Endpoints

Platform-operator (SuperAdmin) endpoints:
- Tenants: CRUD, newest first
- Company admins of a tenant: CRUD, password reset, status toggle
- Configuration: view and edit config.yaml
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from shakti.config import AuthSettings, DomainSettings, TenantDefaults
from shakti.database import get_db
from shakti.dependencies import (
    get_auth_settings,
    get_base_domain_cache,
    get_domain_settings,
    get_tenant_defaults,
)
from shakti.middleware.auth import require_operator
from shakti.schemas.config import ConfigResponse, ConfigUpdateRequest, ConfigUpdateResponse
from shakti.schemas.principals import (
    CompanyAdminCreate,
    CompanyAdminResponse,
    CompanyAdminUpdate,
    PasswordResetRequest,
    PasswordResetResponse,
)
from shakti.schemas.responses import APIResponse, PaginatedResponse, PaginationMeta
from shakti.schemas.tenants import TenantCreate, TenantResponse, TenantUpdate
from shakti.services import principals, tenant_resolver
from shakti.services.authenticator import SessionIdentity
from shakti.services.config_service import get_config_service
from shakti.services.tenant_resolver import BaseDomainCache
from shakti.utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _tenant_response(tenant, domain: DomainSettings) -> TenantResponse:
    response = TenantResponse.model_validate(tenant)
    response.login_url = tenant_resolver.build_tenant_url(
        tenant.subdomain, domain.base_domain, domain.environment
    )
    return response


# ========================================
# Tenant Endpoints
# ========================================

@router.get(
    "/tenants",
    response_model=PaginatedResponse[TenantResponse],
    summary="List tenants",
    description="List all tenants, newest first",
)
async def list_tenants(
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
    domain: DomainSettings = Depends(get_domain_settings),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_filter: str | None = Query(None, alias="status", description="active or inactive"),
) -> PaginatedResponse[TenantResponse]:
    """List all tenants"""
    tenants, total = tenant_resolver.list_tenants_page(db, page, page_size, status_filter)

    return PaginatedResponse(
        success=True,
        data=[_tenant_response(tenant, domain) for tenant in tenants],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post(
    "/tenants",
    response_model=APIResponse[TenantResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create tenant",
    description="Create a new tenant served from its own subdomain",
)
async def create_tenant(
    data: TenantCreate,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
    domain: DomainSettings = Depends(get_domain_settings),
    defaults: TenantDefaults = Depends(get_tenant_defaults),
) -> APIResponse[TenantResponse]:
    """Create a new tenant"""
    tenant = tenant_resolver.create_tenant(
        db,
        {**data.model_dump(exclude_none=True), "created_by": session.principal_id},
        defaults=defaults,
    )
    return APIResponse(
        success=True,
        data=_tenant_response(tenant, domain),
        message="Tenant created successfully",
    )


@router.get(
    "/tenants/{tenant_id}",
    response_model=APIResponse[TenantResponse],
    summary="Get tenant",
)
async def get_tenant(
    tenant_id: int,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
    domain: DomainSettings = Depends(get_domain_settings),
) -> APIResponse[TenantResponse]:
    tenant = tenant_resolver.get_tenant(db, tenant_id)
    return APIResponse(success=True, data=_tenant_response(tenant, domain))


@router.patch(
    "/tenants/{tenant_id}",
    response_model=APIResponse[TenantResponse],
    summary="Update tenant",
    description="Update only the supplied tenant fields",
)
async def update_tenant(
    tenant_id: int,
    data: TenantUpdate,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
    domain: DomainSettings = Depends(get_domain_settings),
) -> APIResponse[TenantResponse]:
    tenant = tenant_resolver.update_tenant(db, tenant_id, data.model_dump(exclude_unset=True))
    return APIResponse(
        success=True,
        data=_tenant_response(tenant, domain),
        message="Tenant updated successfully",
    )


@router.delete(
    "/tenants/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete tenant",
    description="Delete a tenant with its company admins and employees",
)
async def delete_tenant(
    tenant_id: int,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
):
    """Delete tenant (cascades to admins and employees)"""
    tenant_resolver.delete_tenant(db, tenant_id)


# ========================================
# Company Admin Endpoints
# ========================================

@router.get(
    "/tenants/{tenant_id}/admins",
    response_model=APIResponse[list[CompanyAdminResponse]],
    summary="List company admins",
)
async def list_company_admins(
    tenant_id: int,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
) -> APIResponse[list[CompanyAdminResponse]]:
    admins = principals.list_company_admins(db, tenant_id)
    return APIResponse(
        success=True,
        data=[CompanyAdminResponse.model_validate(admin) for admin in admins],
    )


@router.post(
    "/tenants/{tenant_id}/admins",
    response_model=APIResponse[CompanyAdminResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create company admin",
)
async def create_company_admin(
    tenant_id: int,
    data: CompanyAdminCreate,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
    auth_settings: AuthSettings = Depends(get_auth_settings),
) -> APIResponse[CompanyAdminResponse]:
    admin = principals.create_company_admin(
        db,
        tenant_id,
        data.model_dump(exclude_none=True),
        created_by=session.principal_id,
        min_password_length=auth_settings.min_password_length,
    )
    return APIResponse(
        success=True,
        data=CompanyAdminResponse.model_validate(admin),
        message="Company admin created successfully",
    )


@router.patch(
    "/tenants/{tenant_id}/admins/{admin_id}",
    response_model=APIResponse[CompanyAdminResponse],
    summary="Update company admin",
)
async def update_company_admin(
    tenant_id: int,
    admin_id: int,
    data: CompanyAdminUpdate,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
) -> APIResponse[CompanyAdminResponse]:
    admin = principals.update_company_admin(db, tenant_id, admin_id, data.model_dump(exclude_unset=True))
    return APIResponse(
        success=True,
        data=CompanyAdminResponse.model_validate(admin),
        message="Company admin updated successfully",
    )


@router.delete(
    "/tenants/{tenant_id}/admins/{admin_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete company admin",
)
async def delete_company_admin(
    tenant_id: int,
    admin_id: int,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
):
    principals.delete_company_admin(db, tenant_id, admin_id)


@router.post(
    "/tenants/{tenant_id}/admins/{admin_id}/reset-password",
    response_model=APIResponse[PasswordResetResponse],
    summary="Reset company admin password",
    description="Set a new password (generated when omitted) and clear any lockout",
)
async def reset_company_admin_password(
    tenant_id: int,
    admin_id: int,
    data: PasswordResetRequest | None = None,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
    auth_settings: AuthSettings = Depends(get_auth_settings),
) -> APIResponse[PasswordResetResponse]:
    password = principals.reset_company_admin_password(
        db,
        tenant_id,
        admin_id,
        new_password=data.new_password if data else None,
        min_password_length=auth_settings.min_password_length,
    )
    return APIResponse(
        success=True,
        data=PasswordResetResponse(principal_id=admin_id, temporary_password=password),
        message="Password reset. Share it with the admin securely; it will not be shown again.",
    )


@router.post(
    "/tenants/{tenant_id}/admins/{admin_id}/toggle-status",
    response_model=APIResponse[CompanyAdminResponse],
    summary="Toggle company admin status",
)
async def toggle_company_admin_status(
    tenant_id: int,
    admin_id: int,
    session: SessionIdentity = Depends(require_operator),
    db: Session = Depends(get_db),
) -> APIResponse[CompanyAdminResponse]:
    admin = principals.toggle_admin_status(db, tenant_id, admin_id)
    return APIResponse(
        success=True,
        data=CompanyAdminResponse.model_validate(admin),
        message=f"Company admin is now {admin.status}",
    )


# ========================================
# Configuration Management Endpoints
# ========================================

@router.get(
    "/config",
    response_model=APIResponse[ConfigResponse],
    summary="Get configuration",
    description="Get current configuration for editing (bootstrap secrets excluded)",
)
async def get_config(
    session: SessionIdentity = Depends(require_operator),
) -> APIResponse[ConfigResponse]:
    config_service = get_config_service()
    config_service.reload()
    return APIResponse(success=True, data=ConfigResponse(**config_service.get_editable_config()))


@router.patch(
    "/config",
    response_model=APIResponse[ConfigUpdateResponse],
    summary="Update configuration",
    description="Update configuration and save to config.yaml (preserves comments)",
)
async def update_config(
    data: ConfigUpdateRequest,
    session: SessionIdentity = Depends(require_operator),
    cache: BaseDomainCache = Depends(get_base_domain_cache),
) -> APIResponse[ConfigUpdateResponse]:
    """
    Validate and apply a partial configuration update.

    Domain, lockout and tenant default changes apply to the next request.
    """
    config_service = get_config_service()
    config_service.reload()

    updates = data.model_dump(exclude_none=True)
    errors = config_service.validate_update(updates)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Configuration validation failed", "errors": errors},
        )

    changed = config_service.update_from_dict(updates)
    if changed:
        config_service.save()
        logger.info(f"Config updated by operator {session.principal_id}: {', '.join(changed)}")
    if any(path.startswith("domain.") for path in changed):
        cache.dev_suffix = config_service.get("domain.dev_suffix", cache.dev_suffix)
        cache.invalidate()

    return APIResponse(
        success=True,
        data=ConfigUpdateResponse(
            changed_fields=changed,
            message=f"Updated {len(changed)} setting(s)" if changed else "No changes",
        ),
        message="Configuration saved" if changed else "Configuration unchanged",
    )
