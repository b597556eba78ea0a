### Description ###
# Shakti - Loan Recovery Management Platform
# - Employee Management Router -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Employee Management API Endpoints

CompanyAdmin endpoints for the tenant behind the request host. The
session's tenant must match the host's tenant.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shakti.config import AuthSettings
from shakti.database import get_db
from shakti.dependencies import get_auth_settings
from shakti.middleware.auth import require_tenant_admin
from shakti.schemas.principals import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeRole,
    EmployeeUpdate,
    PasswordResetRequest,
    PasswordResetResponse,
)
from shakti.schemas.responses import APIResponse
from shakti.services import principals
from shakti.services.authenticator import SessionIdentity

router = APIRouter()


@router.get(
    "",
    response_model=APIResponse[list[EmployeeResponse]],
    summary="List employees",
    description="Employees of the current organization, newest first",
)
async def list_employees(
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
    role: EmployeeRole | None = Query(None, description="Filter by role"),
) -> APIResponse[list[EmployeeResponse]]:
    employees = principals.list_employees(db, session.tenant_id, role)
    return APIResponse(
        success=True,
        data=[EmployeeResponse.model_validate(employee) for employee in employees],
    )


@router.post(
    "",
    response_model=APIResponse[EmployeeResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create employee",
)
async def create_employee(
    data: EmployeeCreate,
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
    auth_settings: AuthSettings = Depends(get_auth_settings),
) -> APIResponse[EmployeeResponse]:
    employee = principals.create_employee(
        db,
        session.tenant_id,
        data.model_dump(exclude_none=True),
        created_by=session.principal_id,
        min_password_length=auth_settings.min_password_length,
    )
    return APIResponse(
        success=True,
        data=EmployeeResponse.model_validate(employee),
        message="Employee created successfully",
    )


@router.get(
    "/{employee_id}",
    response_model=APIResponse[EmployeeResponse],
    summary="Get employee",
)
async def get_employee(
    employee_id: int,
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
) -> APIResponse[EmployeeResponse]:
    employee = principals.get_employee(db, session.tenant_id, employee_id)
    return APIResponse(success=True, data=EmployeeResponse.model_validate(employee))


@router.patch(
    "/{employee_id}",
    response_model=APIResponse[EmployeeResponse],
    summary="Update employee",
)
async def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
) -> APIResponse[EmployeeResponse]:
    employee = principals.update_employee(
        db, session.tenant_id, employee_id, data.model_dump(exclude_unset=True)
    )
    return APIResponse(
        success=True,
        data=EmployeeResponse.model_validate(employee),
        message="Employee updated successfully",
    )


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete employee",
)
async def delete_employee(
    employee_id: int,
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
):
    principals.delete_employee(db, session.tenant_id, employee_id)


@router.post(
    "/{employee_id}/reset-password",
    response_model=APIResponse[PasswordResetResponse],
    summary="Reset employee password",
    description="Set a new password (generated when omitted) and clear any lockout",
)
async def reset_employee_password(
    employee_id: int,
    data: PasswordResetRequest | None = None,
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
    auth_settings: AuthSettings = Depends(get_auth_settings),
) -> APIResponse[PasswordResetResponse]:
    password = principals.reset_employee_password(
        db,
        session.tenant_id,
        employee_id,
        new_password=data.new_password if data else None,
        min_password_length=auth_settings.min_password_length,
    )
    return APIResponse(
        success=True,
        data=PasswordResetResponse(principal_id=employee_id, temporary_password=password),
        message="Password reset. It will not be shown again.",
    )


@router.post(
    "/{employee_id}/toggle-status",
    response_model=APIResponse[EmployeeResponse],
    summary="Toggle employee status",
)
async def toggle_employee_status(
    employee_id: int,
    session: SessionIdentity = Depends(require_tenant_admin),
    db: Session = Depends(get_db),
) -> APIResponse[EmployeeResponse]:
    employee = principals.toggle_employee_status(db, session.tenant_id, employee_id)
    return APIResponse(
        success=True,
        data=EmployeeResponse.model_validate(employee),
        message=f"Employee is now {employee.status}",
    )
