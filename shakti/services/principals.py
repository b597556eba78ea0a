### Description ###
# Shakti - Loan Recovery Management Platform
# - Principal Management -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Principal Management

Create, update, delete, reset and toggle the accounts that sign in:
- Company admins (managed by platform operators)
- Employees (managed by the tenant's company admins)
- Platform operators (bootstrap and CLI only)

All create paths check that the tenant exists, that per-tenant unique
fields are free and that the tenant's max_users limit is not exceeded.
"""

from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from shakti.database import reject_null_updates, store_errors
from shakti.errors import Conflict, NotFound, ValidationFailed
from shakti.models import (
    CompanyAdmin,
    Employee,
    PlatformOperator,
    Tenant,
    generate_temporary_password,
)
from shakti.models.principals import EMPLOYEE_ROLES, PRINCIPAL_STATUSES
from shakti.utils import get_logger

logger = get_logger(__name__)

DEFAULT_MIN_PASSWORD_LENGTH = 8

# bcrypt only hashes the first 72 bytes and refuses longer input
MAX_PASSWORD_BYTES = 72

ADMIN_FIELDS = ("username", "name", "employee_code", "email", "status")
EMPLOYEE_FIELDS = ("name", "mobile", "employee_code", "role", "status")


# ========================================
# Shared Helpers
# ========================================

def check_password_strength(password: str | None, min_length: int = DEFAULT_MIN_PASSWORD_LENGTH) -> str:
    """
    Raises:
        ValidationFailed: password shorter than min_length, or longer than
            MAX_PASSWORD_BYTES once UTF-8 encoded
    """
    if not password or len(password) < min_length:
        raise ValidationFailed(f"Password must be at least {min_length} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationFailed(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


def _require_tenant(db: Session, tenant_id: int) -> Tenant:
    with store_errors(db):
        tenant = db.query(Tenant).filter(Tenant.id == tenant_id).one_or_none()
    if tenant is None:
        raise NotFound(f"Tenant {tenant_id} not found")
    return tenant


def count_tenant_users(db: Session, tenant_id: int) -> int:
    """Company admins plus employees of a tenant"""
    with store_errors(db):
        admins = db.query(func.count(CompanyAdmin.id)).filter(CompanyAdmin.tenant_id == tenant_id).scalar()
        employees = db.query(func.count(Employee.id)).filter(Employee.tenant_id == tenant_id).scalar()
    return (admins or 0) + (employees or 0)


def _check_user_limit(db: Session, tenant: Tenant) -> None:
    if tenant.max_users and count_tenant_users(db, tenant.id) >= tenant.max_users:
        raise Conflict(f"Tenant '{tenant.subdomain}' has reached its limit of {tenant.max_users} users")


def _is_free(db: Session, model, tenant_id: int, column: str, value: Any, exclude_id: int | None) -> bool:
    if value in (None, ""):
        return True
    query = db.query(model).filter(model.tenant_id == tenant_id, getattr(model, column) == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    with store_errors(db):
        return not db.query(query.exists()).scalar()


def _check_status(status: str | None) -> None:
    if status is not None and status not in PRINCIPAL_STATUSES:
        raise ValidationFailed(f"Invalid status '{status}'")


def _new_or_temporary(new_password: str | None, min_length: int) -> str:
    if new_password:
        return check_password_strength(new_password, min_length)
    return generate_temporary_password()


def _commit(db: Session, row, conflict_message: str):
    with store_errors(db, conflict_message):
        db.commit()
        db.refresh(row)
    return row


# ========================================
# Company Admins
# ========================================

def list_company_admins(db: Session, tenant_id: int) -> list[CompanyAdmin]:
    """Admins of a tenant, newest first"""
    _require_tenant(db, tenant_id)
    with store_errors(db):
        return (
            db.query(CompanyAdmin)
            .filter(CompanyAdmin.tenant_id == tenant_id)
            .order_by(CompanyAdmin.created_at.desc(), CompanyAdmin.id.desc())
            .all()
        )


def get_company_admin(db: Session, tenant_id: int, admin_id: int) -> CompanyAdmin:
    with store_errors(db):
        admin = (
            db.query(CompanyAdmin)
            .filter(CompanyAdmin.id == admin_id, CompanyAdmin.tenant_id == tenant_id)
            .one_or_none()
        )
    if admin is None:
        raise NotFound(f"Company admin {admin_id} not found")
    return admin


def is_admin_email_unique(
    db: Session, tenant_id: int, email: str | None, exclude_id: int | None = None
) -> bool:
    """True when no other admin of the tenant uses this email"""
    return _is_free(db, CompanyAdmin, tenant_id, "email", email, exclude_id)


def is_admin_employee_code_unique(
    db: Session, tenant_id: int, employee_code: str | None, exclude_id: int | None = None
) -> bool:
    """True when no other admin of the tenant uses this employee code"""
    return _is_free(db, CompanyAdmin, tenant_id, "employee_code", employee_code, exclude_id)


def _check_admin_unique(db: Session, tenant_id: int, values: Mapping[str, Any], exclude_id: int | None = None):
    if not _is_free(db, CompanyAdmin, tenant_id, "username", values.get("username"), exclude_id):
        raise Conflict(f"Username '{values['username']}' is already taken")
    if not is_admin_email_unique(db, tenant_id, values.get("email"), exclude_id):
        raise Conflict(f"Email '{values['email']}' is already in use")
    if not is_admin_employee_code_unique(db, tenant_id, values.get("employee_code"), exclude_id):
        raise Conflict(f"Employee code '{values['employee_code']}' is already in use")


def create_company_admin(
    db: Session,
    tenant_id: int,
    data: Mapping[str, Any],
    created_by: int | None = None,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> CompanyAdmin:
    """
    Create a company admin for a tenant.

    Raises:
        NotFound: tenant does not exist
        Conflict: username/email/employee code taken, or user limit reached
        ValidationFailed: weak password or bad status
    """
    tenant = _require_tenant(db, tenant_id)
    password = check_password_strength(data.get("password"), min_password_length)

    values = {key: data[key] for key in ADMIN_FIELDS if data.get(key) is not None}
    if not values.get("username"):
        raise ValidationFailed("Username is required")
    _check_status(values.get("status"))
    _check_admin_unique(db, tenant.id, values)
    _check_user_limit(db, tenant)

    admin = CompanyAdmin(tenant_id=tenant.id, created_by=created_by, **values)
    admin.set_password(password)

    with store_errors(db, "Company admin already exists"):
        db.add(admin)
        db.commit()
        db.refresh(admin)

    logger.info(f"Company admin created: {admin.id} ({admin.username}) for tenant {tenant.subdomain}")
    return admin


def update_company_admin(
    db: Session, tenant_id: int, admin_id: int, fields: Mapping[str, Any]
) -> CompanyAdmin:
    """Partially update a company admin; password changes go through reset"""
    admin = get_company_admin(db, tenant_id, admin_id)

    updates = {key: value for key, value in fields.items() if key in ADMIN_FIELDS}
    reject_null_updates(CompanyAdmin, updates)
    _check_status(updates.get("status"))
    _check_admin_unique(db, tenant_id, updates, exclude_id=admin.id)

    for key, value in updates.items():
        setattr(admin, key, value)

    _commit(db, admin, "Company admin already exists")
    logger.info(f"Company admin updated: {admin.id} ({', '.join(sorted(updates)) or 'no changes'})")
    return admin


def delete_company_admin(db: Session, tenant_id: int, admin_id: int) -> None:
    admin = get_company_admin(db, tenant_id, admin_id)
    with store_errors(db):
        db.delete(admin)
        db.commit()
    logger.info(f"Company admin deleted: {admin_id} (tenant {tenant_id})")


def reset_company_admin_password(
    db: Session,
    tenant_id: int,
    admin_id: int,
    new_password: str | None = None,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> str:
    """
    Replace an admin's password and clear any lockout.

    Returns:
        The new password (generated when none was supplied)
    """
    admin = get_company_admin(db, tenant_id, admin_id)
    password = _new_or_temporary(new_password, min_password_length)
    admin.set_password(password)
    _commit(db, admin, "Company admin already exists")
    logger.info(f"Company admin password reset: {admin.id}")
    return password


def toggle_admin_status(db: Session, tenant_id: int, admin_id: int) -> CompanyAdmin:
    """Flip active <-> inactive"""
    admin = get_company_admin(db, tenant_id, admin_id)
    admin.status = "inactive" if admin.status == "active" else "active"
    _commit(db, admin, "Company admin already exists")
    logger.info(f"Company admin {admin.id} is now {admin.status}")
    return admin


# ========================================
# Employees
# ========================================

def _check_role(role: str | None) -> None:
    if role is not None and role not in EMPLOYEE_ROLES:
        raise ValidationFailed(f"Invalid employee role '{role}'")


def _check_employee_unique(db: Session, tenant_id: int, values: Mapping[str, Any], exclude_id: int | None = None):
    if not _is_free(db, Employee, tenant_id, "mobile", values.get("mobile"), exclude_id):
        raise Conflict(f"Mobile number '{values['mobile']}' is already registered")
    if not _is_free(db, Employee, tenant_id, "employee_code", values.get("employee_code"), exclude_id):
        raise Conflict(f"Employee code '{values['employee_code']}' is already in use")


def list_employees(db: Session, tenant_id: int, role: str | None = None) -> list[Employee]:
    """Employees of a tenant, newest first, optionally filtered by role"""
    _check_role(role)
    with store_errors(db):
        query = db.query(Employee).filter(Employee.tenant_id == tenant_id)
        if role:
            query = query.filter(Employee.role == role)
        return query.order_by(Employee.created_at.desc(), Employee.id.desc()).all()


def get_employee(db: Session, tenant_id: int, employee_id: int) -> Employee:
    with store_errors(db):
        employee = (
            db.query(Employee)
            .filter(Employee.id == employee_id, Employee.tenant_id == tenant_id)
            .one_or_none()
        )
    if employee is None:
        raise NotFound(f"Employee {employee_id} not found")
    return employee


def create_employee(
    db: Session,
    tenant_id: int,
    data: Mapping[str, Any],
    created_by: int | None = None,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> Employee:
    """
    Create a TeamIncharge or Telecaller.

    Raises:
        NotFound: tenant does not exist
        Conflict: mobile/employee code taken, or user limit reached
        ValidationFailed: weak password, bad role or status
    """
    tenant = _require_tenant(db, tenant_id)
    password = check_password_strength(data.get("password"), min_password_length)

    values = {key: data[key] for key in EMPLOYEE_FIELDS if data.get(key) is not None}
    for required in ("name", "mobile", "employee_code", "role"):
        if not values.get(required):
            raise ValidationFailed(f"{required.replace('_', ' ').capitalize()} is required")
    _check_role(values["role"])
    _check_status(values.get("status"))
    _check_employee_unique(db, tenant.id, values)
    _check_user_limit(db, tenant)

    employee = Employee(tenant_id=tenant.id, created_by=created_by, **values)
    employee.set_password(password)

    with store_errors(db, "Employee already exists"):
        db.add(employee)
        db.commit()
        db.refresh(employee)

    logger.info(f"Employee created: {employee.id} ({employee.employee_code}, {employee.role}) for tenant {tenant.subdomain}")
    return employee


def update_employee(
    db: Session, tenant_id: int, employee_id: int, fields: Mapping[str, Any]
) -> Employee:
    employee = get_employee(db, tenant_id, employee_id)

    updates = {key: value for key, value in fields.items() if key in EMPLOYEE_FIELDS}
    reject_null_updates(Employee, updates)
    _check_role(updates.get("role"))
    _check_status(updates.get("status"))
    _check_employee_unique(db, tenant_id, updates, exclude_id=employee.id)

    for key, value in updates.items():
        setattr(employee, key, value)

    _commit(db, employee, "Employee already exists")
    logger.info(f"Employee updated: {employee.id} ({', '.join(sorted(updates)) or 'no changes'})")
    return employee


def delete_employee(db: Session, tenant_id: int, employee_id: int) -> None:
    employee = get_employee(db, tenant_id, employee_id)
    with store_errors(db):
        db.delete(employee)
        db.commit()
    logger.info(f"Employee deleted: {employee_id} (tenant {tenant_id})")


def reset_employee_password(
    db: Session,
    tenant_id: int,
    employee_id: int,
    new_password: str | None = None,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> str:
    """Replace an employee's password and clear any lockout; returns the new password"""
    employee = get_employee(db, tenant_id, employee_id)
    password = _new_or_temporary(new_password, min_password_length)
    employee.set_password(password)
    _commit(db, employee, "Employee already exists")
    logger.info(f"Employee password reset: {employee.id}")
    return password


def toggle_employee_status(db: Session, tenant_id: int, employee_id: int) -> Employee:
    employee = get_employee(db, tenant_id, employee_id)
    employee.status = "inactive" if employee.status == "active" else "active"
    _commit(db, employee, "Employee already exists")
    logger.info(f"Employee {employee.id} is now {employee.status}")
    return employee


# ========================================
# Platform Operators
# ========================================

def create_platform_operator(
    db: Session,
    username: str,
    password: str | None = None,
    password_hash: str | None = None,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> PlatformOperator:
    """
    Create a SuperAdmin account.

    Pass either a plaintext password or a precomputed bcrypt hash.

    Raises:
        Conflict: username already taken
        ValidationFailed: missing username, or weak/missing password
    """
    username = (username or "").strip()
    if not username:
        raise ValidationFailed("Username is required")

    operator = PlatformOperator(username=username)
    if password_hash:
        operator.password_hash = password_hash
        operator.failed_login_attempts = 0
    else:
        operator.set_password(check_password_strength(password, min_password_length))

    with store_errors(db, f"Operator '{username}' already exists"):
        db.add(operator)
        db.commit()
        db.refresh(operator)

    logger.info(f"Platform operator created: {operator.id} ({operator.username})")
    return operator


def get_principal(db: Session, role: str, principal_id: int, tenant_id: int | None = None):
    """
    Load the row behind a session identity.

    Raises:
        NotFound: the principal no longer exists
    """
    if role == PlatformOperator.role:
        model = PlatformOperator
    elif role == CompanyAdmin.role:
        model = CompanyAdmin
    else:
        model = Employee

    with store_errors(db):
        query = db.query(model).filter(model.id == principal_id)
        if model is not PlatformOperator:
            query = query.filter(model.tenant_id == tenant_id)
        principal = query.one_or_none()
    if principal is None:
        raise NotFound("Account not found")
    return principal


def change_password(
    db: Session,
    principal,
    current_password: str,
    new_password: str,
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
) -> None:
    """
    Self-service password change.

    Raises:
        ValidationFailed: current password wrong, or new one too weak
    """
    if not principal.verify_password(current_password or ""):
        raise ValidationFailed("Current password is incorrect")
    principal.set_password(check_password_strength(new_password, min_password_length))
    _commit(db, principal, "Account already exists")
    logger.info(f"Password changed for {principal!r}")
