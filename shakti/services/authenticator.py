### Description ###
# Shakti - Loan Recovery Management Platform
# - Authenticator -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Authenticator

Verifies a role-scoped credential pair and produces a SessionIdentity.

Flow:
    SuperAdmin:
        lookup operator -> verify password -> session
    CompanyAdmin / TeamIncharge / Telecaller:
        resolve tenant from host (missing or inactive -> TenantUnavailable)
        -> lookup principal within the tenant
        -> active? -> not locked? -> verify password
        -> (employees) stored role == claimed role? -> session

Every failure the caller can see uses the same generic message for
"unknown user" and "wrong password".
"""

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shakti.database import store_errors
from shakti.errors import (
    AccountInactive,
    AccountLocked,
    InvalidCredential,
    RoleMismatch,
    TenantUnavailable,
    ValidationFailed,
)
from shakti.models import CompanyAdmin, Employee, PlatformOperator, Role, Tenant
from shakti.services.tenant_resolver import DEFAULT_DEV_SUFFIX, resolve_tenant_for_host
from shakti.utils import get_logger

logger = get_logger(__name__)


@dataclass
class SessionIdentity:
    """Minimal authenticated identity handed to the caller after login"""

    principal_id: int
    name: str
    role: str
    tenant_id: int | None = None
    email: str | None = None
    username: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionIdentity":
        """Build from a dict, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_principal(cls, principal, role: str | None = None) -> "SessionIdentity":
        return cls(
            principal_id=principal.id,
            name=principal.display_name,
            role=role or principal.role,
            tenant_id=principal.tenant_id,
            email=getattr(principal, "email", None),
            username=getattr(principal, "username", None),
        )

    @property
    def role_enum(self) -> Role:
        return Role(self.role)


@dataclass
class LockoutPolicy:
    """Consecutive-failure lockout settings"""

    enabled: bool = True
    max_attempts: int = 5
    lock_minutes: int = 15

    @classmethod
    def from_settings(cls, settings) -> "LockoutPolicy":
        """Build from config.AuthSettings"""
        return cls(
            enabled=settings.lockout_enabled,
            max_attempts=settings.max_attempts,
            lock_minutes=settings.lock_minutes,
        )


def parse_role(role: str | Role) -> Role:
    """
    Convert a role claim into a Role.

    Raises:
        ValidationFailed: not one of the four login roles
    """
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        raise ValidationFailed(f"Unknown role '{role}'") from None


class Authenticator:
    """
    Role-scoped credential verification.

    One instance per request; it borrows the request's database session.

    Usage:
        identity = Authenticator(db).authenticate("bob", "pw", "CompanyAdmin", "acme.yourapp.com")
    """

    def __init__(
        self,
        db: Session,
        lockout: LockoutPolicy | None = None,
        dev_suffix: str = DEFAULT_DEV_SUFFIX,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.lockout = lockout or LockoutPolicy()
        self.dev_suffix = dev_suffix
        self.clock = clock

    def authenticate(
        self, identifier: str, password: str, role: str | Role, hostname: str | None
    ) -> SessionIdentity:
        """
        Verify a credential pair for the claimed role.

        Args:
            identifier: username (SuperAdmin, CompanyAdmin) or mobile /
                employee code (TeamIncharge, Telecaller)
            password: plaintext password
            role: role selected at login
            hostname: request host, used to resolve the tenant

        Raises:
            TenantUnavailable, InvalidCredential, AccountInactive,
            AccountLocked, RoleMismatch, DependencyUnavailable
        """
        claimed = parse_role(role)
        identifier = (identifier or "").strip()

        if claimed is Role.SUPER_ADMIN:
            principal = self._lookup_operator(identifier)
        else:
            tenant = self._resolve_tenant(hostname)
            if claimed is Role.COMPANY_ADMIN:
                principal = self._lookup_company_admin(tenant, identifier)
            else:
                principal = self._lookup_employee(tenant, identifier)

        if principal is None:
            logger.info(f"Login failed: no {claimed.value} '{identifier}' on host '{hostname}'")
            raise InvalidCredential()

        return self._verify(principal, password, claimed)

    # ========================================
    # Lookups
    # ========================================

    def _resolve_tenant(self, hostname: str | None) -> Tenant:
        context = resolve_tenant_for_host(self.db, hostname, self.dev_suffix)
        if not context.is_usable:
            logger.warning(f"Login refused: tenant unavailable for host '{hostname}'")
            raise TenantUnavailable()
        return context.tenant

    def _lookup_operator(self, username: str) -> PlatformOperator | None:
        if not username:
            return None
        with store_errors(self.db):
            return (
                self.db.query(PlatformOperator)
                .filter(PlatformOperator.username == username)
                .one_or_none()
            )

    def _lookup_company_admin(self, tenant: Tenant, username: str) -> CompanyAdmin | None:
        if not username:
            return None
        with store_errors(self.db):
            return (
                self.db.query(CompanyAdmin)
                .filter(CompanyAdmin.tenant_id == tenant.id, CompanyAdmin.username == username)
                .one_or_none()
            )

    def _lookup_employee(self, tenant: Tenant, identifier: str) -> Employee | None:
        """Employees sign in with their mobile number or their employee code"""
        if not identifier:
            return None
        with store_errors(self.db):
            base = self.db.query(Employee).filter(Employee.tenant_id == tenant.id)
            employee = base.filter(Employee.mobile == identifier).one_or_none()
            if employee is None:
                employee = base.filter(Employee.employee_code == identifier).one_or_none()
            return employee

    # ========================================
    # Verification
    # ========================================

    def _verify(self, principal, password: str, claimed: Role) -> SessionIdentity:
        now = self.clock()

        if not principal.is_active:
            logger.info(f"Login refused: {principal!r} is inactive")
            raise AccountInactive()

        if self.lockout.enabled:
            if principal.is_locked(now):
                logger.info(f"Login refused: {principal!r} is locked until {principal.locked_until}")
                raise AccountLocked()
            if principal.locked_until is not None:
                # Lock window has passed, start counting afresh
                principal.failed_login_attempts = 0
                principal.locked_until = None

        if not principal.verify_password(password or ""):
            self._record_failure(principal, now)
            raise InvalidCredential()

        if claimed.is_employee and principal.role != claimed.value:
            logger.warning(
                f"Login refused: {principal!r} claimed role {claimed.value}, stored role {principal.role}"
            )
            raise RoleMismatch()

        principal.record_successful_login(now)
        with store_errors(self.db):
            self.db.commit()

        logger.info(f"Login succeeded: {principal!r} as {claimed.value}")
        return SessionIdentity.from_principal(principal)

    def _record_failure(self, principal, now: datetime) -> None:
        """Count a failed attempt; a failed write is logged, never raised"""
        # Rollback expires the row, so describe it up front
        label = repr(principal)

        if not self.lockout.enabled:
            logger.info(f"Login failed: bad password for {label}")
            return

        locked = principal.record_failed_login(
            self.lockout.max_attempts, self.lockout.lock_minutes, now
        )
        attempts = principal.failed_login_attempts
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Could not record failed login for {label}: {e}")
            return

        if locked:
            logger.warning(f"Account locked: {label} after {attempts} failed attempts")
        else:
            logger.info(
                f"Login failed: bad password for {label} ({attempts}/{self.lockout.max_attempts})"
            )
