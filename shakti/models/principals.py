### Description ###
# Shakti - Loan Recovery Management Platform
# - Principal Models -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Principal Models

Everything that can sign in:
- PlatformOperator: SuperAdmin, not tenant-scoped
- CompanyAdmin: administers one tenant
- Employee: TeamIncharge or Telecaller within one tenant

Passwords are stored as bcrypt hashes only. All three share the
credential and lockout columns from CredentialMixin.
"""

import secrets
import string
from datetime import datetime, timedelta
from enum import Enum

import bcrypt as _bcrypt
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from shakti.database import Base


class Role(str, Enum):
    """Roles selectable on the login screen"""

    SUPER_ADMIN = "SuperAdmin"
    COMPANY_ADMIN = "CompanyAdmin"
    TEAM_INCHARGE = "TeamIncharge"
    TELECALLER = "Telecaller"

    @property
    def is_tenant_scoped(self) -> bool:
        return self is not Role.SUPER_ADMIN

    @property
    def is_employee(self) -> bool:
        return self in (Role.TEAM_INCHARGE, Role.TELECALLER)


EMPLOYEE_ROLES = (Role.TEAM_INCHARGE.value, Role.TELECALLER.value)
PRINCIPAL_STATUSES = ("active", "inactive")


def hash_password(plaintext: str) -> str:
    """Hash a password using bcrypt"""
    return _bcrypt.hashpw(plaintext.encode(), _bcrypt.gensalt()).decode()


def verify_password_hash(plaintext: str, hashed: str | None) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns False for an empty or malformed hash instead of raising.
    """
    if not hashed:
        return False
    try:
        return _bcrypt.checkpw(plaintext.encode(), hashed.encode())
    except ValueError:
        return False


def generate_temporary_password(length: int = 12) -> str:
    """
    Generate a random temporary password for resets and bootstrap.

    Always contains at least one lowercase letter, one uppercase letter
    and one digit.
    """
    alphabet = string.ascii_letters + string.digits
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(length))
        if (
            any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c.isdigit() for c in password)
        ):
            return password


class CredentialMixin:
    """Password hash, lockout counters and login tracking"""

    password_hash = Column(String(255), nullable=False)

    failed_login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)

    def set_password(self, plaintext: str) -> None:
        """Replace the stored hash and clear any lockout"""
        self.password_hash = hash_password(plaintext)
        self.failed_login_attempts = 0
        self.locked_until = None

    def verify_password(self, plaintext: str) -> bool:
        """Check a plaintext password against this principal's hash"""
        return verify_password_hash(plaintext, self.password_hash)

    def is_locked(self, now: datetime | None = None) -> bool:
        """True while a lock window is in effect"""
        if not self.locked_until:
            return False
        return (now or datetime.utcnow()) < self.locked_until

    def record_failed_login(
        self, max_attempts: int, lock_minutes: int, now: datetime | None = None
    ) -> bool:
        """
        Count a failed attempt, locking the account at the threshold.

        Returns:
            True if this failure started a lock window
        """
        now = now or datetime.utcnow()
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= max_attempts:
            self.locked_until = now + timedelta(minutes=lock_minutes)
            return True
        return False

    def record_successful_login(self, now: datetime | None = None) -> None:
        """Reset the failure counter and stamp the login time"""
        self.failed_login_attempts = 0
        self.locked_until = None
        self.last_login_at = now or datetime.utcnow()


class PlatformOperator(CredentialMixin, Base):
    """SuperAdmin account with cross-tenant access"""

    __tablename__ = "platform_operators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    role = Role.SUPER_ADMIN.value
    tenant_id = None
    status = "active"

    def __repr__(self):
        return f"<PlatformOperator(id={self.id}, username='{self.username}')>"

    @property
    def display_name(self) -> str:
        return self.username

    @property
    def is_active(self) -> bool:
        return True


class CompanyAdmin(CredentialMixin, Base):
    """Administrator of a single tenant"""

    __tablename__ = "company_admins"
    __table_args__ = (
        UniqueConstraint("tenant_id", "username", name="uq_company_admin_username"),
        UniqueConstraint("tenant_id", "email", name="uq_company_admin_email"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    username = Column(String(100), nullable=False)
    name = Column(String(100), nullable=True)
    employee_code = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(String(20), default="active", nullable=False)

    # Audit
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(Integer, nullable=True)  # operator id

    # Relationships
    tenant = relationship("Tenant", back_populates="company_admins")

    role = Role.COMPANY_ADMIN.value

    def __repr__(self):
        return f"<CompanyAdmin(id={self.id}, tenant_id={self.tenant_id}, username='{self.username}')>"

    @property
    def display_name(self) -> str:
        return self.name or self.username

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class Employee(CredentialMixin, Base):
    """TeamIncharge or Telecaller working inside a tenant"""

    __tablename__ = "employees"
    __table_args__ = (
        UniqueConstraint("tenant_id", "mobile", name="uq_employee_mobile"),
        UniqueConstraint("tenant_id", "employee_code", name="uq_employee_code"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    mobile = Column(String(20), nullable=False)
    employee_code = Column(String(50), nullable=False)
    role = Column(String(20), nullable=False)  # TeamIncharge | Telecaller
    status = Column(String(20), default="active", nullable=False)

    # Audit
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(Integer, nullable=True)  # company admin id

    # Relationships
    tenant = relationship("Tenant", back_populates="employees")

    def __repr__(self):
        return f"<Employee(id={self.id}, tenant_id={self.tenant_id}, code='{self.employee_code}')>"

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_active(self) -> bool:
        return self.status == "active"
