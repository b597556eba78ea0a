"""
Unit tests for the authenticator.

Covers every login path, the lockout policy and the generic failure
messages.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from shakti.errors import (
    GENERIC_CREDENTIALS_MESSAGE,
    AccountInactive,
    AccountLocked,
    InvalidCredential,
    RoleMismatch,
    TenantUnavailable,
    ValidationFailed,
)
from shakti.services.authenticator import Authenticator, LockoutPolicy, SessionIdentity

from tests.fixtures.factories import DEFAULT_PASSWORD, create_company_admin, create_tenant

TENANT_HOST = "acme.example.com"


class TestSuperAdminLogin:
    """Operators authenticate independently of tenants."""

    def test_success_on_www(self, test_db, operator):
        identity = Authenticator(test_db).authenticate("ops", DEFAULT_PASSWORD, "SuperAdmin", "www.example.com")

        assert identity.role == "SuperAdmin"
        assert identity.principal_id == operator.id
        assert identity.tenant_id is None

    def test_success_with_inactive_tenants_around(self, test_db, operator):
        create_tenant(test_db, subdomain="acme", status="inactive")
        identity = Authenticator(test_db).authenticate("ops", DEFAULT_PASSWORD, "SuperAdmin", TENANT_HOST)
        assert identity.role == "SuperAdmin"

    def test_wrong_password(self, test_db, operator):
        with pytest.raises(InvalidCredential):
            Authenticator(test_db).authenticate("ops", "wrong-pw", "SuperAdmin", "www.example.com")

    def test_unknown_operator(self, test_db):
        with pytest.raises(InvalidCredential):
            Authenticator(test_db).authenticate("ghost", DEFAULT_PASSWORD, "SuperAdmin", "www.example.com")


class TestCompanyAdminLogin:
    """CompanyAdmin logins are scoped to the host's tenant."""

    def test_success(self, test_db, acme, company_admin):
        identity = Authenticator(test_db).authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

        assert identity.role == "CompanyAdmin"
        assert identity.tenant_id == acme.id
        assert identity.principal_id == company_admin.id
        assert identity.email == "bob@acme.test"
        assert identity.username == "bob"

    def test_stamps_last_login(self, test_db, company_admin):
        Authenticator(test_db).authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)
        test_db.refresh(company_admin)
        assert company_admin.last_login_at is not None

    def test_wrong_password_is_generic(self, test_db, company_admin):
        with pytest.raises(InvalidCredential) as wrong_pw:
            Authenticator(test_db).authenticate("bob", "wrong-pw", "CompanyAdmin", TENANT_HOST)
        with pytest.raises(InvalidCredential) as unknown:
            Authenticator(test_db).authenticate("nobody", "wrong-pw", "CompanyAdmin", TENANT_HOST)

        assert wrong_pw.value.to_public() == GENERIC_CREDENTIALS_MESSAGE
        assert unknown.value.to_public() == wrong_pw.value.to_public()

    def test_other_tenants_admin_not_found(self, test_db, company_admin):
        other = create_tenant(test_db, name="Other", subdomain="other")
        create_company_admin(test_db, other, username="carol")

        with pytest.raises(InvalidCredential):
            Authenticator(test_db).authenticate("carol", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

    def test_inactive_tenant(self, test_db, acme, company_admin):
        acme.status = "inactive"
        test_db.commit()

        with pytest.raises(TenantUnavailable):
            Authenticator(test_db).authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

    def test_root_host_has_no_tenant(self, test_db, company_admin):
        with pytest.raises(TenantUnavailable):
            Authenticator(test_db).authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", "www.example.com")

    def test_unknown_tenant(self, test_db, company_admin):
        with pytest.raises(TenantUnavailable):
            Authenticator(test_db).authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", "ghost.example.com")

    def test_inactive_admin(self, test_db, company_admin):
        company_admin.status = "inactive"
        test_db.commit()

        with pytest.raises(AccountInactive):
            Authenticator(test_db).authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)


class TestEmployeeLogin:
    """Employees log in by mobile or employee code."""

    def test_by_mobile(self, test_db, telecaller):
        identity = Authenticator(test_db).authenticate("9000000001", DEFAULT_PASSWORD, "Telecaller", TENANT_HOST)
        assert identity.role == "Telecaller"
        assert identity.principal_id == telecaller.id

    def test_by_employee_code(self, test_db, team_incharge):
        identity = Authenticator(test_db).authenticate("TI001", DEFAULT_PASSWORD, "TeamIncharge", TENANT_HOST)
        assert identity.role == "TeamIncharge"
        assert identity.name == "Ishan"

    def test_role_mismatch(self, test_db, telecaller):
        """Correct password, wrong claimed role."""
        with pytest.raises(RoleMismatch) as exc_info:
            Authenticator(test_db).authenticate("9000000001", DEFAULT_PASSWORD, "TeamIncharge", TENANT_HOST)

        assert exc_info.value.to_public() == GENERIC_CREDENTIALS_MESSAGE

    def test_role_mismatch_with_wrong_password(self, test_db, telecaller):
        """Password is checked before the role."""
        with pytest.raises(InvalidCredential) as exc_info:
            Authenticator(test_db).authenticate("9000000001", "wrong-pw", "TeamIncharge", TENANT_HOST)

        assert not isinstance(exc_info.value, RoleMismatch)

    def test_inactive_tenant_regardless_of_credentials(self, test_db, acme, telecaller):
        acme.status = "inactive"
        test_db.commit()

        for password in (DEFAULT_PASSWORD, "wrong-pw"):
            with pytest.raises(TenantUnavailable):
                Authenticator(test_db).authenticate("TC001", password, "Telecaller", TENANT_HOST)

    def test_inactive_employee(self, test_db, telecaller):
        telecaller.status = "inactive"
        test_db.commit()

        with pytest.raises(AccountInactive):
            Authenticator(test_db).authenticate("TC001", DEFAULT_PASSWORD, "Telecaller", TENANT_HOST)

    def test_unknown_role(self, test_db):
        with pytest.raises(ValidationFailed):
            Authenticator(test_db).authenticate("x", "y", "Janitor", TENANT_HOST)


class TestLockout:
    """Five failures lock the account for fifteen minutes."""

    def test_locks_after_five_failures(self, test_db, company_admin):
        auth = Authenticator(test_db)
        for _ in range(5):
            with pytest.raises(InvalidCredential):
                auth.authenticate("bob", "wrong-pw", "CompanyAdmin", TENANT_HOST)

        with pytest.raises(AccountLocked):
            auth.authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

        test_db.refresh(company_admin)
        assert company_admin.failed_login_attempts == 5
        assert company_admin.locked_until is not None

    def test_success_resets_counter(self, test_db, company_admin):
        auth = Authenticator(test_db)
        for _ in range(3):
            with pytest.raises(InvalidCredential):
                auth.authenticate("bob", "wrong-pw", "CompanyAdmin", TENANT_HOST)

        auth.authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

        test_db.refresh(company_admin)
        assert company_admin.failed_login_attempts == 0
        assert company_admin.locked_until is None

    def test_lock_expires(self, test_db, company_admin):
        company_admin.failed_login_attempts = 5
        company_admin.locked_until = datetime.utcnow() + timedelta(minutes=15)
        test_db.commit()

        later = Authenticator(test_db, clock=lambda: datetime.utcnow() + timedelta(minutes=16))
        identity = later.authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

        assert identity.principal_id == company_admin.id

    def test_disabled_policy_never_locks(self, test_db, company_admin):
        auth = Authenticator(test_db, lockout=LockoutPolicy(enabled=False))
        for _ in range(6):
            with pytest.raises(InvalidCredential):
                auth.authenticate("bob", "wrong-pw", "CompanyAdmin", TENANT_HOST)

        auth.authenticate("bob", DEFAULT_PASSWORD, "CompanyAdmin", TENANT_HOST)

    def test_counter_write_failure_keeps_original_error(self, test_db, company_admin):
        """A failed counter write is logged; InvalidCredential is still raised."""
        auth = Authenticator(test_db)
        with patch.object(test_db, "commit", side_effect=OperationalError("UPDATE", {}, Exception("disk"))):
            with pytest.raises(InvalidCredential):
                auth.authenticate("bob", "wrong-pw", "CompanyAdmin", TENANT_HOST)


class TestSessionIdentity:
    """Serialization of the identity record."""

    def test_dict_round_trip(self):
        identity = SessionIdentity(principal_id=7, name="Bob", role="CompanyAdmin", tenant_id=3, email="b@x.test")
        assert SessionIdentity.from_dict(identity.to_dict()) == identity

    def test_from_dict_ignores_unknown_keys(self):
        identity = SessionIdentity.from_dict({"principal_id": 1, "name": "Ops", "role": "SuperAdmin", "extra": 1})
        assert identity.tenant_id is None
