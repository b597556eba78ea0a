"""
Shared pytest fixtures for Shakti tests.

Provides:
- Isolated SQLite database per test
- FastAPI TestClient with dependency overrides
- Principal fixtures (operator, tenant, company admin, employees)
- Session token headers per role
"""

import os
import tempfile
from pathlib import Path

# Point the app at throwaway storage before anything imports shakti
_TEST_HOME = Path(tempfile.mkdtemp(prefix="shakti-tests-"))
os.environ.setdefault("SHAKTI_APP_DATABASE_URL", f"sqlite:///{_TEST_HOME / 'app.db'}")
os.environ.setdefault("SHAKTI_CONFIG_PATH", str(_TEST_HOME / "config.yaml"))
os.environ.setdefault("SHAKTI_LOG_TO_FILE", "false")
os.environ.setdefault("SHAKTI_LOG_LEVEL", "WARNING")
os.environ.setdefault("SHAKTI_LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("SHAKTI_SECRET_KEY", "test-secret-key")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from shakti.database import Base, get_db
from shakti.main import app
from shakti.middleware.rate_limit import limiter
from shakti.models import CompanyAdmin, Employee, PlatformOperator, Tenant
from shakti.services.authenticator import SessionIdentity
from shakti.services.sessions import issue_session_token

from tests.fixtures.factories import (
    DEFAULT_PASSWORD,
    create_company_admin,
    create_employee,
    create_operator,
    create_tenant,
)

TENANT_HOST = "acme.yourapp.com"
ROOT_HOST = "www.yourapp.com"


# ============================================
# Database Fixtures
# ============================================


@pytest.fixture(scope="function")
def test_engine(tmp_path):
    """
    Create an isolated SQLite database engine for each test.

    Uses a file-based database in tmp_path to avoid connection isolation
    issues with in-memory SQLite.
    """
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine) -> Generator[Session, None, None]:
    """
    Create database tables and provide a session.

    Tables are created before and dropped after.
    """
    from shakti.models import access_log, principals, tenant  # noqa: F401

    Base.metadata.create_all(bind=test_engine)

    TestingSessionLocal = sessionmaker(bind=test_engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(test_db: Session) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient with database dependency overridden.

    Uses the test_db session instead of the application database.
    """

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================
# Principal Fixtures
# ============================================


@pytest.fixture
def operator(test_db: Session) -> PlatformOperator:
    """Platform operator 'ops' with DEFAULT_PASSWORD"""
    return create_operator(test_db, username="ops")


@pytest.fixture
def acme(test_db: Session) -> Tenant:
    """Active tenant served from acme.yourapp.com"""
    return create_tenant(test_db, name="Acme Recoveries", subdomain="acme")


@pytest.fixture
def company_admin(test_db: Session, acme: Tenant) -> CompanyAdmin:
    """Active CompanyAdmin 'bob' of acme"""
    return create_company_admin(test_db, acme, username="bob", email="bob@acme.test")


@pytest.fixture
def telecaller(test_db: Session, acme: Tenant) -> Employee:
    """Active Telecaller of acme (mobile 9000000001, code TC001)"""
    return create_employee(
        test_db, acme, name="Tara", mobile="9000000001", employee_code="TC001", role="Telecaller"
    )


@pytest.fixture
def team_incharge(test_db: Session, acme: Tenant) -> Employee:
    """Active TeamIncharge of acme (mobile 9000000002, code TI001)"""
    return create_employee(
        test_db, acme, name="Ishan", mobile="9000000002", employee_code="TI001", role="TeamIncharge"
    )


@pytest.fixture
def password() -> str:
    return DEFAULT_PASSWORD


# ============================================
# Session Header Fixtures
# ============================================


def _bearer(principal) -> dict[str, str]:
    token, _ = issue_session_token(SessionIdentity.from_principal(principal))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def operator_headers(operator: PlatformOperator) -> dict[str, str]:
    """
    HTTP headers with an operator session for admin-only requests.

    Usage:
        def test_endpoint(client, operator_headers):
            response = client.get("/api/v1/admin/tenants", headers=operator_headers)
    """
    return {**_bearer(operator), "Host": ROOT_HOST}


@pytest.fixture
def admin_headers(company_admin: CompanyAdmin) -> dict[str, str]:
    """CompanyAdmin session addressed to the admin's own tenant host"""
    return {**_bearer(company_admin), "Host": TENANT_HOST}


@pytest.fixture
def telecaller_headers(telecaller: Employee) -> dict[str, str]:
    return {**_bearer(telecaller), "Host": TENANT_HOST}
