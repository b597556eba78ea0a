"""
Unit tests for request logging and the access log model.
"""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from shakti.database import SessionLocal
from shakti.middleware.logging import RequestLoggingMiddleware, describe_principal
from shakti.models import AccessLog
from shakti.services.authenticator import SessionIdentity


class TestDescribePrincipal:
    def test_anonymous(self):
        assert describe_principal(None) == "anonymous"

    def test_operator(self):
        identity = SessionIdentity(principal_id=1, name="ops", role="SuperAdmin")
        assert describe_principal(identity) == "SuperAdmin:1"

    def test_tenant_principal(self):
        identity = SessionIdentity(principal_id=4, name="Tara", role="Telecaller", tenant_id=2)
        assert describe_principal(identity) == "Telecaller:4@2"


class TestAccessLogEntry:
    def test_attributed(self):
        identity = SessionIdentity(principal_id=4, name="Tara", role="Telecaller", tenant_id=2)
        entry = AccessLog.for_request("abcd1234", "GET", "/api/v1/auth/me", 200, 12.345, identity=identity)

        assert entry.principal_id == 4
        assert entry.principal_role == "Telecaller"
        assert entry.tenant_id == 2
        assert entry.response_time_ms == 12.35

    def test_anonymous_login_attempt(self):
        entry = AccessLog.for_request(
            "abcd1234", "POST", "/api/v1/auth/login", 401, 5.0, host="acme.yourapp.com", query_string=""
        )

        assert entry.principal_id is None
        assert entry.is_login_attempt
        assert entry.host == "acme.yourapp.com"
        assert entry.query_string is None

    def test_long_values_clipped(self):
        entry = AccessLog.for_request("abcd1234", "GET", "/", 200, 1.0, user_agent="x" * 900)
        assert len(entry.user_agent) == 500

    def test_failed_write_is_swallowed(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("locked"))
        middleware = RequestLoggingMiddleware(MagicMock(), session_factory=lambda: db)

        middleware._save_access_log(AccessLog.for_request("abcd1234", "GET", "/x", 200, 1.0))

        db.close.assert_called_once()


class TestAccessLogRecording:
    """End to end through the application (access_logs lives in the app database)"""

    def test_failed_login_is_audited(self, client, company_admin):
        response = client.post(
            "/api/v1/auth/login",
            headers={"Host": "acme.yourapp.com"},
            json={"identifier": "bob", "password": "wrong-pw", "role": "CompanyAdmin"},
        )
        request_id = response.headers["X-Request-ID"]

        db = SessionLocal()
        try:
            entry = db.query(AccessLog).filter(AccessLog.request_id == request_id).one()
        finally:
            db.close()

        assert entry.status_code == 401
        assert entry.is_login_attempt
        assert entry.host == "acme.yourapp.com"

    def test_health_not_stored(self, client):
        request_id = client.get("/health").headers["X-Request-ID"]

        db = SessionLocal()
        try:
            assert db.query(AccessLog).filter(AccessLog.request_id == request_id).count() == 0
        finally:
            db.close()
