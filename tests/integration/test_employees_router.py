"""
Integration tests for the employees router.

Tests CompanyAdmin employee management at /api/v1/employees, scoped to
the tenant behind the request host.
"""

import pytest

from shakti.models import Employee

from tests.fixtures.factories import create_company_admin, create_tenant

EMPLOYEES_URL = "/api/v1/employees"

NEW_EMPLOYEE = {
    "name": "Ravi",
    "mobile": "9111111111",
    "employee_code": "TC100",
    "role": "Telecaller",
    "password": "strong-pass-1",
}


class TestAccess:
    """Who may manage employees"""

    def test_operator_denied(self, client, operator_headers):
        response = client.get(EMPLOYEES_URL, headers=operator_headers)
        assert response.status_code == 403

    def test_telecaller_denied(self, client, telecaller_headers):
        response = client.get(EMPLOYEES_URL, headers=telecaller_headers)
        assert response.status_code == 403

    def test_admin_on_other_tenant_host(self, client, test_db, admin_headers):
        """A session from acme must not manage beta's employees."""
        create_tenant(test_db, name="Beta", subdomain="beta")

        response = client.get(EMPLOYEES_URL, headers={**admin_headers, "Host": "beta.yourapp.com"})
        assert response.status_code == 403

    def test_admin_after_tenant_deactivated(self, client, test_db, acme, admin_headers):
        acme.status = "inactive"
        test_db.commit()

        response = client.get(EMPLOYEES_URL, headers=admin_headers)
        assert response.status_code == 403

    def test_admin_deactivated_after_login(self, client, test_db, company_admin, admin_headers):
        company_admin.status = "inactive"
        test_db.commit()

        response = client.get(EMPLOYEES_URL, headers=admin_headers)
        assert response.status_code == 403

    def test_admin_deleted_after_login(self, client, test_db, company_admin, admin_headers):
        test_db.delete(company_admin)
        test_db.commit()

        response = client.post(EMPLOYEES_URL, headers=admin_headers, json=NEW_EMPLOYEE)

        assert response.status_code == 403
        assert test_db.query(Employee).count() == 0


class TestListEmployees:
    """Test GET /api/v1/employees endpoint."""

    def test_lists_own_tenant_only(self, client, test_db, admin_headers, telecaller):
        other = create_tenant(test_db, name="Beta", subdomain="beta")
        create_company_admin(test_db, other, username="carol")

        response = client.get(EMPLOYEES_URL, headers=admin_headers)

        assert response.status_code == 200
        assert [e["id"] for e in response.json()["data"]] == [telecaller.id]

    def test_role_filter(self, client, admin_headers, telecaller, team_incharge):
        response = client.get(f"{EMPLOYEES_URL}?role=TeamIncharge", headers=admin_headers)

        assert [e["employee_code"] for e in response.json()["data"]] == ["TI001"]

    def test_bad_role_filter(self, client, admin_headers):
        response = client.get(f"{EMPLOYEES_URL}?role=Boss", headers=admin_headers)
        assert response.status_code == 422


class TestEmployeeCrud:
    """Create, read, update and delete"""

    def test_create(self, client, admin_headers, acme, company_admin):
        response = client.post(EMPLOYEES_URL, headers=admin_headers, json=NEW_EMPLOYEE)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["tenant_id"] == acme.id
        assert data["role"] == "Telecaller"
        assert "password_hash" not in data

    def test_created_employee_can_log_in(self, client, admin_headers):
        client.post(EMPLOYEES_URL, headers=admin_headers, json=NEW_EMPLOYEE)

        response = client.post(
            "/api/v1/auth/login",
            headers={"Host": "acme.yourapp.com"},
            json={"identifier": "TC100", "password": "strong-pass-1", "role": "Telecaller"},
        )
        assert response.status_code == 200

    def test_duplicate_mobile(self, client, admin_headers, telecaller):
        response = client.post(
            EMPLOYEES_URL, headers=admin_headers, json={**NEW_EMPLOYEE, "mobile": "9000000001"}
        )
        assert response.status_code == 409

    def test_invalid_role(self, client, admin_headers):
        response = client.post(
            EMPLOYEES_URL, headers=admin_headers, json={**NEW_EMPLOYEE, "role": "CompanyAdmin"}
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("password", ["a" * 100, "密" * 30])
    def test_password_over_bcrypt_limit(self, client, test_db, admin_headers, password):
        response = client.post(EMPLOYEES_URL, headers=admin_headers, json={**NEW_EMPLOYEE, "password": password})

        assert response.status_code == 422
        assert test_db.query(Employee).count() == 0

    def test_get(self, client, admin_headers, telecaller):
        response = client.get(f"{EMPLOYEES_URL}/{telecaller.id}", headers=admin_headers)
        assert response.json()["data"]["name"] == "Tara"

    def test_get_missing(self, client, admin_headers):
        response = client.get(f"{EMPLOYEES_URL}/9999", headers=admin_headers)
        assert response.status_code == 404

    def test_update(self, client, admin_headers, telecaller):
        response = client.patch(
            f"{EMPLOYEES_URL}/{telecaller.id}", headers=admin_headers, json={"role": "TeamIncharge"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "TeamIncharge"
        assert response.json()["data"]["mobile"] == "9000000001"

    @pytest.mark.parametrize("field", ["name", "mobile", "employee_code", "role", "status"])
    def test_null_required_field(self, client, test_db, admin_headers, telecaller, field):
        response = client.patch(f"{EMPLOYEES_URL}/{telecaller.id}", headers=admin_headers, json={field: None})

        assert response.status_code == 422
        assert field in response.json()["error"]
        test_db.refresh(telecaller)
        assert telecaller.name == "Tara"

    def test_delete(self, client, test_db, admin_headers, telecaller):
        response = client.delete(f"{EMPLOYEES_URL}/{telecaller.id}", headers=admin_headers)

        assert response.status_code == 204
        assert test_db.query(Employee).count() == 0


class TestEmployeeActions:
    """Password reset and status toggle"""

    def test_reset_with_chosen_password(self, client, admin_headers, telecaller):
        response = client.post(
            f"{EMPLOYEES_URL}/{telecaller.id}/reset-password",
            headers=admin_headers,
            json={"new_password": "chosen-pass-1"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["temporary_password"] == "chosen-pass-1"

    def test_reset_generates_password(self, client, admin_headers, telecaller):
        response = client.post(f"{EMPLOYEES_URL}/{telecaller.id}/reset-password", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()["data"]["temporary_password"]) == 12

    def test_toggle_blocks_login(self, client, admin_headers, telecaller):
        toggled = client.post(f"{EMPLOYEES_URL}/{telecaller.id}/toggle-status", headers=admin_headers)
        assert toggled.json()["data"]["status"] == "inactive"

        response = client.post(
            "/api/v1/auth/login",
            headers={"Host": "acme.yourapp.com"},
            json={"identifier": "TC001", "password": "correct-pw", "role": "Telecaller"},
        )
        assert response.status_code == 403
