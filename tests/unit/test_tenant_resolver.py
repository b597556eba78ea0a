"""
Unit tests for the tenant resolver.

Tests host parsing, label validation, the base-domain cache and the
tenant store operations.
"""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from shakti.config import TenantDefaults
from shakti.errors import Conflict, DependencyUnavailable, InvalidReference, NotFound, ValidationFailed
from shakti.models import CompanyAdmin, Employee, Tenant
from shakti.services import tenant_resolver
from shakti.services.tenant_resolver import (
    BaseDomainCache,
    build_tenant_url,
    extract_base_domain,
    extract_subdomain_label,
    is_root_domain,
    resolve_tenant_identifier,
    validate_subdomain_label,
)

from tests.fixtures.factories import create_company_admin, create_employee, create_operator, create_tenant


class TestExtractSubdomainLabel:
    """Host name -> tenant label."""

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("acme.example.com", "acme"),
            ("ACME.Example.com", "acme"),
            ("acme.example.com:8443", "acme"),
            ("example.com", ""),
            ("localhost", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_public_hosts(self, host, expected):
        """Three labels yield the first; two-label and bare hosts yield nothing."""
        assert extract_subdomain_label(host) == expected

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("localhost:5173", ""),
            ("acme.localhost:5173", "acme"),
            ("acme.localhost", "acme"),
            ("127.0.0.1:8000", ""),
        ],
    )
    def test_loopback_hosts(self, host, expected):
        """Loopback hosts carry a label only as <label>.localhost."""
        assert extract_subdomain_label(host) == expected

    def test_custom_dev_suffix(self):
        assert extract_subdomain_label("acme.lvh.me", dev_suffix="lvh.me") == "acme"


class TestRootDomain:
    """Root vs tenant classification."""

    def test_www_is_root(self):
        assert is_root_domain("www.example.com") is True

    def test_tenant_is_not_root(self):
        assert is_root_domain("acme.example.com") is False

    def test_bare_domain_is_root(self):
        assert is_root_domain("example.com") is True

    def test_identifier_none_on_root(self):
        assert resolve_tenant_identifier("www.example.com") is None
        assert resolve_tenant_identifier("acme.example.com") == "acme"

    def test_base_domain(self):
        assert extract_base_domain("acme.example.com") == "example.com"
        assert extract_base_domain("localhost:5173") == "localhost"


class TestSubdomainValidation:
    """Labels a tenant may claim."""

    def test_normalizes(self):
        assert validate_subdomain_label("  Acme-Loans ") == "acme-loans"

    @pytest.mark.parametrize("label", ["ab", "-acme", "acme-", "ac_me", "ac.me", "", None, "x" * 64])
    def test_malformed_rejected(self, label):
        with pytest.raises(ValidationFailed):
            validate_subdomain_label(label)

    @pytest.mark.parametrize("label", ["www", "admin", "api", "superadmin"])
    def test_reserved_rejected(self, label):
        with pytest.raises(ValidationFailed, match="reserved"):
            validate_subdomain_label(label)

    def test_login_url(self):
        assert build_tenant_url("acme", "yourapp.com", "production") == "https://acme.yourapp.com/login"
        assert build_tenant_url("acme", "yourapp.com", "development") == "acme.yourapp.com"


class TestBaseDomainCache:
    """Explicit, invalidatable base-domain cache."""

    def test_hits_and_misses(self):
        cache = BaseDomainCache()
        assert cache.get("acme.example.com") == "example.com"
        assert cache.get("ACME.example.com:443") == "example.com"

        assert cache.stats == {"entries": 1, "hits": 1, "misses": 1}

    def test_invalidate_one(self):
        cache = BaseDomainCache()
        cache.get("a.example.com")
        cache.get("b.example.com")

        assert cache.invalidate("a.example.com") == 1
        assert cache.invalidate("a.example.com") == 0
        assert cache.stats["entries"] == 1

    def test_invalidate_all(self):
        cache = BaseDomainCache()
        cache.get("a.example.com")
        cache.get("b.example.com")

        assert cache.invalidate() == 2
        assert cache.stats["entries"] == 0

    def test_instances_are_independent(self):
        first, second = BaseDomainCache(), BaseDomainCache()
        first.get("a.example.com")
        assert second.stats["entries"] == 0


class TestFetchTenant:
    """Tenant lookup by label."""

    def test_case_and_whitespace_tolerant(self, test_db):
        tenant = create_tenant(test_db, subdomain="acme")

        assert tenant_resolver.fetch_tenant_by_label(test_db, " Acme ").id == tenant.id
        assert tenant_resolver.fetch_tenant_by_label(test_db, "acme").id == tenant.id

    def test_missing_is_none(self, test_db):
        assert tenant_resolver.fetch_tenant_by_label(test_db, "nobody") is None
        assert tenant_resolver.fetch_tenant_by_label(test_db, "") is None

    def test_store_failure_surfaces(self, test_db):
        with patch.object(test_db, "query", side_effect=OperationalError("SELECT", {}, Exception("down"))):
            with pytest.raises(DependencyUnavailable):
                tenant_resolver.fetch_tenant_by_label(test_db, "acme")


class TestResolveTenantForHost:
    """Host -> TenantContext."""

    def test_root_host(self, test_db):
        context = tenant_resolver.resolve_tenant_for_host(test_db, "www.yourapp.com")
        assert context.is_root
        assert context.tenant is None
        assert not context.is_usable

    def test_active_tenant(self, test_db):
        tenant = create_tenant(test_db, subdomain="acme")
        context = tenant_resolver.resolve_tenant_for_host(test_db, "acme.yourapp.com:443")

        assert context.label == "acme"
        assert context.tenant.id == tenant.id
        assert context.is_usable

    def test_inactive_tenant_unusable(self, test_db):
        create_tenant(test_db, subdomain="acme", status="inactive")
        context = tenant_resolver.resolve_tenant_for_host(test_db, "acme.yourapp.com")

        assert context.tenant is not None
        assert not context.is_usable

    def test_unknown_label(self, test_db):
        context = tenant_resolver.resolve_tenant_for_host(test_db, "ghost.yourapp.com")
        assert not context.is_root
        assert context.tenant is None


class TestCreateTenant:
    """Tenant creation rules."""

    def test_round_trip(self, test_db):
        operator = create_operator(test_db)
        created = tenant_resolver.create_tenant(
            test_db,
            {
                "name": "Acme Recoveries",
                "subdomain": "Acme",
                "plan": "pro",
                "max_users": 25,
                "max_connections": 8,
                "settings": {"branding": {"primaryColor": "#3B82F6"}},
                "created_by": operator.id,
            },
        )

        fetched = tenant_resolver.fetch_tenant_by_label(test_db, "acme")

        assert fetched.id == created.id
        assert fetched.name == "Acme Recoveries"
        assert fetched.subdomain == "acme"
        assert fetched.plan == "pro"
        assert fetched.max_users == 25
        assert fetched.max_connections == 8
        assert fetched.settings == {"branding": {"primaryColor": "#3B82F6"}}
        assert fetched.created_by == operator.id

    def test_defaults_applied(self, test_db):
        defaults = TenantDefaults({"tenants": {"default_plan": "basic", "default_max_users": 10, "default_max_connections": 5}})
        tenant = tenant_resolver.create_tenant(test_db, {"name": "Acme", "subdomain": "acme"}, defaults=defaults)

        assert tenant.plan == "basic"
        assert tenant.max_users == 10
        assert tenant.max_connections == 5
        assert tenant.status == "active"

    def test_duplicate_conflict(self, test_db):
        tenant_resolver.create_tenant(test_db, {"name": "Acme", "subdomain": "acme"})
        with pytest.raises(Conflict):
            tenant_resolver.create_tenant(test_db, {"name": "Acme Two", "subdomain": "ACME"})

    def test_unknown_creator(self, test_db):
        with pytest.raises(InvalidReference):
            tenant_resolver.create_tenant(test_db, {"name": "Acme", "subdomain": "acme", "created_by": 999})

    def test_reserved_label(self, test_db):
        with pytest.raises(ValidationFailed):
            tenant_resolver.create_tenant(test_db, {"name": "Admin", "subdomain": "admin"})


class TestListUpdateDelete:
    """Listing order, partial updates and cascade delete."""

    def test_newest_first(self, test_db):
        first = create_tenant(test_db, name="First", subdomain="first")
        second = create_tenant(test_db, name="Second", subdomain="second")

        ids = [t.id for t in tenant_resolver.list_all_tenants(test_db)]
        assert ids.index(second.id) < ids.index(first.id)

    def test_page(self, test_db):
        for i in range(5):
            create_tenant(test_db, name=f"T{i}", subdomain=f"tenant{i}")

        tenants, total = tenant_resolver.list_tenants_page(test_db, page=2, page_size=2)
        assert total == 5
        assert len(tenants) == 2

    def test_partial_update(self, test_db):
        tenant = create_tenant(test_db, name="Acme", subdomain="acme", plan="basic")
        updated = tenant_resolver.update_tenant(test_db, tenant.id, {"status": "inactive"})

        assert updated.status == "inactive"
        assert updated.name == "Acme"
        assert updated.plan == "basic"

    def test_update_subdomain_taken(self, test_db):
        create_tenant(test_db, subdomain="acme")
        other = create_tenant(test_db, subdomain="other")

        with pytest.raises(Conflict):
            tenant_resolver.update_tenant(test_db, other.id, {"subdomain": "acme"})

    @pytest.mark.parametrize("field", ["name", "subdomain", "plan", "max_users"])
    def test_update_null_required_field(self, test_db, field):
        tenant = create_tenant(test_db, name="Acme", subdomain="acme")

        with pytest.raises(ValidationFailed, match=field):
            tenant_resolver.update_tenant(test_db, tenant.id, {field: None})

        test_db.refresh(tenant)
        assert tenant.name == "Acme"
        assert tenant.subdomain == "acme"

    def test_update_null_optional_field(self, test_db):
        tenant = create_tenant(test_db, subdomain="acme")
        updated = tenant_resolver.update_tenant(test_db, tenant.id, {"gst_number": None})
        assert updated.gst_number is None

    def test_update_missing(self, test_db):
        with pytest.raises(NotFound):
            tenant_resolver.update_tenant(test_db, 404, {"name": "x"})

    def test_delete_cascades(self, test_db):
        tenant = create_tenant(test_db, subdomain="acme")
        create_company_admin(test_db, tenant)
        create_employee(test_db, tenant)

        tenant_resolver.delete_tenant(test_db, tenant.id)

        assert test_db.query(Tenant).count() == 0
        assert test_db.query(CompanyAdmin).count() == 0
        assert test_db.query(Employee).count() == 0

    def test_delete_missing(self, test_db):
        with pytest.raises(NotFound):
            tenant_resolver.delete_tenant(test_db, 404)
