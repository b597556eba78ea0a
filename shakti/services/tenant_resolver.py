### Description ###
# Shakti - Loan Recovery Management Platform
# - Tenant Resolver -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Tenant Resolver

Maps a request host name to a tenant and tells platform-operator
requests (root domain) apart from tenant requests (subdomain).

The host name is always passed in by the caller. Host parsing is pure;
only the fetch/create/update/delete helpers touch the data store.

Host classification:
    yourapp.com            -> root (no label)
    www.yourapp.com        -> root (reserved "www")
    acme.yourapp.com       -> tenant "acme"
    localhost:5173         -> root
    acme.localhost:5173    -> tenant "acme"
"""

import re
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Mapping

from sqlalchemy.orm import Session

from shakti.config import RESERVED_SUBDOMAINS
from shakti.database import reject_null_updates, store_errors
from shakti.errors import Conflict, InvalidReference, NotFound, ValidationFailed
from shakti.models import PlatformOperator, Tenant
from shakti.utils import get_logger

logger = get_logger(__name__)

ROOT_LABEL = "www"
DEFAULT_DEV_SUFFIX = "localhost"
LOOPBACK_ADDRESSES = ("127.0.0.1", "::1", "[::1]")
SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{1,61}[a-z0-9])?$")

# Columns callers may write through create/update
TENANT_FIELDS = (
    "name",
    "subdomain",
    "status",
    "plan",
    "max_users",
    "max_connections",
    "settings",
    "proprietor_name",
    "phone_number",
    "address",
    "gst_number",
)


# ========================================
# Host Parsing
# ========================================

def _strip_host(hostname: str | None) -> str:
    """Lowercase, drop the port and any trailing dot"""
    host = (hostname or "").strip().lower()
    if host.startswith("["):
        # IPv6 literal, e.g. [::1]:8000
        return host.split("]")[0] + "]"
    return host.split(":")[0].rstrip(".")


def _is_loopback(host: str, dev_suffix: str) -> bool:
    return (
        host == dev_suffix
        or host.endswith("." + dev_suffix)
        or host in LOOPBACK_ADDRESSES
    )


def extract_subdomain_label(hostname: str | None, dev_suffix: str = DEFAULT_DEV_SUFFIX) -> str:
    """
    Extract the tenant label from a host name.

    Loopback hosts only carry a label when the development suffix is the
    second label (acme.localhost). Other hosts need at least three labels
    (label.domain.tld), so a bare two-label domain never reads as a
    subdomain.

    Returns:
        The lowercased label, or "" when there is none
    """
    host = _strip_host(hostname)
    if not host:
        return ""

    if _is_loopback(host, dev_suffix):
        # Only <label>.<dev_suffix> carries a label
        label = host[: -len(dev_suffix) - 1] if host.endswith("." + dev_suffix) else ""
        return label if label and "." not in label else ""

    parts = host.split(".")
    if len(parts) > 2:
        return parts[0]

    return ""


def extract_base_domain(hostname: str | None, dev_suffix: str = DEFAULT_DEV_SUFFIX) -> str:
    """
    Get the platform domain part of a host name.

    Loopback hosts are returned as they are (without port); otherwise the
    last two labels (yourapp.com).
    """
    host = _strip_host(hostname)

    if _is_loopback(host, dev_suffix):
        return host

    parts = host.split(".")
    if len(parts) >= 2:
        return ".".join(parts[-2:])

    return host


def is_root_domain(hostname: str | None, dev_suffix: str = DEFAULT_DEV_SUFFIX) -> bool:
    """True for the platform's own host (no label, or the reserved "www")"""
    label = extract_subdomain_label(hostname, dev_suffix)
    return not label or label == ROOT_LABEL


def resolve_tenant_identifier(
    hostname: str | None, dev_suffix: str = DEFAULT_DEV_SUFFIX
) -> str | None:
    """Tenant label for the host, or None on the root domain"""
    if is_root_domain(hostname, dev_suffix):
        return None
    return extract_subdomain_label(hostname, dev_suffix)


def normalize_label(label: str | None) -> str:
    """Lowercase and trim a subdomain label"""
    return (label or "").strip().lower()


def validate_subdomain_label(
    label: str | None, reserved: tuple[str, ...] = RESERVED_SUBDOMAINS
) -> str:
    """
    Normalize and validate a label a tenant wants to claim.

    Raises:
        ValidationFailed: malformed or reserved label

    Returns:
        The normalized label
    """
    normalized = normalize_label(label)
    if not SUBDOMAIN_PATTERN.match(normalized):
        raise ValidationFailed(
            f"Invalid subdomain '{normalized}'. Use up to 63 lowercase letters, digits or "
            "hyphens, starting and ending with a letter or digit"
        )
    if normalized in reserved:
        raise ValidationFailed(f"Subdomain '{normalized}' is reserved")
    return normalized


def build_tenant_url(label: str, base_domain: str, environment: str = "development") -> str:
    """
    Login URL for a tenant.

    development: acme.yourapp.com
    production:  https://acme.yourapp.com/login
    """
    host = f"{normalize_label(label)}.{base_domain}"
    if environment == "development":
        return host
    return f"https://{host}/login"


# ========================================
# Base Domain Cache
# ========================================

@dataclass
class BaseDomainCache:
    """
    Explicit, invalidatable cache of resolved base domains.

    Owned by whoever creates it (the API keeps one on app.state); there
    is no module-level instance.
    """

    dev_suffix: str = DEFAULT_DEV_SUFFIX

    _cache: dict[str, str] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)
    _hits: int = 0
    _misses: int = 0

    def get(self, hostname: str) -> str:
        """Base domain for the host, resolving and storing it on a miss"""
        key = _strip_host(hostname)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._hits += 1
                return cached

            self._misses += 1
            resolved = extract_base_domain(key, self.dev_suffix)
            self._cache[key] = resolved
            return resolved

    def invalidate(self, hostname: str | None = None) -> int:
        """
        Drop one cached host, or everything when hostname is None.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if hostname is None:
                count = len(self._cache)
                self._cache.clear()
                return count
            return 1 if self._cache.pop(_strip_host(hostname), None) is not None else 0

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"entries": len(self._cache), "hits": self._hits, "misses": self._misses}


# ========================================
# Tenant Context
# ========================================

@dataclass
class TenantContext:
    """Outcome of resolving a request host"""

    hostname: str
    label: str | None
    tenant: Tenant | None = None

    @property
    def is_root(self) -> bool:
        return self.label is None

    @property
    def is_usable(self) -> bool:
        """A tenant was found and it is active"""
        return self.tenant is not None and self.tenant.is_active


# ========================================
# Store Operations
# ========================================

def fetch_tenant_by_label(db: Session, label: str | None) -> Tenant | None:
    """
    Look up a tenant by subdomain label.

    Case-insensitive and whitespace-tolerant. A missing tenant is a normal
    outcome and returns None.
    """
    normalized = normalize_label(label)
    if not normalized:
        return None

    with store_errors(db):
        return db.query(Tenant).filter(Tenant.subdomain == normalized).one_or_none()


def get_tenant(db: Session, tenant_id: int) -> Tenant:
    """
    Get a tenant by id.

    Raises:
        NotFound: no tenant with that id
    """
    with store_errors(db):
        tenant = db.query(Tenant).filter(Tenant.id == tenant_id).one_or_none()
    if tenant is None:
        raise NotFound(f"Tenant {tenant_id} not found")
    return tenant


def resolve_tenant_for_host(
    db: Session, hostname: str | None, dev_suffix: str = DEFAULT_DEV_SUFFIX
) -> TenantContext:
    """Classify the host and fetch its tenant (if any)"""
    label = resolve_tenant_identifier(hostname, dev_suffix)
    context = TenantContext(hostname=_strip_host(hostname), label=label)

    if label is not None:
        context.tenant = fetch_tenant_by_label(db, label)
        if context.tenant is None:
            logger.info(f"No tenant registered for subdomain '{label}'")
        elif not context.tenant.is_active:
            logger.info(f"Tenant '{label}' is {context.tenant.status}")

    return context


def _tenants_query(db: Session, status: str | None = None):
    query = db.query(Tenant)
    if status:
        query = query.filter(Tenant.status == status)
    return query.order_by(Tenant.created_at.desc(), Tenant.id.desc())


def list_all_tenants(db: Session, status: str | None = None) -> list[Tenant]:
    """All tenants, newest first (platform-operator view)"""
    with store_errors(db):
        return _tenants_query(db, status).all()


def list_tenants_page(
    db: Session, page: int = 1, page_size: int = 20, status: str | None = None
) -> tuple[list[Tenant], int]:
    """
    One page of tenants, newest first.

    Returns:
        Tuple of (tenants, total count)
    """
    with store_errors(db):
        query = _tenants_query(db, status)
        total = query.count()
        tenants = query.offset((page - 1) * page_size).limit(page_size).all()
    return tenants, total


def _ensure_subdomain_free(db: Session, subdomain: str, exclude_id: int | None = None) -> None:
    query = db.query(Tenant).filter(Tenant.subdomain == subdomain)
    if exclude_id is not None:
        query = query.filter(Tenant.id != exclude_id)
    with store_errors(db):
        exists = db.query(query.exists()).scalar()
    if exists:
        raise Conflict(f"Tenant with subdomain '{subdomain}' already exists")


def create_tenant(
    db: Session,
    data: Mapping[str, Any],
    defaults: Any = None,
) -> Tenant:
    """
    Create a tenant.

    Args:
        db: Database session
        data: Tenant fields plus optional "created_by" (operator id)
        defaults: Object with plan/max_users/max_connections used when the
            data leaves them out (config.TenantDefaults)

    Raises:
        ValidationFailed: malformed or reserved subdomain
        Conflict: subdomain already taken
        InvalidReference: created_by does not name a platform operator
    """
    subdomain = validate_subdomain_label(data.get("subdomain"))
    _ensure_subdomain_free(db, subdomain)

    created_by = data.get("created_by")
    if created_by is not None:
        with store_errors(db):
            operator = db.query(PlatformOperator).filter(PlatformOperator.id == created_by).one_or_none()
        if operator is None:
            raise InvalidReference(f"Creator {created_by} is not a platform operator")

    values = {key: data[key] for key in TENANT_FIELDS if data.get(key) is not None}
    values["subdomain"] = subdomain
    values.setdefault("status", "active")
    values.setdefault("settings", {})
    if defaults is not None:
        values.setdefault("plan", defaults.plan)
        values.setdefault("max_users", defaults.max_users)
        values.setdefault("max_connections", defaults.max_connections)

    tenant = Tenant(created_by=created_by, **values)

    with store_errors(db, f"Tenant with subdomain '{subdomain}' already exists"):
        db.add(tenant)
        db.commit()
        db.refresh(tenant)

    logger.info(f"Tenant created: {tenant.id} ({tenant.subdomain})")
    return tenant


def update_tenant(db: Session, tenant_id: int, fields: Mapping[str, Any]) -> Tenant:
    """
    Partially update a tenant; only the supplied fields are written.

    Raises:
        NotFound: no tenant with that id
        ValidationFailed: a required field set to null, or a bad subdomain
        Conflict: new subdomain is taken
    """
    tenant = get_tenant(db, tenant_id)

    updates = {key: value for key, value in fields.items() if key in TENANT_FIELDS}
    reject_null_updates(Tenant, updates)
    if "subdomain" in updates:
        updates["subdomain"] = validate_subdomain_label(updates["subdomain"])
        _ensure_subdomain_free(db, updates["subdomain"], exclude_id=tenant.id)

    for key, value in updates.items():
        setattr(tenant, key, value)

    with store_errors(db, "Tenant with this subdomain already exists"):
        db.commit()
        db.refresh(tenant)

    logger.info(f"Tenant updated: {tenant.id} ({', '.join(sorted(updates)) or 'no changes'})")
    return tenant


def delete_tenant(db: Session, tenant_id: int) -> None:
    """
    Delete a tenant along with its company admins and employees.

    Raises:
        NotFound: no tenant with that id
    """
    tenant = get_tenant(db, tenant_id)
    subdomain = tenant.subdomain

    with store_errors(db):
        db.delete(tenant)
        db.commit()

    logger.info(f"Tenant deleted: {tenant_id} ({subdomain})")
