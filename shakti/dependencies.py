### Description ###
# Shakti - Loan Recovery Management Platform
# - FastAPI Dependencies -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
FastAPI Dependencies

Provides dependency injection for:
- Configuration settings (domain, auth, tenant defaults)
- The base-domain cache owned by the application
- A per-request Authenticator
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from shakti import config
from shakti.database import get_db
from shakti.services.authenticator import Authenticator, LockoutPolicy
from shakti.services.tenant_resolver import BaseDomainCache


def get_domain_settings() -> config.DomainSettings:
    """Domain settings, re-read from config.yaml so edits apply without restart"""
    return config.get_domain_settings()


def get_auth_settings() -> config.AuthSettings:
    return config.get_auth_settings()


def get_tenant_defaults() -> config.TenantDefaults:
    return config.get_tenant_defaults()


def get_base_domain_cache(request: Request) -> BaseDomainCache:
    """
    The application's base-domain cache.

    Created lazily on app.state so tests and embedded apps get one too.
    """
    cache = getattr(request.app.state, "base_domain_cache", None)
    if cache is None:
        cache = BaseDomainCache(dev_suffix=get_domain_settings().dev_suffix)
        request.app.state.base_domain_cache = cache
    return cache


def get_authenticator(
    db: Session = Depends(get_db),
    auth_settings: config.AuthSettings = Depends(get_auth_settings),
    domain_settings: config.DomainSettings = Depends(get_domain_settings),
) -> Authenticator:
    """Authenticator bound to the request's database session"""
    return Authenticator(
        db,
        lockout=LockoutPolicy.from_settings(auth_settings),
        dev_suffix=domain_settings.dev_suffix,
    )
