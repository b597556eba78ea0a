### Description ###
# Shakti - Loan Recovery Management Platform
# - Tenant Schemas -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Tenant Schemas

Pydantic models for tenant management and tenant lookup endpoints.
Subdomain rules (charset, reserved labels) are enforced by the tenant
resolver, not here.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class TenantCreate(BaseModel):
    """Create a new tenant"""
    name: str = Field(..., min_length=1, max_length=100, description="Company name")
    subdomain: str = Field(..., min_length=1, max_length=63, description="Subdomain label, e.g. 'acme'")
    status: Literal["active", "inactive"] = "active"
    plan: str | None = Field(None, max_length=20, description="Plan tier (defaults from config)")
    max_users: int | None = Field(None, ge=1, le=10000)
    max_connections: int | None = Field(None, ge=1, le=1000)
    settings: dict[str, Any] | None = Field(None, description="Branding and feature flags")
    proprietor_name: str | None = Field(None, max_length=100)
    phone_number: str | None = Field(None, max_length=20)
    address: str | None = None
    gst_number: str | None = Field(None, max_length=20)


class TenantUpdate(BaseModel):
    """Update tenant fields"""
    name: str | None = Field(None, min_length=1, max_length=100)
    subdomain: str | None = Field(None, min_length=1, max_length=63)
    status: Literal["active", "inactive"] | None = None
    plan: str | None = Field(None, max_length=20)
    max_users: int | None = Field(None, ge=1, le=10000)
    max_connections: int | None = Field(None, ge=1, le=1000)
    settings: dict[str, Any] | None = None
    proprietor_name: str | None = Field(None, max_length=100)
    phone_number: str | None = Field(None, max_length=20)
    address: str | None = None
    gst_number: str | None = Field(None, max_length=20)


class TenantResponse(BaseModel):
    """Tenant response"""
    id: int
    name: str
    subdomain: str
    status: str
    plan: str
    max_users: int
    max_connections: int
    settings: dict[str, Any] = Field(default_factory=dict)
    proprietor_name: str | None = None
    phone_number: str | None = None
    address: str | None = None
    gst_number: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    created_by: int | None = None
    login_url: str | None = None

    class Config:
        from_attributes = True


class TenantSummary(BaseModel):
    """Public view of the tenant behind a host"""
    id: int
    name: str
    subdomain: str
    status: str
    plan: str
    settings: dict[str, Any] = Field(default_factory=dict)

    class Config:
        from_attributes = True


class TenantContextResponse(BaseModel):
    """Resolution result for the request host"""
    hostname: str
    is_root: bool
    label: str | None = None
    is_usable: bool
    tenant: TenantSummary | None = None
