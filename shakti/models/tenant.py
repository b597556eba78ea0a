### Description ###
# Shakti - Loan Recovery Management Platform
# - Tenant Model -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Tenant Model

Represents a customer organization (a lending company) served from its
own subdomain, e.g. techcorp.yourapp.com. Company admins and employees
are scoped to exactly one tenant.
"""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from shakti.database import Base

TENANT_STATUSES = ("active", "inactive")
TENANT_PLANS = ("basic", "pro", "enterprise")


class Tenant(Base):
    """
    Tenant model - one lending organization.

    Status gates every tenant-scoped login: an inactive tenant keeps its
    data but none of its principals can sign in.
    """

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    subdomain = Column(String(63), nullable=False, unique=True, index=True)
    status = Column(String(20), default="active", nullable=False)

    # Plan and limits
    plan = Column(String(20), default="basic", nullable=False)
    max_users = Column(Integer, default=10, nullable=False)
    max_connections = Column(Integer, default=5, nullable=False)

    # Branding and feature flags, e.g.
    # {"branding": {"primaryColor": "#3B82F6"}, "features": {"voip": true}}
    settings = Column(JSON, default=dict, nullable=False)

    # Company profile
    proprietor_name = Column(String(100), nullable=True)
    phone_number = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    gst_number = Column(String(20), nullable=True)

    # Audit
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(Integer, ForeignKey("platform_operators.id"), nullable=True)

    # Relationships
    company_admins = relationship(
        "CompanyAdmin", back_populates="tenant", cascade="all, delete-orphan"
    )
    employees = relationship("Employee", back_populates="tenant", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tenant(id={self.id}, subdomain='{self.subdomain}', status='{self.status}')>"

    @property
    def is_active(self) -> bool:
        """Only active tenants accept logins"""
        return self.status == "active"
