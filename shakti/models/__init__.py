### Description ###
# Shakti - Loan Recovery Management Platform
# - API Models Package -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
API Models Package

Contains SQLAlchemy models for the application database:
- Tenant: Lending organization served from its own subdomain
- PlatformOperator, CompanyAdmin, Employee: principals that can sign in
- AccessLog: Request/response audit log
"""

from shakti.models.tenant import Tenant
from shakti.models.principals import (
    CompanyAdmin,
    Employee,
    PlatformOperator,
    Role,
    generate_temporary_password,
    hash_password,
    verify_password_hash,
)
from shakti.models.access_log import AccessLog

__all__ = [
    "AccessLog",
    "CompanyAdmin",
    "Employee",
    "PlatformOperator",
    "Role",
    "Tenant",
    "generate_temporary_password",
    "hash_password",
    "verify_password_hash",
]
