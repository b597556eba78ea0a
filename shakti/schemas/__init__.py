### Description ###
# Shakti - Loan Recovery Management Platform
# - Schemas Package -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Schemas Package

Pydantic models for request/response validation:
- auth: Login and session schemas
- tenants: Tenant management and lookup schemas
- principals: Company admin and employee schemas
- config: Operator configuration schemas
- responses: Common response schemas
"""

from .auth import LoginRequest, LoginResponse, SessionResponse
from .responses import APIResponse, ErrorResponse, PaginatedResponse, PaginationMeta
from .tenants import TenantContextResponse, TenantResponse

__all__ = [
    "APIResponse",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "SessionResponse",
    "TenantContextResponse",
    "TenantResponse",
]
