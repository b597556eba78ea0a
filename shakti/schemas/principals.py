### Description ###
# Shakti - Loan Recovery Management Platform
# - Principal Schemas -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Principal Schemas

Pydantic models for company admin and employee management.
Responses never carry password hashes.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

EmployeeRole = Literal["TeamIncharge", "Telecaller"]
PrincipalStatus = Literal["active", "inactive"]


# ========================================
# Company Admin Schemas
# ========================================

class CompanyAdminCreate(BaseModel):
    """Create a company admin"""
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=72)
    name: str | None = Field(None, max_length=100)
    employee_code: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    status: PrincipalStatus = "active"


class CompanyAdminUpdate(BaseModel):
    """Update company admin fields"""
    username: str | None = Field(None, min_length=1, max_length=100)
    name: str | None = Field(None, max_length=100)
    employee_code: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    status: PrincipalStatus | None = None


class CompanyAdminResponse(BaseModel):
    """Company admin response"""
    id: int
    tenant_id: int
    username: str
    name: str | None = None
    employee_code: str | None = None
    email: str | None = None
    status: str
    last_login_at: datetime | None = None
    locked_until: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# ========================================
# Employee Schemas
# ========================================

class EmployeeCreate(BaseModel):
    """Create a TeamIncharge or Telecaller"""
    name: str = Field(..., min_length=1, max_length=100)
    mobile: str = Field(..., min_length=1, max_length=20)
    employee_code: str = Field(..., min_length=1, max_length=50)
    role: EmployeeRole
    password: str = Field(..., min_length=1, max_length=72)
    status: PrincipalStatus = "active"


class EmployeeUpdate(BaseModel):
    """Update employee fields"""
    name: str | None = Field(None, min_length=1, max_length=100)
    mobile: str | None = Field(None, min_length=1, max_length=20)
    employee_code: str | None = Field(None, min_length=1, max_length=50)
    role: EmployeeRole | None = None
    status: PrincipalStatus | None = None


class EmployeeResponse(BaseModel):
    """Employee response"""
    id: int
    tenant_id: int
    name: str
    mobile: str
    employee_code: str
    role: str
    status: str
    last_login_at: datetime | None = None
    locked_until: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# ========================================
# Password Reset
# ========================================

class PasswordResetRequest(BaseModel):
    """Optional explicit password; a temporary one is generated otherwise"""
    new_password: str | None = Field(None, min_length=1, max_length=72)


class PasswordResetResponse(BaseModel):
    """New password, shown once"""
    principal_id: int
    temporary_password: str
