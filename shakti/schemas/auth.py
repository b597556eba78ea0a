### Description ###
# Shakti - Loan Recovery Management Platform
# - Authentication Schemas -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Authentication Schemas

Login, session and password change models.
"""

from typing import Literal

from pydantic import BaseModel, Field

LoginRole = Literal["SuperAdmin", "CompanyAdmin", "TeamIncharge", "Telecaller"]


class LoginRequest(BaseModel):
    """Role-scoped login"""
    identifier: str = Field(
        ..., min_length=1, max_length=100,
        description="Username, or mobile / employee code for employees",
    )
    password: str = Field(..., min_length=1, max_length=128)
    role: LoginRole


class SessionResponse(BaseModel):
    """Authenticated identity"""
    principal_id: int
    name: str
    role: str
    tenant_id: int | None = None
    email: str | None = None
    username: str | None = None


class LoginResponse(BaseModel):
    """Login response with session token"""
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    session: SessionResponse
    dashboard: str


class ChangePasswordRequest(BaseModel):
    """Self-service password change"""
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=72)
