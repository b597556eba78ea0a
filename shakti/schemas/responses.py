### Description ###
# Shakti - Loan Recovery Management Platform
# - Common Response Schemas -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Common Response Schemas

Pydantic models for standardized API responses.
"""

import math
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from shakti.errors import ShaktiError

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper"""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginationMeta(BaseModel):
    """Pagination metadata"""

    page: int = Field(ge=1, description="Current page number")
    page_size: int = Field(ge=1, le=100, description="Items per page")
    total_items: int = Field(ge=0, description="Total number of items")
    total_pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether there is a next page")
    has_previous: bool = Field(description="Whether there is a previous page")

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "PaginationMeta":
        total_pages = math.ceil(total / page_size) if total > 0 else 1
        return cls(
            page=page,
            page_size=page_size,
            total_items=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated API response"""

    success: bool = True
    data: List[T] = Field(default_factory=list)
    pagination: PaginationMeta


class ErrorDetail(BaseModel):
    """One validation problem"""

    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Error envelope for every failed request.

    code names the domain error (e.g. "AccountLocked") so clients can
    branch without parsing the message.
    """

    success: bool = False
    error: str
    code: Optional[str] = None
    details: Optional[List[ErrorDetail]] = None
    request_id: Optional[str] = None

    @classmethod
    def from_error(cls, exc: ShaktiError, request_id: Optional[str] = None) -> "ErrorResponse":
        """Envelope for a ShaktiError, using only its public message"""
        return cls(error=exc.to_public(), code=exc.public_code, request_id=request_id)


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = "healthy"
    version: str
    app_db_connected: bool
    tenant_count: Optional[int] = None
    base_domain_cache: Optional[Dict[str, int]] = None
