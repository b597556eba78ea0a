### Description ###
# Shakti - Loan Recovery Management Platform
# - Routers Package -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Routers Package

Contains endpoint routers for different resources:
- auth: Login, session and tenant lookup endpoints
- tenants: Operator tenant, company admin and config management
- employees: Company admin employee management
"""

from .auth import router as auth_router
from .employees import router as employees_router
from .tenants import router as tenants_router

__all__ = ["auth_router", "employees_router", "tenants_router"]
