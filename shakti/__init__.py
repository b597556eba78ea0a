### Description ###
# Shakti - Loan Recovery Management Platform
# - Package -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Shakti Backend Package

Tenant resolution and role-based authentication for the Shakti
loan recovery dashboards (SuperAdmin, CompanyAdmin, TeamIncharge,
Telecaller), exposed through a FastAPI application.
"""

__version__ = "1.0.0"
