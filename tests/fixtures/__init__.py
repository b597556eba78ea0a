"""
Test fixtures and factories for Shakti tests.
"""

from tests.fixtures.factories import (
    DEFAULT_PASSWORD,
    create_company_admin,
    create_employee,
    create_operator,
    create_tenant,
)

__all__ = [
    "DEFAULT_PASSWORD",
    "create_company_admin",
    "create_employee",
    "create_operator",
    "create_tenant",
]
