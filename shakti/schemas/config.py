### Description ###
# Shakti - Loan Recovery Management Platform
# - Configuration Schemas -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Configuration Schemas

Request/response models for the operator config endpoints.
"""

from pydantic import BaseModel


class ConfigResponse(BaseModel):
    """Editable configuration (bootstrap secrets excluded)"""
    domain: dict
    auth: dict
    tenants: dict
    application: dict


class ConfigUpdateRequest(BaseModel):
    """Sections of config.yaml an operator may edit"""
    domain: dict | None = None
    auth: dict | None = None
    tenants: dict | None = None
    application: dict | None = None


class ConfigUpdateResponse(BaseModel):
    """Response after config update"""
    changed_fields: list[str]
    message: str
