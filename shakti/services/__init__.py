### Description ###
# Shakti - Loan Recovery Management Platform
# - Services Package -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Services Package

Business logic and data access:
- tenant_resolver: host name -> tenant mapping and tenant CRUD
- authenticator: role-scoped credential verification
- principals: company admin, employee and operator management
- sessions: session tokens and the CLI session file
- config_service: comment-preserving config.yaml edits
"""

from .authenticator import Authenticator, LockoutPolicy, SessionIdentity
from .sessions import SessionStore, decode_session_token, issue_session_token
from .tenant_resolver import BaseDomainCache, TenantContext, resolve_tenant_for_host

__all__ = [
    "Authenticator",
    "BaseDomainCache",
    "LockoutPolicy",
    "SessionIdentity",
    "SessionStore",
    "TenantContext",
    "decode_session_token",
    "issue_session_token",
    "resolve_tenant_for_host",
]
