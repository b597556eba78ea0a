### Description ###
# Shakti - Loan Recovery Management Platform
# - Error Taxonomy -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Error Taxonomy

Exceptions raised by the tenant resolver, the authenticator and the
principal management services. Each error carries the HTTP status the
API layer answers with and a user-facing message.

Authentication failures share one generic message so callers can never
tell "unknown user" from "wrong password".
"""

GENERIC_CREDENTIALS_MESSAGE = "Invalid credentials"


class ShaktiError(Exception):
    """Base class for all domain errors"""

    status_code: int = 400
    public_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_public(self) -> str:
        """Message safe to show to the caller"""
        return self.public_message

    @property
    def public_code(self) -> str:
        """Error name safe to show to the caller"""
        return type(self).__name__


class NotFound(ShaktiError):
    """Tenant or principal row is absent"""

    status_code = 404
    public_message = "Not found"

    def to_public(self) -> str:
        return self.message


class TenantUnavailable(ShaktiError):
    """Tenant could not be resolved for the host, or is not active"""

    status_code = 403
    public_message = "This organization is not available. Please contact support."


class AccountInactive(ShaktiError):
    """Principal exists but its status is not active"""

    status_code = 403
    public_message = "Your account is inactive. Please contact your administrator."


class AccountLocked(ShaktiError):
    """Too many consecutive failures, principal is temporarily locked"""

    status_code = 423
    public_message = "Too many failed attempts. Please try again later."


class InvalidCredential(ShaktiError):
    """Password mismatch, or the generic fallback for an unknown principal"""

    status_code = 401
    public_message = GENERIC_CREDENTIALS_MESSAGE


class RoleMismatch(InvalidCredential):
    """
    Credential is valid but the stored role differs from the claimed one.

    Distinct type for callers and logs, same public message as
    InvalidCredential.
    """

    @property
    def public_code(self) -> str:
        return InvalidCredential.__name__


class Conflict(ShaktiError):
    """Uniqueness or limit violation"""

    status_code = 409
    public_message = "Conflict"

    def to_public(self) -> str:
        return self.message


class InvalidReference(ShaktiError):
    """A referenced row (e.g. the creating operator) does not exist"""

    status_code = 422
    public_message = "Invalid reference"

    def to_public(self) -> str:
        return self.message


class ValidationFailed(ShaktiError):
    """Input rejected by a domain rule (e.g. malformed subdomain label)"""

    status_code = 422
    public_message = "Validation failed"

    def to_public(self) -> str:
        return self.message


class DependencyUnavailable(ShaktiError):
    """The data store itself could not be reached"""

    status_code = 503
    public_message = "Service temporarily unavailable. Please retry."
