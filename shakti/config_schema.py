"""
Config Schema Validation

Pydantic models for validating config.yaml structure.
Provides clear error messages when configuration is invalid.
"""

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

_DOMAIN_PATTERN = re.compile(r"^(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$")


class DomainConfig(BaseModel):
    """Platform domain configuration"""

    base_domain: str = Field(default="yourapp.com", description="Platform base domain")
    environment: Literal["development", "production"] = Field(
        default="development", description="Controls tenant URL format"
    )
    dev_suffix: str = Field(default="localhost", min_length=1, description="Loopback suffix")

    @field_validator("base_domain")
    @classmethod
    def validate_base_domain(cls, v: str) -> str:
        """Base domain must be a plain lowercase host name"""
        v = v.strip().lower()
        if v != "localhost" and not _DOMAIN_PATTERN.match(v):
            raise ValueError(f"Invalid base domain '{v}'. Use a host name like 'yourapp.com'")
        return v


class LockoutConfig(BaseModel):
    """Repeated-failure lockout policy"""

    enabled: bool = Field(default=True, description="Lock accounts after repeated failures")
    max_attempts: int = Field(default=5, ge=1, le=100, description="Failures before locking")
    lock_minutes: int = Field(default=15, ge=1, le=1440, description="Lock window in minutes")


class AuthConfig(BaseModel):
    """Authentication policy"""

    lockout: LockoutConfig = Field(default_factory=LockoutConfig)
    min_password_length: int = Field(default=8, ge=6, le=128)


class TenantsConfig(BaseModel):
    """Defaults for newly created tenants"""

    default_plan: Literal["basic", "pro", "enterprise"] = "basic"
    default_max_users: int = Field(default=10, ge=1)
    default_max_connections: int = Field(default=5, ge=1)


class BootstrapConfig(BaseModel):
    """Initial platform operator"""

    operator_username: str = Field(default="superadmin", min_length=1)
    operator_password_hash: Optional[str] = Field(
        default=None,
        description="bcrypt hash (leave empty to generate a random password on first start)",
    )

    @field_validator("operator_password_hash")
    @classmethod
    def validate_hash(cls, v: Optional[str]) -> Optional[str]:
        """Only bcrypt hashes are accepted"""
        if v is not None and not v.startswith("$2"):
            raise ValueError("operator_password_hash must be a bcrypt hash")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_to_file: bool = Field(default=True, description="Enable file logging")
    log_to_console: bool = Field(default=True, description="Enable console logging")


class ApplicationConfig(BaseModel):
    """Application settings"""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class AppConfig(BaseModel):
    """
    Root configuration model for config.yaml

    Validates the entire configuration structure on load.
    """

    domain: DomainConfig = Field(default_factory=DomainConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    tenants: TenantsConfig = Field(default_factory=TenantsConfig)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    application: ApplicationConfig = Field(default_factory=ApplicationConfig)

    model_config = {"populate_by_name": True}


def validate_config(config_dict: dict) -> AppConfig:
    """
    Validate a config dictionary against the schema.

    Raises:
        pydantic.ValidationError: If config is invalid
    """
    return AppConfig.model_validate(config_dict)


def format_validation_error(error: ValidationError) -> List[str]:
    """One "dotted.path: message" line per problem"""
    return [f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in error.errors()]


def get_validation_errors(config_dict: dict) -> List[str]:
    """
    Validation errors for a config dictionary.

    Returns:
        List of error messages (empty if valid)
    """
    try:
        validate_config(config_dict)
    except ValidationError as e:
        return format_validation_error(e)
    return []
