### Description ###
# Shakti - Loan Recovery Management Platform
# - API Configuration -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
API Configuration Management

Uses Pydantic Settings for configuration with environment variable support.
Loads settings from .env file and data/config.yaml.

Config file location (in order of precedence):
1. SHAKTI_CONFIG_PATH environment variable
2. data/config.yaml (default - created on first run)
"""

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic_settings import BaseSettings


# Labels that can never be claimed by a tenant
RESERVED_SUBDOMAINS = (
    "www",
    "admin",
    "superadmin",
    "api",
    "app",
    "mail",
    "smtp",
    "ftp",
    "webmail",
    "cpanel",
    "whm",
    "blog",
    "forum",
    "shop",
    "store",
    "dashboard",
    "portal",
    "support",
    "help",
    "docs",
    "status",
    "dev",
    "staging",
    "test",
    "demo",
    "sandbox",
    "localhost",
    "ns1",
    "ns2",
    "dns",
    "cdn",
    "assets",
    "static",
    "media",
    "files",
    "images",
)


def get_project_root() -> Path:
    """Get the project root directory"""
    return Path(__file__).parent.parent


def get_config_path() -> Path:
    """
    Get the path to config.yaml.

    Priority:
    1. SHAKTI_CONFIG_PATH environment variable (if set)
    2. data/config.yaml (default location)
    """
    env_path = os.environ.get("SHAKTI_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    return get_project_root() / "data" / "config.yaml"


def get_version() -> str:
    """Package version, shown in the OpenAPI docs and /health"""
    from shakti import __version__

    return __version__


class APISettings(BaseSettings):
    """API Server Settings"""

    # API Configuration
    api_title: str = "Shakti API"
    api_version: str = get_version()
    api_prefix: str = "/api/v1"
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # Database Configuration (SQLite by default)
    app_database_url: str = "sqlite:///./data/shakti.db"

    # Security
    secret_key: str = "change-this-in-production"  # Used for JWT signing
    session_ttl_hours: int = 24
    trust_forwarded_host: bool = False  # Honour X-Forwarded-Host behind a proxy

    # Rate Limiting
    login_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = True

    class Config:
        env_prefix = "SHAKTI_"
        env_file = ".env"
        extra = "ignore"


DEFAULT_CONFIG = """# Shakti Configuration
# Domain, authentication and bootstrap settings

# Domain Configuration
domain:
  # Platform base domain; tenants live at <subdomain>.<base_domain>
  base_domain: "yourapp.com"

  # "development" builds plain host URLs, "production" builds https:// login URLs
  environment: "development"

  # Loopback suffix that enables tenant subdomains in development
  # e.g. acme.localhost:5173
  dev_suffix: "localhost"

# Authentication
auth:
  lockout:
    enabled: true             # Lock an account after repeated failures
    max_attempts: 5           # Consecutive failures before locking
    lock_minutes: 15          # Length of the lock window

  # Minimum length for new and reset passwords
  min_password_length: 8

# Tenant Defaults (applied when a tenant is created without them)
tenants:
  default_plan: "basic"
  default_max_users: 10
  default_max_connections: 5

# Platform Operator Bootstrap
# On first start, if no platform operator exists, one is created with this
# username and a random password printed once to the console.
bootstrap:
  operator_username: "superadmin"
  # operator_password_hash: "$2b$12$..."  # Use this hash instead of a random password

# Application Settings
application:
  logging:
    level: "INFO"             # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_to_file: true         # Enable file logging
    log_to_console: true      # Enable console logging
"""


def load_yaml_config(config_path: str | None = None) -> dict:
    """Load configuration from YAML file, creating default if missing"""
    config_file = get_config_path() if config_path is None else Path(config_path)

    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG)
        print(f"Created default configuration file: {config_file}")

    with open(config_file, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@lru_cache
def get_api_settings() -> APISettings:
    """Get cached API settings instance"""
    return APISettings()


class DomainSettings:
    """Domain settings loaded from config.yaml"""

    def __init__(self, config: dict | None = None):
        config = load_yaml_config() if config is None else config
        domain_config = config.get("domain", {}) or {}

        self.base_domain: str = domain_config.get("base_domain", "yourapp.com")
        self.environment: str = domain_config.get("environment", "development")
        self.dev_suffix: str = domain_config.get("dev_suffix", "localhost")
        self.reserved_subdomains: tuple[str, ...] = RESERVED_SUBDOMAINS


class AuthSettings:
    """Lockout and password policy loaded from config.yaml"""

    def __init__(self, config: dict | None = None):
        config = load_yaml_config() if config is None else config
        auth_config = config.get("auth", {}) or {}
        lockout = auth_config.get("lockout", {}) or {}

        self.lockout_enabled: bool = lockout.get("enabled", True)
        self.max_attempts: int = lockout.get("max_attempts", 5)
        self.lock_minutes: int = lockout.get("lock_minutes", 15)
        self.min_password_length: int = auth_config.get("min_password_length", 8)


class TenantDefaults:
    """Defaults applied to new tenants"""

    def __init__(self, config: dict | None = None):
        config = load_yaml_config() if config is None else config
        tenant_config = config.get("tenants", {}) or {}

        self.plan: str = tenant_config.get("default_plan", "basic")
        self.max_users: int = tenant_config.get("default_max_users", 10)
        self.max_connections: int = tenant_config.get("default_max_connections", 5)


class BootstrapSettings:
    """Initial platform operator settings"""

    def __init__(self, config: dict | None = None):
        config = load_yaml_config() if config is None else config
        bootstrap = config.get("bootstrap", {}) or {}

        self.operator_username: str = bootstrap.get("operator_username", "superadmin")
        self.operator_password_hash: str | None = bootstrap.get("operator_password_hash")


def get_domain_settings() -> DomainSettings:
    """Get domain settings (not cached - reloads from config)"""
    return DomainSettings()


def get_auth_settings() -> AuthSettings:
    """Get auth settings (not cached - reloads from config)"""
    return AuthSettings()


def get_tenant_defaults() -> TenantDefaults:
    """Get tenant defaults (not cached - reloads from config)"""
    return TenantDefaults()
