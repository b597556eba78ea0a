### Description ###
# Shakti - Loan Recovery Management Platform
# - API Server -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
Shakti API - Main Application

FastAPI application entry point that provides:
- Tenant resolution from the request host
- Role-scoped login with session tokens
- Operator tenant / company admin management
- Company admin employee management
- Request logging and attribution
- OpenAPI documentation at /api/docs

Usage:
    # Development
    uvicorn shakti.main:app --reload --port 8000

    # Production
    uvicorn shakti.main:app --host 0.0.0.0 --port 8000
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shakti.config import (
    BootstrapSettings,
    get_api_settings,
    get_auth_settings,
    load_yaml_config,
)
from shakti.database import SessionLocal, engine, get_db, get_migration_revisions, init_db
from shakti.errors import AccountLocked, ShaktiError
from shakti.middleware import RequestLoggingMiddleware
from shakti.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from shakti.models import PlatformOperator, Tenant, generate_temporary_password
from shakti.routers import auth_router, employees_router, tenants_router
from shakti.schemas.responses import ErrorResponse, HealthResponse
from shakti.services import principals
from shakti.services.tenant_resolver import BaseDomainCache
from shakti.utils import apply_logging_config, get_logger

# Load settings
settings = get_api_settings()
logger = get_logger(__name__)


def _setup_initial_operator():
    """
    Create the first platform operator if none exist.

    - Uses bootstrap.operator_password_hash from config.yaml when set
    - Otherwise generates a random password and displays it ONCE
    """
    bootstrap = BootstrapSettings(load_yaml_config())

    db = SessionLocal()
    try:
        if db.query(PlatformOperator).first() is not None:
            return  # Operator already exists

        if bootstrap.operator_password_hash:
            principals.create_platform_operator(
                db, bootstrap.operator_username, password_hash=bootstrap.operator_password_hash
            )
            print(f"Created platform operator '{bootstrap.operator_username}' from configured hash")
            return

        password = generate_temporary_password(16)
        principals.create_platform_operator(db, bootstrap.operator_username, password=password)

        # Display the password prominently (only shown once!)
        print("\n" + "=" * 70)
        print("  INITIAL PLATFORM OPERATOR CREATED")
        print("=" * 70)
        print(f"\n  Username: {bootstrap.operator_username}")
        print(f"  Password: {password}\n")
        print("  IMPORTANT: Save this password now! It will NOT be shown again.")
        print("  Change it after the first login (POST /api/v1/auth/change-password).\n")
        print("=" * 70 + "\n")

    finally:
        db.close()


def _check_pending_migrations():
    """Warn at startup when the schema is behind the latest migration; never blocks"""
    try:
        current_rev, head_rev = get_migration_revisions()
    except Exception as e:
        logger.warning(f"Skipping migration check: {e}")
        return

    if current_rev is None:
        logger.warning("Database is not stamped by Alembic. For an existing database run: alembic stamp head")
    elif current_rev != head_rev:
        logger.warning(f"Schema at {current_rev}, latest is {head_rev}. Run: alembic upgrade head")
    else:
        logger.info(f"Schema up to date (revision {current_rev})")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager

    - Startup: create tables, check migrations, bootstrap the first operator
    - Shutdown: nothing to release beyond the engine pool
    """
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"API documentation available at: http://localhost:{settings.port}/api/docs")

    yaml_config = load_yaml_config()
    app.state.yaml_config = yaml_config
    applied = apply_logging_config(yaml_config)
    if applied:
        logger.info(f"Log level from config.yaml: {applied}")
    app.state.base_domain_cache = BaseDomainCache(
        dev_suffix=(yaml_config.get("domain") or {}).get("dev_suffix", "localhost")
    )

    init_db()
    app.state.app_db_connected = True

    _check_pending_migrations()
    _setup_initial_operator()

    yield

    logger.info("Shutting down Shakti API...")
    engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="""
## Shakti API

Multi-tenant backend for loan recovery operations.

### Features
- **Tenants**: Each organization is served from its own subdomain
- **Roles**: SuperAdmin, CompanyAdmin, TeamIncharge, Telecaller
- **Lockout**: Accounts lock after repeated failed logins
- **Logging**: Full request attribution and audit trail

### Authentication
Log in with `POST /api/v1/auth/login` and pass the returned token:

```
Authorization: Bearer <token>
```
    """,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(ShaktiError)
async def domain_exception_handler(request: Request, exc: ShaktiError) -> JSONResponse:
    """Render domain errors with their status and public message"""
    headers = None
    if isinstance(exc, AccountLocked):
        headers = {"Retry-After": str(get_auth_settings().lock_minutes * 60)}
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.from_error(exc, getattr(request.state, "request_id", None)).model_dump(),
        headers=headers,
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            request_id=getattr(request.state, "request_id", None),
            details=[{"message": str(exc)}] if settings.debug else None,
        ).model_dump(),
    )


# Health check endpoint
@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check",
    description="Check API health and database connectivity",
)
async def health_check(request: Request, db: Session = Depends(get_db)) -> HealthResponse:
    """Health check endpoint"""
    tenant_count = None
    try:
        db.execute(text("SELECT 1"))
        tenant_count = db.query(Tenant).count()
        app_db_connected = True
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        app_db_connected = False

    cache = getattr(request.app.state, "base_domain_cache", None)
    return HealthResponse(
        status="healthy" if app_db_connected else "degraded",
        version=settings.api_version,
        app_db_connected=app_db_connected,
        tenant_count=tenant_count,
        base_domain_cache=cache.stats if cache is not None else None,
    )


# Root endpoint
@app.get("/", tags=["System"], summary="API Info")
async def root():
    """API root - returns basic API information"""
    return {
        "name": settings.api_title,
        "version": settings.api_version,
        "docs": "/api/docs",
        "health": "/health",
    }


# Include routers
app.include_router(
    auth_router,
    prefix=settings.api_prefix,
    tags=["Authentication"],
)

app.include_router(
    tenants_router,
    prefix=f"{settings.api_prefix}/admin",
    tags=["Admin - Tenant Management"],
)

app.include_router(
    employees_router,
    prefix=f"{settings.api_prefix}/employees",
    tags=["Employees"],
)


# Entry point for running directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shakti.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
