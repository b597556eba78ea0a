### Description ###
# Shakti - Loan Recovery Management Platform
# - App Database Setup -
# Author: Shakti Platform Team
# Date: 10/16/2026
# Python: 3.11
####################

"""
App Database Setup

Relational store for:
- Tenants
- Platform operators, company admins and employees
- Access logs

Uses synchronous SQLAlchemy (no greenlet dependency). SQLite by default,
any SQLAlchemy URL via SHAKTI_APP_DATABASE_URL.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Mapping

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shakti.config import get_api_settings
from shakti.errors import Conflict, DependencyUnavailable, ValidationFailed

# Database file location (used when the default SQLite URL is in effect)
DATA_DIR = Path(__file__).parent.parent / "data"
DATA_DIR.mkdir(exist_ok=True)
DATABASE_PATH = DATA_DIR / "shakti.db"

_configured_url = get_api_settings().app_database_url
DATABASE_URL = (
    f"sqlite:///{DATABASE_PATH}"
    if _configured_url == "sqlite:///./data/shakti.db"
    else _configured_url
)

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# FastAPI runs sync endpoints in a threadpool, so SQLite must allow cross-thread use
engine = create_engine(DATABASE_URL, connect_args=_connect_args, echo=False)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """One session per request, closed when the response is sent"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Create any missing tables.

    Existing tables are left alone; schema changes go through Alembic.
    """
    # Registers every model on Base.metadata
    from shakti.models import access_log, principals, tenant  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_migration_revisions() -> tuple[str | None, str | None]:
    """
    (current, head) Alembic revisions for the app database.

    current is None when the database was never stamped, e.g. tables
    created by init_db() alone.
    """
    from alembic.config import Config
    from alembic.runtime.migration import MigrationContext
    from alembic.script import ScriptDirectory

    root = Path(__file__).parent.parent
    alembic_cfg = Config(str(root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root / "migrations"))
    head = ScriptDirectory.from_config(alembic_cfg).get_current_head()

    with engine.connect() as conn:
        current = MigrationContext.configure(conn).get_current_revision()
    return current, head


@contextmanager
def store_errors(db: Session, conflict_message: str = "Record already exists"):
    """
    Translate store failures into domain errors.

    - IntegrityError -> Conflict (a uniqueness constraint fired)
    - any other SQLAlchemyError -> DependencyUnavailable

    The session is rolled back in both cases. Domain errors raised inside
    the block pass through untouched.

    Usage:
        with store_errors(db):
            db.add(row)
            db.commit()
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise Conflict(conflict_message) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyUnavailable(f"Data store error: {e.__class__.__name__}") from e


def reject_null_updates(model, updates: Mapping[str, Any]) -> None:
    """
    Refuse a partial update that clears a NOT NULL column.

    Raises:
        ValidationFailed: an update sets a non-nullable column to None
    """
    columns = model.__table__.columns
    cleared = sorted(
        key for key, value in updates.items()
        if value is None and key in columns and not columns[key].nullable
    )
    if cleared:
        raise ValidationFailed(f"{', '.join(cleared)} cannot be empty")
