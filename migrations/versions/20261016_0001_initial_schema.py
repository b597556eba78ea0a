"""Initial schema - tenants, principals, access_logs

Revision ID: 0001
Revises: None
Create Date: 2026-10-16

Tables:
- platform_operators: SuperAdmin accounts
- tenants: Lending organizations served from their own subdomain
- company_admins: Per-tenant administrators
- employees: Per-tenant TeamIncharge / Telecaller accounts
- access_logs: Request/response audit trail
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers, used by Alembic
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _credential_columns() -> list[sa.Column]:
    """Password hash, lockout and login tracking shared by all principals"""
    return [
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, default=0),
        sa.Column("locked_until", sa.DateTime(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create initial database schema."""

    op.create_table(
        "platform_operators",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        *_credential_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_platform_operators_username", "platform_operators", ["username"], unique=True)

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("subdomain", sa.String(length=63), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, default="active"),
        sa.Column("plan", sa.String(length=20), nullable=False, default="basic"),
        sa.Column("max_users", sa.Integer(), nullable=False, default=10),
        sa.Column("max_connections", sa.Integer(), nullable=False, default=5),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("proprietor_name", sa.String(length=100), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("gst_number", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["platform_operators.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenants_subdomain", "tenants", ["subdomain"], unique=True)

    op.create_table(
        "company_admins",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("employee_code", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_credential_columns(),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "username", name="uq_company_admin_username"),
        sa.UniqueConstraint("tenant_id", "email", name="uq_company_admin_email"),
    )
    op.create_index("ix_company_admins_tenant_id", "company_admins", ["tenant_id"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=False),
        sa.Column("employee_code", sa.String(length=50), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_credential_columns(),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "mobile", name="uq_employee_mobile"),
        sa.UniqueConstraint("tenant_id", "employee_code", name="uq_employee_code"),
    )
    op.create_index("ix_employees_tenant_id", "employees", ["tenant_id"])

    op.create_table(
        "access_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_id", sa.String(length=36), nullable=False),
        sa.Column("principal_id", sa.Integer(), nullable=True),
        sa.Column("principal_role", sa.String(length=20), nullable=True),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("host", sa.String(length=255), nullable=True),
        sa.Column("method", sa.String(length=10), nullable=False),
        sa.Column("path", sa.String(length=500), nullable=False),
        sa.Column("query_string", sa.String(length=1000), nullable=True),
        sa.Column("client_ip", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("status_code", sa.Integer(), nullable=False),
        sa.Column("response_time_ms", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create indexes for access_logs
    op.create_index("ix_access_logs_created_at", "access_logs", ["created_at"])
    op.create_index(
        "ix_access_logs_principal_created",
        "access_logs",
        ["principal_role", "principal_id", "created_at"],
    )
    op.create_index("ix_access_logs_tenant_created", "access_logs", ["tenant_id", "created_at"])
    op.create_index("ix_access_logs_path_created", "access_logs", ["path", "created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_access_logs_path_created", table_name="access_logs")
    op.drop_index("ix_access_logs_tenant_created", table_name="access_logs")
    op.drop_index("ix_access_logs_principal_created", table_name="access_logs")
    op.drop_index("ix_access_logs_created_at", table_name="access_logs")
    op.drop_table("access_logs")
    op.drop_index("ix_employees_tenant_id", table_name="employees")
    op.drop_table("employees")
    op.drop_index("ix_company_admins_tenant_id", table_name="company_admins")
    op.drop_table("company_admins")
    op.drop_index("ix_tenants_subdomain", table_name="tenants")
    op.drop_table("tenants")
    op.drop_index("ix_platform_operators_username", table_name="platform_operators")
    op.drop_table("platform_operators")
