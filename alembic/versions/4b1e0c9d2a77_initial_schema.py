"""initial schema: users, workspaces, members, catalog, projects, invoices, portfolios

Revision ID: 4b1e0c9d2a77
Revises: 
Create Date: 2026-10-19 09:12:41.308114

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4b1e0c9d2a77'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Enum columns store member names.
ROLE_NAMES = ("OWNER", "MANAGER", "MEMBER")
ENUM_TYPES = (
    "workspacerole",
    "workspaceplan",
    "workspacestatus",
    "servicestatus",
    "projectstatus",
    "invoicestatus",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _workspace_fk() -> sa.Column:
    return sa.Column("workspace_id", sa.Uuid(), sa.ForeignKey("workspaces.id"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.String(5), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("bio", sa.String(500), nullable=False),
        sa.Column("workspace_id", sa.Uuid(), nullable=True),
        sa.Column("workspace_role", sa.Enum(*ROLE_NAMES, name="workspacerole"), nullable=True),
        sa.Column("workspace_joined_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f("ix_users_user_id"), "users", ["user_id"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_workspace_id"), "users", ["workspace_id"])

    op.create_table(
        "workspaces",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("plan", sa.Enum("FREE", "PRO", "BUSINESS", name="workspaceplan"), nullable=False),
        sa.Column("status", sa.Enum("ACTIVE", "SUSPENDED", name="workspacestatus"), nullable=False),
        sa.Column("permissions", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_workspaces_slug"), "workspaces", ["slug"], unique=True)
    op.create_index(op.f("ix_workspaces_owner_id"), "workspaces", ["owner_id"])

    op.create_table(
        "workspace_members",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _workspace_fk(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "role",
            postgresql.ENUM(*ROLE_NAMES, name="workspacerole", create_type=False),
            nullable=False,
        ),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.Column("invited_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.UniqueConstraint("workspace_id", "user_id"),
    )
    op.create_index(op.f("ix_workspace_members_workspace_id"), "workspace_members", ["workspace_id"])
    op.create_index(op.f("ix_workspace_members_user_id"), "workspace_members", ["user_id"])

    op.create_table(
        "clients",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _workspace_fk(),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("address", sa.String(1000), nullable=False),
        sa.Column("notes", sa.String(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("workspace_id", "client_id"),
    )
    op.create_index(op.f("ix_clients_workspace_id"), "clients", ["workspace_id"])
    op.create_index(op.f("ix_clients_client_id"), "clients", ["client_id"])

    op.create_table(
        "services",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _workspace_fk(),
        sa.Column("service_id", sa.String(64), nullable=False),
        sa.Column("service_name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("service_price", sa.Float(), nullable=False),
        sa.Column("duration_of_work", sa.Integer(), nullable=False),
        sa.Column("deliverables", sa.String(), nullable=False),
        sa.Column("unlimited_revision", sa.Boolean(), nullable=False),
        sa.Column("total_revision", sa.Integer(), nullable=True),
        sa.Column("status", sa.Enum("ACTIVE", "INACTIVE", name="servicestatus"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("workspace_id", "service_id"),
    )
    op.create_index(op.f("ix_services_workspace_id"), "services", ["workspace_id"])
    op.create_index(op.f("ix_services_service_id"), "services", ["service_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _workspace_fk(),
        sa.Column("number_order", sa.String(32), nullable=False),
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("client_id", sa.String(64), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_email", sa.String(320), nullable=False),
        sa.Column("client_company", sa.String(255), nullable=False),
        sa.Column("client_address", sa.String(1000), nullable=False),
        sa.Column("client_phone", sa.String(50), nullable=False),
        sa.Column("deadline", sa.DateTime(), nullable=False),
        sa.Column("brief", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("discount", sa.Float(), nullable=False),
        sa.Column("total_price", sa.Float(), nullable=False),
        sa.Column("deliverables", sa.String(), nullable=False),
        sa.Column("invoice", sa.String(), nullable=False),
        sa.Column("linked_invoice_id", sa.String(64), nullable=False),
        sa.Column("linked_invoice_number", sa.String(64), nullable=False),
        sa.Column("service_id", sa.String(64), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "TODO", "IN_PROGRESS", "WAITING_FOR_PAYMENT", "IN_REVIEW", "REVISION", "DONE",
                name="projectstatus",
            ),
            nullable=False,
        ),
        sa.Column("comments", sa.JSON(), nullable=False),
        sa.Column("logs", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("workspace_id", "number_order"),
    )
    op.create_index(op.f("ix_projects_workspace_id"), "projects", ["workspace_id"])
    op.create_index(op.f("ix_projects_number_order"), "projects", ["number_order"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _workspace_fk(),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("invoice_number", sa.String(64), nullable=False),
        sa.Column("invoice_date", sa.DateTime(), nullable=False),
        sa.Column("due_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.Enum("DRAFT", "SENT", "PAID", name="invoicestatus"), nullable=False),
        sa.Column("logo", sa.Text(), nullable=False, server_default=""),
        sa.Column("billed_by", sa.JSON(), nullable=False),
        sa.Column("billed_to", sa.JSON(), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("payment_method", sa.JSON(), nullable=False),
        sa.Column("terms", sa.String(), nullable=False),
        sa.Column("footer", sa.String(), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False),
        sa.Column("total", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("updated_by", sa.String(64), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_invoices_workspace_id"), "invoices", ["workspace_id"])
    op.create_index(op.f("ix_invoices_invoice_number"), "invoices", ["invoice_number"], unique=True)
    op.create_index(op.f("ix_invoices_status"), "invoices", ["status"])

    op.create_table(
        "portfolios",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _workspace_fk(),
        sa.Column("title", sa.String(140), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("cover_image", sa.Text(), nullable=False, server_default=""),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("links", sa.JSON(), nullable=False),
        sa.Column("socials", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_portfolios_workspace_id"), "portfolios", ["workspace_id"], unique=True)
    op.create_index(op.f("ix_portfolios_slug"), "portfolios", ["slug"], unique=True)


def downgrade() -> None:
    for table in (
        "portfolios",
        "invoices",
        "projects",
        "services",
        "clients",
        "workspace_members",
        "workspaces",
        "users",
    ):
        op.drop_table(table)
    bind = op.get_bind()
    for name in ENUM_TYPES:
        sa.Enum(name=name).drop(bind, checkfirst=True)
