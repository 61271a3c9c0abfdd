"""Initial schema: projects, MCP servers, proxy keys, audit logs

Revision ID: 0001
Revises:
Create Date: 2024-01-15 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONVariant = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create the four Turnstile tables."""

    # Projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])

    # MCP servers table
    op.create_table(
        "mcp_servers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("base_url", sa.String(length=2048), nullable=False),
        sa.Column("auth_token", sa.Text(), nullable=True),
        sa.Column("cached_tools", JSONVariant, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mcp_servers_project_id", "mcp_servers", ["project_id"])
    op.create_index(
        "uq_mcp_servers_project_name",
        "mcp_servers",
        ["project_id", "name"],
        unique=True,
    )
    op.create_index(
        "ix_mcp_servers_project_active_created",
        "mcp_servers",
        ["project_id", "is_active", "created_at"],
    )

    # Proxy keys table
    op.create_table(
        "proxy_keys",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("key_hash", sa.String(length=64), nullable=False),
        sa.Column("key_prefix", sa.String(length=32), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("allowed_tools", JSONVariant, nullable=True),
        sa.Column("blacklist_words", JSONVariant, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_proxy_keys_project_id", "proxy_keys", ["project_id"])
    op.create_index("ix_proxy_keys_key_hash", "proxy_keys", ["key_hash"], unique=True)

    # Audit logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("proxy_key_id", sa.Uuid(), nullable=True),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("server_name", sa.String(length=255), nullable=True),
        sa.Column("tool_name", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error_code", sa.String(length=64), nullable=True),
        sa.Column("request_body", JSONVariant, nullable=True),
        sa.Column("response_body", JSONVariant, nullable=True),
        sa.Column("request_id", sa.String(length=255), nullable=True),
        sa.Column("latency_ms", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["proxy_key_id"], ["proxy_keys.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_project_id", "audit_logs", ["project_id"])
    op.create_index("ix_audit_logs_proxy_key_id", "audit_logs", ["proxy_key_id"])
    op.create_index("ix_audit_logs_server_name", "audit_logs", ["server_name"])
    op.create_index("ix_audit_logs_tool_name", "audit_logs", ["tool_name"])
    op.create_index("ix_audit_logs_status", "audit_logs", ["status"])
    op.create_index("ix_audit_logs_request_id", "audit_logs", ["request_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
    op.create_index(
        "ix_audit_logs_project_created", "audit_logs", ["project_id", "created_at"]
    )
    op.create_index(
        "ix_audit_logs_project_status",
        "audit_logs",
        ["project_id", "status", "created_at"],
    )
    op.create_index(
        "ix_audit_logs_key_created", "audit_logs", ["proxy_key_id", "created_at"]
    )


def downgrade() -> None:
    """Drop all Turnstile tables."""
    op.drop_table("audit_logs")
    op.drop_table("proxy_keys")
    op.drop_table("mcp_servers")
    op.drop_table("projects")
