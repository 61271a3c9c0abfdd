"""
MCP Server Model

An MCP Server is an upstream tool-providing endpoint registered in a project.
Callers address it by name (``server_name``) or implicitly through one of
the tools in its cached catalog (``tool`` / ``method``).

The catalog is a snapshot taken by the tools/list handshake on create, on
URL/credential change and on manual refresh. The gateway only ever reads it.

SAMPLE MCP SERVER RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ 660e8400-e29b-41d4-a716-446655440001                      │
│ project_id       │ 550e8400-e29b-41d4-a716-446655440000                      │
│ name             │ "github"                                                   │
│ base_url         │ "https://mcp.example.com/github"                          │
│ auth_token       │ "ghp_..." (never returned by the API)                     │
│ cached_tools     │ [                                                          │
│                  │   {"name": "create_issue", "description": "..."},          │
│                  │   "list_repos"                                             │
│                  │ ]                                                          │
│ is_active        │ true                                                       │
│ created_at       │ 2024-01-02T00:00:00Z                                      │
│ updated_at       │ 2024-01-15T10:30:00Z                                      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.mcp.catalog import tool_names
from app.models.base import Base, JSONVariant, TimestampMixin

if TYPE_CHECKING:
    from app.models.project import Project


class McpServer(Base, TimestampMixin):
    """
    Registered upstream MCP server.

    Attributes:
        id: Unique identifier (UUID v4)
        project_id: Owning project
        name: Caller-facing name, unique per project and case-sensitive
        base_url: Endpoint that receives forwarded JSON-RPC requests
        auth_token: Optional bearer credential substituted for the proxy key
        cached_tools: Tool catalog from the last successful handshake
        is_active: Inactive servers are invisible to the gateway
    """

    __tablename__ = "mcp_servers"

    # ==========================================================================
    # PRIMARY KEY
    # ==========================================================================

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Unique identifier for the MCP server",
    )

    # ==========================================================================
    # FOREIGN KEYS
    # ==========================================================================

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Reference to the owning project",
    )

    # ==========================================================================
    # CONNECTION
    # ==========================================================================

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Name callers use in server_name (unique within the project)",
    )

    base_url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        doc="URL the gateway POSTs JSON-RPC requests to",
    )

    auth_token: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Bearer credential for the upstream server (optional)",
    )

    # ==========================================================================
    # TOOL CATALOG
    # ==========================================================================

    cached_tools: Mapped[list[Any]] = mapped_column(
        JSONVariant,
        default=list,
        nullable=False,
        doc="Tool entries (strings or objects with a name) from the last handshake",
    )

    # ==========================================================================
    # STATUS FLAGS
    # ==========================================================================

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Whether the gateway may route requests to this server",
    )

    # ==========================================================================
    # RELATIONSHIPS
    # ==========================================================================

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="mcp_servers",
    )

    # ==========================================================================
    # TABLE CONSTRAINTS & INDEXES
    # ==========================================================================

    __table_args__ = (
        # Server names are unique per project (case-sensitive)
        Index(
            "uq_mcp_servers_project_name",
            "project_id",
            "name",
            unique=True,
        ),
        # Tool lookup scans active servers of a project in registration order
        Index(
            "ix_mcp_servers_project_active_created",
            "project_id",
            "is_active",
            "created_at",
        ),
    )

    # ==========================================================================
    # METHODS
    # ==========================================================================

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<McpServer(id={self.id}, name={self.name})>"

    @property
    def has_auth_token(self) -> bool:
        """Check if an upstream credential is configured."""
        return bool(self.auth_token)

    @property
    def tool_names(self) -> list[str]:
        """Names of the tools in the cached catalog."""
        return tool_names(self.cached_tools or [])
