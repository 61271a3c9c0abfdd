"""
Project Model

A Project is the top-level tenant boundary. Every MCP server, proxy key and
audit entry belongs to exactly one project, and every lookup the gateway
performs is filtered by project.

Hierarchy:
    Project (this model)
       ├── MCP Servers (upstream endpoints with cached tool catalogs)
       ├── Proxy Keys (credentials issued to callers)
       └── Audit Logs (one entry per gateway decision)

SAMPLE PROJECT RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ 550e8400-e29b-41d4-a716-446655440000                      │
│ owner_id         │ "user_2f9c1a"                                              │
│ name             │ "Support Assistant"                                        │
│ created_at       │ 2024-01-01T00:00:00Z                                      │
│ updated_at       │ 2024-01-01T00:00:00Z                                      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.audit_log import AuditLog
    from app.models.mcp_server import McpServer
    from app.models.proxy_key import ProxyKey


class Project(Base, TimestampMixin):
    """
    Project model owning servers, keys and audit entries.

    Attributes:
        id: Unique identifier (UUID v4)
        owner_id: Identity of the operator who owns the project
        name: Display name

    Relationships:
        mcp_servers: Registered upstream MCP servers
        proxy_keys: Issued proxy keys
        audit_logs: Gateway decisions made with this project's keys
    """

    __tablename__ = "projects"

    # ==========================================================================
    # PRIMARY KEY
    # ==========================================================================

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Unique identifier for the project",
    )

    # ==========================================================================
    # OWNERSHIP & BASIC INFORMATION
    # ==========================================================================

    owner_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        doc="Identity (JWT subject) of the operator owning this project",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Display name of the project",
    )

    # ==========================================================================
    # RELATIONSHIPS
    # ==========================================================================

    mcp_servers: Mapped[list["McpServer"]] = relationship(
        "McpServer",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="McpServer.created_at",
    )

    proxy_keys: Mapped[list["ProxyKey"]] = relationship(
        "ProxyKey",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    audit_logs: Mapped[list["AuditLog"]] = relationship(
        "AuditLog",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    # ==========================================================================
    # METHODS
    # ==========================================================================

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Project(id={self.id}, name={self.name})>"
