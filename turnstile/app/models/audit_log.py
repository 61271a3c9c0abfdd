"""
Audit Log Model

Audit Logs record every terminal decision made by the gateway once a proxy
key has been authenticated: forwarded calls and every classified rejection.

Each log entry captures:
- Who: project, proxy key (nulled if the key is later deleted), project owner
- What: resolved server name and tool name (either may be unknown)
- Outcome: success/error tag, gateway error code, upstream response or
  internal failure detail
- The raw inbound request body

Entries are immutable. They are removed only when their project is deleted.

SAMPLE AUDIT LOG (Blocked Request):
┌──────────────────────────────────────────────────────────────────────────────┐
│ id              │ ff0e8400-e29b-41d4-a716-446655440030                       │
│ project_id      │ 550e8400-e29b-41d4-a716-446655440000                       │
│ proxy_key_id    │ dd0e8400-e29b-41d4-a716-446655440020                       │
│ user_id         │ "user_2f9c1a"                                               │
│ server_name     │ "github"                                                    │
│ tool_name       │ "delete_repo"                                               │
│ status          │ "error"                                                     │
│ error_code      │ "TOOL_NOT_ALLOWED"                                          │
│ request_body    │ {"tool": "delete_repo", "params": {...}}                    │
│ response_body   │ {"error": "Tool 'delete_repo' is not allowed ..."}          │
│ request_id      │ "req-4f1c9a7be210"                                          │
│ latency_ms      │ 3                                                           │
│ created_at      │ 2024-01-15T14:30:00Z                                       │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.config.constants import AuditStatus
from app.core.utils import utc_now
from app.models.base import Base, EnumValidationMixin, JSONVariant

if TYPE_CHECKING:
    from app.models.project import Project
    from app.models.proxy_key import ProxyKey


class AuditLog(Base, EnumValidationMixin):
    """
    Audit Log model recording gateway decisions.

    Note: This model doesn't use TimestampMixin because audit logs are
    immutable (no updated_at needed) and created_at is the decision time.

    Attributes:
        id: Unique identifier (UUID v4)
        project_id: Project whose key made the request
        proxy_key_id: Key that made the request (null once the key is deleted)
        user_id: Project owner (denormalized for reporting)
        server_name: Resolved or requested server name
        tool_name: Requested or inferred tool name
        status: "success" or "error"
        error_code: Gateway error code for rejections
        request_body: Inbound request body
        response_body: Upstream response or rejection detail
        request_id: Request id shared with logs and the upstream call
        latency_ms: Time spent handling the request
        created_at: Timestamp of the decision
    """

    _enum_fields: ClassVar[dict[str, type[Enum]]] = {
        "status": AuditStatus,
    }

    __tablename__ = "audit_logs"

    # ==========================================================================
    # PRIMARY KEY
    # ==========================================================================

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Unique identifier for this audit log entry",
    )

    # ==========================================================================
    # CONTEXT: Project, Key and Owner
    # ==========================================================================

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Reference to the project",
    )

    proxy_key_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("proxy_keys.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Reference to the proxy key that made the request",
    )

    user_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        doc="Owner of the project at decision time",
    )

    # ==========================================================================
    # TARGET
    # ==========================================================================

    server_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="Server the request targeted (null if never resolved)",
    )

    tool_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="Tool the request targeted (null if not supplied)",
    )

    # ==========================================================================
    # OUTCOME
    # ==========================================================================

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        doc="Outcome tag: AuditStatus enum value",
    )

    error_code: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        doc="Gateway error code for rejected requests",
    )

    # ==========================================================================
    # PAYLOADS
    # ==========================================================================

    request_body: Mapped[Any] = mapped_column(
        JSONVariant,
        nullable=True,
        doc="Raw inbound request body",
    )

    response_body: Mapped[Any] = mapped_column(
        JSONVariant,
        nullable=True,
        doc="Upstream response body, or the rejection/failure detail",
    )

    # ==========================================================================
    # PERFORMANCE & METADATA
    # ==========================================================================

    request_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="Request id (matches logs and the upstream X-Gateway-Request-ID)",
    )

    latency_ms: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        doc="Time to reach the decision in milliseconds",
    )

    # ==========================================================================
    # TIMESTAMP
    # ==========================================================================

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
        doc="When this decision was made",
    )

    # ==========================================================================
    # RELATIONSHIPS
    # ==========================================================================

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="audit_logs",
    )

    proxy_key: Mapped["ProxyKey | None"] = relationship("ProxyKey")

    # ==========================================================================
    # TABLE CONFIGURATION
    # ==========================================================================

    __table_args__ = (
        Index("ix_audit_logs_project_created", "project_id", "created_at"),
        Index("ix_audit_logs_project_status", "project_id", "status", "created_at"),
        Index("ix_audit_logs_key_created", "proxy_key_id", "created_at"),
    )

    # ==========================================================================
    # METHODS
    # ==========================================================================

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<AuditLog(id={self.id}, status={self.status})>"

    @property
    def was_forwarded(self) -> bool:
        """Check if the request reached the upstream server."""
        return self.error_code is None
