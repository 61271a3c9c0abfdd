"""
Proxy Key Model

A Proxy Key is the credential this system issues to callers. Callers present
it to the gateway as ``Authorization: Bearer <key>``; the gateway swaps it for
the upstream server's own credential before forwarding.

Security Model:
- Only the SHA-256 hash of the key is stored (``key_hash``), unique across
  the whole system so that a presented key resolves to exactly one project
- The plain key is returned once, at creation
- ``key_prefix`` holds a masked form for listings ("sk_live_ab...wxyz")

Policy:
- allowed_tools: tool names this key may invoke (null/empty = every tool)
- blacklist_words: literal words that may not appear anywhere in a request
  body, matched case-insensitively (null/empty = no filtering)

SAMPLE PROXY KEY RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ dd0e8400-e29b-41d4-a716-446655440020                      │
│ project_id       │ 550e8400-e29b-41d4-a716-446655440000                      │
│ key_hash         │ "a1b2c3d4e5f6..." (SHA-256 of full key)                   │
│ key_prefix       │ "sk_live_Xy...9fQa"                                        │
│ label            │ "Support bot (production)"                                 │
│ allowed_tools    │ ["create_issue", "list_repos"]                             │
│ blacklist_words  │ ["password", "ssn"]                                        │
│ is_active        │ true                                                       │
│ created_at       │ 2024-01-10T00:00:00Z                                      │
│ updated_at       │ 2024-01-10T00:00:00Z                                      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONVariant, TimestampMixin

if TYPE_CHECKING:
    from app.models.project import Project


class ProxyKey(Base, TimestampMixin):
    """
    Proxy key issued to a caller, scoped to one project.

    Attributes:
        id: Unique identifier (UUID v4)
        project_id: Owning project
        key_hash: SHA-256 hash of the key (lookup key)
        key_prefix: Masked key for display
        label: Human-readable label
        allowed_tools: Optional tool allow-list
        blacklist_words: Optional content blacklist
        is_active: Inactive keys are rejected by the gateway
    """

    __tablename__ = "proxy_keys"

    # ==========================================================================
    # PRIMARY KEY
    # ==========================================================================

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Unique identifier for the proxy key",
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
    # KEY MATERIAL
    # ==========================================================================

    key_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        doc="SHA-256 hash of the proxy key",
    )

    key_prefix: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        doc="Masked key for identification in listings",
    )

    label: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Human-readable label for the key",
    )

    # ==========================================================================
    # POLICY
    # ==========================================================================

    allowed_tools: Mapped[list[str] | None] = mapped_column(
        JSONVariant,
        nullable=True,
        doc="Tool names this key may invoke (null or empty = all tools)",
    )

    blacklist_words: Mapped[list[str] | None] = mapped_column(
        JSONVariant,
        nullable=True,
        doc="Words that may not appear in a request body (case-insensitive)",
    )

    # ==========================================================================
    # STATUS FLAGS
    # ==========================================================================

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Whether the key is accepted by the gateway",
    )

    # ==========================================================================
    # RELATIONSHIPS
    # ==========================================================================

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="proxy_keys",
    )

    # ==========================================================================
    # METHODS
    # ==========================================================================

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<ProxyKey(id={self.id}, prefix={self.key_prefix})>"

    @property
    def restricts_tools(self) -> bool:
        """Check if an allow-list is in effect."""
        return bool(self.allowed_tools)

    @property
    def filters_content(self) -> bool:
        """Check if a blacklist is in effect."""
        return bool(self.blacklist_words)
