"""
Base Model Classes

This module provides the foundational classes for all SQLAlchemy models in Turnstile.
It includes the declarative base, the portable JSON column type, and common
mixins for timestamps and enum validation.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from sqlalchemy import JSON, DateTime, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.functions import now

from app.core.utils import utc_now


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in the test suite)
JSONVariant = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    This is the declarative base that all models inherit from. It provides:
    - Type annotation support for columns
    - JSON type mapping (JSONB on PostgreSQL) for dict/list columns
    """

    type_annotation_map = {
        dict[str, Any]: JSONVariant,
        list[Any]: JSONVariant,
    }


class TimestampMixin:
    """
    Mixin that adds automatic timestamp tracking to models.

    Provides two timestamp columns that are automatically managed:
    - created_at: Set when the record is first inserted
    - updated_at: Updated whenever the record is modified

    ``created_at`` is set in Python with microsecond precision so rows
    inserted within the same second keep their registration order (the
    gateway scans servers in that order). The server default covers rows
    written outside the ORM.

    Example values:
        created_at: 2024-01-15T10:30:00.120443Z (when record was created)
        updated_at: 2024-01-16T14:45:30.004211Z (last modification time)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=now(),
        onupdate=utc_now,
        nullable=False,
    )


class EnumValidationMixin:
    """
    Mixin that provides automatic enum validation for model fields.

    Models using this mixin should define an `_enum_fields` class variable
    that maps field names to their corresponding Enum classes.

    Example:
        from app.config.constants import AuditStatus

        class AuditLog(Base, EnumValidationMixin):
            _enum_fields: ClassVar[dict[str, type[Enum]]] = {
                "status": AuditStatus,
            }

    The validation is triggered automatically before insert/update operations,
    ensuring invalid enum values cannot be written to the database.
    """

    _enum_fields: ClassVar[dict[str, type[Enum]]] = {}

    def validate_enum_fields(self) -> None:
        """
        Validate all enum fields have valid values.

        Raises:
            ValueError: If any enum field has an invalid value
        """
        for field_name, enum_class in self._enum_fields.items():
            value = getattr(self, field_name, None)
            if value is not None:
                valid_values = {e.value for e in enum_class}
                if value not in valid_values:
                    raise ValueError(
                        f"Invalid value '{value}' for field '{field_name}'. "
                        f"Must be one of: {', '.join(sorted(valid_values))}"
                    )

    @classmethod
    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Register validation event listeners when subclass is created."""
        super().__init_subclass__(**kwargs)

        if cls._enum_fields:
            # Signature: (mapper, connection, target) - we only need target
            @event.listens_for(cls, "before_insert", propagate=True)
            def validate_before_insert(*args: Any) -> None:
                target = args[2]
                target.validate_enum_fields()

            @event.listens_for(cls, "before_update", propagate=True)
            def validate_before_update(*args: Any) -> None:
                target = args[2]
                target.validate_enum_fields()
