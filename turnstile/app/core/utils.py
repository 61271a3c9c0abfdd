"""
Common Utilities

Helper functions used throughout the application.
"""

import uuid
from datetime import UTC, datetime


def generate_short_id(prefix: str = "") -> str:
    """Generate a short, URL-safe ID.

    Args:
        prefix: Optional prefix for the ID

    Returns:
        Short ID string (e.g., "handshake-abc123def456")
    """
    short_uuid = uuid.uuid4().hex[:12]
    if prefix:
        return f"{prefix}-{short_uuid}"
    return short_uuid


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime with UTC timezone
    """
    return datetime.now(UTC)


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate a string to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append if truncated

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def non_empty_string(value: object) -> str | None:
    """Return ``value`` if it is a non-empty string, otherwise None."""
    if isinstance(value, str) and value:
        return value
    return None

