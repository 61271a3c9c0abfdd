"""
API Utilities

Shared helper functions for API endpoints.
"""

from uuid import UUID

from app.core.exceptions import ValidationError
from app.schemas.common import PaginatedResponse, PaginationMeta


def validate_uuid(value: str, field_name: str) -> UUID:
    """
    Validate and convert a string to UUID.

    Args:
        value: String value to convert
        field_name: Field name for error message

    Returns:
        UUID object

    Raises:
        ValidationError: If value is not a valid UUID (400 INVALID_UUID)

    Example:
        server_uuid = validate_uuid(server_id, "server_id")
    """
    try:
        return UUID(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid {field_name}: must be a valid UUID",
            error_code="INVALID_UUID",
            details={"field": field_name},
        ) from e


def paginate(items: list, page: int, per_page: int, total: int) -> PaginatedResponse:
    """Wrap one page of results with pagination metadata."""
    return PaginatedResponse(
        data=items,
        pagination=PaginationMeta.create(page=page, per_page=per_page, total=total),
    )
