"""
Custom Exceptions

Application-specific exceptions with HTTP status codes.
"""

from typing import Any, Optional

from app.config.constants import (
    GATEWAY_ERROR_STATUS,
    HANDSHAKE_FAILURE_MESSAGES,
    GatewayErrorCode,
    HandshakeFailure,
)


class TurnstileException(Exception):
    """Base exception for all Turnstile errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        hint: Optional[str] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        self.hint = hint
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        error: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.hint:
            error["hint"] = self.hint
        return {"error": error}


class AuthenticationError(TurnstileException):
    """Authentication failed error."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_ERROR",
            details=details,
        )


class NotFoundError(TurnstileException):
    """Resource not found error."""

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        error_code: str = "NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code=error_code,
            details=details,
        )


class ValidationError(TurnstileException):
    """Validation error."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details,
        )


class ConflictError(TurnstileException):
    """Resource conflict error."""

    def __init__(
        self,
        message: str = "Resource conflict",
        error_code: str = "CONFLICT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code=error_code,
            details=details,
        )


class ProjectNotFoundError(NotFoundError):
    """Project not found error."""

    def __init__(self, project_id: str) -> None:
        super().__init__(
            resource="Project",
            resource_id=project_id,
            error_code="PROJECT_NOT_FOUND",
        )


class McpServerNotFoundError(NotFoundError):
    """MCP server not found error."""

    def __init__(self, server_id: str) -> None:
        super().__init__(
            resource="MCP server",
            resource_id=server_id,
            error_code="SERVER_NOT_FOUND",
        )


class ProxyKeyNotFoundError(NotFoundError):
    """Proxy key not found error."""

    def __init__(self, key_id: str) -> None:
        super().__init__(
            resource="Proxy key",
            resource_id=key_id,
            error_code="KEY_NOT_FOUND",
        )


class AuditLogNotFoundError(NotFoundError):
    """Audit log entry not found error."""

    def __init__(self, log_id: str) -> None:
        super().__init__(
            resource="Audit log",
            resource_id=log_id,
            error_code="AUDIT_LOG_NOT_FOUND",
        )


# =============================================================================
# Handshake Exceptions
# =============================================================================


class HandshakeError(TurnstileException):
    """
    A tools/list handshake against an MCP server failed.

    Surfaced to operators as a 400 because the cause is almost always the
    registration input (URL, token) rather than the gateway itself.
    """

    def __init__(
        self,
        reason: HandshakeFailure,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message, hint = HANDSHAKE_FAILURE_MESSAGES[reason]
        super().__init__(
            message=message,
            status_code=400,
            error_code=reason.value,
            details=details,
            hint=hint,
        )
        self.reason = reason


# =============================================================================
# Gateway Exceptions
# =============================================================================


class GatewayError(TurnstileException):
    """
    Terminal rejection produced by the gateway pipeline.

    Rendered flat (``{"error", "code", "hint"}``) because API-key holders
    consume it programmatically. ``audit_detail`` is written to the audit
    entry only and never returned to the caller.
    """

    def __init__(
        self,
        code: GatewayErrorCode,
        message: str,
        hint: Optional[str] = None,
        audit_detail: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=GATEWAY_ERROR_STATUS[code],
            error_code=code.value,
            hint=hint,
        )
        self.code = code
        self.audit_detail = audit_detail or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the gateway's flat error body."""
        body: dict[str, Any] = {"error": self.message, "code": self.error_code}
        if self.hint:
            body["hint"] = self.hint
        return body
