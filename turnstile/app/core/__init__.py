"""Core utilities module."""

from app.core.exceptions import (
    TurnstileException,
    AuthenticationError,
    NotFoundError,
    ValidationError,
    ConflictError,
    HandshakeError,
    GatewayError,
)

__all__ = [
    "TurnstileException",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "HandshakeError",
    "GatewayError",
]
