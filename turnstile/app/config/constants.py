"""
Application Constants

Centralized constants used throughout the application.
"""

from enum import Enum


class AuditStatus(str, Enum):
    """Outcome tag recorded on every audit entry."""

    SUCCESS = "success"
    ERROR = "error"


class GatewayErrorCode(str, Enum):
    """
    Stable machine-readable codes returned by the gateway.

    API-key holders branch on these values, so they never change once
    published.
    """

    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_API_KEY = "INVALID_API_KEY"
    INACTIVE_API_KEY = "INACTIVE_API_KEY"
    INVALID_REQUEST_BODY = "INVALID_REQUEST_BODY"
    SERVER_NOT_FOUND = "SERVER_NOT_FOUND"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    MISSING_SERVER_IDENTIFIER = "MISSING_SERVER_IDENTIFIER"
    TOOL_NOT_ALLOWED = "TOOL_NOT_ALLOWED"
    BLACKLIST_VIOLATION = "BLACKLIST_VIOLATION"
    FORWARD_FAILED = "FORWARD_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# One status per code. Authentication failures are 401, policy refusals and
# inactive keys 403, unresolvable targets 404, malformed input 400.
GATEWAY_ERROR_STATUS: dict[GatewayErrorCode, int] = {
    GatewayErrorCode.UNAUTHORIZED: 401,
    GatewayErrorCode.INVALID_API_KEY: 401,
    GatewayErrorCode.INACTIVE_API_KEY: 403,
    GatewayErrorCode.TOOL_NOT_ALLOWED: 403,
    GatewayErrorCode.BLACKLIST_VIOLATION: 403,
    GatewayErrorCode.SERVER_NOT_FOUND: 404,
    GatewayErrorCode.TOOL_NOT_FOUND: 404,
    GatewayErrorCode.MISSING_SERVER_IDENTIFIER: 400,
    GatewayErrorCode.INVALID_REQUEST_BODY: 400,
    GatewayErrorCode.FORWARD_FAILED: 500,
    GatewayErrorCode.INTERNAL_ERROR: 500,
}


class HandshakeFailure(str, Enum):
    """Classified reasons a tools/list handshake can fail."""

    AUTH_FAILED = "HANDSHAKE_AUTH_FAILED"
    FORBIDDEN = "HANDSHAKE_FORBIDDEN"
    UPSTREAM_STATUS = "HANDSHAKE_FAILED"
    INVALID_RESPONSE = "HANDSHAKE_INVALID_RESPONSE"
    TIMEOUT = "HANDSHAKE_TIMEOUT"
    CONNECTION_REFUSED = "HANDSHAKE_CONNECTION_REFUSED"
    HOST_UNRESOLVABLE = "HANDSHAKE_HOST_UNRESOLVABLE"
    NETWORK_ERROR = "HANDSHAKE_NETWORK_ERROR"


HANDSHAKE_FAILURE_MESSAGES: dict[HandshakeFailure, tuple[str, str]] = {
    HandshakeFailure.AUTH_FAILED: (
        "MCP server rejected the credentials (401)",
        "Check that the auth token is valid for this server",
    ),
    HandshakeFailure.FORBIDDEN: (
        "MCP server denied access (403)",
        "Check that the auth token has permission to list tools",
    ),
    HandshakeFailure.UPSTREAM_STATUS: (
        "MCP server returned an error status",
        "Check if the Base URL is correct and if authentication is required",
    ),
    HandshakeFailure.INVALID_RESPONSE: (
        "MCP server returned a response that is not valid JSON",
        "Check that the Base URL points at an MCP JSON-RPC endpoint",
    ),
    HandshakeFailure.TIMEOUT: (
        "MCP server did not respond in time",
        "Check that the server is running and reachable from the gateway",
    ),
    HandshakeFailure.CONNECTION_REFUSED: (
        "Connection to MCP server was refused",
        "Check that the server is running and listening on the given port",
    ),
    HandshakeFailure.HOST_UNRESOLVABLE: (
        "MCP server host could not be resolved",
        "Check the hostname in the Base URL",
    ),
    HandshakeFailure.NETWORK_ERROR: (
        "Could not connect to MCP server",
        "Check the Base URL and network connectivity",
    ),
}


HANDSHAKE_METHOD = "tools/list"
JSONRPC_VERSION = "2.0"

MISSING_IDENTIFIER_HINT = "Include server_name, tool, or method in your request body"

# Audit-log listing
AUDIT_LOG_DEFAULT_PAGE_SIZE = 50
AUDIT_LOG_MAX_PAGE_SIZE = 200

# Upstream bodies echoed in handshake error details are cut to this length
UPSTREAM_BODY_PREVIEW_CHARS = 2000
