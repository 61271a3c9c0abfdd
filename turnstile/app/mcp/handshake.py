"""
MCP Handshake Client

Performs the ``tools/list`` discovery round trip against a candidate MCP
server and returns its normalized tool catalog.

Every failure is raised as a HandshakeError carrying a classified reason:

    HTTP 401                      -> HANDSHAKE_AUTH_FAILED
    HTTP 403                      -> HANDSHAKE_FORBIDDEN
    other non-2xx                 -> HANDSHAKE_FAILED (status + body in details)
    2xx with a non-JSON body      -> HANDSHAKE_INVALID_RESPONSE
    timeout                       -> HANDSHAKE_TIMEOUT
    connection refused            -> HANDSHAKE_CONNECTION_REFUSED
    DNS resolution failure        -> HANDSHAKE_HOST_UNRESOLVABLE
    any other transport error     -> HANDSHAKE_NETWORK_ERROR

There are no retries. The caller decides what a failure means for the
server record.
"""

import errno
import json
import socket
import time
from typing import Any, Iterator

import httpx

from app.config.constants import (
    HANDSHAKE_METHOD,
    JSONRPC_VERSION,
    UPSTREAM_BODY_PREVIEW_CHARS,
    HandshakeFailure,
)
from app.config.settings import settings
from app.core.exceptions import HandshakeError, ValidationError
from app.core.logging import get_logger
from app.core.utils import generate_short_id, truncate_string
from app.mcp.catalog import ToolCatalog, normalize_catalog

logger = get_logger(__name__)

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


def validate_base_url(base_url: str) -> str:
    """Check that a base URL is well formed before any network call.

    Args:
        base_url: URL entered by the operator (already trimmed)

    Returns:
        The URL unchanged

    Raises:
        ValidationError: INVALID_URL_FORMAT when the URL does not parse, is
            not http(s), or has no host
    """
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise ValidationError(
            "Invalid URL format", error_code="INVALID_URL_FORMAT"
        ) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ValidationError(
            "Invalid URL format",
            error_code="INVALID_URL_FORMAT",
            details={"reason": "URL must use http or https and include a host"},
        )
    return base_url


def build_handshake_request() -> dict[str, Any]:
    """JSON-RPC body for the tools/list discovery call."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": HANDSHAKE_METHOD,
        "params": {},
        "id": generate_short_id("handshake"),
    }


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield an exception, its causes/contexts and exception-group members."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, BaseExceptionGroup):
            stack.extend(current.exceptions)
        if current.__cause__ is not None:
            stack.append(current.__cause__)
        if current.__context__ is not None:
            stack.append(current.__context__)


def classify_connect_error(exc: httpx.TransportError) -> HandshakeFailure:
    """Work out why a connection attempt failed.

    httpx wraps the socket error several layers deep, so the whole cause
    chain is inspected before falling back to the error text.
    """
    for cause in _exception_chain(exc):
        if isinstance(cause, socket.gaierror):
            return HandshakeFailure.HOST_UNRESOLVABLE
        if isinstance(cause, ConnectionRefusedError):
            return HandshakeFailure.CONNECTION_REFUSED
        if isinstance(cause, OSError) and cause.errno == errno.ECONNREFUSED:
            return HandshakeFailure.CONNECTION_REFUSED

    text = " ".join(str(cause).lower() for cause in _exception_chain(exc))
    if "connection refused" in text:
        return HandshakeFailure.CONNECTION_REFUSED
    if any(marker in text for marker in _DNS_FAILURE_MARKERS):
        return HandshakeFailure.HOST_UNRESOLVABLE
    return HandshakeFailure.NETWORK_ERROR


class HandshakeClient:
    """
    HTTP client for tools/list handshakes.

    Holds one pooled httpx.AsyncClient. Created and closed by the application
    lifespan; tests pass an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the handshake client.

        Args:
            timeout_seconds: Bound on the whole discovery round trip
            transport: Optional transport override
        """
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                follow_redirects=False,
                transport=self._transport,
            )
            logger.info(
                "Handshake client initialized",
                timeout_seconds=self.timeout_seconds,
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Handshake client closed")

    async def fetch_catalog(
        self, base_url: str, auth_token: str | None = None
    ) -> ToolCatalog:
        """Run the handshake and return the normalized tool catalog.

        Args:
            base_url: MCP server endpoint
            auth_token: Optional bearer credential

        Returns:
            Tool catalog (possibly empty)

        Raises:
            ValidationError: base_url is not a well-formed http(s) URL
            HandshakeError: the round trip failed (see module docstring)
        """
        validate_base_url(base_url)

        if self._client is None:
            await self.initialize()

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"

        payload = build_handshake_request()
        log = logger.bind(base_url=base_url, handshake_id=payload["id"])
        log.info("Handshake: sending tools/list", has_auth_token=bool(auth_token))

        start_time = time.perf_counter()
        try:
            response = await self._client.post(base_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            log.warning("Handshake: TIMEOUT", error=str(e))
            raise HandshakeError(
                HandshakeFailure.TIMEOUT,
                details={"timeout_seconds": self.timeout_seconds},
            ) from e
        except httpx.NetworkError as e:
            reason = classify_connect_error(e)
            log.warning("Handshake: CONNECTION ERROR", reason=reason.value, error=str(e))
            raise HandshakeError(reason, details={"error": str(e)}) from e
        except httpx.HTTPError as e:
            log.warning("Handshake: transport error", error_type=type(e).__name__)
            raise HandshakeError(
                HandshakeFailure.NETWORK_ERROR, details={"error": str(e)}
            ) from e

        elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)
        log.info(
            "Handshake: response received",
            status_code=response.status_code,
            response_time_ms=elapsed_ms,
        )

        if response.status_code == 401:
            raise HandshakeError(HandshakeFailure.AUTH_FAILED)
        if response.status_code == 403:
            raise HandshakeError(HandshakeFailure.FORBIDDEN)
        if not response.is_success:
            raise HandshakeError(
                HandshakeFailure.UPSTREAM_STATUS,
                details={
                    "upstream_status": response.status_code,
                    "upstream_body": truncate_string(
                        response.text, UPSTREAM_BODY_PREVIEW_CHARS
                    ),
                },
            )

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning(
                "Handshake: non-JSON response",
                content_type=response.headers.get("content-type"),
            )
            raise HandshakeError(
                HandshakeFailure.INVALID_RESPONSE,
                details={
                    "upstream_body": truncate_string(
                        response.text, UPSTREAM_BODY_PREVIEW_CHARS
                    )
                },
            ) from e

        catalog = normalize_catalog(body)
        log.info("Handshake: catalog received", tool_count=len(catalog))
        return catalog


def create_handshake_client() -> HandshakeClient:
    """Build a handshake client from settings."""
    return HandshakeClient(timeout_seconds=settings.HANDSHAKE_TIMEOUT_SECONDS)
