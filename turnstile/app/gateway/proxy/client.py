"""
Upstream MCP Client

Forwards accepted gateway requests to the resolved MCP server.

Features:
- Connection pooling (one httpx.AsyncClient per process)
- Bounded timeout, no retries
- Response time tracking
- The caller's headers are never forwarded; the upstream only sees the
  gateway's own headers and the server's stored credential
"""

import time
from typing import Optional

import httpx

from app.config.settings import settings
from app.core.logging import get_logger
from app.schemas.gateway import ForwardResult, ResolvedTarget

logger = get_logger(__name__)


class UpstreamClient:
    """
    HTTP client for forwarding requests to upstream MCP servers.

    Uses httpx for async HTTP requests with:
    - Connection pooling
    - Configurable timeouts
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        max_keepalive_connections: int = 20,
        max_connections: int = 100,
        request_id_header: str = "X-Gateway-Request-ID",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the upstream client.

        Args:
            timeout_seconds: Request timeout in seconds
            max_keepalive_connections: Max keepalive connections in pool
            max_connections: Max total connections in pool
            request_id_header: Header carrying the gateway request id
            transport: Optional transport override (tests)
        """
        self.timeout_seconds = timeout_seconds
        self.max_keepalive_connections = max_keepalive_connections
        self.max_connections = max_connections
        self.request_id_header = request_id_header
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Initialize the HTTP client.

        Call this during application startup.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(
                    max_keepalive_connections=self.max_keepalive_connections,
                    max_connections=self.max_connections,
                ),
                follow_redirects=False,
                transport=self._transport,
            )
            logger.info(
                "Upstream client initialized",
                timeout_seconds=self.timeout_seconds,
                max_connections=self.max_connections,
            )

    async def close(self) -> None:
        """Close the HTTP client.

        Call this during application shutdown.
        """
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Upstream client closed")

    def build_headers(self, target: ResolvedTarget, request_id: str) -> dict[str, str]:
        """Headers sent upstream: content type, request id, server credential."""
        headers = {
            "Content-Type": "application/json",
            self.request_id_header: request_id,
        }
        if target.auth_token:
            headers["Authorization"] = f"Bearer {target.auth_token}"
        return headers

    async def forward(
        self,
        target: ResolvedTarget,
        raw_body: bytes,
        request_id: str,
    ) -> ForwardResult:
        """Forward the original request body to the target server.

        Any HTTP response, whatever its status, is returned as a
        ForwardResult for the gateway to relay.

        Args:
            target: Resolved upstream server
            raw_body: Request body exactly as the caller sent it
            request_id: Gateway request id

        Returns:
            ForwardResult with the upstream status, body and content type

        Raises:
            httpx.HTTPError: The request never produced a response
                (timeout, connection failure, protocol error)
        """
        if self._client is None:
            logger.info("UpstreamClient: Initializing HTTP client")
            await self.initialize()

        log = logger.bind(
            request_id=request_id,
            server_name=target.server_name,
            upstream_url=target.base_url,
        )
        log.info("UpstreamClient: Sending request to upstream", body_bytes=len(raw_body))

        start_time = time.perf_counter()
        try:
            response = await self._client.post(
                target.base_url,
                content=raw_body,
                headers=self.build_headers(target, request_id),
            )
        except httpx.TimeoutException as e:
            log.error(
                "UpstreamClient: Upstream TIMEOUT",
                elapsed_ms=round((time.perf_counter() - start_time) * 1000, 2),
                timeout_seconds=self.timeout_seconds,
                error=str(e),
            )
            raise
        except httpx.HTTPError as e:
            log.error(
                "UpstreamClient: Upstream request FAILED",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "UpstreamClient: Upstream response received",
            status_code=response.status_code,
            response_time_ms=round(elapsed_ms, 2),
            content_length=response.headers.get("content-length"),
        )

        return ForwardResult(
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type"),
            response_time_ms=elapsed_ms,
        )


def create_upstream_client() -> UpstreamClient:
    """Build an upstream client from settings."""
    return UpstreamClient(
        timeout_seconds=settings.UPSTREAM_TIMEOUT_SECONDS,
        max_keepalive_connections=settings.UPSTREAM_MAX_KEEPALIVE_CONNECTIONS,
        max_connections=settings.UPSTREAM_MAX_CONNECTIONS,
        request_id_header=settings.GATEWAY_REQUEST_ID_HEADER,
    )
