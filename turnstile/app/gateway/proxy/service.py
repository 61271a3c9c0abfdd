"""
Gateway Service

Runs one authenticated gateway request through the pipeline:

1. Parse the body (must be a JSON object)
2. Resolve the target server (server_name, else tool/method lookup)
3. Check the key's allow-list
4. Check the key's blacklist
5. Forward the raw body to the upstream server and relay its response

The first step that fails ends the request. Every outcome, forwarded or
rejected, is written to the audit log exactly once. Key authentication has
already happened in the route dependency.
"""

import json
import time
from typing import Any, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import AuditStatus, GatewayErrorCode
from app.core.exceptions import GatewayError
from app.core.logging import get_logger
from app.db.repositories.mcp_server_repository import McpServerRepository
from app.gateway.audit.writer import AuditLogWriter
from app.gateway.engine.policy import check_allow_list, check_blacklist
from app.gateway.engine.resolver import TargetResolver, extract_identifiers
from app.gateway.proxy.client import UpstreamClient
from app.schemas.gateway import GatewayResult, ProxyKeyContext

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal gateway error"


def raw_body_for_audit(raw_body: bytes) -> dict[str, str]:
    """Wrap an unparseable body so it can still be stored."""
    return {"raw": raw_body.decode("utf-8", errors="replace")}


def parse_request_body(raw_body: bytes) -> dict[str, Any]:
    """Decode the request body, which must be a JSON object.

    Raises:
        GatewayError: INVALID_REQUEST_BODY
    """
    try:
        body = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise GatewayError(
            GatewayErrorCode.INVALID_REQUEST_BODY,
            "Request body must be valid JSON",
        ) from e

    if not isinstance(body, dict):
        raise GatewayError(
            GatewayErrorCode.INVALID_REQUEST_BODY,
            "Request body must be a JSON object",
        )
    return body


class GatewayService:
    """
    Service for routing key-authenticated requests to MCP servers.

    Holds no state between requests. The session and upstream client are
    passed in by the route.
    """

    def __init__(self, db: AsyncSession, upstream_client: UpstreamClient):
        """Initialize the gateway service.

        Args:
            db: Request-scoped database session
            upstream_client: Shared client for forwarding
        """
        self.db = db
        self.upstream_client = upstream_client
        self.resolver = TargetResolver(McpServerRepository(db))
        self.audit_writer = AuditLogWriter(db)

    async def handle(
        self,
        key_context: ProxyKeyContext,
        raw_body: bytes,
        request_id: str,
    ) -> GatewayResult:
        """
        Run a request through the gateway pipeline.

        Never raises: rejections and internal failures are turned into a
        GatewayResult after the audit entry is written.

        Args:
            key_context: Authenticated key
            raw_body: Request body as received
            request_id: Request id (logged, audited and sent upstream)

        Returns:
            GatewayResult to send back to the caller
        """
        start_time = time.perf_counter()
        log = logger.bind(
            request_id=request_id,
            project_id=str(key_context.project_id),
            proxy_key_id=str(key_context.proxy_key_id),
        )

        request_body: Optional[Any] = None
        server_name: Optional[str] = None
        tool_name: Optional[str] = None

        try:
            log.info("Step 1: Parsing request body", body_bytes=len(raw_body))
            body = parse_request_body(raw_body)
            request_body = body

            server_name, tool_name = extract_identifiers(body)
            log.info(
                "Step 2: Resolving target server",
                server_name=server_name,
                tool_name=tool_name,
            )
            target = await self.resolver.resolve(
                key_context.project_id, server_name, tool_name
            )
            server_name = target.server_name

            log.info("Step 3: Checking allow-list", restricted=bool(key_context.allowed_tools))
            check_allow_list(key_context.allowed_tools, tool_name)

            log.info("Step 4: Checking blacklist", word_count=len(key_context.blacklist_words))
            check_blacklist(body, key_context.blacklist_words)

            log.info("Step 5: Forwarding request", server_name=server_name)
            try:
                forward_result = await self.upstream_client.forward(
                    target, raw_body, request_id
                )
            except httpx.HTTPError as e:
                raise GatewayError(
                    GatewayErrorCode.FORWARD_FAILED,
                    f"Failed to forward request to MCP server '{server_name}'",
                    audit_detail={"error_type": type(e).__name__, "detail": str(e)},
                ) from e

        except GatewayError as e:
            log.warning(
                "Gateway request REJECTED",
                code=e.error_code,
                status_code=e.status_code,
                server_name=server_name,
                tool_name=tool_name,
            )
            await self.audit_writer.record(
                key_context,
                AuditStatus.ERROR,
                server_name=server_name,
                tool_name=tool_name,
                error_code=e.error_code,
                request_body=(
                    request_body if request_body is not None else raw_body_for_audit(raw_body)
                ),
                response_body={**e.to_dict(), **e.audit_detail},
                request_id=request_id,
                latency_ms=self._elapsed_ms(start_time),
            )
            return GatewayResult.from_body(e.status_code, e.to_dict())

        except (
            SQLAlchemyError,
            RuntimeError,
            TypeError,
            AttributeError,
            KeyError,
            ValueError,
            OSError,
        ) as e:
            log.exception("Gateway request FAILED", error_type=type(e).__name__)
            await self.db.rollback()
            error = GatewayError(GatewayErrorCode.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE)
            await self.audit_writer.record(
                key_context,
                AuditStatus.ERROR,
                server_name=server_name,
                tool_name=tool_name,
                error_code=error.error_code,
                request_body=(
                    request_body if request_body is not None else raw_body_for_audit(raw_body)
                ),
                response_body={
                    **error.to_dict(),
                    "error_type": type(e).__name__,
                    "detail": str(e),
                },
                request_id=request_id,
                latency_ms=self._elapsed_ms(start_time),
            )
            return GatewayResult.from_body(error.status_code, error.to_dict())

        status = AuditStatus.SUCCESS if forward_result.is_success else AuditStatus.ERROR
        await self.audit_writer.record(
            key_context,
            status,
            server_name=server_name,
            tool_name=tool_name,
            request_body=request_body,
            response_body=forward_result.body_for_audit(),
            request_id=request_id,
            latency_ms=self._elapsed_ms(start_time),
        )

        log.info(
            "Gateway request completed",
            server_name=server_name,
            tool_name=tool_name,
            upstream_status=forward_result.status_code,
            upstream_time_ms=round(forward_result.response_time_ms, 2),
            total_time_ms=self._elapsed_ms(start_time),
        )
        return GatewayResult.from_forward(forward_result)

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)
