"""
Gateway MCP Endpoint

Single entry point for API-key holders:

    POST /gateway/api/v1/mcp
    Authorization: Bearer sk_live_...
    {"server_name": "github", "tool": "create_issue", ...}

Flow:
1. Validate proxy key (dependency; derives the project)
2. Resolve target, apply allow-list and blacklist, forward
3. Relay the upstream response, or return a flat error body

The handler always returns a response instead of raising once the key is
valid, so the audit entry written during the request is committed.
"""

from fastapi import APIRouter, Request, Response

from app.core.logging import logger
from app.core.utils import generate_short_id
from app.gateway.api.dependencies import DbSession, Upstream, ValidatedProxyKey
from app.gateway.proxy.service import GatewayService
from app.schemas.common import GatewayErrorResponse

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    """Extract client IP, considering X-Forwarded-For from proxies."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.post(
    "",
    summary="Route a request to an MCP server",
    description="""
Route a JSON request to one of the key's project servers.

The target is chosen by `server_name`, or by `tool` / `method` looked up in
the cached tool catalogs. The upstream response is relayed unchanged.
    """,
    responses={
        400: {"model": GatewayErrorResponse},
        401: {"model": GatewayErrorResponse},
        403: {"model": GatewayErrorResponse},
        404: {"model": GatewayErrorResponse},
        500: {"model": GatewayErrorResponse},
    },
)
async def route_mcp_request(
    request: Request,
    key_context: ValidatedProxyKey,
    db: DbSession,
    upstream_client: Upstream,
) -> Response:
    """Route an MCP request through the gateway pipeline."""
    request_id = getattr(request.state, "request_id", None) or generate_short_id("req")
    raw_body = await request.body()

    logger.info(
        "Received gateway request",
        request_id=request_id,
        client_ip=_get_client_ip(request),
        proxy_key_id=str(key_context.proxy_key_id),
        key_label=key_context.label,
    )

    service = GatewayService(db=db, upstream_client=upstream_client)
    result = await service.handle(key_context, raw_body, request_id)

    return Response(
        content=result.content,
        status_code=result.status_code,
        media_type=result.content_type,
    )
