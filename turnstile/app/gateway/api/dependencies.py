"""
Gateway API Dependencies

Proxy key validation for gateway requests. All caller context (project,
owner, allow-list, blacklist) is derived from the key.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import GatewayErrorCode
from app.core.exceptions import GatewayError
from app.core.logging import logger
from app.core.security import hash_proxy_key
from app.db.repositories.proxy_key_repository import ProxyKeyRepository
from app.db.session import get_db
from app.gateway.proxy.client import UpstreamClient, create_upstream_client
from app.schemas.gateway import ProxyKeyContext

BEARER_PREFIX = "Bearer "


async def validate_proxy_key(
    authorization: Annotated[str | None, Header()] = None,
    db: Annotated[AsyncSession, Depends(get_db)] = None,
) -> ProxyKeyContext:
    """Validate the proxy key from the Authorization header.

    Failures here are not audited: without a valid key there is no project
    to attribute the request to.

    Args:
        authorization: Authorization header value
        db: Database session

    Returns:
        ProxyKeyContext derived from the key

    Raises:
        GatewayError: UNAUTHORIZED (missing/malformed header),
            INVALID_API_KEY (unknown key), INACTIVE_API_KEY (revoked key),
            INTERNAL_ERROR (key store failure)
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.warning(
            "Proxy key validation failed: missing or malformed authorization header",
            has_authorization=authorization is not None,
        )
        raise GatewayError(
            GatewayErrorCode.UNAUTHORIZED,
            "Missing or invalid Authorization header",
            hint="Send 'Authorization: Bearer <proxy key>'",
        )

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise GatewayError(
            GatewayErrorCode.UNAUTHORIZED,
            "Missing or invalid Authorization header",
            hint="Send 'Authorization: Bearer <proxy key>'",
        )

    repo = ProxyKeyRepository(db)
    try:
        key_record = await repo.get_by_hash(hash_proxy_key(token))
    except SQLAlchemyError as e:
        logger.exception("Proxy key lookup failed", error_type=type(e).__name__)
        raise GatewayError(
            GatewayErrorCode.INTERNAL_ERROR, "Internal gateway error"
        ) from e

    if key_record is None:
        logger.warning("Proxy key validation failed: key not found")
        raise GatewayError(GatewayErrorCode.INVALID_API_KEY, "Invalid API key")

    if not key_record.is_active:
        logger.warning(
            "Proxy key validation failed: key inactive",
            proxy_key_id=str(key_record.id),
        )
        raise GatewayError(GatewayErrorCode.INACTIVE_API_KEY, "API key is inactive")

    logger.info(
        "Proxy key validated",
        proxy_key_id=str(key_record.id),
        project_id=str(key_record.project_id),
        key_prefix=key_record.key_prefix,
    )

    return ProxyKeyContext(
        proxy_key_id=key_record.id,
        project_id=key_record.project_id,
        owner_id=key_record.project.owner_id,
        label=key_record.label,
        allowed_tools=key_record.allowed_tools or [],
        blacklist_words=key_record.blacklist_words or [],
    )


def get_upstream_client(request: Request) -> UpstreamClient:
    """Shared upstream client created by the application lifespan."""
    client = getattr(request.app.state, "upstream_client", None)
    if client is None:
        client = create_upstream_client()
        request.app.state.upstream_client = client
    return client


# Type aliases for common dependency patterns
ValidatedProxyKey = Annotated[ProxyKeyContext, Depends(validate_proxy_key)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Upstream = Annotated[UpstreamClient, Depends(get_upstream_client)]
