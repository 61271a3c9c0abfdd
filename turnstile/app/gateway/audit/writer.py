"""
Audit Log Writer

Appends one audit entry per terminal gateway outcome.

A failed write never changes what the caller receives: the error is logged
with its traceback, the session is rolled back, and the gateway response goes
out as decided.
"""

from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import AuditStatus
from app.core.logging import get_logger
from app.db.repositories.audit_log_repository import AuditLogRepository
from app.models.audit_log import AuditLog
from app.schemas.gateway import ProxyKeyContext

logger = get_logger(__name__)


class AuditLogWriter:
    """Writes gateway decisions to the audit log."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the writer.

        Args:
            session: Request-scoped database session
        """
        self.session = session
        self.audit_repo = AuditLogRepository(session)

    async def record(
        self,
        key_context: ProxyKeyContext,
        status: AuditStatus,
        *,
        server_name: Optional[str] = None,
        tool_name: Optional[str] = None,
        error_code: Optional[str] = None,
        request_body: Any = None,
        response_body: Any = None,
        request_id: Optional[str] = None,
        latency_ms: Optional[int] = None,
    ) -> Optional[AuditLog]:
        """Write one audit entry.

        Args:
            key_context: Authenticated key (project, key id and owner)
            status: success or error
            server_name: Resolved or requested server
            tool_name: Requested tool
            error_code: Gateway error code for rejections
            request_body: Inbound body (parsed, or ``{"raw": text}``)
            response_body: Upstream body or rejection detail
            request_id: Gateway request id
            latency_ms: Time spent on the request

        Returns:
            The created entry, or None when the write failed
        """
        try:
            entry = await self.audit_repo.create_entry(
                project_id=key_context.project_id,
                proxy_key_id=key_context.proxy_key_id,
                user_id=key_context.owner_id,
                server_name=server_name,
                tool_name=tool_name,
                status=status.value,
                error_code=error_code,
                request_body=request_body,
                response_body=response_body,
                request_id=request_id,
                latency_ms=latency_ms,
            )
        except SQLAlchemyError:
            logger.exception(
                "AuditLogWriter: Failed to write audit entry",
                request_id=request_id,
                project_id=str(key_context.project_id),
                error_code=error_code,
            )
            await self.session.rollback()
            return None

        logger.info(
            "AuditLogWriter: Audit entry written",
            request_id=request_id,
            audit_log_id=str(entry.id),
            status=status.value,
            error_code=error_code,
        )
        return entry
