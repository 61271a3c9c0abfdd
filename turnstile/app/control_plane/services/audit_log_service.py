"""
Audit Log Service

Read-only access to a project's gateway audit log.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuditLogNotFoundError
from app.db.repositories import AuditLogRepository
from app.models.project import Project
from app.schemas.audit_log import AuditLogQueryParams, AuditLogResponse


class AuditLogService:
    """Service for audit log queries."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repo = AuditLogRepository(session)

    async def query_logs(
        self, project: Project, params: AuditLogQueryParams
    ) -> tuple[list[AuditLogResponse], int]:
        """Query a project's audit log, newest first.

        Returns:
            Tuple of (entries, total_count)
        """
        filters = {
            "status": params.status.value if params.status else None,
            "server_name": params.server_name,
            "tool_name": params.tool_name,
            "proxy_key_id": params.proxy_key_id,
        }
        logs = await self.repo.query(
            project.id,
            offset=params.offset,
            limit=params.per_page,
            **filters,
        )
        total = await self.repo.count_query(project.id, **filters)
        return [AuditLogResponse.model_validate(log) for log in logs], total

    async def get_log(self, project: Project, log_id: UUID) -> AuditLogResponse:
        """Get one audit entry in the project."""
        log = await self.repo.get_in_project(project.id, log_id)
        if log is None:
            raise AuditLogNotFoundError(str(log_id))
        return AuditLogResponse.model_validate(log)
