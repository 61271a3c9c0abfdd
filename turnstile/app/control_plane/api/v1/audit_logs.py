"""
Audit Log Endpoints

Query the gateway's audit log for a project.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.control_plane.api.dependencies import DbSession, OwnedProject
from app.control_plane.api.utils import paginate, validate_uuid
from app.control_plane.services import AuditLogService
from app.schemas.audit_log import AuditLogQueryParams, AuditLogResponse
from app.schemas.common import PaginatedResponse

router = APIRouter()


@router.get(
    "/{project_id}/audit-logs",
    response_model=PaginatedResponse[AuditLogResponse],
    summary="Query audit logs",
    description="""
Query the project's audit log, newest first.

Optional filters (combined with AND): `status`, `server_name`, `tool_name`,
`proxy_key_id`. Page size defaults to 50 and is capped at 200.
    """,
)
async def query_audit_logs(
    project: OwnedProject,
    db: DbSession,
    params: Annotated[AuditLogQueryParams, Depends()],
) -> PaginatedResponse[AuditLogResponse]:
    """Query audit logs."""
    logs, total = await AuditLogService(db).query_logs(project, params)
    return paginate(logs, params.page, params.per_page, total)


@router.get(
    "/{project_id}/audit-logs/{log_id}",
    response_model=AuditLogResponse,
    summary="Get audit log entry",
)
async def get_audit_log(
    log_id: str, project: OwnedProject, db: DbSession
) -> AuditLogResponse:
    """Get one audit log entry."""
    return await AuditLogService(db).get_log(project, validate_uuid(log_id, "log_id"))
