"""
Audit Log Repository

Database operations specific to the AuditLog model.

Common Operations:
==================
- create_entry()        → Append one gateway decision
- query()               → Search a project's log with filters, newest first
- count_query()         → Count entries matching the same filters
- detach_proxy_key()    → Null the key reference before a key is deleted

What Gets Logged:
=================
┌─────────────────────────────────────────────────────────────────────────────┐
│                        AUDIT LOG ENTRY                                      │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│  CONTEXT:                                                                   │
│  - project_id, proxy_key_id, user_id: Who made the call?                   │
│  - request_id: Correlates with logs and the upstream request               │
│                                                                             │
│  TARGET:                                                                    │
│  - server_name, tool_name: What was called (either may be unknown)         │
│                                                                             │
│  OUTCOME:                                                                   │
│  - status: "success" | "error"                                             │
│  - error_code: Gateway rejection code (null when forwarded)                │
│  - request_body / response_body: Raw payloads                              │
│                                                                             │
│  PERFORMANCE:                                                               │
│  - latency_ms, created_at                                                   │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘

Entries are insert-only. The only UPDATE ever issued is detach_proxy_key(),
which keeps history intact when a key is deleted.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.functions import count

from app.db.repositories.base import ProjectScopedRepository
from app.models.audit_log import AuditLog


class AuditLogRepository(ProjectScopedRepository[AuditLog]):
    """
    Repository for AuditLog database operations.

    Note: Audit logs are insert-only (immutable).
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AuditLog, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_entry(
        self,
        project_id: UUID,
        status: str,
        proxy_key_id: UUID | None = None,
        user_id: str | None = None,
        server_name: str | None = None,
        tool_name: str | None = None,
        error_code: str | None = None,
        request_body: Any = None,
        response_body: Any = None,
        request_id: str | None = None,
        latency_ms: int | None = None,
    ) -> AuditLog:
        """
        Create an audit log entry for a gateway decision.

        Example:
            log = await repo.create_entry(
                project_id=key.project_id,
                proxy_key_id=key.id,
                user_id=project.owner_id,
                server_name="github",
                tool_name="delete_repo",
                status="error",
                error_code="TOOL_NOT_ALLOWED",
                request_body={"tool": "delete_repo"},
                response_body={"error": "Tool 'delete_repo' is not allowed"},
            )
        """
        return await self.create(
            project_id=project_id,
            proxy_key_id=proxy_key_id,
            user_id=user_id,
            server_name=server_name,
            tool_name=tool_name,
            status=status,
            error_code=error_code,
            request_body=request_body,
            response_body=response_body,
            request_id=request_id,
            latency_ms=latency_ms,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # QUERY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    def _build_filters(
        self,
        project_id: UUID,
        status: str | None,
        server_name: str | None,
        tool_name: str | None,
        proxy_key_id: UUID | None,
    ) -> list[Any]:
        conditions: list[Any] = [AuditLog.project_id == project_id]
        if status:
            conditions.append(AuditLog.status == status)
        if server_name:
            conditions.append(AuditLog.server_name == server_name)
        if tool_name:
            conditions.append(AuditLog.tool_name == tool_name)
        if proxy_key_id:
            conditions.append(AuditLog.proxy_key_id == proxy_key_id)
        return conditions

    async def query(
        self,
        project_id: UUID,
        status: str | None = None,
        server_name: str | None = None,
        tool_name: str | None = None,
        proxy_key_id: UUID | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> list[AuditLog]:
        """
        Query a project's audit log, newest first.

        All filters are optional and combined with AND logic.

        SQL Generated:
            SELECT * FROM audit_logs
            WHERE project_id = '...' AND status = 'error'
            ORDER BY created_at DESC
            OFFSET 0 LIMIT 50
        """
        conditions = self._build_filters(
            project_id, status, server_name, tool_name, proxy_key_id
        )
        result = await self.session.execute(
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_query(
        self,
        project_id: UUID,
        status: str | None = None,
        server_name: str | None = None,
        tool_name: str | None = None,
        proxy_key_id: UUID | None = None,
    ) -> int:
        """Count audit log entries matching the query() filters."""
        conditions = self._build_filters(
            project_id, status, server_name, tool_name, proxy_key_id
        )
        result = await self.session.execute(
            select(count(AuditLog.id)).select_from(AuditLog).where(*conditions)
        )
        return result.scalar() or 0

    # ═══════════════════════════════════════════════════════════════════════════
    # KEY DELETION SUPPORT
    # ═══════════════════════════════════════════════════════════════════════════

    async def detach_proxy_key(self, project_id: UUID, proxy_key_id: UUID) -> int:
        """
        Null the key reference on a key's audit entries.

        Issued explicitly so history survives key deletion on every backend,
        including SQLite without foreign-key enforcement.

        SQL Generated:
            UPDATE audit_logs SET proxy_key_id = NULL
            WHERE project_id = '...' AND proxy_key_id = '...'

        Returns:
            Number of entries updated
        """
        result = await self.session.execute(
            update(AuditLog)
            .where(
                AuditLog.project_id == project_id,
                AuditLog.proxy_key_id == proxy_key_id,
            )
            .values(proxy_key_id=None)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
