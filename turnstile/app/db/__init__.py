"""
Database Module

Async SQLAlchemy engine, per-request sessions, startup migrations and the
repositories the services use.

Request flow:
    route ──Depends(get_db)──▶ AsyncSession ──▶ Service ──▶ Repository ──▶ SQL

- session.py: engine, session factory, get_db (commit on success, rollback
  on error), startup/shutdown helpers and the health probe
- migrations.py: alembic upgrade on startup (advisory lock on PostgreSQL)
- repositories/: one repository per table, project-scoped where the table
  belongs to a project

Usage outside a request (scripts):
    async with AsyncSessionLocal() as session:
        project = await ProjectRepository(session).create(owner_id="op", name="Demo")
        await session.commit()
"""

from app.db.session import (
    AsyncSessionLocal,
    check_db_health,
    close_db,
    get_db,
    init_db,
)

__all__ = [
    "AsyncSessionLocal",
    "check_db_health",
    "close_db",
    "get_db",
    "init_db",
]
