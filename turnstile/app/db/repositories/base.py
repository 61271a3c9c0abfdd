"""
Base Repository

Generic repositories with the CRUD operations every table needs.

What This Provides:
===================
BaseRepository[ModelType]
- get(id)          → Fetch single record by UUID
- list()           → List records with pagination and equality filters
- count()          → Count records with equality filters
- create()         → Insert a record and reload DB defaults
- update()         → Apply exactly the given field changes
- delete()         → Hard delete a record

ProjectScopedRepository[ModelType]
- get_in_project()     → Fetch by UUID, only if it belongs to the project
- list_by_project()    → List one project's records
- count_by_project()   → Count one project's records
- delete_in_project()  → Delete by UUID, only inside the project

Tenant Isolation:
=================
Servers, keys and audit entries are owned by a project. Their repositories
extend ProjectScopedRepository and every query they issue carries a
``project_id`` filter, so a key from one project can never reach another
project's rows:

    ┌─────────────────────────────────────────────────────────────┐
    │ SELECT * FROM mcp_servers                                   │
    │ WHERE project_id = :project_id     ← always present          │
    │   AND id = :server_id                                       │
    └─────────────────────────────────────────────────────────────┘

flush() vs commit():
====================
Repository methods only flush(). The request-scoped session from get_db()
commits once the handler returns, so a failure anywhere in the request rolls
back every write made during it.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.functions import count

from app.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameter:
        ModelType: The SQLAlchemy model class this repository manages

    Example:
        class ProjectRepository(BaseRepository[Project]):
            def __init__(self, session: AsyncSession):
                super().__init__(Project, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession) -> None:
        """
        Initialize the repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session from get_db()
        """
        self.model = model
        self.session = session

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get(self, entity_id: UUID) -> ModelType | None:
        """
        Get a single record by its UUID.

        SQL Generated:
            SELECT * FROM projects WHERE id = '550e8400-...'
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == entity_id)
        )
        return result.scalar_one_or_none()

    def _apply_filters(self, query: Any, filters: dict[str, Any] | None) -> Any:
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field):
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 100,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        order_desc: bool = True,
    ) -> list[ModelType]:
        """
        List records with pagination and optional equality filtering.

        Args:
            offset: Number of records to skip
            limit: Maximum records to return
            filters: Dict of field=value for WHERE clauses
            order_by: Field name to order results by
            order_desc: If True, order descending; if False, ascending

        SQL Generated:
            SELECT * FROM proxy_keys
            WHERE project_id = '...' AND is_active = true
            ORDER BY created_at DESC
            OFFSET 20 LIMIT 20
        """
        query = self._apply_filters(select(self.model), filters)

        if order_by and hasattr(self.model, order_by):
            order_field = getattr(self.model, order_by)
            query = query.order_by(order_field.desc() if order_desc else order_field)

        query = query.offset(offset).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        """
        Count records with optional equality filtering.

        SQL Generated:
            SELECT COUNT(id) FROM mcp_servers WHERE project_id = '...'
        """
        query = self._apply_filters(
            select(count(self.model.id)).select_from(self.model), filters
        )
        result = await self.session.execute(query)
        return result.scalar() or 0

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Flushes so the INSERT runs now (constraint violations surface here)
        and refreshes so server defaults are loaded on the instance.

        SQL Generated:
            INSERT INTO projects (id, owner_id, name, ...)
            VALUES ('...', 'user_2f9c1a', 'Support Assistant', ...)
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    # ═══════════════════════════════════════════════════════════════════════════
    # UPDATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def update_instance(self, instance: ModelType, **kwargs: Any) -> ModelType:
        """
        Apply field changes to an already loaded record.

        Every keyword is written, None included, so callers pass only the
        fields that actually changed. Passing ``auth_token=None`` clears the
        column.

        SQL Generated:
            UPDATE mcp_servers
            SET auth_token = NULL, updated_at = '...'
            WHERE id = '...'
        """
        for field, value in kwargs.items():
            if hasattr(instance, field):
                setattr(instance, field, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, entity_id: UUID, **kwargs: Any) -> ModelType | None:
        """
        Update a record by ID.

        Returns:
            Updated model instance, or None if not found
        """
        instance = await self.get(entity_id)
        if not instance:
            return None
        return await self.update_instance(instance, **kwargs)

    # ═══════════════════════════════════════════════════════════════════════════
    # DELETE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def delete_instance(self, instance: ModelType) -> None:
        """Hard delete an already loaded record (ORM cascades apply)."""
        await self.session.delete(instance)
        await self.session.flush()

    async def delete(self, entity_id: UUID) -> bool:
        """
        Hard delete a record by ID.

        Returns:
            True if deleted, False if not found

        SQL Generated:
            DELETE FROM projects WHERE id = '...'
        """
        instance = await self.get(entity_id)
        if not instance:
            return False
        await self.delete_instance(instance)
        return True


class ProjectScopedRepository(BaseRepository[ModelType]):
    """
    Repository for tables owned by a project.

    The managed model must have a ``project_id`` column.
    """

    async def get_in_project(
        self, project_id: UUID, entity_id: UUID
    ) -> ModelType | None:
        """
        Get a record by UUID only if it belongs to the project.

        SQL Generated:
            SELECT * FROM proxy_keys
            WHERE project_id = '...' AND id = '...'
        """
        result = await self.session.execute(
            select(self.model).where(
                self.model.project_id == project_id,
                self.model.id == entity_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_project(
        self,
        project_id: UUID,
        *,
        offset: int = 0,
        limit: int = 100,
        order_desc: bool = True,
    ) -> list[ModelType]:
        """List a project's records ordered by creation time."""
        return await self.list(
            offset=offset,
            limit=limit,
            filters={"project_id": project_id},
            order_by="created_at",
            order_desc=order_desc,
        )

    async def count_by_project(self, project_id: UUID) -> int:
        """Count a project's records."""
        return await self.count(filters={"project_id": project_id})

    async def delete_in_project(self, project_id: UUID, entity_id: UUID) -> bool:
        """
        Delete a record by UUID only if it belongs to the project.

        Returns:
            True if deleted, False if not found in this project
        """
        instance = await self.get_in_project(project_id, entity_id)
        if not instance:
            return False
        await self.delete_instance(instance)
        return True
