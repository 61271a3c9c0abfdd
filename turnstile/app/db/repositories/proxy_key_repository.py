"""
Proxy Key Repository

Database operations specific to the ProxyKey model.

Common Operations:
==================
- get_by_hash()   → Gateway authentication (global lookup by key hash)
- list_by_project() / get_in_project() / delete_in_project() from the base

Key Lookup:
===========
The key hash is the only lookup that is not filtered by project: the key
itself is what tells the gateway which project the caller belongs to. The
hash column is unique across the whole table.

    SELECT * FROM proxy_keys WHERE key_hash = 'a1b2c3...'
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.db.repositories.base import ProjectScopedRepository
from app.models.proxy_key import ProxyKey


class ProxyKeyRepository(ProjectScopedRepository[ProxyKey]):
    """Repository for ProxyKey database operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ProxyKey, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # AUTHENTICATION (Critical Path!)
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_by_hash(self, key_hash: str) -> ProxyKey | None:
        """
        Get a proxy key by hash, active or not, with its project loaded.

        The caller decides how to treat inactive keys (they are reported
        differently from unknown ones).

        Args:
            key_hash: SHA-256 hash of the presented key

        Returns:
            ProxyKey with ``project`` loaded, or None
        """
        result = await self.session.execute(
            select(ProxyKey)
            .options(joinedload(ProxyKey.project))
            .where(ProxyKey.key_hash == key_hash)
        )
        return result.scalar_one_or_none()
