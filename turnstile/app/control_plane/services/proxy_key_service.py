"""
Proxy Key Service

Business logic for proxy key management.

Keys are what callers present to the gateway. The plain key is generated
here, returned once, and never stored: the database keeps its SHA-256 hash
for lookup and a masked form for display.

Access Control:
- allowed_tools: the only tools the key may call (null or [] = any tool)
- blacklist_words: words that block a request body (null or [] = none)
- is_active: inactive keys are rejected before anything else happens
"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, ProxyKeyNotFoundError, ValidationError
from app.core.logging import logger
from app.core.security import generate_proxy_key, mask_proxy_key
from app.db.repositories import AuditLogRepository, ProxyKeyRepository
from app.models.project import Project
from app.models.proxy_key import ProxyKey
from app.schemas.proxy_key import (
    ProxyKeyCreate,
    ProxyKeyCreatedResponse,
    ProxyKeyResponse,
    ProxyKeyUpdate,
)


def _clean_label(label: Optional[str]) -> str:
    cleaned = (label or "").strip()
    if not cleaned:
        raise ValidationError("Key label is required", error_code="INVALID_LABEL")
    return cleaned


class ProxyKeyService:
    """Service for proxy key operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repo = ProxyKeyRepository(session)
        self.audit_repo = AuditLogRepository(session)

    async def _get_key(self, project: Project, key_id: UUID) -> ProxyKey:
        key = await self.repo.get_in_project(project.id, key_id)
        if key is None:
            raise ProxyKeyNotFoundError(str(key_id))
        return key

    async def issue_key(
        self, project: Project, data: ProxyKeyCreate
    ) -> ProxyKeyCreatedResponse:
        """Issue a new proxy key.

        Args:
            project: Project the key grants access to
            data: Label and optional restrictions

        Returns:
            Created key with the actual key value (shown only once!)

        Raises:
            ValidationError: INVALID_LABEL if the label is blank
            ConflictError: Generated key collided with an existing one
        """
        label = _clean_label(data.label)
        plain_key, key_hash = generate_proxy_key()

        try:
            key = await self.repo.create(
                project_id=project.id,
                label=label,
                key_hash=key_hash,
                key_prefix=mask_proxy_key(plain_key),
                allowed_tools=data.allowed_tools,
                blacklist_words=data.blacklist_words,
            )
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Could not issue a unique key, please retry") from e

        logger.info(
            "Proxy key issued",
            project_id=str(project.id),
            proxy_key_id=str(key.id),
            key_prefix=key.key_prefix,
        )

        return ProxyKeyCreatedResponse(
            **ProxyKeyResponse.model_validate(key).model_dump(),
            key=plain_key,
        )

    async def list_keys(
        self,
        project: Project,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[list[ProxyKeyResponse], int]:
        """List a project's keys, newest first (masked).

        Returns:
            Tuple of (keys, total_count)
        """
        keys = await self.repo.list_by_project(project.id, offset=offset, limit=limit)
        total = await self.repo.count_by_project(project.id)
        return [ProxyKeyResponse.model_validate(k) for k in keys], total

    async def get_key(self, project: Project, key_id: UUID) -> ProxyKeyResponse:
        """Get one key (masked)."""
        return ProxyKeyResponse.model_validate(await self._get_key(project, key_id))

    async def update_key(
        self,
        project: Project,
        key_id: UUID,
        data: ProxyKeyUpdate,
    ) -> ProxyKeyResponse:
        """Update a key's label, restrictions or active flag.

        Each field is optional. An explicit empty list clears a restriction.
        """
        key = await self._get_key(project, key_id)
        fields = data.model_dump(exclude_unset=True)
        changes: dict[str, Any] = {}

        if "label" in fields:
            changes["label"] = _clean_label(fields["label"])
        if "allowed_tools" in fields:
            changes["allowed_tools"] = fields["allowed_tools"]
        if "blacklist_words" in fields:
            changes["blacklist_words"] = fields["blacklist_words"]
        if fields.get("is_active") is not None:
            changes["is_active"] = fields["is_active"]

        if changes:
            key = await self.repo.update_instance(key, **changes)
            logger.info(
                "Proxy key updated",
                proxy_key_id=str(key.id),
                fields=sorted(changes),
            )

        return ProxyKeyResponse.model_validate(key)

    async def delete_key(self, project: Project, key_id: UUID) -> None:
        """Delete a key. Its audit entries stay, with the key reference nulled."""
        key = await self._get_key(project, key_id)
        detached = await self.audit_repo.detach_proxy_key(project.id, key.id)
        await self.repo.delete_instance(key)
        logger.info(
            "Proxy key deleted",
            proxy_key_id=str(key_id),
            audit_entries_detached=detached,
        )
