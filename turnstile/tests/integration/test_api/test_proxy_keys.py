"""
Proxy Key API Integration Tests

Endpoint Summary:
=================
- POST   /projects/{id}/keys          - Issue key (plain key shown once)
- GET    /projects/{id}/keys          - List keys (masked)
- GET    /projects/{id}/keys/{kid}    - Get key (masked)
- PATCH  /projects/{id}/keys/{kid}    - Update label / restrictions / active flag
- DELETE /projects/{id}/keys/{kid}    - Delete key (audit history kept)
"""

# pylint: disable=unused-argument

import uuid

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_proxy_key
from app.models import AuditLog, ProxyKey

PROJECTS_URL = "/control-plane/api/v1/projects"
GATEWAY_URL = "/gateway/api/v1/mcp"


def keys_url(project) -> str:
    return f"{PROJECTS_URL}/{project.id}/keys"


class TestIssueKey:
    """Tests for POST /projects/{id}/keys."""

    async def test_issue_key(
        self,
        client: AsyncClient,
        test_db: AsyncSession,
        owner_headers: dict,
        test_project,
    ):
        """
        Given: An owned project
        When: Issuing a key with restrictions
        Then: The plain key is returned once, only its hash is stored
        """
        response = await client.post(
            keys_url(test_project),
            json={
                "label": "Support bot",
                "allowedTools": ["search"],
                "blacklistWords": ["password"],
            },
            headers=owner_headers,
        )

        assert response.status_code == 201
        data = response.json()
        plain_key = data["key"]
        assert plain_key.startswith("sk_live_")
        assert data["label"] == "Support bot"
        assert data["allowedTools"] == ["search"]
        assert data["blacklistWords"] == ["password"]
        assert data["isActive"] is True
        assert data["keyPrefix"].startswith("sk_live_")
        assert data["keyPrefix"] != plain_key

        stored = await test_db.scalar(select(ProxyKey).where(ProxyKey.id == uuid.UUID(data["id"])))
        assert stored.key_hash == hash_proxy_key(plain_key)
        assert plain_key not in (stored.key_hash, stored.key_prefix)

    async def test_issued_key_works_at_gateway(
        self, client: AsyncClient, owner_headers: dict, test_project, kb_server
    ):
        response = await client.post(
            keys_url(test_project), json={"label": "bot"}, headers=owner_headers
        )
        plain_key = response.json()["key"]

        gateway_response = await client.post(
            GATEWAY_URL,
            json={"tool": "search"},
            headers={"Authorization": f"Bearer {plain_key}"},
        )
        assert gateway_response.status_code == 200

    async def test_blank_label(self, client: AsyncClient, owner_headers: dict, test_project):
        response = await client.post(
            keys_url(test_project), json={"label": "  "}, headers=owner_headers
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_LABEL"


class TestReadKeys:
    """Tests for listing and fetching keys."""

    async def test_list_is_masked(
        self, client: AsyncClient, owner_headers: dict, test_project, make_proxy_key
    ):
        plain_key, _ = await make_proxy_key(test_project, label="first")

        response = await client.get(keys_url(test_project), headers=owner_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["total"] == 1
        assert "key" not in data["data"][0]
        assert plain_key not in response.text

    async def test_keys_are_project_scoped(
        self,
        client: AsyncClient,
        other_owner_headers: dict,
        test_project,
        other_project,
        make_proxy_key,
    ):
        _, key = await make_proxy_key(test_project)

        response = await client.get(
            f"{keys_url(other_project)}/{key.id}", headers=other_owner_headers
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "KEY_NOT_FOUND"


class TestUpdateKey:
    """Tests for PATCH /projects/{id}/keys/{kid}."""

    async def test_partial_update(
        self, client: AsyncClient, owner_headers: dict, test_project, make_proxy_key
    ):
        """
        Given: A key with an allow-list and blacklist
        When: Patching only the label
        Then: Restrictions are unchanged
        """
        _, key = await make_proxy_key(
            test_project, allowed_tools=["search"], blacklist_words=["secret"]
        )

        response = await client.patch(
            f"{keys_url(test_project)}/{key.id}",
            json={"label": "renamed"},
            headers=owner_headers,
        )

        data = response.json()
        assert response.status_code == 200
        assert data["label"] == "renamed"
        assert data["allowedTools"] == ["search"]
        assert data["blacklistWords"] == ["secret"]

    async def test_empty_list_clears_restriction(
        self, client: AsyncClient, owner_headers: dict, test_project, make_proxy_key
    ):
        _, key = await make_proxy_key(test_project, allowed_tools=["search"])

        response = await client.patch(
            f"{keys_url(test_project)}/{key.id}",
            json={"allowedTools": []},
            headers=owner_headers,
        )
        assert response.json()["allowedTools"] == []

    async def test_deactivate_blocks_gateway(
        self,
        client: AsyncClient,
        owner_headers: dict,
        test_project,
        kb_server,
        make_proxy_key,
    ):
        plain_key, key = await make_proxy_key(test_project)

        await client.patch(
            f"{keys_url(test_project)}/{key.id}",
            json={"isActive": False},
            headers=owner_headers,
        )
        response = await client.post(
            GATEWAY_URL,
            json={"tool": "search"},
            headers={"Authorization": f"Bearer {plain_key}"},
        )
        assert response.status_code == 403
        assert response.json()["code"] == "INACTIVE_API_KEY"

    async def test_restriction_change_applies_immediately(
        self,
        client: AsyncClient,
        owner_headers: dict,
        test_project,
        kb_server,
        make_proxy_key,
    ):
        plain_key, key = await make_proxy_key(test_project)
        gateway_headers = {"Authorization": f"Bearer {plain_key}"}

        first = await client.post(GATEWAY_URL, json={"tool": "search"}, headers=gateway_headers)
        await client.patch(
            f"{keys_url(test_project)}/{key.id}",
            json={"blacklistWords": ["search"]},
            headers=owner_headers,
        )
        second = await client.post(GATEWAY_URL, json={"tool": "search"}, headers=gateway_headers)

        assert first.status_code == 200
        assert second.status_code == 403
        assert second.json()["code"] == "BLACKLIST_VIOLATION"


class TestDeleteKey:
    """Tests for DELETE /projects/{id}/keys/{kid}."""

    async def test_delete_keeps_audit_history(
        self,
        client: AsyncClient,
        test_db: AsyncSession,
        owner_headers: dict,
        test_project,
        kb_server,
        make_proxy_key,
    ):
        """
        Given: A key with one audited gateway call
        When: Deleting the key
        Then: The key stops working and the audit entry stays with no key reference
        """
        plain_key, key = await make_proxy_key(test_project)
        gateway_headers = {"Authorization": f"Bearer {plain_key}"}
        await client.post(GATEWAY_URL, json={"tool": "search"}, headers=gateway_headers)

        response = await client.delete(
            f"{keys_url(test_project)}/{key.id}", headers=owner_headers
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Proxy key deleted"

        after = await client.post(GATEWAY_URL, json={"tool": "search"}, headers=gateway_headers)
        assert after.status_code == 401
        assert after.json()["code"] == "INVALID_API_KEY"

        entries = list((await test_db.execute(select(AuditLog))).scalars().all())
        assert len(entries) == 1
        assert entries[0].proxy_key_id is None
        assert entries[0].status == "success"
