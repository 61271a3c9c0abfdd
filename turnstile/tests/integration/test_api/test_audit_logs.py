"""
Audit Log API Integration Tests

Endpoint Summary:
=================
- GET /projects/{id}/audit-logs           - Query (newest first, filtered, paginated)
- GET /projects/{id}/audit-logs/{log_id}  - Get one entry

Query Parameters:
=================
- status: success | error
- server_name, tool_name, proxy_key_id: exact match
- page/per_page: Pagination (default 50, max 200)
"""

# pylint: disable=redefined-outer-name,unused-argument

import uuid

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories import AuditLogRepository

PROJECTS_URL = "/control-plane/api/v1/projects"
GATEWAY_URL = "/gateway/api/v1/mcp"


def logs_url(project) -> str:
    return f"{PROJECTS_URL}/{project.id}/audit-logs"


@pytest_asyncio.fixture
async def seeded_logs(test_db: AsyncSession, test_project, make_proxy_key):
    """Three entries: two for kb/search (one per key), one rejected github call."""
    _, key_a = await make_proxy_key(test_project, label="a")
    _, key_b = await make_proxy_key(test_project, label="b")
    repo = AuditLogRepository(test_db)
    entries = [
        await repo.create_entry(
            project_id=test_project.id,
            proxy_key_id=key_a.id,
            status="success",
            server_name="kb",
            tool_name="search",
            request_body={"tool": "search"},
            response_body={"result": {}},
        ),
        await repo.create_entry(
            project_id=test_project.id,
            proxy_key_id=key_b.id,
            status="success",
            server_name="kb",
            tool_name="search",
        ),
        await repo.create_entry(
            project_id=test_project.id,
            proxy_key_id=key_a.id,
            status="error",
            error_code="TOOL_NOT_ALLOWED",
            server_name="github",
            tool_name="delete_repo",
        ),
    ]
    await test_db.commit()
    return {"key_a": key_a, "key_b": key_b, "entries": entries}


class TestQueryAuditLogs:
    """Tests for GET /projects/{id}/audit-logs."""

    async def test_list_all(
        self, client: AsyncClient, owner_headers: dict, test_project, seeded_logs
    ):
        response = await client.get(logs_url(test_project), headers=owner_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["data"]) == 3
        assert data["pagination"]["perPage"] == 50
        assert data["pagination"]["total"] == 3

    async def test_filter_by_status(
        self, client: AsyncClient, owner_headers: dict, test_project, seeded_logs
    ):
        response = await client.get(
            logs_url(test_project), params={"status": "error"}, headers=owner_headers
        )

        [entry] = response.json()["data"]
        assert entry["errorCode"] == "TOOL_NOT_ALLOWED"
        assert entry["toolName"] == "delete_repo"

    async def test_filters_combine(
        self, client: AsyncClient, owner_headers: dict, test_project, seeded_logs
    ):
        """
        Given: Entries across keys and servers
        When: Filtering by server and key together
        Then: Only entries matching both are returned
        """
        response = await client.get(
            logs_url(test_project),
            params={"server_name": "kb", "proxy_key_id": str(seeded_logs["key_a"].id)},
            headers=owner_headers,
        )

        data = response.json()
        assert data["pagination"]["total"] == 1
        assert data["data"][0]["requestBody"] == {"tool": "search"}

    async def test_pagination(
        self, client: AsyncClient, owner_headers: dict, test_project, seeded_logs
    ):
        response = await client.get(
            logs_url(test_project), params={"page": 2, "per_page": 2}, headers=owner_headers
        )

        data = response.json()
        assert len(data["data"]) == 1
        assert data["pagination"]["totalPages"] == 2

    async def test_page_size_cap(
        self, client: AsyncClient, owner_headers: dict, test_project
    ):
        response = await client.get(
            logs_url(test_project), params={"per_page": 201}, headers=owner_headers
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_invalid_status_filter(
        self, client: AsyncClient, owner_headers: dict, test_project
    ):
        response = await client.get(
            logs_url(test_project), params={"status": "blocked"}, headers=owner_headers
        )
        assert response.status_code == 400

    async def test_other_projects_logs_are_hidden(
        self,
        client: AsyncClient,
        other_owner_headers: dict,
        other_project,
        seeded_logs,
    ):
        response = await client.get(logs_url(other_project), headers=other_owner_headers)
        assert response.json()["data"] == []

    async def test_gateway_calls_show_up(
        self,
        client: AsyncClient,
        owner_headers: dict,
        test_project,
        kb_server,
        make_proxy_key,
    ):
        """
        Given: One forwarded and one rejected gateway call
        When: Querying the audit log
        Then: Both are listed with the request id the caller saw
        """
        plain_key, _ = await make_proxy_key(test_project, allowed_tools=["search"])
        gateway_headers = {"Authorization": f"Bearer {plain_key}"}
        url = logs_url(test_project)

        ok = await client.post(GATEWAY_URL, json={"tool": "search"}, headers=gateway_headers)
        await client.post(GATEWAY_URL, json={"tool": "summarize"}, headers=gateway_headers)

        response = await client.get(url, headers=owner_headers)
        entries = response.json()["data"]

        assert {(e["status"], e["errorCode"]) for e in entries} == {
            ("success", None),
            ("error", "TOOL_NOT_ALLOWED"),
        }
        success = next(e for e in entries if e["status"] == "success")
        assert success["requestId"] == ok.headers["X-Request-ID"]
        assert success["userId"] == "owner-alpha"


class TestGetAuditLog:
    """Tests for GET /projects/{id}/audit-logs/{log_id}."""

    async def test_get_entry(
        self, client: AsyncClient, owner_headers: dict, test_project, seeded_logs
    ):
        entry = seeded_logs["entries"][0]

        response = await client.get(
            f"{logs_url(test_project)}/{entry.id}", headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["responseBody"] == {"result": {}}

    async def test_unknown_entry(self, client: AsyncClient, owner_headers: dict, test_project):
        response = await client.get(
            f"{logs_url(test_project)}/{uuid.uuid4()}", headers=owner_headers
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "AUDIT_LOG_NOT_FOUND"

    async def test_entry_of_other_project(
        self,
        client: AsyncClient,
        other_owner_headers: dict,
        other_project,
        seeded_logs,
    ):
        entry = seeded_logs["entries"][0]
        response = await client.get(
            f"{logs_url(other_project)}/{entry.id}", headers=other_owner_headers
        )
        assert response.status_code == 404
