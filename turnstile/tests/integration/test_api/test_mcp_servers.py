"""
MCP Server Registry API Integration Tests

Endpoint Summary:
=================
- POST   /projects/{id}/servers                  - Register (handshake first)
- GET    /projects/{id}/servers                  - List in registration order
- GET    /projects/{id}/servers/{sid}            - Get one
- PUT    /projects/{id}/servers/{sid}            - Update (re-handshake on URL/token change)
- POST   /projects/{id}/servers/{sid}/refresh    - Re-run handshake
- DELETE /projects/{id}/servers/{sid}            - Delete

Handshake:
==========
The fake upstream answers ``tools/list`` with the catalog registered for the
URL. Failures are injected per URL with ``fake_upstream.on``.
"""

# pylint: disable=unused-argument

import json
import uuid

import httpx
from httpx import AsyncClient

PROJECTS_URL = "/control-plane/api/v1/projects"
JIRA_URL = "http://jira.test/mcp"
KB_SERVER_URL = "http://kb.test/mcp"


def servers_url(project) -> str:
    return f"{PROJECTS_URL}/{project.id}/servers"


# =============================================================================
# REGISTRATION
# =============================================================================


class TestRegisterServer:
    """Tests for POST /projects/{id}/servers."""

    async def test_register_stores_catalog(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project
    ):
        """
        Given: A reachable MCP server with two tools
        When: Registering it with a token
        Then: 201, catalog cached, token used for the handshake but never returned
        """
        fake_upstream.add_server(
            JIRA_URL,
            {"jsonrpc": "2.0", "id": 1, "result": {"tools": [{"name": "create_ticket"}, "search"]}},
        )

        response = await client.post(
            servers_url(test_project),
            json={"name": " jira ", "baseUrl": f" {JIRA_URL} ", "authToken": "jira-secret"},
            headers=owner_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "jira"
        assert data["baseUrl"] == JIRA_URL
        assert data["cachedTools"] == [{"name": "create_ticket"}, "search"]
        assert data["toolNames"] == ["create_ticket", "search"]
        assert data["hasAuthToken"] is True
        assert data["isActive"] is True
        assert "jira-secret" not in response.text

        [handshake] = fake_upstream.handshakes
        assert handshake.headers["Authorization"] == "Bearer jira-secret"
        assert json.loads(handshake.content)["method"] == "tools/list"

    async def test_snake_case_input_is_accepted(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project
    ):
        fake_upstream.add_server(JIRA_URL, {"tools": []})

        response = await client.post(
            servers_url(test_project),
            json={"name": "jira", "base_url": JIRA_URL},
            headers=owner_headers,
        )

        assert response.status_code == 201
        assert response.json()["cachedTools"] == []
        assert response.json()["hasAuthToken"] is False

    async def test_handshake_auth_failure_is_not_saved(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project
    ):
        """
        Given: A server answering 401
        When: Registering it
        Then: 400 HANDSHAKE_AUTH_FAILED with a hint, nothing stored
        """
        fake_upstream.on(JIRA_URL, lambda request: httpx.Response(401))
        url = servers_url(test_project)

        response = await client.post(
            url,
            json={"name": "jira", "baseUrl": JIRA_URL, "authToken": "wrong"},
            headers=owner_headers,
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "HANDSHAKE_AUTH_FAILED"
        assert error["hint"]

        listing = await client.get(url, headers=owner_headers)
        assert listing.json()["data"] == []

    async def test_handshake_error_status_detail(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project
    ):
        fake_upstream.on(JIRA_URL, lambda request: httpx.Response(500, text="boom"))

        response = await client.post(
            servers_url(test_project),
            json={"name": "jira", "baseUrl": JIRA_URL},
            headers=owner_headers,
        )

        error = response.json()["error"]
        assert error["code"] == "HANDSHAKE_FAILED"
        assert error["details"] == {"upstream_status": 500, "upstream_body": "boom"}

    async def test_invalid_inputs(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project
    ):
        """
        Given: Blank name, blank URL or malformed URL
        When: Registering
        Then: 400 with a specific code and no handshake attempted
        """
        cases = [
            ({"name": " ", "baseUrl": JIRA_URL}, "INVALID_NAME"),
            ({"name": "jira", "baseUrl": "  "}, "INVALID_BASE_URL"),
            ({"name": "jira", "baseUrl": "jira.test/mcp"}, "INVALID_URL_FORMAT"),
        ]
        url = servers_url(test_project)
        for payload, code in cases:
            response = await client.post(
                url, json=payload, headers=owner_headers
            )
            assert response.status_code == 400
            assert response.json()["error"]["code"] == code

        assert fake_upstream.requests == []

    async def test_duplicate_name(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        response = await client.post(
            servers_url(test_project),
            json={"name": "kb", "baseUrl": JIRA_URL},
            headers=owner_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SERVER_NAME_CONFLICT"
        assert fake_upstream.requests == []

    async def test_same_name_in_other_project_is_fine(
        self,
        client: AsyncClient,
        other_owner_headers: dict,
        fake_upstream,
        other_project,
        kb_server,
    ):
        fake_upstream.add_server(JIRA_URL, {"tools": []})

        response = await client.post(
            servers_url(other_project),
            json={"name": "kb", "baseUrl": JIRA_URL},
            headers=other_owner_headers,
        )
        assert response.status_code == 201

    async def test_other_owner_cannot_register(
        self, client: AsyncClient, other_owner_headers: dict, test_project
    ):
        response = await client.post(
            servers_url(test_project),
            json={"name": "jira", "baseUrl": JIRA_URL},
            headers=other_owner_headers,
        )
        assert response.status_code == 404


# =============================================================================
# LIST / GET
# =============================================================================


class TestReadServers:
    """Tests for listing and fetching servers."""

    async def test_list_in_registration_order(
        self, client: AsyncClient, owner_headers: dict, test_project, kb_server, github_server
    ):
        response = await client.get(servers_url(test_project), headers=owner_headers)

        assert response.status_code == 200
        data = response.json()
        assert [s["name"] for s in data["data"]] == ["kb", "github"]
        assert data["pagination"]["total"] == 2

    async def test_get_server(
        self, client: AsyncClient, owner_headers: dict, test_project, kb_server
    ):
        response = await client.get(
            f"{servers_url(test_project)}/{kb_server.id}", headers=owner_headers
        )
        assert response.status_code == 200
        assert response.json()["toolNames"] == ["search", "summarize"]

    async def test_get_unknown_server(
        self, client: AsyncClient, owner_headers: dict, test_project
    ):
        response = await client.get(
            f"{servers_url(test_project)}/{uuid.uuid4()}", headers=owner_headers
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SERVER_NOT_FOUND"

    async def test_server_of_other_project_is_not_found(
        self,
        client: AsyncClient,
        other_owner_headers: dict,
        other_project,
        kb_server,
    ):
        """A server id is only visible through its own project."""
        response = await client.get(
            f"{servers_url(other_project)}/{kb_server.id}", headers=other_owner_headers
        )
        assert response.status_code == 404


# =============================================================================
# UPDATE / REFRESH / DELETE
# =============================================================================


class TestUpdateServer:
    """Tests for PUT /projects/{id}/servers/{sid}."""

    async def test_rename_without_handshake(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        response = await client.put(
            f"{servers_url(test_project)}/{kb_server.id}",
            json={"name": "knowledge"},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "knowledge"
        assert response.json()["toolNames"] == ["search", "summarize"]
        assert fake_upstream.requests == []

    async def test_rename_to_taken_name(
        self, client: AsyncClient, owner_headers: dict, test_project, kb_server, github_server
    ):
        response = await client.put(
            f"{servers_url(test_project)}/{kb_server.id}",
            json={"name": "github"},
            headers=owner_headers,
        )
        assert response.status_code == 409

    async def test_url_change_replaces_catalog(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        """
        Given: A registered server
        When: Its base URL changes
        Then: The handshake runs against the new URL and its catalog replaces the old one
        """
        fake_upstream.add_server(JIRA_URL, {"result": ["create_ticket"]})

        response = await client.put(
            f"{servers_url(test_project)}/{kb_server.id}",
            json={"baseUrl": JIRA_URL},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["baseUrl"] == JIRA_URL
        assert response.json()["cachedTools"] == ["create_ticket"]
        assert [str(r.url) for r in fake_upstream.handshakes] == [JIRA_URL]

    async def test_failed_handshake_keeps_record(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        fake_upstream.on(JIRA_URL, lambda request: httpx.Response(403))
        url = f"{servers_url(test_project)}/{kb_server.id}"

        response = await client.put(url, json={"baseUrl": JIRA_URL}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "HANDSHAKE_FORBIDDEN"

        current = await client.get(url, headers=owner_headers)
        assert current.json()["baseUrl"] == KB_SERVER_URL
        assert current.json()["toolNames"] == ["search", "summarize"]

    async def test_null_token_clears_credential(
        self,
        client: AsyncClient,
        owner_headers: dict,
        fake_upstream,
        test_project,
        github_server,
    ):
        """
        Given: A server with a stored token
        When: Updating with authToken null
        Then: The handshake runs without credentials and the token is removed
        """
        response = await client.put(
            f"{servers_url(test_project)}/{github_server.id}",
            json={"authToken": None},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["hasAuthToken"] is False
        [handshake] = fake_upstream.handshakes
        assert "Authorization" not in handshake.headers

    async def test_deactivate(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        response = await client.put(
            f"{servers_url(test_project)}/{kb_server.id}",
            json={"isActive": False},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["isActive"] is False
        assert fake_upstream.requests == []


class TestRefreshAndDelete:
    """Tests for catalog refresh and deletion."""

    async def test_refresh_replaces_catalog(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        fake_upstream.add_server(KB_SERVER_URL, {"tools": [{"name": "search_v2"}]})

        response = await client.post(
            f"{servers_url(test_project)}/{kb_server.id}/refresh", headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["toolNames"] == ["search_v2"]

    async def test_refresh_failure_keeps_catalog(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        fake_upstream.on(KB_SERVER_URL, timeout)
        url = f"{servers_url(test_project)}/{kb_server.id}"

        response = await client.post(f"{url}/refresh", headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "HANDSHAKE_TIMEOUT"
        current = await client.get(url, headers=owner_headers)
        assert current.json()["toolNames"] == ["search", "summarize"]

    async def test_delete(
        self, client: AsyncClient, owner_headers: dict, test_project, kb_server
    ):
        url = f"{servers_url(test_project)}/{kb_server.id}"

        response = await client.delete(url, headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "MCP server deleted"
        assert (await client.get(url, headers=owner_headers)).status_code == 404


# =============================================================================
# REGISTRATION TO GATEWAY
# =============================================================================


class TestRegisteredServerAtGateway:
    """End-to-end: a registered catalog drives gateway resolution."""

    async def test_registered_tool_resolves(
        self,
        client: AsyncClient,
        owner_headers: dict,
        fake_upstream,
        test_project,
        make_proxy_key,
    ):
        """
        Given: A server registered against an upstream listing tool "foo"
        When: A key holder calls {"tool": "foo"}
        Then: The request is forwarded to that server
        """
        foo_url = "http://foo.test/mcp"
        fake_upstream.add_server(foo_url, {"result": {"tools": [{"name": "foo"}]}})
        plain_key, _ = await make_proxy_key(test_project)

        registered = await client.post(
            servers_url(test_project),
            json={"name": "foo-server", "baseUrl": foo_url},
            headers=owner_headers,
        )
        assert registered.json()["cachedTools"] == [{"name": "foo"}]

        response = await client.post(
            "/gateway/api/v1/mcp",
            json={"tool": "foo"},
            headers={"Authorization": f"Bearer {plain_key}"},
        )

        assert response.status_code == 200
        assert [str(r.url) for r in fake_upstream.forwarded] == [foo_url]

    async def test_repeated_refresh_is_stable(
        self, client: AsyncClient, owner_headers: dict, fake_upstream, test_project, kb_server
    ):
        fake_upstream.add_server(KB_SERVER_URL, {"tools": ["search", {"name": "summarize"}]})
        url = f"{servers_url(test_project)}/{kb_server.id}/refresh"

        first = await client.post(url, headers=owner_headers)
        second = await client.post(url, headers=owner_headers)

        assert first.json()["cachedTools"] == second.json()["cachedTools"]
        assert second.json()["cachedTools"] == ["search", {"name": "summarize"}]
