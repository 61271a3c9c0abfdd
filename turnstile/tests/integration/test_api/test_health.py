"""
Health and service-level behaviour tests.
"""

from httpx import AsyncClient

from app import __version__


class TestHealth:
    """Tests for the health endpoints and shared middleware."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "turnstile"
        assert data["version"] == __version__

    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "req-abc"})
        assert response.headers["X-Request-ID"] == "req-abc"

    async def test_request_id_is_generated(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.headers["X-Request-ID"].startswith("req-")

    async def test_unknown_route_uses_error_shape(self, client: AsyncClient):
        response = await client.get("/control-plane/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_detailed_health_reports_components(self, client: AsyncClient, monkeypatch):
        """
        Given: A reachable database
        When: GET /health/detailed
        Then: Every component is healthy
        """
        async def healthy() -> bool:
            return True

        monkeypatch.setattr("app.main.check_db_health", healthy)

        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert set(data["components"]) == {"database", "gateway", "handshake"}

    async def test_detailed_health_degrades_without_database(
        self, client: AsyncClient, monkeypatch
    ):
        """
        Given: The database probe fails
        When: GET /health/detailed
        Then: The service reports degraded with an unhealthy database
        """
        async def unhealthy() -> bool:
            return False

        monkeypatch.setattr("app.main.check_db_health", unhealthy)

        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["database"]["status"] == "unhealthy"
