"""Tests for the service level endpoints."""


class TestService:
    """Tests for health and index routes."""

    async def test_health(self, client):
        """Test that the health check reports the environment."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["environment"] == "test"

    async def test_index_lists_endpoints(self, client):
        """Test that the API index points at every router."""
        response = await client.get("/api")

        endpoints = response.json()["data"]["endpoints"]
        assert endpoints["upload"] == "/api/upload"
        assert set(endpoints) == {"auth", "tickets", "users", "categories", "notifications", "upload", "dashboard"}

    async def test_unknown_route_uses_envelope(self, client):
        """Test that framework 404s are wrapped too."""
        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found"}
