"""Tests for the user management endpoints."""

from .conftest import create_member

API = "/api/users"


class TestAccess:
    """Tests for role checks."""

    async def test_list_requires_admin(self, client, agent):
        """Test that agents cannot list users."""
        response = await client.get(API, headers=agent.headers)

        assert response.status_code == 403
        assert response.json()["message"] == "User role agent is not authorized to access this route"

    async def test_agents_visible_to_everyone(self, client, user, agent, admin):
        """Test that any user can see the active staff list."""
        await create_member("Away Agent", "away@example.com", "agent", is_active=False)

        response = await client.get(f"{API}/agents", headers=user.headers)

        emails = {item["email"] for item in response.json()["data"]["agents"]}
        assert emails == {"agent@example.com", "admin@example.com"}


class TestListAndGet:
    """Tests for listing and fetching users."""

    async def test_filters_and_pagination(self, client, user, other_user, agent, admin):
        """Test role filter, search and the pagination block."""
        by_role = await client.get(API, params={"role": "user", "limit": 1}, headers=admin.headers)
        by_search = await client.get(API, params={"search": "AGENT"}, headers=admin.headers)

        data = by_role.json()["data"]
        assert len(data["users"]) == 1
        assert data["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
        assert [item["email"] for item in by_search.json()["data"]["users"]] == ["agent@example.com"]

    async def test_get_unknown(self, client, admin):
        """Test that an unknown id is 404."""
        response = await client.get(f"{API}/missing", headers=admin.headers)

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    async def test_stats(self, client, user, agent, admin):
        """Test per role counters."""
        await create_member("Dormant", "dormant@example.com", "user", is_active=False)

        response = await client.get(f"{API}/stats", headers=admin.headers)

        assert response.json()["data"] == {
            "totalUsers": 4,
            "activeUsers": 3,
            "inactiveUsers": 1,
            "roleStats": {"user": 2, "agent": 1, "admin": 1},
        }


class TestCreateUpdateDelete:
    """Tests for admin changes to accounts."""

    async def test_create_agent(self, client, admin):
        """Test that admins can create staff accounts."""
        response = await client.post(
            API,
            json={"name": "New Agent", "email": "new@example.com", "password": "secret123", "role": "agent"},
            headers=admin.headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["user"]["role"] == "agent"

    async def test_update_role_and_status(self, client, user, admin):
        """Test that role and active flag can be changed."""
        response = await client.put(
            f"{API}/{user.id}",
            json={"role": "agent", "isActive": False},
            headers=admin.headers,
        )

        updated = response.json()["data"]["user"]
        assert updated["role"] == "agent"
        assert updated["isActive"] is False

    async def test_deactivated_token_stops_working(self, client, user, admin):
        """Test that deactivation locks out existing tokens."""
        await client.put(f"{API}/{user.id}", json={"isActive": False}, headers=admin.headers)

        response = await client.get("/api/auth/me", headers=user.headers)

        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated"

    async def test_update_to_taken_email(self, client, user, other_user, admin):
        """Test that emails stay unique."""
        response = await client.put(
            f"{API}/{user.id}",
            json={"email": "other@example.com"},
            headers=admin.headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists"

    async def test_delete(self, client, user, admin):
        """Test that a user without tickets can be deleted."""
        response = await client.delete(f"{API}/{user.id}", headers=admin.headers)

        assert response.status_code == 200
        assert (await client.get(f"{API}/{user.id}", headers=admin.headers)).status_code == 404

    async def test_cannot_delete_self(self, client, admin):
        """Test that admins cannot remove their own account."""
        response = await client.delete(f"{API}/{admin.id}", headers=admin.headers)

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot delete your own account"

    async def test_cannot_delete_ticket_owner(self, client, user, admin, category):
        """Test that users with tickets are kept."""
        await client.post(
            "/api/tickets",
            data={"title": "Printer", "description": "Jammed", "category": category.id},
            headers=user.headers,
        )

        response = await client.delete(f"{API}/{user.id}", headers=admin.headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete user. They have created 1 ticket(s)."
