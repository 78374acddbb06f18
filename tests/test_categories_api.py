"""Tests for the category endpoints."""

API = "/api/categories"


async def create_category(client, member, name, **extra):
    return await client.post(API, json={"name": name, **extra}, headers=member.headers)


class TestCreate:
    """Tests for POST /categories."""

    async def test_agent_creates_with_default_color(self, client, agent):
        """Test that staff can create a category and get the default color."""
        response = await create_category(client, agent, "Hardware", description="Laptops and phones")

        assert response.status_code == 201
        created = response.json()["data"]["category"]
        assert created["color"] == "#3B82F6"
        assert created["isActive"] is True
        assert created["createdBy"]["email"] == "agent@example.com"

    async def test_user_cannot_create(self, client, user):
        """Test that plain users are forbidden."""
        response = await create_category(client, user, "Hardware")

        assert response.status_code == 403

    async def test_duplicate_name_ignores_case(self, client, agent, category):
        """Test that names are unique regardless of case."""
        response = await create_category(client, agent, "technical SUPPORT")

        assert response.status_code == 400
        assert response.json()["message"] == "Category with this name already exists"

    async def test_invalid_color(self, client, agent):
        """Test that colors must be hex codes."""
        response = await create_category(client, agent, "Hardware", color="blue")

        assert response.status_code == 422


class TestListAndGet:
    """Tests for reading categories."""

    async def test_lists_active_by_default(self, client, user, agent, category):
        """Test that inactive categories are hidden unless asked for."""
        hidden = (await create_category(client, agent, "Legacy")).json()["data"]["category"]
        await client.put(f"{API}/{hidden['id']}", json={"isActive": False}, headers=agent.headers)

        active = await client.get(API, headers=user.headers)
        inactive = await client.get(API, params={"isActive": "false"}, headers=user.headers)

        assert [item["name"] for item in active.json()["data"]["categories"]] == ["Technical Support"]
        assert [item["name"] for item in inactive.json()["data"]["categories"]] == ["Legacy"]
        assert active.json()["data"]["pagination"]["total"] == 1

    async def test_get_includes_ticket_count(self, client, user, category):
        """Test that a single category reports how many tickets use it."""
        await client.post(
            "/api/tickets",
            data={"title": "VPN", "description": "Cannot connect", "category": category.id},
            headers=user.headers,
        )

        response = await client.get(f"{API}/{category.id}", headers=user.headers)

        assert response.json()["data"]["category"]["ticketCount"] == 1

    async def test_get_unknown(self, client, user, app):
        """Test that an unknown id is 404."""
        response = await client.get(f"{API}/missing", headers=user.headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Category not found"


class TestUpdateAndDelete:
    """Tests for changing and removing categories."""

    async def test_rename(self, client, agent, category):
        """Test that a category can be renamed."""
        response = await client.put(f"{API}/{category.id}", json={"name": "IT Support"}, headers=agent.headers)

        assert response.json()["data"]["category"]["name"] == "IT Support"

    async def test_rename_to_existing(self, client, agent, category):
        """Test that a rename cannot collide with another category."""
        other = (await create_category(client, agent, "Billing")).json()["data"]["category"]

        response = await client.put(f"{API}/{other['id']}", json={"name": "Technical Support"}, headers=agent.headers)

        assert response.status_code == 400

    async def test_delete_requires_admin(self, client, agent, category):
        """Test that only admins delete categories."""
        response = await client.delete(f"{API}/{category.id}", headers=agent.headers)

        assert response.status_code == 403

    async def test_delete_unused(self, client, admin, category):
        """Test that an unused category is removed."""
        response = await client.delete(f"{API}/{category.id}", headers=admin.headers)

        assert response.status_code == 200
        assert (await client.get(f"{API}/{category.id}", headers=admin.headers)).status_code == 404

    async def test_delete_in_use(self, client, user, admin, category):
        """Test that a category with tickets is kept."""
        await client.post(
            "/api/tickets",
            data={"title": "VPN", "description": "Cannot connect", "category": category.id},
            headers=user.headers,
        )

        response = await client.delete(f"{API}/{category.id}", headers=admin.headers)

        assert response.status_code == 400
        assert response.json()["message"].startswith("Cannot delete category. It has 1 associated ticket(s).")


class TestBulkAndStats:
    """Tests for bulk updates and usage statistics."""

    async def test_bulk_deactivate(self, client, admin, category):
        """Test that several categories can be switched off at once."""
        other = (await create_category(client, admin, "Billing")).json()["data"]["category"]

        response = await client.put(
            f"{API}/bulk",
            json={"categoryIds": [category.id, other["id"]], "action": "deactivate"},
            headers=admin.headers,
        )

        assert response.json()["data"] == {"modifiedCount": 2}
        listed = await client.get(API, headers=admin.headers)
        assert listed.json()["data"]["categories"] == []

    async def test_bulk_update_color(self, client, admin, category):
        """Test that a bulk update applies the given fields."""
        await client.put(
            f"{API}/bulk",
            json={"categoryIds": [category.id], "action": "update", "data": {"color": "#10B981"}},
            headers=admin.headers,
        )

        response = await client.get(f"{API}/{category.id}", headers=admin.headers)

        assert response.json()["data"]["category"]["color"] == "#10B981"

    async def test_bulk_errors(self, client, admin, category):
        """Test the messages for missing ids and unknown actions."""
        no_ids = await client.put(f"{API}/bulk", json={"categoryIds": [], "action": "activate"}, headers=admin.headers)
        bad_action = await client.put(
            f"{API}/bulk",
            json={"categoryIds": [category.id], "action": "explode"},
            headers=admin.headers,
        )

        assert no_ids.json()["message"] == "Please provide valid category IDs"
        assert bad_action.json()["message"] == "Invalid action specified"

    async def test_stats(self, client, user, admin, category):
        """Test per category ticket counters."""
        await create_category(client, admin, "Billing")
        created = await client.post(
            "/api/tickets",
            data={"title": "VPN", "description": "Cannot connect", "category": category.id},
            headers=user.headers,
        )
        ticket_id = created.json()["data"]["ticket"]["id"]
        await client.put(f"/api/tickets/{ticket_id}", json={"status": "resolved"}, headers=admin.headers)

        response = await client.get(f"{API}/stats", headers=user.headers)

        data = response.json()["data"]
        assert data["totalCategories"] == 2
        assert data["activeCategories"] == 2
        first = data["categoryStats"][0]
        assert first["name"] == "Technical Support"
        assert (first["ticketCount"], first["openTickets"], first["resolvedTickets"]) == (1, 0, 1)
