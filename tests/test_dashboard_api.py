"""Tests for the dashboard endpoints."""

from .test_tickets_api import open_ticket

API = "/api/dashboard"


async def resolve(client, staff, ticket):
    response = await client.put(
        f"/api/tickets/{ticket['id']}",
        json={"status": "resolved"},
        headers=staff.headers,
    )
    assert response.status_code == 200, response.text


class TestStats:
    """Tests for GET /dashboard/stats."""

    async def test_requires_token(self, client, app):
        """Test that anonymous callers are refused."""
        response = await client.get(f"{API}/stats")

        assert response.status_code == 401

    async def test_staff_overview(self, client, user, other_user, agent, category):
        """Test that staff see counts across every ticket."""
        first = await open_ticket(client, user, category, priority="urgent")
        await open_ticket(client, other_user, category, priority="high")
        third = await open_ticket(client, user, category, priority="urgent")
        await resolve(client, agent, third)

        response = await client.get(f"{API}/stats", headers=agent.headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overview"] == {
            "totalTickets": 3,
            "openTickets": 2,
            "inProgressTickets": 0,
            "resolvedTickets": 1,
            "totalUsers": 2,
            "totalCategories": 1,
            "urgentTickets": 1,
        }
        assert data["distribution"]["byStatus"] == {"open": 2, "resolved": 1}
        assert data["distribution"]["byPriority"] == {"urgent": 2, "high": 1}
        assert [item["ticketId"] for item in data["recentActivity"]][-1] == first["ticketId"]
        assert data["recentActivity"][0]["category"]["name"] == "Technical Support"
        assert sum(item["count"] for item in data["trends"]) == 3

    async def test_user_sees_only_own_tickets(self, client, user, other_user, agent, category):
        """Test that end users get their own counters and no global data."""
        mine = await open_ticket(client, user, category)
        await open_ticket(client, user, category)
        await open_ticket(client, other_user, category)
        await client.put(f"/api/tickets/{mine['id']}", json={"status": "in-progress"}, headers=agent.headers)

        response = await client.get(f"{API}/stats", headers=user.headers)

        data = response.json()["data"]
        assert data["overview"] == {
            "myTickets": 2,
            "myOpenTickets": 1,
            "myInProgressTickets": 1,
            "myResolvedTickets": 0,
        }
        assert data["distribution"] == {"byStatus": {"open": 1, "in-progress": 1}, "byPriority": None}
        assert len(data["recentActivity"]) == 2
        assert data["trends"] is None

    async def test_recent_activity_is_capped(self, client, user, admin, category):
        """Test that only the five newest tickets are listed."""
        for index in range(6):
            await open_ticket(client, user, category, title=f"Issue {index}")

        response = await client.get(f"{API}/stats", headers=admin.headers)

        recent = response.json()["data"]["recentActivity"]
        assert len(recent) == 5
        assert "Issue 0" not in {item["title"] for item in recent}


class TestAnalytics:
    """Tests for GET /dashboard/analytics."""

    async def test_staff_only(self, client, user):
        """Test that end users cannot read analytics."""
        response = await client.get(f"{API}/analytics", headers=user.headers)

        assert response.status_code == 403

    async def test_series_and_categories(self, client, user, agent, category):
        """Test that created and resolved tickets show up in the period."""
        await open_ticket(client, user, category)
        done = await open_ticket(client, user, category)
        await resolve(client, agent, done)

        response = await client.get(f"{API}/analytics", params={"period": 7}, headers=agent.headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["period"] == "7 days"
        assert sum(item["count"] for item in data["ticketsCreated"]) == 2
        assert sum(item["count"] for item in data["ticketsResolved"]) == 1
        assert data["avgResolutionTime"]["count"] == 1
        assert data["ticketsByCategory"] == [
            {"categoryId": category.id, "categoryName": "Technical Support", "count": 2}
        ]

    async def test_rejects_bad_period(self, client, agent):
        """Test that the period must be a positive day count."""
        response = await client.get(f"{API}/analytics", params={"period": 0}, headers=agent.headers)

        assert response.status_code == 422
        assert response.json()["success"] is False


class TestPerformance:
    """Tests for GET /dashboard/performance."""

    async def test_staff_only(self, client, user):
        """Test that end users cannot read performance metrics."""
        response = await client.get(f"{API}/performance", headers=user.headers)

        assert response.status_code == 403

    async def test_metrics(self, client, user, admin, category):
        """Test that fresh tickets count toward the current period."""
        await open_ticket(client, user, category, priority="urgent")
        done = await open_ticket(client, user, category)
        await resolve(client, admin, done)

        response = await client.get(f"{API}/performance", headers=admin.headers)

        metrics = response.json()["data"]["metrics"]
        assert metrics["totalTickets"] == {"current": 2, "previous": 0, "change": 100.0}
        assert metrics["resolvedTickets"]["current"] == 1
        assert metrics["urgentTickets"]["current"] == 1
        assert metrics["resolutionRate"] == {"current": 50.0, "previous": 0.0}
