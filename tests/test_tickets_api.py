"""Tests for the ticket endpoints."""

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

API = "/api/tickets"


async def open_ticket(client, member, category, *, files=None, **fields):
    data = {
        "title": "Printer jammed",
        "description": "Paper stuck in tray 2",
        "category": category.id,
        **fields,
    }
    response = await client.post(API, data=data, files=files, headers=member.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["ticket"]


class TestCreate:
    """Tests for POST /tickets."""

    async def test_sequential_ticket_ids(self, client, user, category):
        """Test that tickets get sequential human readable ids."""
        first = await open_ticket(client, user, category)
        second = await open_ticket(client, user, category, priority="high", tags="printer, floor-2")

        assert first["ticketId"] == "TKT-000001"
        assert second["ticketId"] == "TKT-000002"
        assert second["priority"] == "high"
        assert second["tags"] == ["printer", "floor-2"]
        assert first["status"] == "open"
        assert first["createdBy"]["id"] == user.id
        assert first["category"]["name"] == "Technical Support"

    async def test_unknown_category(self, client, user, app):
        """Test that the category must exist."""
        response = await client.post(
            API,
            data={"title": "x", "description": "y", "category": "missing"},
            headers=user.headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid category"

    async def test_with_attachments(self, client, user, category, uploads_dir):
        """Test that attachments are stored and linked to the ticket."""
        ticket = await open_ticket(
            client,
            user,
            category,
            files=[
                ("attachments", ("screen.png", b"\x89PNG....", "image/png")),
                ("attachments", ("log.txt", b"error at line 3", "text/plain")),
            ],
        )

        names = [item["originalName"] for item in ticket["attachments"]]
        assert sorted(names) == ["log.txt", "screen.png"]
        for item in ticket["attachments"]:
            assert (uploads_dir / item["filename"]).exists()
            assert item["url"] == f"/uploads/{item['filename']}"

    async def test_too_many_attachments(self, client, user, category, uploads_dir):
        """Test that the attachment limit rejects the ticket and keeps no files."""
        files = [("attachments", (f"{index}.txt", b"x", "text/plain")) for index in range(6)]

        response = await client.post(
            API,
            data={"title": "x", "description": "y", "category": category.id},
            files=files,
            headers=user.headers,
        )

        assert response.status_code == 400
        assert not uploads_dir.exists() or list(uploads_dir.iterdir()) == []

    async def test_staff_is_notified(self, client, user, agent, admin, category):
        """Test that active staff receive a ticket created notification."""
        ticket = await open_ticket(client, user, category, priority="urgent")

        response = await client.get("/api/notifications", headers=agent.headers)

        notifications = response.json()["data"]["notifications"]
        assert len(notifications) == 1
        assert notifications[0]["type"] == "ticket_created"
        assert notifications[0]["priority"] == "urgent"
        assert notifications[0]["title"] == f"New Ticket Created - {ticket['ticketId']}"
        assert notifications[0]["relatedTicket"]["id"] == ticket["id"]
        assert notifications[0]["actionUrl"] == f"/tickets/{ticket['id']}"


class TestVisibility:
    """Tests for who sees which tickets."""

    async def test_users_see_only_their_tickets(self, client, user, other_user, agent, category):
        """Test that listing is scoped to the creator for plain users."""
        await open_ticket(client, user, category)
        await open_ticket(client, other_user, category)

        own = await client.get(API, headers=user.headers)
        staff = await client.get(API, headers=agent.headers)

        assert own.json()["data"]["pagination"]["total"] == 1
        assert staff.json()["data"]["pagination"]["total"] == 2

    async def test_user_cannot_open_foreign_ticket(self, client, user, other_user, category):
        """Test that a user gets 403 on someone else's ticket."""
        ticket = await open_ticket(client, other_user, category)

        response = await client.get(f"{API}/{ticket['id']}", headers=user.headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. You can only view your own tickets."

    async def test_internal_comments_hidden_from_users(self, client, user, agent, category):
        """Test that staff-only comments are not shown to the creator."""
        ticket = await open_ticket(client, user, category)
        await client.post(f"{API}/{ticket['id']}/comments", json={"content": "Public reply"}, headers=agent.headers)
        await client.post(
            f"{API}/{ticket['id']}/comments",
            json={"content": "Check warranty", "isInternal": True},
            headers=agent.headers,
        )

        as_user = await client.get(f"{API}/{ticket['id']}", headers=user.headers)
        as_agent = await client.get(f"{API}/{ticket['id']}", headers=agent.headers)

        assert [item["content"] for item in as_user.json()["data"]["ticket"]["comments"]] == ["Public reply"]
        assert len(as_agent.json()["data"]["ticket"]["comments"]) == 2

    async def test_filters(self, client, user, agent, category):
        """Test status, priority and search filters."""
        await open_ticket(client, user, category, title="VPN down", priority="high")
        await open_ticket(client, user, category, title="Mouse broken", priority="low")

        high = await client.get(API, params={"priority": "high"}, headers=agent.headers)
        search = await client.get(API, params={"search": "mouse"}, headers=agent.headers)
        none_closed = await client.get(API, params={"status": "closed"}, headers=agent.headers)

        assert [item["title"] for item in high.json()["data"]["tickets"]] == ["VPN down"]
        assert [item["title"] for item in search.json()["data"]["tickets"]] == ["Mouse broken"]
        assert none_closed.json()["data"]["tickets"] == []

    async def test_my_tickets_for_agents(self, client, user, agent, admin, category):
        """Test that myTickets narrows staff listings to their assignments."""
        assigned = await open_ticket(client, user, category, title="Assigned")
        await open_ticket(client, user, category, title="Unassigned")
        await client.put(f"{API}/{assigned['id']}", json={"assignedTo": agent.id}, headers=admin.headers)

        response = await client.get(API, params={"myTickets": "true"}, headers=agent.headers)

        assert [item["title"] for item in response.json()["data"]["tickets"]] == ["Assigned"]


class TestUpdate:
    """Tests for PUT /tickets/{id}."""

    async def test_owner_edits_open_ticket(self, client, user, category):
        """Test that the creator can edit an open ticket but not its status."""
        ticket = await open_ticket(client, user, category)

        response = await client.put(
            f"{API}/{ticket['id']}",
            json={"title": "Printer fixed itself?", "status": "closed"},
            headers=user.headers,
        )

        updated = response.json()["data"]["ticket"]
        assert updated["title"] == "Printer fixed itself?"
        assert updated["status"] == "open"

    async def test_owner_cannot_edit_after_progress(self, client, user, agent, category):
        """Test that creators lose edit rights once work starts."""
        ticket = await open_ticket(client, user, category)
        await client.put(f"{API}/{ticket['id']}", json={"status": "in-progress"}, headers=agent.headers)

        response = await client.put(f"{API}/{ticket['id']}", json={"title": "Too late"}, headers=user.headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You can only edit open tickets."

    async def test_stranger_cannot_edit(self, client, user, other_user, category):
        """Test that unrelated users are refused."""
        ticket = await open_ticket(client, user, category)

        response = await client.put(f"{API}/{ticket['id']}", json={"title": "Mine now"}, headers=other_user.headers)

        assert response.status_code == 403

    async def test_resolve_stamps_time_and_notifies_creator(self, client, user, agent, category):
        """Test that resolving records resolvedAt and tells the creator."""
        ticket = await open_ticket(client, user, category)

        response = await client.put(
            f"{API}/{ticket['id']}",
            json={"status": "resolved", "resolution": "Replaced the roller"},
            headers=agent.headers,
        )

        updated = response.json()["data"]["ticket"]
        assert updated["status"] == "resolved"
        assert updated["resolvedAt"] is not None
        assert updated["resolution"] == "Replaced the roller"
        notifications = (await client.get("/api/notifications", headers=user.headers)).json()["data"]
        assert [item["type"] for item in notifications["notifications"]] == ["ticket_resolved"]

    async def test_assign_to_agent(self, client, user, agent, admin, category):
        """Test that assignment sets the assignee and notifies them."""
        ticket = await open_ticket(client, user, category)

        response = await client.put(f"{API}/{ticket['id']}", json={"assignedTo": agent.id}, headers=admin.headers)

        assert response.json()["data"]["ticket"]["assignedTo"]["id"] == agent.id
        stats = (await client.get("/api/notifications/stats", headers=agent.headers)).json()["data"]
        assert stats["typeStats"]["ticket_assigned"] == {"total": 1, "unread": 1}

    async def test_assign_to_plain_user(self, client, user, other_user, admin, category):
        """Test that only active staff can be assigned."""
        ticket = await open_ticket(client, user, category)

        response = await client.put(
            f"{API}/{ticket['id']}",
            json={"assignedTo": other_user.id},
            headers=admin.headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid assignee. User must be an active agent or admin."


class TestDelete:
    """Tests for DELETE /tickets/{id}."""

    async def test_admin_deletes_ticket_and_files(self, client, user, admin, category, uploads_dir):
        """Test that deleting a ticket removes its attachment files."""
        ticket = await open_ticket(
            client,
            user,
            category,
            files=[("attachments", ("log.txt", b"trace", "text/plain"))],
        )
        stored = uploads_dir / ticket["attachments"][0]["filename"]

        response = await client.delete(f"{API}/{ticket['id']}", headers=admin.headers)

        assert response.status_code == 200
        assert not stored.exists()
        assert (await client.get(f"{API}/{ticket['id']}", headers=admin.headers)).status_code == 404

    async def test_failed_commit_keeps_files(self, app, client, user, admin, category, uploads_dir, monkeypatch):
        """Test that attachment files stay when the deletion cannot be committed."""
        ticket = await open_ticket(
            client,
            user,
            category,
            files=[("attachments", ("log.txt", b"trace", "text/plain"))],
        )
        stored = uploads_dir / ticket["attachments"][0]["filename"]

        async def refuse(self):
            raise RuntimeError("database is locked")

        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        with monkeypatch.context() as patch:
            patch.setattr(AsyncSession, "commit", refuse)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as failing:
                response = await failing.delete(f"{API}/{ticket['id']}", headers=admin.headers)

        assert response.status_code == 500
        assert stored.exists()
        assert (await client.get(f"{API}/{ticket['id']}", headers=admin.headers)).status_code == 200

    async def test_notifications_survive_ticket_deletion(self, client, user, agent, admin, category):
        """Test that notifications lose their ticket link instead of breaking."""
        ticket = await open_ticket(client, user, category)

        await client.delete(f"{API}/{ticket['id']}", headers=admin.headers)

        notifications = (await client.get("/api/notifications", headers=agent.headers)).json()["data"]
        assert notifications["notifications"][0]["relatedTicket"] is None

    async def test_agent_cannot_delete(self, client, user, agent, category):
        """Test that deletion is admin only."""
        ticket = await open_ticket(client, user, category)

        response = await client.delete(f"{API}/{ticket['id']}", headers=agent.headers)

        assert response.status_code == 403

    async def test_missing(self, client, admin):
        """Test that deleting an unknown ticket is 404."""
        response = await client.delete(f"{API}/missing", headers=admin.headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Ticket not found"


class TestCommentsAndRating:
    """Tests for comments and satisfaction ratings."""

    async def test_user_comment_is_never_internal(self, client, user, category):
        """Test that only staff can post internal comments."""
        ticket = await open_ticket(client, user, category)

        response = await client.post(
            f"{API}/{ticket['id']}/comments",
            json={"content": "Any news?", "isInternal": True},
            headers=user.headers,
        )

        assert response.status_code == 201
        comment = response.json()["data"]["comment"]
        assert comment["isInternal"] is False
        assert comment["author"]["id"] == user.id

    async def test_stranger_cannot_comment(self, client, user, other_user, category):
        """Test that unrelated users cannot comment."""
        ticket = await open_ticket(client, user, category)

        response = await client.post(f"{API}/{ticket['id']}/comments", json={"content": "Hi"}, headers=other_user.headers)

        assert response.status_code == 403

    async def test_rate_open_ticket(self, client, user, category):
        """Test that open tickets cannot be rated."""
        ticket = await open_ticket(client, user, category)

        response = await client.post(f"{API}/{ticket['id']}/rate", json={"rating": 5}, headers=user.headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Only resolved or closed tickets can be rated"

    async def test_rate_resolved_ticket(self, client, user, agent, category):
        """Test that the creator can rate a resolved ticket."""
        ticket = await open_ticket(client, user, category)
        await client.put(f"{API}/{ticket['id']}", json={"status": "resolved"}, headers=agent.headers)

        response = await client.post(
            f"{API}/{ticket['id']}/rate",
            json={"rating": 4, "feedback": "Quick fix"},
            headers=user.headers,
        )

        rating = response.json()["data"]["rating"]
        assert (rating["rating"], rating["feedback"]) == (4, "Quick fix")
        assert rating["ratedAt"] is not None

    async def test_only_creator_rates(self, client, user, agent, category):
        """Test that staff cannot rate on behalf of the creator."""
        ticket = await open_ticket(client, user, category)
        await client.put(f"{API}/{ticket['id']}", json={"status": "closed"}, headers=agent.headers)

        response = await client.post(f"{API}/{ticket['id']}/rate", json={"rating": 1}, headers=agent.headers)

        assert response.status_code == 403

    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_range(self, client, user, category, rating):
        """Test that ratings outside one to five are invalid."""
        ticket = await open_ticket(client, user, category)

        response = await client.post(f"{API}/{ticket['id']}/rate", json={"rating": rating}, headers=user.headers)

        assert response.status_code == 422


class TestStats:
    """Tests for GET /tickets/stats."""

    async def test_scoped_by_role(self, client, user, other_user, agent, category):
        """Test that users only count their own tickets."""
        await open_ticket(client, user, category, priority="high")
        await open_ticket(client, other_user, category)
        resolved = await open_ticket(client, other_user, category)
        await client.put(f"{API}/{resolved['id']}", json={"status": "resolved"}, headers=agent.headers)

        mine = (await client.get(f"{API}/stats", headers=user.headers)).json()["data"]
        everything = (await client.get(f"{API}/stats", headers=agent.headers)).json()["data"]

        assert mine["totalTickets"] == 1
        assert mine["priorityStats"] == {"high": 1}
        assert everything["totalTickets"] == 3
        assert everything["openTickets"] == 2
        assert everything["resolvedTickets"] == 1
        assert sum(item["count"] for item in everything["monthlyStats"]) == 3

    async def test_only_assigned(self, client, user, agent, admin, category):
        """Test that agents can narrow stats to their own assignments."""
        ticket = await open_ticket(client, user, category)
        await open_ticket(client, user, category)
        await client.put(f"{API}/{ticket['id']}", json={"assignedTo": agent.id}, headers=admin.headers)

        response = await client.get(f"{API}/stats", params={"onlyAssigned": "true"}, headers=agent.headers)

        assert response.json()["data"]["totalTickets"] == 1
