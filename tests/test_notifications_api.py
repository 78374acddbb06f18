"""Tests for the notification endpoints."""

API = "/api/notifications"


async def send(client, admin, recipient, **fields):
    payload = {"recipient": recipient.id, "title": "Maintenance", "message": "Downtime tonight", **fields}
    response = await client.post(API, json=payload, headers=admin.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["notification"]


class TestCreate:
    """Tests for POST /notifications."""

    async def test_admin_sends(self, client, user, admin):
        """Test that admins can notify a user with metadata."""
        created = await send(client, admin, user, type="announcement", metadata={"window": "22:00"})

        assert created["recipientId"] == user.id
        assert created["type"] == "announcement"
        assert created["isRead"] is False
        assert created["metadata"] == {"window": "22:00"}

    async def test_unknown_recipient(self, client, admin):
        """Test that the recipient must exist."""
        response = await client.post(
            API,
            json={"recipient": "missing", "title": "t", "message": "m"},
            headers=admin.headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Recipient not found"

    async def test_agents_cannot_send(self, client, user, agent):
        """Test that sending is admin only."""
        response = await client.post(
            API,
            json={"recipient": user.id, "title": "t", "message": "m"},
            headers=agent.headers,
        )

        assert response.status_code == 403


class TestList:
    """Tests for GET /notifications."""

    async def test_only_own_with_unread_count(self, client, user, other_user, admin):
        """Test that each user sees only their notifications."""
        await send(client, admin, user)
        await send(client, admin, user, type="announcement")
        await send(client, admin, other_user)

        response = await client.get(API, headers=user.headers)

        data = response.json()["data"]
        assert len(data["notifications"]) == 2
        assert data["unreadCount"] == 2
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 1,
            "totalNotifications": 2,
            "hasNextPage": False,
            "hasPrevPage": False,
        }

    async def test_filters_and_paging(self, client, user, admin):
        """Test type filter and page flags."""
        for _ in range(3):
            await send(client, admin, user)
        await send(client, admin, user, type="announcement")

        by_type = await client.get(API, params={"type": "announcement"}, headers=user.headers)
        second_page = await client.get(API, params={"page": 2, "limit": 3}, headers=user.headers)

        assert len(by_type.json()["data"]["notifications"]) == 1
        pagination = second_page.json()["data"]["pagination"]
        assert len(second_page.json()["data"]["notifications"]) == 1
        assert pagination["hasPrevPage"] is True
        assert pagination["hasNextPage"] is False


class TestReadState:
    """Tests for marking and clearing notifications."""

    async def test_mark_one_read(self, client, user, admin):
        """Test that a single notification can be marked read."""
        created = await send(client, admin, user)

        response = await client.put(f"{API}/{created['id']}/read", headers=user.headers)

        assert response.json()["data"]["notification"]["isRead"] is True
        unread = await client.get(API, params={"isRead": "false"}, headers=user.headers)
        assert unread.json()["data"]["notifications"] == []

    async def test_cannot_touch_others(self, client, user, other_user, admin):
        """Test that another user's notification is off limits."""
        created = await send(client, admin, other_user)

        mark = await client.put(f"{API}/{created['id']}/read", headers=user.headers)
        remove = await client.delete(f"{API}/{created['id']}", headers=user.headers)

        assert mark.status_code == 403
        assert remove.status_code == 403

    async def test_missing(self, client, user):
        """Test that unknown ids are 404."""
        response = await client.put(f"{API}/missing/read", headers=user.headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Notification not found"

    async def test_mark_all_then_clear(self, client, user, other_user, admin):
        """Test bulk read and clearing only touch the caller's notifications."""
        await send(client, admin, user)
        await send(client, admin, user)
        await send(client, admin, other_user)

        marked = await client.put(f"{API}/mark-all-read", headers=user.headers)
        cleared = await client.delete(f"{API}/clear-read", headers=user.headers)

        assert marked.json()["data"] == {"modifiedCount": 2}
        assert cleared.json()["data"] == {"deletedCount": 2}
        assert (await client.get(API, headers=user.headers)).json()["data"]["notifications"] == []
        assert len((await client.get(API, headers=other_user.headers)).json()["data"]["notifications"]) == 1

    async def test_delete(self, client, user, admin):
        """Test that the recipient can delete a notification."""
        created = await send(client, admin, user)

        response = await client.delete(f"{API}/{created['id']}", headers=user.headers)

        assert response.json()["message"] == "Notification deleted successfully"


class TestStats:
    """Tests for GET /notifications/stats."""

    async def test_counts_by_type(self, client, user, admin):
        """Test totals and per type breakdown."""
        first = await send(client, admin, user)
        await send(client, admin, user)
        await send(client, admin, user, type="announcement")
        await client.put(f"{API}/{first['id']}/read", headers=user.headers)

        response = await client.get(f"{API}/stats", headers=user.headers)

        assert response.json()["data"] == {
            "total": 3,
            "unread": 2,
            "read": 1,
            "typeStats": {
                "system": {"total": 2, "unread": 1},
                "announcement": {"total": 1, "unread": 1},
            },
        }
