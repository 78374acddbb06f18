"""Repository protocol for notifications."""

from __future__ import annotations

from typing import Protocol

from .models import Notification, NotificationCreateInput, NotificationPage, NotificationQuery


class NotificationRepository(Protocol):
    async def get_by_id(self, notification_id: str) -> Notification | None:
        ...

    async def list_notifications(self, query: NotificationQuery) -> NotificationPage:
        ...

    async def create_notification(self, payload: NotificationCreateInput) -> Notification:
        ...

    async def recipient_exists(self, recipient_id: str) -> bool:
        ...

    async def mark_read(self, notification_id: str) -> Notification:
        ...

    async def mark_all_read(self, recipient_id: str) -> int:
        ...

    async def delete_notification(self, notification_id: str) -> None:
        ...

    async def delete_read(self, recipient_id: str) -> int:
        ...

    async def type_counts(self, recipient_id: str) -> list[tuple[str, bool, int]]:
        ...
