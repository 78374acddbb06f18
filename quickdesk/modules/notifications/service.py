"""Notification use cases and ticket notification helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.infrastructure.database.repositories.notification_repository import (
    SqlNotificationRepository,
)

from .exceptions import (
    InvalidRecipientError,
    NotificationAccessDeniedError,
    NotificationNotFoundError,
)
from .models import (
    TYPE_TICKET_ASSIGNED,
    TYPE_TICKET_CREATED,
    TYPE_TICKET_RESOLVED,
    TYPE_TICKET_UPDATED,
    Notification,
    NotificationCreateInput,
    NotificationPage,
    NotificationQuery,
    NotificationStats,
)
from .repository import NotificationRepository

if TYPE_CHECKING:
    from quickdesk.modules.tickets.models import Ticket

logger = logging.getLogger(__name__)


def _ticket_message(ticket: "Ticket", notification_type: str) -> tuple[str, str]:
    if notification_type == TYPE_TICKET_CREATED:
        return (
            f"New Ticket Created - {ticket.ticket_id}",
            f'A new ticket "{ticket.title}" has been created with {ticket.priority} priority.',
        )
    if notification_type == TYPE_TICKET_ASSIGNED:
        return (
            f"Ticket Assigned - {ticket.ticket_id}",
            f'You have been assigned to ticket "{ticket.title}".',
        )
    if notification_type == TYPE_TICKET_UPDATED:
        return (
            f"Ticket Updated - {ticket.ticket_id}",
            f'Ticket "{ticket.title}" has been updated. Status: {ticket.status}',
        )
    if notification_type == TYPE_TICKET_RESOLVED:
        return (
            f"Ticket Resolved - {ticket.ticket_id}",
            f'Great news! Your ticket "{ticket.title}" has been resolved.',
        )
    return (
        f"Ticket Notification - {ticket.ticket_id}",
        f'There\'s an update on your ticket "{ticket.title}".',
    )


class NotificationService:
    def __init__(self, repository: NotificationRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "NotificationService":
        return cls(SqlNotificationRepository(session))

    async def list_notifications(self, query: NotificationQuery) -> NotificationPage:
        return await self._repository.list_notifications(query)

    async def create_notification(self, payload: NotificationCreateInput) -> Notification:
        if not await self._repository.recipient_exists(payload.recipient_id):
            raise InvalidRecipientError(payload.recipient_id)
        notification = await self._repository.create_notification(payload)
        logger.debug("Notification %s sent to %s", notification.type, notification.recipient_id)
        return notification

    async def mark_read(self, notification_id: str, *, recipient_id: str) -> Notification:
        await self._require_owned(notification_id, recipient_id)
        return await self._repository.mark_read(notification_id)

    async def mark_all_read(self, recipient_id: str) -> int:
        return await self._repository.mark_all_read(recipient_id)

    async def delete_notification(self, notification_id: str, *, recipient_id: str) -> None:
        await self._require_owned(notification_id, recipient_id)
        await self._repository.delete_notification(notification_id)

    async def clear_read(self, recipient_id: str) -> int:
        return await self._repository.delete_read(recipient_id)

    async def stats(self, recipient_id: str) -> NotificationStats:
        stats = NotificationStats()
        for notification_type, is_read, count in await self._repository.type_counts(recipient_id):
            entry = stats.type_stats.setdefault(notification_type, {"total": 0, "unread": 0})
            entry["total"] += count
            stats.total += count
            if is_read:
                stats.read += count
            else:
                entry["unread"] += count
                stats.unread += count
        return stats

    async def notify_ticket(
        self,
        ticket: "Ticket",
        notification_type: str,
        recipient_ids: Iterable[str],
    ) -> list[Notification]:
        """Send one ticket notification per distinct recipient."""
        title, message = _ticket_message(ticket, notification_type)
        sent: list[Notification] = []
        seen: set[str] = set()
        for recipient_id in recipient_ids:
            if recipient_id in seen:
                continue
            seen.add(recipient_id)
            sent.append(
                await self._repository.create_notification(
                    NotificationCreateInput(
                        recipient_id=recipient_id,
                        title=title,
                        message=message,
                        type=notification_type,
                        priority="urgent" if ticket.priority == "urgent" else "medium",
                        related_ticket_id=ticket.id,
                        action_url=f"/tickets/{ticket.id}",
                        metadata={
                            "ticketId": ticket.ticket_id,
                            "ticketTitle": ticket.title,
                            "ticketStatus": ticket.status,
                            "ticketPriority": ticket.priority,
                        },
                    )
                )
            )
        if sent:
            logger.info("Sent %d %s notifications for %s", len(sent), notification_type, ticket.ticket_id)
        return sent

    async def notify_participants(
        self,
        ticket: "Ticket",
        notification_type: str,
        *,
        exclude_id: str | None = None,
    ) -> list[Notification]:
        """Notify the ticket creator and assignee, skipping the acting user."""
        recipients = [ticket.created_by.id]
        if ticket.assigned_to is not None:
            recipients.append(ticket.assigned_to.id)
        return await self.notify_ticket(
            ticket,
            notification_type,
            [recipient for recipient in recipients if recipient != exclude_id],
        )

    async def _require_owned(self, notification_id: str, recipient_id: str) -> Notification:
        notification = await self._repository.get_by_id(notification_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        if notification.recipient_id != recipient_id:
            raise NotificationAccessDeniedError(notification_id)
        return notification
