"""Ticket use cases."""

from __future__ import annotations

import calendar
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.infrastructure.database.repositories.ticket_repository import SqlTicketRepository
from quickdesk.modules.accounts.models import ROLE_AGENT, ROLE_USER, Account
from quickdesk.modules.notifications.models import (
    TYPE_TICKET_ASSIGNED,
    TYPE_TICKET_CREATED,
    TYPE_TICKET_RESOLVED,
    TYPE_TICKET_UPDATED,
)
from quickdesk.modules.notifications.service import NotificationService
from quickdesk.modules.uploads.models import StoredFile
from quickdesk.modules.uploads.service import UploadService

from .exceptions import (
    InvalidAssigneeError,
    InvalidCategoryError,
    TicketAccessDeniedError,
    TicketNotFoundError,
    TicketNotRatableError,
)
from .models import (
    RATABLE_STATUSES,
    STATUS_CLOSED,
    STATUS_OPEN,
    STATUS_RESOLVED,
    AttachmentInput,
    Comment,
    MonthlyCount,
    ResponseTime,
    SatisfactionRating,
    Ticket,
    TicketCreateInput,
    TicketPage,
    TicketQuery,
    TicketStats,
    TicketTimes,
    TicketUpdateInput,
    format_ticket_id,
)
from .repository import TicketRepository

logger = logging.getLogger(__name__)

STATS_MONTHS = 6


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; every stored value is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def months_ago(now: datetime, months: int) -> datetime:
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def summarize(rows: Sequence[TicketTimes], *, now: datetime | None = None) -> TicketStats:
    """Fold ticket status/timestamp rows into the statistics payload."""
    now = now or datetime.now(timezone.utc)
    since = months_ago(now, STATS_MONTHS)

    status_stats = Counter(row.status for row in rows)
    priority_stats = Counter(row.priority for row in rows)

    monthly = Counter()
    hours: list[float] = []
    for row in rows:
        created = as_utc(row.created_at)
        if created >= since:
            monthly[(created.year, created.month)] += 1
        if row.status == STATUS_RESOLVED and row.resolved_at is not None:
            hours.append((as_utc(row.resolved_at) - created).total_seconds() / 3600)

    response_time = ResponseTime()
    if hours:
        response_time = ResponseTime(
            avg_response_time=sum(hours) / len(hours),
            min_response_time=min(hours),
            max_response_time=max(hours),
        )

    return TicketStats(
        total_tickets=len(rows),
        open_tickets=status_stats.get(STATUS_OPEN, 0),
        resolved_tickets=status_stats.get(STATUS_RESOLVED, 0),
        status_stats=dict(status_stats),
        priority_stats=dict(priority_stats),
        monthly_stats=[
            MonthlyCount(year=year, month=month, count=count)
            for (year, month), count in sorted(monthly.items())
        ],
        response_time=response_time,
    )


class TicketService:
    """Ticket lifecycle with role based visibility rules.

    Attachments are written through the upload service and removed again when
    the ticket cannot be created or is deleted.
    """

    def __init__(
        self,
        repository: TicketRepository,
        *,
        notifications: NotificationService | None = None,
        uploads: UploadService | None = None,
        max_attachments: int = 5,
    ) -> None:
        self._repository = repository
        self._notifications = notifications
        self._uploads = uploads
        self._max_attachments = max_attachments

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        *,
        uploads: UploadService | None = None,
        max_attachments: int = 5,
    ) -> "TicketService":
        return cls(
            SqlTicketRepository(session),
            notifications=NotificationService.with_session(session),
            uploads=uploads,
            max_attachments=max_attachments,
        )

    async def list_tickets(self, query: TicketQuery, actor: Account, *, my_tickets: bool = False) -> TicketPage:
        if actor.role == ROLE_USER:
            query.created_by_id = actor.id
        if my_tickets and actor.is_staff():
            query.assigned_to_id = actor.id
        query.start_date = as_utc(query.start_date)
        query.end_date = as_utc(query.end_date)
        return await self._repository.list_tickets(query)

    async def get_ticket(self, ticket_id: str, actor: Account) -> Ticket:
        ticket = await self._require(ticket_id)
        if actor.role == ROLE_USER:
            if ticket.created_by.id != actor.id:
                raise TicketAccessDeniedError("Access denied. You can only view your own tickets.")
            ticket.comments = [comment for comment in ticket.comments if not comment.is_internal]
        return ticket

    async def create_ticket(
        self,
        payload: TicketCreateInput,
        actor: Account,
        files: Sequence[UploadFile] | None = None,
    ) -> Ticket:
        if not await self._repository.category_exists(payload.category_id):
            raise InvalidCategoryError(payload.category_id)

        stored: list[StoredFile] = []
        if files:
            if self._uploads is None:
                raise RuntimeError("Ticket attachments need an upload service")
            stored = await self._uploads.store_multiple(files, max_files=self._max_attachments)

        try:
            number = await self._repository.next_number()
            ticket = await self._repository.create_ticket(
                number=number,
                ticket_id=format_ticket_id(number),
                title=payload.title.strip(),
                description=payload.description.strip(),
                priority=payload.priority,
                category_id=payload.category_id,
                created_by_id=actor.id,
                tags=payload.tags,
                due_date=payload.due_date,
                attachments=[
                    AttachmentInput(
                        filename=item.filename,
                        original_name=item.original_name,
                        path=str(item.path),
                        size=item.size,
                        mime_type=item.mimetype,
                    )
                    for item in stored
                ],
            )
        except Exception:
            await self.discard_files(item.filename for item in stored)
            raise

        logger.info("Ticket %s created by %s", ticket.ticket_id, actor.email)
        if self._notifications is not None:
            staff = [staff_id for staff_id in await self._repository.list_staff_ids() if staff_id != actor.id]
            await self._notifications.notify_ticket(ticket, TYPE_TICKET_CREATED, staff)
        return ticket

    async def update_ticket(self, ticket_id: str, payload: TicketUpdateInput, actor: Account) -> Ticket:
        ticket = await self._require(ticket_id)

        is_owner = ticket.created_by.id == actor.id
        is_assigned = ticket.assigned_to is not None and ticket.assigned_to.id == actor.id
        if not (is_owner or is_assigned or actor.is_staff()):
            raise TicketAccessDeniedError(
                "Access denied. You can only update your own tickets or assigned tickets."
            )

        values: dict[str, Any] = {}
        if payload.title:
            values["title"] = payload.title.strip()
        if payload.description:
            values["description"] = payload.description.strip()
        if payload.priority:
            values["priority"] = payload.priority
        if payload.tags is not None:
            values["tags"] = payload.tags

        assignee_changed = False
        if actor.role == ROLE_USER and is_owner:
            if ticket.status != STATUS_OPEN:
                raise TicketAccessDeniedError("You can only edit open tickets.")
        else:
            if payload.status:
                values["status"] = payload.status
            if payload.due_date is not None:
                values["due_date"] = payload.due_date
            if payload.resolution:
                values["resolution"] = payload.resolution
            current_assignee = ticket.assigned_to.id if ticket.assigned_to else None
            if payload.assigned_to_id and payload.assigned_to_id != current_assignee:
                if not await self._repository.is_active_staff(payload.assigned_to_id):
                    raise InvalidAssigneeError(payload.assigned_to_id)
                values["assigned_to_id"] = payload.assigned_to_id
                assignee_changed = True

        new_status = values.get("status", ticket.status)
        now = datetime.now(timezone.utc)
        if new_status == STATUS_RESOLVED and ticket.resolved_at is None:
            values["resolved_at"] = now
        elif new_status == STATUS_CLOSED and ticket.closed_at is None:
            values["closed_at"] = now

        if not values:
            return ticket
        updated = await self._repository.update_ticket(ticket_id, **values)

        if self._notifications is not None:
            if new_status != ticket.status:
                notification_type = TYPE_TICKET_RESOLVED if new_status == STATUS_RESOLVED else TYPE_TICKET_UPDATED
                await self._notifications.notify_participants(updated, notification_type, exclude_id=actor.id)
            if assignee_changed and updated.assigned_to is not None and updated.assigned_to.id != actor.id:
                await self._notifications.notify_ticket(updated, TYPE_TICKET_ASSIGNED, [updated.assigned_to.id])
        return updated

    async def delete_ticket(self, ticket_id: str) -> list[str]:
        """Delete the ticket row and return its attachment names.

        The files stay on disk; callers remove them with ``discard_files`` once
        the deletion is committed.
        """
        ticket = await self._require(ticket_id)
        await self._repository.delete_ticket(ticket_id)
        logger.info("Ticket %s deleted", ticket.ticket_id)
        return [attachment.filename for attachment in ticket.attachments]

    async def add_comment(self, ticket_id: str, actor: Account, content: str, *, is_internal: bool = False) -> Comment:
        ticket = await self._require(ticket_id)
        is_owner = ticket.created_by.id == actor.id
        is_assigned = ticket.assigned_to is not None and ticket.assigned_to.id == actor.id
        if not (is_owner or is_assigned or actor.is_staff()):
            raise TicketAccessDeniedError(
                "Access denied. You can only comment on your own tickets or assigned tickets."
            )
        return await self._repository.add_comment(
            ticket_id,
            author_id=actor.id,
            content=content.strip(),
            is_internal=bool(is_internal and actor.is_staff()),
        )

    async def rate_ticket(self, ticket_id: str, actor: Account, rating: int, feedback: str | None = None) -> SatisfactionRating:
        ticket = await self._require(ticket_id)
        if ticket.created_by.id != actor.id:
            raise TicketAccessDeniedError("Only the ticket creator can rate the ticket")
        if ticket.status not in RATABLE_STATUSES:
            raise TicketNotRatableError(ticket.status)

        updated = await self._repository.update_ticket(
            ticket_id,
            rating=rating,
            rating_feedback=feedback or "",
            rated_at=datetime.now(timezone.utc),
        )
        assert updated.satisfaction_rating is not None
        return updated.satisfaction_rating

    async def stats(self, actor: Account, *, only_assigned: bool = False) -> TicketStats:
        created_by_id = actor.id if actor.role == ROLE_USER else None
        assigned_to_id = actor.id if actor.role == ROLE_AGENT and only_assigned else None
        rows = await self._repository.ticket_times(created_by_id=created_by_id, assigned_to_id=assigned_to_id)
        return summarize(rows)

    async def _require(self, ticket_id: str) -> Ticket:
        ticket = await self._repository.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    async def discard_files(self, filenames: Iterable[str]) -> None:
        if self._uploads is None:
            return
        for filename in filenames:
            await self._uploads.discard(filename)
