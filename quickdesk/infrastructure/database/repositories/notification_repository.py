"""SQLAlchemy implementation of the notification repository."""

from __future__ import annotations

import json

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.db.models import Notification as NotificationModel
from quickdesk.db.models import User as UserModel
from quickdesk.modules.notifications.exceptions import NotificationNotFoundError
from quickdesk.modules.notifications.models import (
    Notification,
    NotificationCreateInput,
    NotificationPage,
    NotificationQuery,
    TicketRef,
)


class SqlNotificationRepository:
    """Notification repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, notification_id: str) -> Notification | None:
        return self._to_domain(await self._get_model(notification_id))

    async def list_notifications(self, query: NotificationQuery) -> NotificationPage:
        stmt = select(NotificationModel).where(NotificationModel.recipient_id == query.recipient_id)
        if query.type:
            stmt = stmt.where(NotificationModel.type == query.type)
        if query.is_read is not None:
            stmt = stmt.where(NotificationModel.is_read == query.is_read)

        total = await self._session.scalar(select(func.count()).select_from(stmt.subquery()))
        unread = await self._session.scalar(
            select(func.count(NotificationModel.id)).where(
                NotificationModel.recipient_id == query.recipient_id,
                NotificationModel.is_read.is_(False),
            )
        )
        stmt = stmt.order_by(NotificationModel.created_at.desc()).offset(query.skip).limit(query.limit)
        result = await self._session.execute(stmt)
        return NotificationPage(
            total=int(total or 0),
            unread_count=int(unread or 0),
            notifications=[self._to_domain(model) for model in result.scalars().all()],
        )

    async def create_notification(self, payload: NotificationCreateInput) -> Notification:
        model = NotificationModel(
            recipient_id=payload.recipient_id,
            title=payload.title,
            message=payload.message,
            type=payload.type,
            priority=payload.priority,
            related_ticket_id=payload.related_ticket_id,
            action_url=payload.action_url,
            meta=json.dumps(payload.metadata or {}),
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(await self._get_model(model.id, refresh=True))

    async def recipient_exists(self, recipient_id: str) -> bool:
        stmt = select(func.count(UserModel.id)).where(UserModel.id == recipient_id)
        return bool(await self._session.scalar(stmt))

    async def mark_read(self, notification_id: str) -> Notification:
        model = await self._get_model(notification_id)
        if model is None:
            raise NotificationNotFoundError(notification_id)
        model.is_read = True
        await self._session.flush()
        return self._to_domain(model)

    async def mark_all_read(self, recipient_id: str) -> int:
        stmt = (
            update(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id, NotificationModel.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def delete_notification(self, notification_id: str) -> None:
        await self._session.execute(delete(NotificationModel).where(NotificationModel.id == notification_id))

    async def delete_read(self, recipient_id: str) -> int:
        stmt = (
            delete(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id, NotificationModel.is_read.is_(True))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def type_counts(self, recipient_id: str) -> list[tuple[str, bool, int]]:
        stmt = (
            select(NotificationModel.type, NotificationModel.is_read, func.count(NotificationModel.id))
            .where(NotificationModel.recipient_id == recipient_id)
            .group_by(NotificationModel.type, NotificationModel.is_read)
        )
        result = await self._session.execute(stmt)
        return [(row[0], bool(row[1]), int(row[2])) for row in result.all()]

    async def _get_model(self, notification_id: str, *, refresh: bool = False) -> NotificationModel | None:
        stmt = select(NotificationModel).where(NotificationModel.id == notification_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: NotificationModel | None) -> Notification | None:
        if model is None:
            return None
        ticket = model.related_ticket
        return Notification(
            id=str(model.id),
            recipient_id=str(model.recipient_id),
            title=model.title,
            message=model.message,
            type=model.type,
            priority=model.priority,
            is_read=bool(model.is_read),
            related_ticket=(
                TicketRef(
                    id=str(ticket.id),
                    ticket_id=ticket.ticket_id,
                    title=ticket.title,
                    status=ticket.status,
                    priority=ticket.priority,
                )
                if ticket is not None
                else None
            ),
            action_url=model.action_url,
            metadata=json.loads(model.meta) if model.meta else {},
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
