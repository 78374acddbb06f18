"""SQLAlchemy implementation of the ticket repository."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.db.models import Category as CategoryModel
from quickdesk.db.models import Notification as NotificationModel
from quickdesk.db.models import Ticket as TicketModel
from quickdesk.db.models import TicketAttachment as AttachmentModel
from quickdesk.db.models import TicketComment as CommentModel
from quickdesk.db.models import User as UserModel
from quickdesk.modules.accounts.models import STAFF_ROLES
from quickdesk.modules.tickets.exceptions import TicketNotFoundError
from quickdesk.modules.tickets.models import (
    Attachment,
    AttachmentInput,
    CategoryRef,
    Comment,
    SatisfactionRating,
    Ticket,
    TicketPage,
    TicketQuery,
    TicketTimes,
    UserRef,
)


def user_ref(model: UserModel | None, fallback_id: str | None = None) -> UserRef | None:
    if model is None:
        if fallback_id is None:
            return None
        return UserRef(id=fallback_id, name="Deleted user", email="", role="user")
    return UserRef(
        id=str(model.id),
        name=model.name,
        email=model.email,
        role=model.role,
        department=model.department,
    )


class SqlTicketRepository:
    """Ticket repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        return self._to_domain(await self._get_model(ticket_id))

    async def list_tickets(self, query: TicketQuery) -> TicketPage:
        stmt = select(TicketModel)
        if query.created_by_id:
            stmt = stmt.where(TicketModel.created_by_id == query.created_by_id)
        if query.assigned_to_id:
            stmt = stmt.where(TicketModel.assigned_to_id == query.assigned_to_id)
        if query.status:
            stmt = stmt.where(TicketModel.status == query.status)
        if query.priority:
            stmt = stmt.where(TicketModel.priority == query.priority)
        if query.category_id:
            stmt = stmt.where(TicketModel.category_id == query.category_id)
        if query.search:
            pattern = f"%{query.search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(TicketModel.title).like(pattern),
                    func.lower(TicketModel.description).like(pattern),
                    func.lower(TicketModel.ticket_id).like(pattern),
                )
            )
        if query.start_date is not None:
            stmt = stmt.where(TicketModel.created_at >= query.start_date)
        if query.end_date is not None:
            stmt = stmt.where(TicketModel.created_at <= query.end_date)

        total = await self._session.scalar(select(func.count()).select_from(stmt.subquery()))
        stmt = stmt.order_by(TicketModel.created_at.desc()).offset(query.skip).limit(query.limit)
        result = await self._session.execute(stmt)
        tickets = [self._to_domain(model) for model in result.scalars().all()]
        return TicketPage(total=int(total or 0), tickets=tickets)

    async def next_number(self) -> int:
        current = await self._session.scalar(select(func.coalesce(func.max(TicketModel.number), 0)))
        return int(current or 0) + 1

    async def category_exists(self, category_id: str) -> bool:
        stmt = select(func.count(CategoryModel.id)).where(CategoryModel.id == category_id)
        return bool(await self._session.scalar(stmt))

    async def is_active_staff(self, account_id: str) -> bool:
        stmt = select(func.count(UserModel.id)).where(
            UserModel.id == account_id,
            UserModel.role.in_(STAFF_ROLES),
            UserModel.is_active.is_(True),
        )
        return bool(await self._session.scalar(stmt))

    async def list_staff_ids(self) -> list[str]:
        stmt = select(UserModel.id).where(UserModel.role.in_(STAFF_ROLES), UserModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return [str(value) for value in result.scalars().all()]

    async def create_ticket(
        self,
        *,
        number: int,
        ticket_id: str,
        title: str,
        description: str,
        priority: str,
        category_id: str,
        created_by_id: str,
        tags: Sequence[str],
        due_date: datetime | None,
        attachments: Sequence[AttachmentInput],
    ) -> Ticket:
        model = TicketModel(
            number=number,
            ticket_id=ticket_id,
            title=title,
            description=description,
            priority=priority,
            category_id=category_id,
            created_by_id=created_by_id,
            tags=json.dumps(list(tags)),
            due_date=due_date,
            attachments=[
                AttachmentModel(
                    filename=item.filename,
                    original_name=item.original_name,
                    path=item.path,
                    size=item.size,
                    mime_type=item.mime_type,
                )
                for item in attachments
            ],
            comments=[],
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(await self._get_model(model.id, refresh=True))

    async def update_ticket(self, ticket_id: str, **values: Any) -> Ticket:
        model = await self._get_model(ticket_id)
        if model is None:
            raise TicketNotFoundError(ticket_id)
        if "tags" in values:
            values["tags"] = json.dumps(list(values["tags"]))
        for key, value in values.items():
            setattr(model, key, value)
        await self._session.flush()
        return self._to_domain(await self._get_model(ticket_id, refresh=True))

    async def delete_ticket(self, ticket_id: str) -> None:
        model = await self._get_model(ticket_id)
        if model is None:
            raise TicketNotFoundError(ticket_id)
        await self._session.execute(
            update(NotificationModel)
            .where(NotificationModel.related_ticket_id == ticket_id)
            .values(related_ticket_id=None)
            .execution_options(synchronize_session=False)
        )
        await self._session.delete(model)
        await self._session.flush()

    async def add_comment(
        self,
        ticket_id: str,
        *,
        author_id: str,
        content: str,
        is_internal: bool,
    ) -> Comment:
        model = CommentModel(
            ticket_id=ticket_id,
            author_id=author_id,
            content=content,
            is_internal=is_internal,
        )
        self._session.add(model)
        await self._session.flush()
        stmt = (
            select(CommentModel)
            .where(CommentModel.id == model.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return self._comment_to_domain(result.scalar_one())

    async def ticket_times(
        self,
        *,
        created_by_id: str | None = None,
        assigned_to_id: str | None = None,
    ) -> list[TicketTimes]:
        stmt = select(
            TicketModel.status,
            TicketModel.priority,
            TicketModel.created_at,
            TicketModel.resolved_at,
            TicketModel.category_id,
        )
        if created_by_id:
            stmt = stmt.where(TicketModel.created_by_id == created_by_id)
        if assigned_to_id:
            stmt = stmt.where(TicketModel.assigned_to_id == assigned_to_id)
        result = await self._session.execute(stmt)
        return [
            TicketTimes(
                status=row[0],
                priority=row[1],
                created_at=row[2],
                resolved_at=row[3],
                category_id=row[4],
            )
            for row in result.all()
        ]

    async def _get_model(self, ticket_id: str, *, refresh: bool = False) -> TicketModel | None:
        stmt = select(TicketModel).where(TicketModel.id == ticket_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _comment_to_domain(model: CommentModel) -> Comment:
        return Comment(
            id=str(model.id),
            content=model.content,
            author=user_ref(model.author, fallback_id=str(model.author_id)),
            is_internal=bool(model.is_internal),
            created_at=model.created_at,
        )

    @classmethod
    def _to_domain(cls, model: TicketModel | None) -> Ticket | None:
        if model is None:
            return None
        category = model.category
        rating = None
        if model.rating is not None:
            rating = SatisfactionRating(
                rating=int(model.rating),
                feedback=model.rating_feedback or "",
                rated_at=model.rated_at,
            )
        return Ticket(
            id=str(model.id),
            ticket_id=model.ticket_id,
            title=model.title,
            description=model.description,
            priority=model.priority,
            status=model.status,
            category=CategoryRef(
                id=str(model.category_id),
                name=category.name if category is not None else "",
                color=category.color if category is not None else "",
            ),
            created_by=user_ref(model.created_by, fallback_id=str(model.created_by_id)),
            assigned_to=user_ref(model.assigned_to, fallback_id=model.assigned_to_id),
            attachments=[
                Attachment(
                    id=str(item.id),
                    filename=item.filename,
                    original_name=item.original_name,
                    path=item.path,
                    size=int(item.size),
                    mime_type=item.mime_type,
                    uploaded_at=item.uploaded_at,
                )
                for item in model.attachments
            ],
            comments=[cls._comment_to_domain(item) for item in model.comments],
            tags=json.loads(model.tags) if model.tags else [],
            due_date=model.due_date,
            resolved_at=model.resolved_at,
            closed_at=model.closed_at,
            resolution=model.resolution,
            satisfaction_rating=rating,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
