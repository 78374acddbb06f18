"""SQLAlchemy implementation of the category repository."""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.db.models import Category as CategoryModel
from quickdesk.db.models import Ticket as TicketModel
from quickdesk.db.models import User as UserModel
from quickdesk.modules.categories.exceptions import CategoryNotFoundError
from quickdesk.modules.categories.models import (
    Category,
    CategoryPage,
    CategoryQuery,
    CategoryUsage,
    PersonRef,
)


def person_ref(model: UserModel | None) -> PersonRef | None:
    if model is None:
        return None
    return PersonRef(id=str(model.id), name=model.name, email=model.email)


class SqlCategoryRepository:
    """Category repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, category_id: str) -> Category | None:
        return self._to_domain(await self._get_model(category_id))

    async def find_by_name(self, name: str, *, exclude_id: str | None = None) -> Category | None:
        stmt = select(CategoryModel).where(func.lower(CategoryModel.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(CategoryModel.id != exclude_id)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalars().first())

    async def list_categories(self, query: CategoryQuery) -> CategoryPage:
        stmt = select(CategoryModel)
        if query.is_active is not None:
            stmt = stmt.where(CategoryModel.is_active == query.is_active)
        if query.search:
            stmt = stmt.where(func.lower(CategoryModel.name).like(f"%{query.search.lower()}%"))

        total = await self._session.scalar(select(func.count()).select_from(stmt.subquery()))
        stmt = stmt.order_by(CategoryModel.created_at.desc()).offset(query.skip).limit(query.limit)
        result = await self._session.execute(stmt)
        categories = [self._to_domain(model) for model in result.scalars().all()]
        return CategoryPage(total=int(total or 0), categories=categories)

    async def create_category(
        self,
        *,
        name: str,
        description: str | None,
        color: str,
        created_by_id: str | None,
    ) -> Category:
        model = CategoryModel(
            name=name,
            description=description,
            color=color,
            created_by_id=created_by_id,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(await self._get_model(model.id, refresh=True))

    async def update_category(self, category_id: str, **values: Any) -> Category:
        model = await self._get_model(category_id)
        if model is None:
            raise CategoryNotFoundError(category_id)
        for key, value in values.items():
            setattr(model, key, value)
        await self._session.flush()
        return self._to_domain(model)

    async def bulk_update(self, category_ids: Sequence[str], values: dict[str, Any]) -> int:
        stmt = (
            update(CategoryModel)
            .where(CategoryModel.id.in_(list(category_ids)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def delete_category(self, category_id: str) -> None:
        await self._session.execute(delete(CategoryModel).where(CategoryModel.id == category_id))

    async def count_tickets(self, category_id: str) -> int:
        stmt = select(func.count(TicketModel.id)).where(TicketModel.category_id == category_id)
        return int(await self._session.scalar(stmt) or 0)

    async def count(self, *, is_active: bool | None = None) -> int:
        stmt = select(func.count(CategoryModel.id))
        if is_active is not None:
            stmt = stmt.where(CategoryModel.is_active == is_active)
        return int(await self._session.scalar(stmt) or 0)

    async def usage(self) -> list[CategoryUsage]:
        ticket_count = func.count(TicketModel.id)
        stmt = (
            select(
                CategoryModel.id,
                CategoryModel.name,
                CategoryModel.color,
                CategoryModel.is_active,
                CategoryModel.description,
                CategoryModel.created_at,
                ticket_count.label("ticket_count"),
                func.coalesce(func.sum(case((TicketModel.status == "open", 1), else_=0)), 0),
                func.coalesce(func.sum(case((TicketModel.status == "resolved", 1), else_=0)), 0),
            )
            .outerjoin(TicketModel, TicketModel.category_id == CategoryModel.id)
            .group_by(CategoryModel.id)
            .order_by(ticket_count.desc(), CategoryModel.name)
        )
        result = await self._session.execute(stmt)
        return [
            CategoryUsage(
                id=str(row[0]),
                name=row[1],
                color=row[2],
                is_active=bool(row[3]),
                description=row[4],
                created_at=row[5],
                ticket_count=int(row[6]),
                open_tickets=int(row[7]),
                resolved_tickets=int(row[8]),
            )
            for row in result.all()
        ]

    async def _get_model(self, category_id: str, *, refresh: bool = False) -> CategoryModel | None:
        stmt = select(CategoryModel).where(CategoryModel.id == category_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.unique().scalar_one_or_none()

    @staticmethod
    def _to_domain(model: CategoryModel | None) -> Category | None:
        if model is None:
            return None
        return Category(
            id=str(model.id),
            name=model.name,
            description=model.description,
            color=model.color,
            is_active=bool(model.is_active),
            created_by=person_ref(model.created_by),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
