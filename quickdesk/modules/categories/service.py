"""Category use cases."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.infrastructure.database.repositories.category_repository import SqlCategoryRepository

from .exceptions import (
    CategoryAlreadyExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    InvalidBulkActionError,
)
from .models import (
    BULK_ACTIVATE,
    BULK_DEACTIVATE,
    BULK_UPDATE,
    DEFAULT_COLOR,
    Category,
    CategoryCreateInput,
    CategoryPage,
    CategoryQuery,
    CategoryStats,
    CategoryUpdateInput,
)
from .repository import CategoryRepository

logger = logging.getLogger(__name__)

# Fields a bulk "update" may touch; renames go through update_category.
_BULK_FIELDS = ("description", "color", "is_active")


class CategoryService:
    def __init__(self, repository: CategoryRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CategoryService":
        return cls(SqlCategoryRepository(session))

    async def list_categories(self, query: CategoryQuery) -> CategoryPage:
        return await self._repository.list_categories(query)

    async def get_category(self, category_id: str) -> Category:
        category = await self._repository.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        category.ticket_count = await self._repository.count_tickets(category_id)
        return category

    async def create_category(self, payload: CategoryCreateInput, *, created_by_id: str | None) -> Category:
        name = payload.name.strip()
        if await self._repository.find_by_name(name) is not None:
            raise CategoryAlreadyExistsError(name)
        category = await self._repository.create_category(
            name=name,
            description=payload.description,
            color=payload.color or DEFAULT_COLOR,
            created_by_id=created_by_id,
        )
        logger.info("Category created: %s", category.name)
        return category

    async def update_category(self, category_id: str, payload: CategoryUpdateInput) -> Category:
        current = await self._repository.get_by_id(category_id)
        if current is None:
            raise CategoryNotFoundError(category_id)

        values: dict[str, Any] = {}
        if payload.name:
            name = payload.name.strip()
            if name.lower() != current.name.lower():
                if await self._repository.find_by_name(name, exclude_id=category_id) is not None:
                    raise CategoryAlreadyExistsError(name)
            values["name"] = name
        if payload.description:
            values["description"] = payload.description
        if payload.color:
            values["color"] = payload.color
        if payload.is_active is not None:
            values["is_active"] = payload.is_active

        if not values:
            return current
        return await self._repository.update_category(category_id, **values)

    async def bulk_update(
        self,
        category_ids: Sequence[str],
        action: str,
        data: dict[str, Any] | None = None,
    ) -> int:
        if not category_ids:
            raise InvalidBulkActionError("Please provide valid category IDs")

        if action == BULK_ACTIVATE:
            values: dict[str, Any] = {"is_active": True}
        elif action == BULK_DEACTIVATE:
            values = {"is_active": False}
        elif action == BULK_UPDATE:
            values = {key: value for key, value in (data or {}).items() if key in _BULK_FIELDS}
        else:
            raise InvalidBulkActionError("Invalid action specified")

        if not values:
            return 0
        modified = await self._repository.bulk_update(category_ids, values)
        logger.info("Bulk %s applied to %d categories", action, modified)
        return modified

    async def delete_category(self, category_id: str) -> None:
        if await self._repository.get_by_id(category_id) is None:
            raise CategoryNotFoundError(category_id)
        ticket_count = await self._repository.count_tickets(category_id)
        if ticket_count:
            raise CategoryInUseError(ticket_count)
        await self._repository.delete_category(category_id)
        logger.info("Category deleted: %s", category_id)

    async def stats(self) -> CategoryStats:
        return CategoryStats(
            total_categories=await self._repository.count(),
            active_categories=await self._repository.count(is_active=True),
            category_stats=await self._repository.usage(),
        )
