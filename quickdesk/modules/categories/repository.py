"""Repository protocol for categories."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import Category, CategoryPage, CategoryQuery, CategoryUsage


class CategoryRepository(Protocol):
    async def get_by_id(self, category_id: str) -> Category | None:
        ...

    async def find_by_name(self, name: str, *, exclude_id: str | None = None) -> Category | None:
        ...

    async def list_categories(self, query: CategoryQuery) -> CategoryPage:
        ...

    async def create_category(
        self,
        *,
        name: str,
        description: str | None,
        color: str,
        created_by_id: str | None,
    ) -> Category:
        ...

    async def update_category(self, category_id: str, **values: Any) -> Category:
        ...

    async def bulk_update(self, category_ids: Sequence[str], values: dict[str, Any]) -> int:
        ...

    async def delete_category(self, category_id: str) -> None:
        ...

    async def count_tickets(self, category_id: str) -> int:
        ...

    async def count(self, *, is_active: bool | None = None) -> int:
        ...

    async def usage(self) -> list[CategoryUsage]:
        ...
