"""Repository protocol for tickets."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from .models import AttachmentInput, Comment, Ticket, TicketPage, TicketQuery, TicketTimes


class TicketRepository(Protocol):
    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        ...

    async def list_tickets(self, query: TicketQuery) -> TicketPage:
        ...

    async def next_number(self) -> int:
        ...

    async def category_exists(self, category_id: str) -> bool:
        ...

    async def is_active_staff(self, account_id: str) -> bool:
        ...

    async def list_staff_ids(self) -> list[str]:
        ...

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
        ...

    async def update_ticket(self, ticket_id: str, **values: Any) -> Ticket:
        ...

    async def delete_ticket(self, ticket_id: str) -> None:
        ...

    async def add_comment(
        self,
        ticket_id: str,
        *,
        author_id: str,
        content: str,
        is_internal: bool,
    ) -> Comment:
        ...

    async def ticket_times(
        self,
        *,
        created_by_id: str | None = None,
        assigned_to_id: str | None = None,
    ) -> list[TicketTimes]:
        ...
