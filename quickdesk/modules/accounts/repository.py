"""Repository protocol for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from .models import Account, AccountPage, AccountQuery


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence."""

    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_email(self, email: str) -> Account | None:
        ...

    async def get_by_reset_token(self, token_hash: str) -> Account | None:
        ...

    async def list_accounts(self, query: AccountQuery) -> AccountPage:
        ...

    async def list_staff(self) -> Sequence[Account]:
        ...

    async def create_account(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: str,
        department: str | None,
        phone: str | None,
        is_active: bool,
    ) -> Account:
        ...

    async def update_account(self, account_id: str, **values: Any) -> Account:
        ...

    async def delete_account(self, account_id: str) -> None:
        ...

    async def count_owned_tickets(self, account_id: str) -> int:
        ...

    async def count_by_role(self) -> dict[str, int]:
        ...

    async def count_active(self, is_active: bool) -> int:
        ...

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        ...
