"""Domain services for account management."""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.core.crypto import hash_password, verify_password
from quickdesk.infrastructure.database.repositories.account_repository import SqlAccountRepository

from .exceptions import (
    AccountAlreadyExistsError,
    AccountDisabledError,
    AccountInUseError,
    AccountNotFoundError,
    InvalidPasswordError,
    InvalidResetTokenError,
    SelfDeletionError,
)
from .models import (
    Account,
    AccountCreateInput,
    AccountPage,
    AccountQuery,
    AccountStats,
    AccountUpdateInput,
    UNSET,
)
from .repository import AccountRepository

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def get_by_email(self, email: str) -> Account | None:
        return await self._repository.get_by_email(normalize_email(email))

    async def require(self, account_id: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def list_accounts(self, query: AccountQuery) -> AccountPage:
        return await self._repository.list_accounts(query)

    async def list_agents(self) -> Sequence[Account]:
        return await self._repository.list_staff()

    async def authenticate(self, email: str, password: str) -> Account | None:
        account = await self._repository.get_by_email(normalize_email(email))
        if account is None or not verify_password(password, account.password_hash):
            return None
        if not account.is_active:
            raise AccountDisabledError(account.id)
        await self._repository.set_last_login(account.id, datetime.now(timezone.utc))
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        email = normalize_email(payload.email)
        existing = await self._repository.get_by_email(email)
        if existing is not None:
            raise AccountAlreadyExistsError(email)

        account = await self._repository.create_account(
            name=payload.name.strip(),
            email=email,
            password_hash=hash_password(payload.password),
            role=payload.role,
            department=payload.department,
            phone=payload.phone,
            is_active=payload.is_active,
        )
        logger.info("Account created: %s (%s)", account.email, account.role)
        return account

    async def update_account(self, account_id: str, payload: AccountUpdateInput) -> Account:
        current = await self.require(account_id)

        values: dict[str, object] = {}
        if payload.email is not UNSET and payload.email:
            email = normalize_email(str(payload.email))
            if email != current.email:
                if await self._repository.get_by_email(email) is not None:
                    raise AccountAlreadyExistsError(email)
                values["email"] = email
        for name in ("name", "role", "department", "phone"):
            value = getattr(payload, name)
            if value is not UNSET and value:
                values[name] = value
        if payload.is_active is not UNSET and payload.is_active is not None:
            values["is_active"] = payload.is_active
        if payload.password is not UNSET and payload.password:
            values["password_hash"] = hash_password(str(payload.password))

        if not values:
            return current
        return await self._repository.update_account(account_id, **values)

    async def change_password(self, account_id: str, current_password: str, new_password: str) -> None:
        account = await self.require(account_id)
        if not verify_password(current_password, account.password_hash):
            raise InvalidPasswordError(account_id)
        await self._repository.update_account(account_id, password_hash=hash_password(new_password))
        logger.info("Password changed for account %s", account_id)

    async def request_password_reset(self, email: str) -> str:
        """Issue a one hour reset token for ``email``.

        Only the SHA-256 digest is stored; the plain token is returned once so
        the caller can deliver it.
        """
        account = await self._repository.get_by_email(normalize_email(email))
        if account is None:
            raise AccountNotFoundError(email)
        token = secrets.token_hex(20)
        await self._repository.update_account(
            account.id,
            reset_password_token=hash_reset_token(token),
            reset_password_expires=datetime.now(timezone.utc) + RESET_TOKEN_TTL,
        )
        logger.info("Password reset requested for %s", account.email)
        return token

    async def reset_password(self, token: str, new_password: str) -> Account:
        account = await self._repository.get_by_reset_token(hash_reset_token(token))
        if account is None or account.reset_password_expires is None:
            raise InvalidResetTokenError()
        expires = account.reset_password_expires
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        if expires <= datetime.now(timezone.utc):
            raise InvalidResetTokenError()

        account = await self._repository.update_account(
            account.id,
            password_hash=hash_password(new_password),
            reset_password_token=None,
            reset_password_expires=None,
        )
        logger.info("Password reset completed for account %s", account.id)
        return account

    async def delete_account(self, account_id: str, *, actor_id: str) -> None:
        if account_id == actor_id:
            raise SelfDeletionError(account_id)
        await self.require(account_id)
        owned = await self._repository.count_owned_tickets(account_id)
        if owned:
            raise AccountInUseError(owned)
        await self._repository.delete_account(account_id)
        logger.info("Account deleted: %s", account_id)

    async def stats(self) -> AccountStats:
        role_stats = await self._repository.count_by_role()
        active = await self._repository.count_active(True)
        inactive = await self._repository.count_active(False)
        return AccountStats(
            total_users=sum(role_stats.values()),
            active_users=active,
            inactive_users=inactive,
            role_stats=role_stats,
        )
