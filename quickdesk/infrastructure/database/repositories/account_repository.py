"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.db.models import Category as CategoryModel
from quickdesk.db.models import Notification as NotificationModel
from quickdesk.db.models import Ticket as TicketModel
from quickdesk.db.models import User as UserModel
from quickdesk.modules.accounts.exceptions import AccountNotFoundError
from quickdesk.modules.accounts.models import STAFF_ROLES, Account, AccountPage, AccountQuery


class SqlAccountRepository:
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        return self._to_domain(await self._get_model(account_id))

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_reset_token(self, token_hash: str) -> Account | None:
        stmt = select(UserModel).where(UserModel.reset_password_token == token_hash)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def list_accounts(self, query: AccountQuery) -> AccountPage:
        stmt = select(UserModel)
        if query.role:
            stmt = stmt.where(UserModel.role == query.role)
        if query.is_active is not None:
            stmt = stmt.where(UserModel.is_active.is_(query.is_active))
        if query.search:
            pattern = f"%{query.search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(UserModel.name).like(pattern),
                    func.lower(UserModel.email).like(pattern),
                    func.lower(UserModel.department).like(pattern),
                )
            )

        total = await self._session.scalar(select(func.count()).select_from(stmt.subquery()))
        stmt = stmt.order_by(UserModel.created_at.desc()).offset(query.skip).limit(query.limit)
        result = await self._session.execute(stmt)
        accounts = [self._to_domain(model) for model in result.scalars().all()]
        return AccountPage(total=int(total or 0), accounts=accounts)

    async def list_staff(self) -> Sequence[Account]:
        stmt = (
            select(UserModel)
            .where(UserModel.role.in_(STAFF_ROLES), UserModel.is_active.is_(True))
            .order_by(UserModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

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
        model = UserModel(
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            department=department,
            phone=phone,
            is_active=is_active,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(model)

    async def update_account(self, account_id: str, **values: Any) -> Account:
        model = await self._get_model(account_id)
        if model is None:
            raise AccountNotFoundError(account_id)
        for key, value in values.items():
            setattr(model, key, value)
        await self._session.flush()
        return self._to_domain(model)

    async def delete_account(self, account_id: str) -> None:
        await self._session.execute(
            update(TicketModel)
            .where(TicketModel.assigned_to_id == account_id)
            .values(assigned_to_id=None)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(
            update(CategoryModel)
            .where(CategoryModel.created_by_id == account_id)
            .values(created_by_id=None)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(delete(NotificationModel).where(NotificationModel.recipient_id == account_id))
        result = await self._session.execute(delete(UserModel).where(UserModel.id == account_id))
        if result.rowcount == 0:
            raise AccountNotFoundError(account_id)

    async def count_owned_tickets(self, account_id: str) -> int:
        stmt = select(func.count(TicketModel.id)).where(TicketModel.created_by_id == account_id)
        return int(await self._session.scalar(stmt) or 0)

    async def count_by_role(self) -> dict[str, int]:
        stmt = select(UserModel.role, func.count(UserModel.id)).group_by(UserModel.role)
        result = await self._session.execute(stmt)
        return {role: int(count) for role, count in result.all()}

    async def count_active(self, is_active: bool) -> int:
        stmt = select(func.count(UserModel.id)).where(UserModel.is_active.is_(is_active))
        return int(await self._session.scalar(stmt) or 0)

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        stmt = update(UserModel).where(UserModel.id == account_id).values(last_login_at=timestamp)
        await self._session.execute(stmt)

    async def _get_model(self, account_id: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == account_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: UserModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            name=model.name,
            email=model.email,
            role=model.role or "user",
            is_active=bool(model.is_active),
            password_hash=model.password_hash,
            department=model.department,
            phone=model.phone,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
            reset_password_expires=model.reset_password_expires,
        )
