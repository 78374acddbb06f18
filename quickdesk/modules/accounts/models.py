"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ROLE_USER = "user"
ROLE_AGENT = "agent"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_AGENT, ROLE_ADMIN)
STAFF_ROLES = frozenset({ROLE_AGENT, ROLE_ADMIN})


@dataclass(slots=True)
class Account:
    id: str
    name: str
    email: str
    role: str
    is_active: bool
    password_hash: str = field(repr=False)
    department: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    reset_password_expires: Optional[datetime] = field(default=None, repr=False)

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(slots=True)
class AccountCreateInput:
    name: str
    email: str
    password: str
    role: str = ROLE_USER
    department: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True


# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()


@dataclass(slots=True)
class AccountUpdateInput:
    name: Optional[str] | object = UNSET
    email: Optional[str] | object = UNSET
    role: Optional[str] | object = UNSET
    department: Optional[str] | object = UNSET
    phone: Optional[str] | object = UNSET
    is_active: Optional[bool] | object = UNSET
    password: Optional[str] | object = UNSET


@dataclass(slots=True)
class AccountQuery:
    role: Optional[str] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None
    skip: int = 0
    limit: int = 10


@dataclass(slots=True)
class AccountPage:
    total: int
    accounts: list[Account]


@dataclass(slots=True)
class AccountStats:
    total_users: int
    active_users: int
    inactive_users: int
    role_stats: dict[str, int]
