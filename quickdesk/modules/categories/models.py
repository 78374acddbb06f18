"""Domain models for ticket categories."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

DEFAULT_COLOR = "#3B82F6"

BULK_ACTIVATE = "activate"
BULK_DEACTIVATE = "deactivate"
BULK_UPDATE = "update"
BULK_ACTIONS = (BULK_ACTIVATE, BULK_DEACTIVATE, BULK_UPDATE)


@dataclass(slots=True)
class PersonRef:
    """Minimal projection of a user embedded in other records."""

    id: str
    name: str
    email: str


@dataclass(slots=True)
class Category:
    id: str
    name: str
    color: str
    is_active: bool
    description: Optional[str] = None
    created_by: Optional[PersonRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ticket_count: Optional[int] = None


@dataclass(slots=True)
class CategoryCreateInput:
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


@dataclass(slots=True)
class CategoryUpdateInput:
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(slots=True)
class CategoryQuery:
    is_active: Optional[bool] = True
    search: Optional[str] = None
    skip: int = 0
    limit: int = 20


@dataclass(slots=True)
class CategoryPage:
    total: int
    categories: list[Category]


@dataclass(slots=True)
class CategoryUsage:
    id: str
    name: str
    color: str
    is_active: bool
    description: Optional[str]
    created_at: Optional[datetime]
    ticket_count: int = 0
    open_tickets: int = 0
    resolved_tickets: int = 0


@dataclass(slots=True)
class CategoryStats:
    total_categories: int
    active_categories: int
    category_stats: list[CategoryUsage] = field(default_factory=list)
