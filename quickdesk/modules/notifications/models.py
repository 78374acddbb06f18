"""Domain models for notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

TYPE_TICKET_CREATED = "ticket_created"
TYPE_TICKET_UPDATED = "ticket_updated"
TYPE_TICKET_RESOLVED = "ticket_resolved"
TYPE_TICKET_ASSIGNED = "ticket_assigned"
TYPE_SYSTEM = "system"
TYPE_ANNOUNCEMENT = "announcement"
NOTIFICATION_TYPES = (
    TYPE_TICKET_CREATED,
    TYPE_TICKET_UPDATED,
    TYPE_TICKET_RESOLVED,
    TYPE_TICKET_ASSIGNED,
    TYPE_SYSTEM,
    TYPE_ANNOUNCEMENT,
)


@dataclass(slots=True)
class TicketRef:
    id: str
    ticket_id: str
    title: str
    status: str
    priority: str


@dataclass(slots=True)
class Notification:
    id: str
    recipient_id: str
    title: str
    message: str
    type: str
    priority: str
    is_read: bool
    related_ticket: Optional[TicketRef] = None
    action_url: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class NotificationCreateInput:
    recipient_id: str
    title: str
    message: str
    type: str = TYPE_SYSTEM
    priority: str = "medium"
    related_ticket_id: Optional[str] = None
    action_url: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class NotificationQuery:
    recipient_id: str
    type: Optional[str] = None
    is_read: Optional[bool] = None
    skip: int = 0
    limit: int = 20


@dataclass(slots=True)
class NotificationPage:
    total: int
    unread_count: int
    notifications: list[Notification]


@dataclass(slots=True)
class NotificationStats:
    total: int = 0
    unread: int = 0
    read: int = 0
    type_stats: dict[str, dict[str, int]] = field(default_factory=dict)
