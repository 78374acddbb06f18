"""Domain models for tickets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH, PRIORITY_URGENT)

STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in-progress"
STATUS_RESOLVED = "resolved"
STATUS_CLOSED = "closed"
STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_RESOLVED, STATUS_CLOSED)
RATABLE_STATUSES = frozenset({STATUS_RESOLVED, STATUS_CLOSED})

TICKET_ID_PREFIX = "TKT-"


def format_ticket_id(number: int) -> str:
    return f"{TICKET_ID_PREFIX}{number:06d}"


@dataclass(slots=True)
class UserRef:
    id: str
    name: str
    email: str
    role: str
    department: Optional[str] = None


@dataclass(slots=True)
class CategoryRef:
    id: str
    name: str
    color: str


@dataclass(slots=True)
class Attachment:
    id: str
    filename: str
    original_name: str
    path: str
    size: int
    mime_type: str
    uploaded_at: Optional[datetime] = None

    @property
    def url(self) -> str:
        return f"/uploads/{self.filename}"


@dataclass(slots=True)
class AttachmentInput:
    filename: str
    original_name: str
    path: str
    size: int
    mime_type: str


@dataclass(slots=True)
class Comment:
    id: str
    content: str
    author: UserRef
    is_internal: bool
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class SatisfactionRating:
    rating: int
    feedback: str
    rated_at: Optional[datetime]


@dataclass(slots=True)
class Ticket:
    id: str
    ticket_id: str
    title: str
    description: str
    priority: str
    status: str
    category: CategoryRef
    created_by: UserRef
    assigned_to: Optional[UserRef] = None
    attachments: list[Attachment] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    due_date: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    resolution: Optional[str] = None
    satisfaction_rating: Optional[SatisfactionRating] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class TicketCreateInput:
    title: str
    description: str
    category_id: str
    priority: str = PRIORITY_MEDIUM
    tags: list[str] = field(default_factory=list)
    due_date: Optional[datetime] = None


@dataclass(slots=True)
class TicketUpdateInput:
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    assigned_to_id: Optional[str] = None
    tags: Optional[list[str]] = None
    due_date: Optional[datetime] = None
    resolution: Optional[str] = None


@dataclass(slots=True)
class TicketQuery:
    status: Optional[str] = None
    priority: Optional[str] = None
    category_id: Optional[str] = None
    created_by_id: Optional[str] = None
    assigned_to_id: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    skip: int = 0
    limit: int = 10


@dataclass(slots=True)
class TicketPage:
    total: int
    tickets: list[Ticket]


@dataclass(slots=True)
class TicketTimes:
    """Status and timestamps of one ticket, the input of the statistics."""

    status: str
    priority: str
    created_at: datetime
    resolved_at: Optional[datetime]
    category_id: Optional[str] = None


@dataclass(slots=True)
class MonthlyCount:
    year: int
    month: int
    count: int


@dataclass(slots=True)
class ResponseTime:
    avg_response_time: float = 0.0
    min_response_time: float = 0.0
    max_response_time: float = 0.0


@dataclass(slots=True)
class TicketStats:
    total_tickets: int
    open_tickets: int
    resolved_tickets: int
    status_stats: dict[str, int]
    priority_stats: dict[str, int]
    monthly_stats: list[MonthlyCount]
    response_time: ResponseTime


def parse_tags(raw: str | list[str] | None) -> list[str]:
    """Accept a comma separated string or a list and return trimmed, non-empty tags."""
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [tag.strip() for tag in items if tag and tag.strip()]
