"""Domain models for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from quickdesk.modules.tickets.models import Ticket

RECENT_LIMIT = 5
TREND_DAYS = 7
PERFORMANCE_DAYS = 30


@dataclass(slots=True)
class DailyCount:
    date: str
    count: int


@dataclass(slots=True)
class StaffOverview:
    total_tickets: int
    open_tickets: int
    in_progress_tickets: int
    resolved_tickets: int
    total_users: int
    total_categories: int
    urgent_tickets: int


@dataclass(slots=True)
class MyTicketsOverview:
    my_tickets: int
    my_open_tickets: int
    my_in_progress_tickets: int
    my_resolved_tickets: int


@dataclass(slots=True)
class Distribution:
    by_status: dict[str, int]
    by_priority: Optional[dict[str, int]] = None


@dataclass(slots=True)
class DashboardStats:
    """Overview for the signed-in account; staff see every ticket, users their own."""

    overview: Union[StaffOverview, MyTicketsOverview]
    distribution: Distribution
    recent_activity: list[Ticket] = field(default_factory=list)
    trends: Optional[list[DailyCount]] = None


@dataclass(slots=True)
class ResolutionTime:
    avg_resolution_time: float = 0.0
    count: int = 0


@dataclass(slots=True)
class CategoryCount:
    category_id: Optional[str]
    category_name: Optional[str]
    count: int


@dataclass(slots=True)
class TicketAnalytics:
    period: str
    tickets_created: list[DailyCount]
    tickets_resolved: list[DailyCount]
    avg_resolution_time: ResolutionTime
    tickets_by_category: list[CategoryCount]


@dataclass(slots=True)
class PeriodChange:
    current: int
    previous: int
    change: float


@dataclass(slots=True)
class RateComparison:
    current: float
    previous: float


@dataclass(slots=True)
class PerformanceMetrics:
    total_tickets: PeriodChange
    resolved_tickets: PeriodChange
    urgent_tickets: PeriodChange
    resolution_rate: RateComparison
