"""Dashboard aggregates built on the ticket, account and category repositories."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from quickdesk.infrastructure.database.repositories.account_repository import SqlAccountRepository
from quickdesk.infrastructure.database.repositories.category_repository import SqlCategoryRepository
from quickdesk.infrastructure.database.repositories.ticket_repository import SqlTicketRepository
from quickdesk.modules.accounts.models import ROLE_USER, Account
from quickdesk.modules.accounts.repository import AccountRepository
from quickdesk.modules.categories.repository import CategoryRepository
from quickdesk.modules.tickets.models import (
    PRIORITY_URGENT,
    STATUS_IN_PROGRESS,
    STATUS_OPEN,
    STATUS_RESOLVED,
    TicketQuery,
    TicketTimes,
)
from quickdesk.modules.tickets.repository import TicketRepository
from quickdesk.modules.tickets.service import as_utc

from .models import (
    PERFORMANCE_DAYS,
    RECENT_LIMIT,
    TREND_DAYS,
    CategoryCount,
    DailyCount,
    DashboardStats,
    Distribution,
    MyTicketsOverview,
    PerformanceMetrics,
    PeriodChange,
    RateComparison,
    ResolutionTime,
    StaffOverview,
    TicketAnalytics,
)


def daily_counts(stamps: Sequence[datetime]) -> list[DailyCount]:
    """Count timestamps per UTC day, oldest day first."""
    counts = Counter(as_utc(stamp).strftime("%Y-%m-%d") for stamp in stamps)
    return [DailyCount(date=day, count=counts[day]) for day in sorted(counts)]


def percent_change(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def resolution_rate(resolved: int, total: int) -> float:
    return round(resolved / total * 100, 1) if total else 0.0


def build_analytics(
    rows: Sequence[TicketTimes],
    category_names: dict[str, str],
    days: int,
    *,
    now: datetime | None = None,
) -> TicketAnalytics:
    """Fold ticket rows into created/resolved series for the last ``days`` days."""
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=days)

    created = [as_utc(row.created_at) for row in rows if as_utc(row.created_at) >= since]
    resolved_rows = [
        row
        for row in rows
        if row.status == STATUS_RESOLVED and row.resolved_at is not None and as_utc(row.resolved_at) >= since
    ]
    hours = [
        (as_utc(row.resolved_at) - as_utc(row.created_at)).total_seconds() / 3600
        for row in resolved_rows
    ]

    by_category = Counter(row.category_id for row in rows if as_utc(row.created_at) >= since)
    categories = [
        CategoryCount(category_id=category_id, category_name=category_names.get(category_id), count=count)
        for category_id, count in by_category.items()
    ]
    categories.sort(key=lambda item: (-item.count, item.category_name or ""))

    return TicketAnalytics(
        period=f"{days} days",
        tickets_created=daily_counts(created),
        tickets_resolved=daily_counts([row.resolved_at for row in resolved_rows]),
        avg_resolution_time=ResolutionTime(
            avg_resolution_time=round(sum(hours) / len(hours), 2) if hours else 0.0,
            count=len(hours),
        ),
        tickets_by_category=categories,
    )


def compare_periods(rows: Sequence[TicketTimes], *, now: datetime | None = None) -> PerformanceMetrics:
    """Compare tickets created in the last 30 days with the 30 days before."""
    now = now or datetime.now(timezone.utc)
    current_start = now - timedelta(days=PERFORMANCE_DAYS)
    previous_start = now - timedelta(days=2 * PERFORMANCE_DAYS)

    current: list[TicketTimes] = []
    previous: list[TicketTimes] = []
    for row in rows:
        created = as_utc(row.created_at)
        if created >= current_start:
            current.append(row)
        elif created >= previous_start:
            previous.append(row)

    def tally(items: list[TicketTimes]) -> tuple[int, int, int]:
        resolved = sum(1 for row in items if row.status == STATUS_RESOLVED)
        urgent = sum(1 for row in items if row.priority == PRIORITY_URGENT)
        return len(items), resolved, urgent

    cur_total, cur_resolved, cur_urgent = tally(current)
    prev_total, prev_resolved, prev_urgent = tally(previous)
    return PerformanceMetrics(
        total_tickets=PeriodChange(cur_total, prev_total, percent_change(cur_total, prev_total)),
        resolved_tickets=PeriodChange(cur_resolved, prev_resolved, percent_change(cur_resolved, prev_resolved)),
        urgent_tickets=PeriodChange(cur_urgent, prev_urgent, percent_change(cur_urgent, prev_urgent)),
        resolution_rate=RateComparison(
            current=resolution_rate(cur_resolved, cur_total),
            previous=resolution_rate(prev_resolved, prev_total),
        ),
    )


class DashboardService:
    """Read-only views over tickets, accounts and categories."""

    def __init__(
        self,
        tickets: TicketRepository,
        accounts: AccountRepository,
        categories: CategoryRepository,
    ) -> None:
        self._tickets = tickets
        self._accounts = accounts
        self._categories = categories

    @classmethod
    def with_session(cls, session: AsyncSession) -> "DashboardService":
        return cls(
            SqlTicketRepository(session),
            SqlAccountRepository(session),
            SqlCategoryRepository(session),
        )

    async def stats(self, actor: Account, *, now: datetime | None = None) -> DashboardStats:
        if actor.is_staff():
            return await self._staff_stats(now or datetime.now(timezone.utc))
        return await self._user_stats(actor)

    async def analytics(self, days: int = 30, *, now: datetime | None = None) -> TicketAnalytics:
        rows = await self._tickets.ticket_times()
        names = {usage.id: usage.name for usage in await self._categories.usage()}
        return build_analytics(rows, names, days, now=now)

    async def performance(self, *, now: datetime | None = None) -> PerformanceMetrics:
        return compare_periods(await self._tickets.ticket_times(), now=now)

    async def _staff_stats(self, now: datetime) -> DashboardStats:
        rows = await self._tickets.ticket_times()
        by_status = Counter(row.status for row in rows)
        by_priority = Counter(row.priority for row in rows)
        role_counts = await self._accounts.count_by_role()
        recent = await self._tickets.list_tickets(TicketQuery(limit=RECENT_LIMIT))

        since = now - timedelta(days=TREND_DAYS)
        trend_stamps = [row.created_at for row in rows if as_utc(row.created_at) >= since]

        overview = StaffOverview(
            total_tickets=len(rows),
            open_tickets=by_status.get(STATUS_OPEN, 0),
            in_progress_tickets=by_status.get(STATUS_IN_PROGRESS, 0),
            resolved_tickets=by_status.get(STATUS_RESOLVED, 0),
            total_users=role_counts.get(ROLE_USER, 0),
            total_categories=await self._categories.count(),
            urgent_tickets=sum(
                1 for row in rows if row.priority == PRIORITY_URGENT and row.status != STATUS_RESOLVED
            ),
        )
        return DashboardStats(
            overview=overview,
            distribution=Distribution(by_status=dict(by_status), by_priority=dict(by_priority)),
            recent_activity=recent.tickets,
            trends=daily_counts(trend_stamps),
        )

    async def _user_stats(self, actor: Account) -> DashboardStats:
        rows = await self._tickets.ticket_times(created_by_id=actor.id)
        by_status = Counter(row.status for row in rows)
        recent = await self._tickets.list_tickets(TicketQuery(created_by_id=actor.id, limit=RECENT_LIMIT))

        overview = MyTicketsOverview(
            my_tickets=len(rows),
            my_open_tickets=by_status.get(STATUS_OPEN, 0),
            my_in_progress_tickets=by_status.get(STATUS_IN_PROGRESS, 0),
            my_resolved_tickets=by_status.get(STATUS_RESOLVED, 0),
        )
        return DashboardStats(
            overview=overview,
            distribution=Distribution(by_status=dict(by_status)),
            recent_activity=recent.tickets,
        )
