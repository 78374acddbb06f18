"""Tests for dashboard analytics and period comparison."""

from datetime import datetime, timedelta, timezone

from quickdesk.modules.dashboard.service import (
    build_analytics,
    compare_periods,
    daily_counts,
    percent_change,
)
from quickdesk.modules.tickets.models import TicketTimes

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def row(status="open", priority="medium", *, days_ago, resolved_after=None, category="c1"):
    created = NOW - timedelta(days=days_ago)
    resolved = created + timedelta(hours=resolved_after) if resolved_after is not None else None
    return TicketTimes(
        status=status,
        priority=priority,
        created_at=created,
        resolved_at=resolved,
        category_id=category,
    )


class TestDailyCounts:
    """Tests for per-day bucketing."""

    def test_groups_by_utc_day_oldest_first(self):
        """Test that stamps fold into sorted day buckets."""
        stamps = [
            datetime(2026, 10, 18, 23, 0, tzinfo=timezone.utc),
            datetime(2026, 10, 17, 1, 0),
            datetime(2026, 10, 18, 1, 0, tzinfo=timezone.utc),
        ]

        counts = daily_counts(stamps)

        assert [(item.date, item.count) for item in counts] == [("2026-10-17", 1), ("2026-10-18", 2)]


class TestPercentChange:
    """Tests for period over period change."""

    def test_from_zero(self):
        """Test that growth from nothing is 100 and no change is 0."""
        assert percent_change(3, 0) == 100.0
        assert percent_change(0, 0) == 0.0

    def test_rounds_to_one_decimal(self):
        """Test that the change is a rounded percentage."""
        assert percent_change(2, 3) == -33.3
        assert percent_change(6, 4) == 50.0


class TestBuildAnalytics:
    """Tests for the analytics payload."""

    def test_window_excludes_older_tickets(self):
        """Test that only tickets inside the period are counted."""
        rows = [row(days_ago=1), row(days_ago=2), row(days_ago=45)]

        analytics = build_analytics(rows, {"c1": "Hardware"}, 30, now=NOW)

        assert analytics.period == "30 days"
        assert sum(item.count for item in analytics.tickets_created) == 2
        assert [(item.category_name, item.count) for item in analytics.tickets_by_category] == [("Hardware", 2)]

    def test_resolution_time_in_hours(self):
        """Test that resolved tickets give an average resolution time."""
        rows = [
            row("resolved", days_ago=3, resolved_after=2),
            row("resolved", days_ago=2, resolved_after=4),
            row("open", days_ago=1),
        ]

        analytics = build_analytics(rows, {}, 30, now=NOW)

        assert analytics.avg_resolution_time.count == 2
        assert analytics.avg_resolution_time.avg_resolution_time == 3.0
        assert sum(item.count for item in analytics.tickets_resolved) == 2

    def test_categories_sorted_by_count(self):
        """Test that busier categories come first."""
        rows = [row(days_ago=1, category="a"), row(days_ago=1, category="b"), row(days_ago=2, category="b")]

        analytics = build_analytics(rows, {"a": "Access", "b": "Billing"}, 7, now=NOW)

        assert [item.category_id for item in analytics.tickets_by_category] == ["b", "a"]

    def test_empty(self):
        """Test that no tickets give empty series."""
        analytics = build_analytics([], {}, 30, now=NOW)

        assert analytics.tickets_created == []
        assert analytics.avg_resolution_time.avg_resolution_time == 0.0


class TestComparePeriods:
    """Tests for the performance metrics."""

    def test_current_against_previous(self):
        """Test that both windows are tallied and compared."""
        rows = [
            row("resolved", "urgent", days_ago=1, resolved_after=1),
            row("open", days_ago=5),
            row("resolved", days_ago=10, resolved_after=5),
            row("resolved", days_ago=40, resolved_after=5),
            row("open", "urgent", days_ago=50),
            row("open", days_ago=90),
        ]

        metrics = compare_periods(rows, now=NOW)

        assert (metrics.total_tickets.current, metrics.total_tickets.previous) == (3, 2)
        assert metrics.total_tickets.change == 50.0
        assert (metrics.resolved_tickets.current, metrics.resolved_tickets.previous) == (2, 1)
        assert (metrics.urgent_tickets.current, metrics.urgent_tickets.previous) == (1, 1)
        assert metrics.urgent_tickets.change == 0.0
        assert metrics.resolution_rate.current == 66.7
        assert metrics.resolution_rate.previous == 50.0

    def test_no_tickets(self):
        """Test that empty windows report zero rates."""
        metrics = compare_periods([], now=NOW)

        assert metrics.total_tickets.change == 0.0
        assert metrics.resolution_rate.current == 0.0
