"""Dashboard endpoints."""
from fastapi import APIRouter, Depends, Query

from quickdesk.core.security import get_current_account, get_current_staff
from quickdesk.interfaces.http.deps import get_dashboard_service
from quickdesk.modules.accounts.models import Account
from quickdesk.modules.dashboard.models import StaffOverview
from quickdesk.modules.dashboard.service import DashboardService
from quickdesk.schemas import (
    ApiResponse,
    DailyCountOut,
    DashboardStatsOut,
    DistributionOut,
    MyTicketsOverviewOut,
    PerformanceMetricsOut,
    PerformancePayload,
    RecentTicketOut,
    StaffOverviewOut,
    TicketAnalyticsOut,
)

router = APIRouter()


@router.get("/stats", response_model=ApiResponse[DashboardStatsOut], summary="Dashboard overview")
async def dashboard_stats(
    current: Account = Depends(get_current_account),
    service: DashboardService = Depends(get_dashboard_service),
):
    stats = await service.stats(current)
    overview_model = StaffOverviewOut if isinstance(stats.overview, StaffOverview) else MyTicketsOverviewOut
    return ApiResponse(
        data=DashboardStatsOut(
            overview=overview_model.model_validate(stats.overview),
            distribution=DistributionOut.model_validate(stats.distribution),
            recent_activity=[RecentTicketOut.model_validate(ticket) for ticket in stats.recent_activity],
            trends=None if stats.trends is None else [DailyCountOut.model_validate(item) for item in stats.trends],
        )
    )


@router.get("/analytics", response_model=ApiResponse[TicketAnalyticsOut], summary="Ticket analytics")
async def ticket_analytics(
    period: int = Query(default=30, ge=1, le=365, description="Window in days"),
    staff: Account = Depends(get_current_staff),
    service: DashboardService = Depends(get_dashboard_service),
):
    analytics = await service.analytics(period)
    return ApiResponse(data=TicketAnalyticsOut.model_validate(analytics))


@router.get("/performance", response_model=ApiResponse[PerformancePayload], summary="Performance metrics")
async def performance_metrics(
    staff: Account = Depends(get_current_staff),
    service: DashboardService = Depends(get_dashboard_service),
):
    metrics = await service.performance()
    return ApiResponse(data=PerformancePayload(metrics=PerformanceMetricsOut.model_validate(metrics)))
