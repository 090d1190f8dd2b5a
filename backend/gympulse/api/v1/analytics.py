"""Analytics API router: occupancy curves, KPI cards, trends and insights.

Every endpoint accepts an optional ``now`` so a dashboard can be rendered for
any point in time.
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query

from gympulse.analytics.insights import (
    compute_booking_insights,
    compute_peak_hours,
    compute_user_engagement,
    compute_user_type_distribution,
)
from gympulse.analytics.occupancy import get_current_occupancy, get_daily_occupancy, get_session_summary
from gympulse.analytics.report import build_analytics_report
from gympulse.analytics.summary import compute_summary_metrics
from gympulse.analytics.trends import build_monthly_trend, build_weekly_trend
from gympulse.api.deps import get_settings, get_store
from gympulse.config import Settings
from gympulse.schemas.analytics import (
    AnalyticsReportResponse,
    BookingInsightsResponse,
    CurrentOccupancyResponse,
    DailyOccupancyResponse,
    MonthlyTrendPoint,
    PeakHoursResponse,
    SessionSummaryResponse,
    SummaryMetricsResponse,
    UserEngagementResponse,
    UserTypeShare,
    WeeklyTrendPoint,
)
from gympulse.store import DataStore

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])

_NOW = Query(None, description="Reference timestamp (defaults to the server's current time)")
_DAY = Query(None, description="Calendar day (defaults to today)")


@router.get("/summary", response_model=SummaryMetricsResponse)
async def get_summary(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SummaryMetricsResponse:
    """Month-over-month KPI cards."""
    return await compute_summary_metrics(store, settings, now)


@router.get("/trends/weekly", response_model=list[WeeklyTrendPoint])
async def get_weekly_trend(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> list[WeeklyTrendPoint]:
    """Bookings vs attendance for each day of the current ISO week."""
    return await build_weekly_trend(store, settings, now)


@router.get("/trends/monthly", response_model=list[MonthlyTrendPoint])
async def get_monthly_trend(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> list[MonthlyTrendPoint]:
    """Bookings per month, oldest first, ending at the current month."""
    return await build_monthly_trend(store, settings, now)


@router.get("/occupancy/daily", response_model=DailyOccupancyResponse)
async def get_occupancy_curve(
    day: date | None = _DAY,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> DailyOccupancyResponse:
    """Dense hourly occupancy curve over the configured operating hours."""
    return await get_daily_occupancy(store, settings, day)


@router.get("/occupancy/current", response_model=CurrentOccupancyResponse)
async def get_occupancy_now(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CurrentOccupancyResponse:
    return await get_current_occupancy(store, settings, now)


@router.get("/occupancy/slots", response_model=SessionSummaryResponse)
async def get_occupancy_slots(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SessionSummaryResponse:
    """Today's session slots with peak, average and current head counts."""
    return await get_session_summary(store, settings, now)


@router.get("/insights/peak-hours", response_model=PeakHoursResponse)
async def get_peak_hours(
    day: date | None = _DAY,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PeakHoursResponse:
    return await compute_peak_hours(store, settings, day)


@router.get("/insights/bookings", response_model=BookingInsightsResponse)
async def get_booking_insights(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> BookingInsightsResponse:
    return await compute_booking_insights(store, settings, now)


@router.get("/insights/engagement", response_model=UserEngagementResponse)
async def get_user_engagement(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> UserEngagementResponse:
    return await compute_user_engagement(store, settings, now)


@router.get("/insights/user-types", response_model=list[UserTypeShare])
async def get_user_types(store: DataStore = Depends(get_store)) -> list[UserTypeShare]:
    """Share of registered users per role."""
    return await compute_user_type_distribution(store)


@router.get("/report", response_model=AnalyticsReportResponse)
async def get_report(
    now: datetime | None = _NOW,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> AnalyticsReportResponse:
    """Every metric group at once; failed groups are listed under ``errors``."""
    return await build_analytics_report(store, settings, now)
