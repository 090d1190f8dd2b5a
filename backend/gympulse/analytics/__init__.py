"""Occupancy and booking analytics engine.

Every operation takes an injected ``DataStore`` and returns pydantic models
ready to serialize for the dashboard.
"""

from gympulse.analytics.insights import (
    compute_booking_insights,
    compute_peak_hours,
    compute_user_engagement,
    compute_user_type_distribution,
)
from gympulse.analytics.occupancy import get_current_occupancy, get_daily_occupancy, get_session_summary
from gympulse.analytics.report import build_analytics_report
from gympulse.analytics.rollup import AnalyticsRollupWriter, backfill_hourly_rollups, build_daily_summary
from gympulse.analytics.summary import compute_summary_metrics
from gympulse.analytics.timeslots import TimeSlotBucket, TimeSlotBucketer, resolve_current_occupancy
from gympulse.analytics.trends import build_monthly_trend, build_weekly_trend

__all__ = [
    "AnalyticsRollupWriter",
    "TimeSlotBucket",
    "TimeSlotBucketer",
    "backfill_hourly_rollups",
    "build_analytics_report",
    "build_daily_summary",
    "build_monthly_trend",
    "build_weekly_trend",
    "compute_booking_insights",
    "compute_peak_hours",
    "compute_summary_metrics",
    "compute_user_engagement",
    "compute_user_type_distribution",
    "get_current_occupancy",
    "get_daily_occupancy",
    "get_session_summary",
    "resolve_current_occupancy",
]
