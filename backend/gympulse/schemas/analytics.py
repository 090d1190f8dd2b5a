"""Pydantic v2 schemas for analytics endpoints.

Every series is sized and ordered the way the dashboard charts consume it:
curves are dense over the configured buckets, weekly trends always carry
Mon..Sun and monthly trends always carry the full month window.
"""

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

ChangeKind = Literal["relative", "absolute"]
ChangeType = Literal["increase", "decrease", "unchanged"]


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------


class LabeledValue(BaseModel):
    """One point of a categorical series."""

    label: str
    value: int | Decimal


class MonthlyTrendPoint(LabeledValue):
    """Booking count for one calendar month."""

    month: str  # YYYY-MM


class WeeklyTrendPoint(BaseModel):
    """Bookings vs attendance for one weekday of the current ISO week."""

    day: str  # Mon..Sun
    date: dt.date
    bookings: int
    attendance: int


class Insight(BaseModel):
    label: str
    value: str


# ---------------------------------------------------------------------------
# Summary metrics
# ---------------------------------------------------------------------------


class SummaryMetric(BaseModel):
    """A KPI for the current month with its previous-month comparator.

    ``change`` is a relative percent change when ``change_kind`` is
    ``relative`` and a percentage-point difference when it is ``absolute``.
    """

    label: str
    value: Decimal
    previous: Decimal
    change: Decimal
    change_kind: ChangeKind
    change_type: ChangeType


class SummaryMetricsResponse(BaseModel):
    period_start: dt.date
    period_end: dt.date
    previous_period_start: dt.date
    previous_period_end: dt.date
    total_bookings: SummaryMetric
    average_daily_attendance: SummaryMetric
    no_show_rate: SummaryMetric
    peak_utilization: SummaryMetric

    def as_list(self) -> list[SummaryMetric]:
        return [
            self.total_bookings,
            self.average_daily_attendance,
            self.no_show_rate,
            self.peak_utilization,
        ]


# ---------------------------------------------------------------------------
# Occupancy
# ---------------------------------------------------------------------------


class TimeSlot(BaseModel):
    """A session slot with its live head count."""

    id: str | None = None
    label: str  # "HH:MM - HH:MM"
    start_minutes: int = Field(..., ge=0, le=24 * 60)
    end_minutes: int = Field(..., ge=0, le=24 * 60)
    current: int = Field(0, ge=0)
    capacity: int = Field(0, ge=0)
    status: Literal["open", "full"] = "open"
    category: str | None = None


class CurrentOccupancyResponse(BaseModel):
    occupancy: int
    slot: TimeSlot | None = None
    max_capacity: int
    utilization: Decimal  # percentage of max_capacity


class SessionSummaryResponse(BaseModel):
    """Head-count overview of one day's slots."""

    date: dt.date | None = None
    peak_occupancy: int
    average_occupancy: Decimal
    total_check_ins: int
    current_occupancy: int
    current_utilization: Decimal
    slots: list[TimeSlot]


class DailyOccupancyResponse(BaseModel):
    date: dt.date
    points: list[LabeledValue]


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


class PeakSlot(BaseModel):
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    occupancy: int
    label: str  # "8:00 AM - 9:00 AM"


class PeakHoursResponse(BaseModel):
    date: dt.date
    morning_peak: PeakSlot | None = None
    afternoon_peak: PeakSlot | None = None
    lowest_usage: PeakSlot | None = None
    insights: list[Insight]


class BookingInsightsResponse(BaseModel):
    period_start: dt.date
    period_end: dt.date
    total_bookings: int
    average_lead_time_days: Decimal | None = None
    cancellation_rate: Decimal
    same_day_rate: Decimal
    insights: list[Insight]


class UserEngagementResponse(BaseModel):
    """Engagement segments; every rate is over users active this month."""

    period_start: dt.date
    period_end: dt.date
    active_users: int
    regular_users: int
    new_users: int
    returning_users: int
    regular_rate: Decimal
    new_rate: Decimal
    returning_rate: Decimal
    insights: list[Insight]


class UserTypeShare(BaseModel):
    user_role: str
    count: int
    percentage: Decimal


# ---------------------------------------------------------------------------
# Combined report
# ---------------------------------------------------------------------------


class AnalyticsReportResponse(BaseModel):
    """All metric groups; a group that failed is ``None`` and listed in ``errors``."""

    generated_at: dt.datetime
    summary: SummaryMetricsResponse | None = None
    weekly_trend: list[WeeklyTrendPoint] | None = None
    monthly_trend: list[MonthlyTrendPoint] | None = None
    daily_occupancy: DailyOccupancyResponse | None = None
    peak_hours: PeakHoursResponse | None = None
    booking_insights: BookingInsightsResponse | None = None
    user_engagement: UserEngagementResponse | None = None
    user_types: list[UserTypeShare] | None = None
    errors: dict[str, str] = Field(default_factory=dict)
