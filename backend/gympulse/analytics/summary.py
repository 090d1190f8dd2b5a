"""Month-over-month KPI cards: bookings, attendance, no-show rate and peak utilization.

Bookings and attendance compare as relative percent change. No-show rate and
peak utilization are already percentages, so they compare as absolute
percentage-point differences.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from gympulse.analytics.occupancy import is_daily_summary_row
from gympulse.analytics.parsing import as_count, as_date, local_now
from gympulse.analytics.periods import month_bounds, previous_month
from gympulse.analytics.rates import (
    absolute_change,
    change_type,
    percent,
    quantize,
    ratio,
    relative_change,
)
from gympulse.config import Settings
from gympulse.errors import ComputationError
from gympulse.schemas.analytics import ChangeKind, SummaryMetric, SummaryMetricsResponse
from gympulse.store.base import ANALYTICS, BOOKINGS, SESSION_OCCURRENCES, DataStore, between

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodMetrics:
    """Raw KPI values for one calendar month."""

    total_bookings: int
    average_daily_attendance: Decimal
    no_show_rate: Decimal
    peak_utilization: Decimal


async def count_bookings(store: DataStore, start: date, end: date) -> int:
    return await store.count(BOOKINGS, filters=between("session_date", start, end))


async def average_daily_attendance(store: DataStore, start: date, end: date) -> Decimal:
    """Mean of per-day occupancy totals over the days that have samples.

    Days with no hourly samples are left out of the denominator rather than
    counted as zero-attendance days.
    """
    rows = await store.query(
        ANALYTICS,
        columns=["date", "start_time_of_day", "end_time_of_day", "hourly_occupancy"],
        filters=between("date", start, end),
    )
    per_day: dict[date, int] = defaultdict(int)
    for row in rows:
        if is_daily_summary_row(row):
            continue
        try:
            per_day[as_date(row["date"])] += as_count(row.get("hourly_occupancy"))
        except ComputationError as exc:
            logger.warning("Skipping malformed analytics row: %s", exc)
    if not per_day:
        return Decimal("0.00")
    return ratio(sum(per_day.values()), len(per_day))


async def no_show_rate(store: DataStore, start: date, end: date) -> Decimal:
    """``(booked - attended) / booked * 100`` over the period's session occurrences."""
    rows = await store.query(
        SESSION_OCCURRENCES,
        columns=["date", "booked_slots", "attended_count"],
        filters=between("date", start, end),
    )
    booked = attended = 0
    for row in rows:
        try:
            row_booked = as_count(row.get("booked_slots"))
            row_attended = as_count(row.get("attended_count"))
        except ComputationError as exc:
            logger.warning("Skipping malformed session occurrence: %s", exc)
            continue
        booked += row_booked
        attended += row_attended
    return percent(booked - attended, booked)


async def peak_utilization(store: DataStore, start: date, end: date, max_capacity: int) -> Decimal:
    """Highest hourly occupancy in the period as a percentage of ``max_capacity``."""
    rows = await store.query(
        ANALYTICS,
        columns=["date", "start_time_of_day", "end_time_of_day", "hourly_occupancy"],
        filters=between("date", start, end),
    )
    peak = 0
    for row in rows:
        if is_daily_summary_row(row):
            continue
        try:
            peak = max(peak, as_count(row.get("hourly_occupancy")))
        except ComputationError as exc:
            logger.warning("Skipping malformed analytics row: %s", exc)
    return percent(peak, max_capacity)


async def compute_period_metrics(
    store: DataStore,
    start: date,
    end: date,
    max_capacity: int,
) -> PeriodMetrics:
    bookings, attendance, no_shows, peak = await asyncio.gather(
        count_bookings(store, start, end),
        average_daily_attendance(store, start, end),
        no_show_rate(store, start, end),
        peak_utilization(store, start, end, max_capacity),
    )
    return PeriodMetrics(
        total_bookings=bookings,
        average_daily_attendance=attendance,
        no_show_rate=no_shows,
        peak_utilization=peak,
    )


def build_metric(label: str, current: Decimal | int, previous: Decimal | int, kind: ChangeKind) -> SummaryMetric:
    """Pair a value with its comparator using the requested change convention."""
    if kind == "relative":
        change = relative_change(current, previous)
    else:
        change = absolute_change(Decimal(current), Decimal(previous))
    return SummaryMetric(
        label=label,
        value=quantize(current),
        previous=quantize(previous),
        change=change,
        change_kind=kind,
        change_type=change_type(change),
    )


async def compute_summary_metrics(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> SummaryMetricsResponse:
    """This calendar month against the previous one."""
    now = local_now(now, settings.timezone)
    start, end = month_bounds(now)
    prev_start, prev_end = previous_month(now)

    current, previous = await asyncio.gather(
        compute_period_metrics(store, start, end, settings.max_capacity),
        compute_period_metrics(store, prev_start, prev_end, settings.max_capacity),
    )

    return SummaryMetricsResponse(
        period_start=start,
        period_end=end,
        previous_period_start=prev_start,
        previous_period_end=prev_end,
        total_bookings=build_metric(
            "Total Bookings This Month", current.total_bookings, previous.total_bookings, "relative"
        ),
        average_daily_attendance=build_metric(
            "Average Daily Attendance",
            current.average_daily_attendance,
            previous.average_daily_attendance,
            "relative",
        ),
        no_show_rate=build_metric("No-Show Rate", current.no_show_rate, previous.no_show_rate, "absolute"),
        peak_utilization=build_metric(
            "Peak Utilization", current.peak_utilization, previous.peak_utilization, "absolute"
        ),
    )
