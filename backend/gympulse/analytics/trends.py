"""Weekly (Mon..Sun) and monthly booking trend series."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import date, datetime, timedelta

from gympulse.analytics.parsing import as_count, as_date, local_now
from gympulse.analytics.periods import end_of_iso_week, end_of_month, month_window, start_of_iso_week
from gympulse.config import Settings
from gympulse.errors import ComputationError
from gympulse.schemas.analytics import MonthlyTrendPoint, WeeklyTrendPoint
from gympulse.store.base import BOOKINGS, SESSION_OCCURRENCES, DataStore, between

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


async def _bookings_per_day(store: DataStore, start: date, end: date) -> Counter[date]:
    rows = await store.query(BOOKINGS, columns=["session_date"], filters=between("session_date", start, end))
    counts: Counter[date] = Counter()
    for row in rows:
        try:
            counts[as_date(row["session_date"])] += 1
        except ComputationError as exc:
            logger.warning("Skipping booking with bad session_date: %s", exc)
    return counts


async def _attendance_per_day(store: DataStore, start: date, end: date) -> Counter[date]:
    rows = await store.query(
        SESSION_OCCURRENCES,
        columns=["date", "attended_count"],
        filters=between("date", start, end),
    )
    counts: Counter[date] = Counter()
    for row in rows:
        try:
            counts[as_date(row["date"])] += as_count(row.get("attended_count"))
        except ComputationError as exc:
            logger.warning("Skipping session occurrence with bad fields: %s", exc)
    return counts


async def build_weekly_trend(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> list[WeeklyTrendPoint]:
    """Bookings and attendance for each day of the ISO week containing ``now``."""
    now = local_now(now, settings.timezone)
    monday = start_of_iso_week(now)
    sunday = end_of_iso_week(now)

    bookings, attendance = await asyncio.gather(
        _bookings_per_day(store, monday, sunday),
        _attendance_per_day(store, monday, sunday),
    )

    points = []
    for offset, label in enumerate(WEEKDAY_LABELS):
        day = monday + timedelta(days=offset)
        points.append(
            WeeklyTrendPoint(day=label, date=day, bookings=bookings[day], attendance=attendance[day])
        )
    return points


async def build_monthly_trend(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> list[MonthlyTrendPoint]:
    """Booking counts for the configured number of months ending at the current month.

    Months are ordered oldest to newest and months without bookings are 0, so
    the series always has ``settings.monthly_trend_months`` points.
    """
    now = local_now(now, settings.timezone)
    months = month_window(now, settings.monthly_trend_months)

    per_day = await _bookings_per_day(store, months[0], end_of_month(months[-1]))
    per_month: Counter[tuple[int, int]] = Counter()
    for day, count in per_day.items():
        per_month[(day.year, day.month)] += count

    return [
        MonthlyTrendPoint(
            label=first.strftime("%b"),
            month=first.strftime("%Y-%m"),
            value=per_month[(first.year, first.month)],
        )
        for first in months
    ]
