"""Occupancy views: today's session slots, the live occupancy card and the daily curve."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from gympulse.analytics.parsing import as_count, as_date, hhmm, local_now, minutes_since_midnight
from gympulse.analytics.rates import ZERO, percent, ratio
from gympulse.analytics.timeslots import TimeSlotBucketer, resolve_current_occupancy
from gympulse.config import Settings
from gympulse.errors import ComputationError
from gympulse.models.analytics_record import DAILY_SUMMARY_END, DAILY_SUMMARY_START
from gympulse.schemas.analytics import (
    CurrentOccupancyResponse,
    DailyOccupancyResponse,
    SessionSummaryResponse,
    TimeSlot,
)
from gympulse.store.base import ANALYTICS, SESSION_OCCURRENCES, DataStore, OrderBy, Row, eq, lt

logger = logging.getLogger(__name__)

_SLOT_COLUMNS = [
    "id",
    "date",
    "start_time_of_day",
    "end_time_of_day",
    "capacity",
    "override_capacity",
    "booked_slots",
    "attended_count",
    "category",
]
_PREVIOUS_DAY_LOOKBACK_ROWS = 20


def is_daily_summary_row(row: Row) -> bool:
    return row.get("start_time_of_day") == DAILY_SUMMARY_START and row.get("end_time_of_day") == DAILY_SUMMARY_END


async def fetch_hourly_samples(store: DataStore, day: date) -> list[Row]:
    """The day's hourly analytics rows in ascending start order, sentinel row excluded."""
    rows = await store.query(
        ANALYTICS,
        columns=["date", "start_time_of_day", "end_time_of_day", "hourly_occupancy"],
        filters=[eq("date", day)],
        order=[OrderBy("start_time_of_day")],
    )
    return [r for r in rows if not is_daily_summary_row(r)]


def slot_target_date(now: datetime) -> date:
    """Today, except that Sunday (no sessions) looks at Monday's schedule."""
    today = now.date()
    if today.weekday() == 6:
        return today + timedelta(days=1)
    return today


def _to_time_slot(row: Row) -> TimeSlot:
    start = hhmm(row.get("start_time_of_day"))
    end = hhmm(row.get("end_time_of_day"))
    capacity = as_count(row.get("override_capacity")) or as_count(row.get("capacity"))
    current = as_count(row.get("booked_slots"))
    return TimeSlot(
        id=str(row["id"]) if row.get("id") is not None else None,
        label=f"{start} - {end}",
        start_minutes=minutes_since_midnight(start),
        end_minutes=minutes_since_midnight(end),
        current=current,
        capacity=capacity,
        status="full" if current >= capacity else "open",
        category=row.get("category"),
    )


async def fetch_today_time_slots(
    store: DataStore,
    now: datetime | None = None,
) -> tuple[date | None, list[TimeSlot], int]:
    """Load the slots shown on the sessions board.

    Returns ``(slot_date, slots, total_check_ins)``. When the target date has
    no occurrences, the most recent earlier date with data is used instead.
    """
    now = now or datetime.now()
    target = slot_target_date(now)

    rows = await store.query(
        SESSION_OCCURRENCES,
        columns=_SLOT_COLUMNS,
        filters=[eq("date", target)],
        order=[OrderBy("start_time_of_day")],
    )
    slot_date: date | None = target

    if not rows:
        previous = await store.query(
            SESSION_OCCURRENCES,
            columns=_SLOT_COLUMNS,
            filters=[lt("date", target)],
            order=[OrderBy("date", descending=True), OrderBy("start_time_of_day")],
            limit=_PREVIOUS_DAY_LOOKBACK_ROWS,
        )
        if not previous:
            return None, [], 0
        most_recent = previous[0]["date"]
        rows = [r for r in previous if r["date"] == most_recent]
        slot_date = as_date(most_recent)
        logger.info("No session occurrences for %s, falling back to %s", target, slot_date)

    slots: list[TimeSlot] = []
    check_ins = 0
    for row in rows:
        try:
            slots.append(_to_time_slot(row))
            check_ins += as_count(row.get("attended_count"))
        except ComputationError as exc:
            logger.warning("Skipping malformed session occurrence %r: %s", row.get("id"), exc)
    return slot_date, slots, check_ins


async def get_current_occupancy(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> CurrentOccupancyResponse:
    now = local_now(now, settings.timezone)
    _, slots, _ = await fetch_today_time_slots(store, now)
    occupancy, slot = resolve_current_occupancy(slots, now)
    return CurrentOccupancyResponse(
        occupancy=occupancy,
        slot=slot,
        max_capacity=settings.max_capacity,
        utilization=percent(occupancy, settings.max_capacity),
    )


async def get_session_summary(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> SessionSummaryResponse:
    """Peak, average and current head counts for the sessions board."""
    now = local_now(now, settings.timezone)
    slot_date, slots, check_ins = await fetch_today_time_slots(store, now)
    occupancy, _ = resolve_current_occupancy(slots, now)
    counts = [s.current for s in slots]
    return SessionSummaryResponse(
        date=slot_date,
        peak_occupancy=max(counts, default=0),
        average_occupancy=ratio(sum(counts), len(counts)) if counts else ZERO,
        total_check_ins=check_ins,
        current_occupancy=occupancy,
        current_utilization=percent(occupancy, settings.max_capacity),
        slots=slots,
    )


async def get_daily_occupancy(
    store: DataStore,
    settings: Settings,
    day: date | None = None,
) -> DailyOccupancyResponse:
    """Dense occupancy curve for ``day`` over the configured buckets."""
    day = day or local_now(None, settings.timezone).date()
    samples = await fetch_hourly_samples(store, day)
    bucketer = TimeSlotBucketer.from_settings(settings)
    return DailyOccupancyResponse(date=day, points=bucketer.bucket(samples))
