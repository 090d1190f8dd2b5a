"""Persisting hourly and daily analytics rollups.

Rows are only ever appended. Hourly buckets and the daily summary share the
``analytics`` table; the summary row is the one spanning ``00:00``-``23:59``.
Store failures propagate to the caller unchanged.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any

from gympulse.analytics.occupancy import is_daily_summary_row
from gympulse.analytics.parsing import as_count, as_date, hhmm, local_now
from gympulse.config import Settings
from gympulse.errors import ComputationError, ConfigurationError
from gympulse.models.analytics_record import DAILY_SUMMARY_END, DAILY_SUMMARY_START
from gympulse.schemas.rollup import DailySummary, HourlyRollup, RollupWriteResponse
from gympulse.store.base import ANALYTICS, SESSION_OCCURRENCES, DataStore, OrderBy, eq, gte, lt, neq

logger = logging.getLogger(__name__)


class AnalyticsRollupWriter:
    """Append hourly and daily rollup rows to the ``analytics`` table.

    With ``settings.rollup_skip_existing`` enabled a bucket is written at most
    once: a row with the same ``(date, start_time_of_day, end_time_of_day)``
    makes the write a no-op that returns ``False``. With it disabled every call
    appends a new row.
    """

    def __init__(self, store: DataStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    def _resolve_capacity(self, max_capacity: int | None) -> int:
        if max_capacity is not None and max_capacity != self.settings.max_capacity:
            raise ConfigurationError(
                f"rollup max_capacity {max_capacity} disagrees with configured max_capacity "
                f"{self.settings.max_capacity}"
            )
        return self.settings.max_capacity

    async def _exists(self, day: date, start: str, end: str) -> bool:
        found = await self.store.count(
            ANALYTICS,
            filters=[eq("date", day), eq("start_time_of_day", start), eq("end_time_of_day", end)],
        )
        return found > 0

    async def _append(self, row: dict[str, Any]) -> bool:
        day, start, end = row["date"], row["start_time_of_day"], row["end_time_of_day"]
        if self.settings.rollup_skip_existing and await self._exists(day, start, end):
            logger.info("Rollup %s %s-%s already logged, skipping", day, start, end)
            return False
        await self.store.insert(ANALYTICS, [row])
        logger.info("Logged rollup %s %s-%s", day, start, end)
        return True

    async def log_hourly_rollup(self, rollup: HourlyRollup) -> bool:
        """Append the row for one completed time bucket."""
        row = rollup.model_dump()
        row["max_capacity"] = self._resolve_capacity(rollup.max_capacity)
        return await self._append(row)

    async def log_daily_summary(self, summary: DailySummary) -> bool:
        """Append the day's ``00:00``-``23:59`` summary row.

        ``hourly_occupancy`` carries the day's peak and ``daily_occupancy`` its
        total occupancy.
        """
        row = {
            "date": summary.date,
            "start_time_of_day": DAILY_SUMMARY_START,
            "end_time_of_day": DAILY_SUMMARY_END,
            "hourly_occupancy": summary.peak_occupancy,
            "daily_occupancy": summary.total_occupancy,
            "booked_count": summary.total_booked,
            "no_show_count": summary.total_no_shows,
            "cancelled_count": summary.total_cancellations,
            "waitlist_count": summary.total_waitlist,
            "peak_time": summary.peak_time,
            "max_capacity": self._resolve_capacity(summary.max_capacity),
        }
        return await self._append(row)


async def build_daily_summary(store: DataStore, day: date) -> DailySummary:
    """Derive a day's summary from the hourly rows already logged for it."""
    rows = await store.query(
        ANALYTICS,
        filters=[eq("date", day)],
        order=[OrderBy("start_time_of_day")],
    )
    summary = DailySummary(date=day)
    peak = -1
    for row in rows:
        if is_daily_summary_row(row):
            continue
        try:
            occupancy = as_count(row.get("hourly_occupancy"))
            booked = as_count(row.get("booked_count"))
            no_shows = as_count(row.get("no_show_count"))
            cancellations = as_count(row.get("cancelled_count"))
            waitlist = as_count(row.get("waitlist_count"))
            peak_time = hhmm(row.get("peak_time") or row.get("start_time_of_day"))
        except ComputationError as exc:
            logger.warning("Skipping malformed hourly row for %s: %s", day, exc)
            continue
        summary.total_occupancy += occupancy
        summary.total_booked += booked
        summary.total_no_shows += no_shows
        summary.total_cancellations += cancellations
        summary.total_waitlist += waitlist
        if occupancy > peak:
            peak = occupancy
            summary.peak_occupancy = occupancy
            summary.peak_time = peak_time
    return summary


# ---------------------------------------------------------------------------
# Backfill
# ---------------------------------------------------------------------------


async def _next_hour_to_log(store: DataStore, now: datetime) -> datetime:
    latest = await store.query(
        ANALYTICS,
        columns=["date", "start_time_of_day"],
        filters=[neq("end_time_of_day", DAILY_SUMMARY_END)],
        order=[OrderBy("date", descending=True), OrderBy("start_time_of_day", descending=True)],
        limit=1,
    )
    if not latest:
        return datetime.combine(now.date(), time.min)
    last_day = as_date(latest[0]["date"])
    last_hour = int(hhmm(latest[0]["start_time_of_day"])[:2])
    return datetime.combine(last_day, time(last_hour)) + timedelta(hours=1)


async def aggregate_hour(store: DataStore, day: date, hour: int) -> HourlyRollup:
    """Roll the session occurrences starting within ``[hour, hour + 1)`` into one bucket.

    Occupancy is the number of members who actually attended.
    """
    filters = [eq("date", day), gte("start_time_of_day", time(hour))]
    if hour < 23:
        filters.append(lt("start_time_of_day", time(hour + 1)))
    rows = await store.query(
        SESSION_OCCURRENCES,
        columns=["start_time_of_day", "booked_slots", "attended_count", "cancelled_count", "waitlist_count"],
        filters=filters,
        order=[OrderBy("start_time_of_day")],
    )

    start = f"{hour:02d}:00"
    occupancy = booked = cancelled = waitlist = 0
    peak_time, peak = start, 0
    for row in rows:
        try:
            attended = as_count(row.get("attended_count"))
            row_booked = as_count(row.get("booked_slots"))
            row_cancelled = as_count(row.get("cancelled_count"))
            row_waitlist = as_count(row.get("waitlist_count"))
            row_start = hhmm(row.get("start_time_of_day"))
        except ComputationError as exc:
            logger.warning("Skipping malformed session occurrence on %s: %s", day, exc)
            continue
        occupancy += attended
        booked += row_booked
        cancelled += row_cancelled
        waitlist += row_waitlist
        if attended > peak:
            peak = attended
            peak_time = row_start

    return HourlyRollup(
        date=day,
        start_time_of_day=start,
        end_time_of_day=f"{hour + 1:02d}:00",
        hourly_occupancy=occupancy,
        booked_count=booked,
        no_show_count=max(booked - occupancy, 0),
        cancelled_count=cancelled,
        waitlist_count=waitlist,
        peak_time=peak_time,
    )


async def backfill_hourly_rollups(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> list[RollupWriteResponse]:
    """Log every completed hour since the latest hourly row, up to ``now``.

    Starts at today's midnight when nothing has been logged yet and stops
    after ``settings.rollup_backfill_max_hours`` buckets.
    """
    now = local_now(now, settings.timezone)
    writer = AnalyticsRollupWriter(store, settings)
    bucket_start = await _next_hour_to_log(store, now)

    results: list[RollupWriteResponse] = []
    while bucket_start + timedelta(hours=1) <= now:
        if len(results) >= settings.rollup_backfill_max_hours:
            logger.warning(
                "Backfill stopped after %d hours; next pending bucket is %s",
                len(results),
                bucket_start,
            )
            break
        rollup = await aggregate_hour(store, bucket_start.date(), bucket_start.hour)
        written = await writer.log_hourly_rollup(rollup)
        results.append(
            RollupWriteResponse(
                written=written,
                date=rollup.date,
                start_time_of_day=rollup.start_time_of_day,
                end_time_of_day=rollup.end_time_of_day,
            )
        )
        bucket_start += timedelta(hours=1)
    return results
