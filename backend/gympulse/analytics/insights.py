"""Categorical insights: peak hours, booking behaviour, user engagement and user mix."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime

from gympulse.analytics.occupancy import fetch_hourly_samples
from gympulse.analytics.parsing import as_count, as_date, as_datetime, hhmm, local_now, minutes_since_midnight
from gympulse.analytics.periods import month_bounds, previous_month
from gympulse.analytics.rates import percent, quantize
from gympulse.analytics.status import is_cancelled
from gympulse.analytics.timeslots import format_time_range_12h
from gympulse.config import Settings
from gympulse.errors import ComputationError
from gympulse.schemas.analytics import (
    BookingInsightsResponse,
    Insight,
    PeakHoursResponse,
    PeakSlot,
    UserEngagementResponse,
    UserTypeShare,
)
from gympulse.store.base import BOOKINGS, USERS, DataStore, OrderBy, Row, between, in_

logger = logging.getLogger(__name__)

MORNING = (6 * 60, 12 * 60)
AFTERNOON = (12 * 60, 18 * 60)
NOT_AVAILABLE = "N/A"
_SECONDS_PER_DAY = 86400


# ---------------------------------------------------------------------------
# Peak hours
# ---------------------------------------------------------------------------


def _peak_slot(start: str, end: str, occupancy: int) -> PeakSlot:
    return PeakSlot(
        start_time=start,
        end_time=end,
        occupancy=occupancy,
        label=format_time_range_12h(start, end),
    )


def find_peak_hours(samples: Sequence[Row]) -> tuple[PeakSlot | None, PeakSlot | None, PeakSlot | None]:
    """Return ``(morning_peak, afternoon_peak, lowest_usage)`` for one day's samples.

    Samples are scanned in ascending start time so ties go to the earliest
    slot. Lowest usage only considers slots with occupancy above zero.
    """
    # (start minutes, occupancy, start HH:MM, end HH:MM)
    parsed: list[tuple[int, int, str, str]] = []
    for sample in samples:
        try:
            start = hhmm(sample.get("start_time_of_day"))
            end = hhmm(sample.get("end_time_of_day"))
            minutes_since_midnight(end)
            parsed.append((minutes_since_midnight(start), as_count(sample.get("hourly_occupancy")), start, end))
        except ComputationError as exc:
            logger.warning("Skipping malformed hourly sample %r: %s", sample, exc)
    parsed.sort(key=lambda item: item[0])

    def slot(item: tuple[int, int, str, str] | None) -> PeakSlot | None:
        return _peak_slot(item[2], item[3], item[1]) if item else None

    def best(window: tuple[int, int]) -> PeakSlot | None:
        winner = None
        for item in parsed:
            if window[0] <= item[0] < window[1] and (winner is None or item[1] > winner[1]):
                winner = item
        return slot(winner)

    lowest = None
    for item in parsed:
        if item[1] > 0 and (lowest is None or item[1] < lowest[1]):
            lowest = item

    return best(MORNING), best(AFTERNOON), slot(lowest)


async def compute_peak_hours(
    store: DataStore,
    settings: Settings,
    day: date | None = None,
) -> PeakHoursResponse:
    day = day or local_now(None, settings.timezone).date()
    samples = await fetch_hourly_samples(store, day)
    morning, afternoon, lowest = find_peak_hours(samples)
    return PeakHoursResponse(
        date=day,
        morning_peak=morning,
        afternoon_peak=afternoon,
        lowest_usage=lowest,
        insights=[
            Insight(label="Morning Peak", value=morning.label if morning else NOT_AVAILABLE),
            Insight(label="Afternoon Peak", value=afternoon.label if afternoon else NOT_AVAILABLE),
            Insight(label="Lowest Usage", value=lowest.label if lowest else NOT_AVAILABLE),
        ],
    )


# ---------------------------------------------------------------------------
# Booking behaviour
# ---------------------------------------------------------------------------


def lead_time_days(booking: Row, tz: str | None = None) -> float:
    """Days between booking creation and the session date (midnight)."""
    session_day = as_date(booking.get("session_date"))
    booked_at = as_datetime(booking.get("booking_time"), tz)
    lead = (datetime.combine(session_day, datetime.min.time()) - booked_at).total_seconds() / _SECONDS_PER_DAY
    if not math.isfinite(lead):
        raise ComputationError(f"lead time is not a number for {booking!r}")
    return lead


def is_same_day(booking: Row, tz: str | None = None) -> bool:
    return as_datetime(booking.get("booking_time"), tz).date() == as_date(booking.get("session_date"))


async def compute_booking_insights(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> BookingInsightsResponse:
    """Lead time, cancellation rate and same-day share for this month's bookings."""
    now = local_now(now, settings.timezone)
    start, end = month_bounds(now)
    rows = await store.query(
        BOOKINGS,
        columns=["user_id", "session_date", "booking_time", "status"],
        filters=between("session_date", start, end),
    )

    total = len(rows)
    leads: list[float] = []
    cancelled = same_day = 0
    for row in rows:
        if is_cancelled(row.get("status")):
            cancelled += 1
        try:
            leads.append(lead_time_days(row, settings.timezone))
            if is_same_day(row, settings.timezone):
                same_day += 1
        except ComputationError as exc:
            logger.warning("Excluding booking from lead-time stats: %s", exc)

    average_lead = quantize(sum(leads) / len(leads)) if leads else None
    cancellation_rate = percent(cancelled, total)
    same_day_rate = percent(same_day, total)

    return BookingInsightsResponse(
        period_start=start,
        period_end=end,
        total_bookings=total,
        average_lead_time_days=average_lead,
        cancellation_rate=cancellation_rate,
        same_day_rate=same_day_rate,
        insights=[
            Insight(
                label="Average Booking Lead Time",
                value=f"{average_lead.normalize():f} days" if average_lead is not None else NOT_AVAILABLE,
            ),
            Insight(label="Cancellation Rate", value=f"{cancellation_rate}%"),
            Insight(label="Same-day Bookings", value=f"{same_day_rate}%"),
        ],
    )


# ---------------------------------------------------------------------------
# User engagement
# ---------------------------------------------------------------------------


async def compute_user_engagement(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> UserEngagementResponse:
    """Regular, new and returning shares among users who booked this month."""
    now = local_now(now, settings.timezone)
    start, end = month_bounds(now)
    prev_start, _ = previous_month(now)

    rows = await store.query(
        BOOKINGS,
        columns=["user_id", "session_date"],
        filters=between("session_date", prev_start, end),
    )
    this_month: Counter[str] = Counter()
    last_month: Counter[str] = Counter()
    for row in rows:
        try:
            day = as_date(row.get("session_date"))
        except ComputationError as exc:
            logger.warning("Skipping booking with bad session_date: %s", exc)
            continue
        user = str(row.get("user_id"))
        if day >= start:
            this_month[user] += 1
        else:
            last_month[user] += 1

    active = sorted(this_month)
    first_booked: dict[str, date] = {}
    if active:
        history = await store.query(
            BOOKINGS,
            columns=["user_id", "session_date"],
            filters=[in_("user_id", _user_id_values(rows, active))],
            order=[OrderBy("session_date")],
        )
        for row in history:
            try:
                day = as_date(row.get("session_date"))
            except ComputationError:
                continue
            user = str(row.get("user_id"))
            if user not in first_booked or day < first_booked[user]:
                first_booked[user] = day

    regular = sum(1 for u in active if this_month[u] >= settings.regular_user_min_bookings)
    new = sum(1 for u in active if start <= first_booked.get(u, start) <= end)
    returning = sum(1 for u in active if last_month[u] > 0)
    total = len(active)

    regular_rate = percent(regular, total)
    new_rate = percent(new, total)
    returning_rate = percent(returning, total)

    return UserEngagementResponse(
        period_start=start,
        period_end=end,
        active_users=total,
        regular_users=regular,
        new_users=new,
        returning_users=returning,
        regular_rate=regular_rate,
        new_rate=new_rate,
        returning_rate=returning_rate,
        insights=[
            Insight(
                label=f"Regular Users ({settings.regular_user_min_bookings}+ bookings/month)",
                value=f"{regular_rate}%",
            ),
            Insight(label="New Users This Month", value=f"{new_rate}%"),
            Insight(label="Return Rate", value=f"{returning_rate}%"),
        ],
    )


def _user_id_values(rows: Sequence[Row], active: Sequence[str]) -> list:
    """Original (un-stringified) user ids for the active users, for the IN filter."""
    wanted = set(active)
    seen: dict[str, object] = {}
    for row in rows:
        key = str(row.get("user_id"))
        if key in wanted and key not in seen:
            seen[key] = row.get("user_id")
    return list(seen.values())


# ---------------------------------------------------------------------------
# User mix
# ---------------------------------------------------------------------------


async def compute_user_type_distribution(store: DataStore) -> list[UserTypeShare]:
    """Share of registered users per role, largest first."""
    rows = await store.query(USERS, columns=["user_role"])
    counts: Counter[str] = Counter(str(row.get("user_role") or "unknown") for row in rows)
    total = sum(counts.values())
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [UserTypeShare(user_role=role, count=count, percentage=percent(count, total)) for role, count in ordered]
