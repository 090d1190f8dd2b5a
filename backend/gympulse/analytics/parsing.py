"""Field coercion for rows coming back from the data store.

Stores hand back either native ``date``/``time``/``datetime`` objects (SQL) or
ISO strings (JSON-ish sources). Everything malformed raises
``ComputationError`` so callers can skip the offending record.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any
from zoneinfo import ZoneInfo

from gympulse.errors import ComputationError


def as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise ComputationError(f"invalid date {value!r}") from exc
    raise ComputationError(f"invalid date {value!r}")


def as_datetime(value: Any, tz: str | None = None) -> datetime:
    """Parse a timestamp and return it as a naive local datetime.

    Aware values are converted to ``tz`` before the offset is dropped so that
    comparisons against naive session dates happen in facility-local time.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ComputationError(f"invalid timestamp {value!r}") from exc
    else:
        raise ComputationError(f"invalid timestamp {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(tz or "UTC")).replace(tzinfo=None)
    return parsed


def as_time(value: Any) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        parts = value.strip().split(":")
        try:
            hour = int(parts[0])
            minute = int(parts[1]) if len(parts) > 1 else 0
            if hour == 24 and minute == 0:
                return time(23, 59, 59)
            return time(hour, minute)
        except ValueError as exc:
            raise ComputationError(f"invalid time of day {value!r}") from exc
    raise ComputationError(f"invalid time of day {value!r}")


def hhmm(value: Any) -> str:
    """Truncate a time of day to ``"HH:MM"`` (``"06:00:00"`` -> ``"06:00"``)."""
    if isinstance(value, str):
        parts = value.strip().split(":")
        try:
            return f"{int(parts[0]):02d}:{int(parts[1]) if len(parts) > 1 else 0:02d}"
        except ValueError as exc:
            raise ComputationError(f"invalid time of day {value!r}") from exc
    parsed = as_time(value)
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def minutes_since_midnight(value: Any) -> int:
    """``"HH:MM"`` or ``time`` to minutes; ``"24:00"`` maps to 1440."""
    label = hhmm(value)
    hour, minute = (int(p) for p in label.split(":"))
    if not (0 <= hour <= 24 and 0 <= minute < 60) or (hour == 24 and minute):
        raise ComputationError(f"time of day out of range {value!r}")
    return hour * 60 + minute


def as_count(value: Any) -> int:
    """Non-negative whole count; ``None`` counts as 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ComputationError(f"invalid count {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ComputationError(f"invalid count {value!r}") from exc
    if not math.isfinite(number) or number < 0 or not number.is_integer():
        raise ComputationError(f"invalid count {value!r}")
    return int(number)


def local_now(now: datetime | None = None, tz: str | None = None) -> datetime:
    """``now`` as a naive facility-local datetime, defaulting to the current time in ``tz``."""
    if now is None:
        return datetime.now(ZoneInfo(tz or "UTC")).replace(tzinfo=None)
    return as_datetime(now, tz)
