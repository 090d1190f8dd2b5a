"""Pure calendar helpers for month and ISO-week windows.

A month always spans its first through last day inclusive and an ISO week
starts on Monday.
"""

from __future__ import annotations

import calendar as _stdlib_calendar
from datetime import date, datetime, timedelta


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def start_of_month(value: date | datetime) -> date:
    return _as_date(value).replace(day=1)


def end_of_month(value: date | datetime) -> date:
    day = _as_date(value)
    last = _stdlib_calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=last)


def shift_months(value: date | datetime, months: int) -> date:
    """First day of the month ``months`` away from ``value``'s month."""
    day = _as_date(value)
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def previous_month(value: date | datetime) -> tuple[date, date]:
    """Inclusive ``(first, last)`` days of the month before ``value``."""
    first = shift_months(value, -1)
    return first, end_of_month(first)


def month_bounds(value: date | datetime) -> tuple[date, date]:
    """Inclusive ``(first, last)`` days of ``value``'s month."""
    return start_of_month(value), end_of_month(value)


def start_of_iso_week(value: date | datetime) -> date:
    day = _as_date(value)
    return day - timedelta(days=day.weekday())


def end_of_iso_week(value: date | datetime) -> date:
    return start_of_iso_week(value) + timedelta(days=6)


def month_window(value: date | datetime, months: int) -> list[date]:
    """First days of the ``months`` calendar months ending at ``value``'s month, oldest first."""
    if months < 1:
        raise ValueError("months must be >= 1")
    return [shift_months(value, offset) for offset in range(-(months - 1), 1)]
