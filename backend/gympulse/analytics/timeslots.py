"""Time-slot bucketing and current-occupancy resolution.

``TimeSlotBucketer`` turns the sparse hourly samples of one day into a dense
series over the configured buckets. ``resolve_current_occupancy`` picks the
slot that best represents "now" for the live occupancy card.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from gympulse.analytics.parsing import as_count, hhmm, minutes_since_midnight
from gympulse.errors import ComputationError, ConfigurationError
from gympulse.schemas.analytics import LabeledValue, TimeSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlotBucket:
    """A labeled ``[start, end)`` range in minutes since midnight."""

    label: str
    start: int
    end: int

    @property
    def start_hhmm(self) -> str:
        return f"{self.start // 60:02d}:{self.start % 60:02d}"

    @property
    def end_hhmm(self) -> str:
        return f"{self.end // 60:02d}:{self.end % 60:02d}"


def _hour_12(hour: int) -> tuple[int, str]:
    hour %= 24
    return (12 if hour % 12 == 0 else hour % 12), ("PM" if hour >= 12 else "AM")


def hour_range_label(start_hour: int, end_hour: int) -> str:
    """``(6, 7)`` -> ``"6-7 AM"``; ``(11, 12)`` -> ``"11 AM-12 PM"``."""
    start, start_suffix = _hour_12(start_hour)
    end, end_suffix = _hour_12(end_hour)
    if start_suffix == end_suffix:
        return f"{start}-{end} {end_suffix}"
    return f"{start} {start_suffix}-{end} {end_suffix}"


def format_time_12h(value: Any) -> str:
    """``"14:30"`` -> ``"2:30 PM"``."""
    minutes = minutes_since_midnight(value)
    hour, suffix = _hour_12(minutes // 60)
    return f"{hour}:{minutes % 60:02d} {suffix}"


def format_time_range_12h(start: Any, end: Any) -> str:
    return f"{format_time_12h(start)} - {format_time_12h(end)}"


def validate_buckets(buckets: Sequence[TimeSlotBucket]) -> None:
    """Buckets must be non-empty, ascending, non-overlapping and contiguous."""
    if not buckets:
        raise ConfigurationError("at least one time slot bucket is required")
    for bucket in buckets:
        if not 0 <= bucket.start < bucket.end <= 24 * 60:
            raise ConfigurationError(f"bucket {bucket.label!r} has an invalid range")
    for prev, curr in zip(buckets, buckets[1:]):
        if curr.start != prev.end:
            raise ConfigurationError(
                f"bucket {curr.label!r} does not start where {prev.label!r} ends"
            )


def hourly_buckets(start_hour: int, end_hour: int) -> list[TimeSlotBucket]:
    """One-hour buckets covering ``[start_hour, end_hour)``, e.g. 6-7 AM .. 6-7 PM."""
    buckets = [
        TimeSlotBucket(label=hour_range_label(h, h + 1), start=h * 60, end=(h + 1) * 60)
        for h in range(start_hour, end_hour)
    ]
    validate_buckets(buckets)
    return buckets


class TimeSlotBucketer:
    """Map sparse ``(start_time, occupancy)`` samples onto fixed buckets."""

    def __init__(self, buckets: Sequence[TimeSlotBucket]) -> None:
        validate_buckets(buckets)
        self.buckets = tuple(buckets)

    @classmethod
    def from_settings(cls, settings) -> "TimeSlotBucketer":
        return cls(hourly_buckets(settings.operating_start_hour, settings.operating_end_hour))

    def bucket(
        self,
        samples: Iterable[Mapping[str, Any]],
        time_key: str = "start_time_of_day",
        value_key: str = "hourly_occupancy",
    ) -> list[LabeledValue]:
        """Return exactly one point per bucket, in configured order.

        A bucket takes the value of the first sample whose start time,
        truncated to ``HH:MM``, equals the bucket start. Buckets without a
        sample are 0. Malformed samples are skipped.
        """
        by_start: dict[str, int] = {}
        for sample in samples:
            try:
                key = hhmm(sample.get(time_key))
                value = as_count(sample.get(value_key))
            except ComputationError as exc:
                logger.warning("Skipping malformed occupancy sample %r: %s", sample, exc)
                continue
            by_start.setdefault(key, value)

        return [LabeledValue(label=b.label, value=by_start.get(b.start_hhmm, 0)) for b in self.buckets]


def resolve_current_occupancy(
    slots: Sequence[TimeSlot],
    now: datetime | None = None,
) -> tuple[int, TimeSlot | None]:
    """Return ``(occupancy, slot)`` for the slot that represents ``now``.

    The first slot with ``start <= now < end`` wins. Otherwise the slot whose
    nearer boundary is closest to ``now`` is used, ties going to the earlier
    slot in input order. No slots yields ``(0, None)``.
    """
    if not slots:
        return 0, None

    now = now or datetime.now()
    now_minutes = now.hour * 60 + now.minute

    for slot in slots:
        if slot.start_minutes <= now_minutes < slot.end_minutes:
            return slot.current, slot

    def distance(slot: TimeSlot) -> int:
        return min(abs(now_minutes - slot.start_minutes), abs(now_minutes - slot.end_minutes))

    nearest = slots[0]
    for slot in slots[1:]:
        if distance(slot) < distance(nearest):
            nearest = slot
    return nearest.current, nearest
