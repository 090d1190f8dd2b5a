"""Tests for time-slot bucketing and current-occupancy resolution."""

from datetime import datetime

import pytest

from gympulse.analytics.timeslots import (
    TimeSlotBucket,
    TimeSlotBucketer,
    format_time_range_12h,
    hour_range_label,
    hourly_buckets,
    resolve_current_occupancy,
)
from gympulse.config import Settings
from gympulse.errors import ConfigurationError
from gympulse.schemas.analytics import TimeSlot


def _slot(start: int, end: int, current: int) -> TimeSlot:
    return TimeSlot(
        label=f"{start // 60:02d}:{start % 60:02d} - {end // 60:02d}:{end % 60:02d}",
        start_minutes=start,
        end_minutes=end,
        current=current,
        capacity=20,
    )


class TestLabels:
    @pytest.mark.parametrize(
        ("start", "end", "expected"),
        [(6, 7, "6-7 AM"), (11, 12, "11 AM-12 PM"), (12, 13, "12-1 PM"), (18, 19, "6-7 PM")],
    )
    def test_hour_range_label(self, start: int, end: int, expected: str) -> None:
        assert hour_range_label(start, end) == expected

    def test_twelve_hour_range(self) -> None:
        assert format_time_range_12h("08:00", "09:00") == "8:00 AM - 9:00 AM"
        assert format_time_range_12h("12:30", "13:30") == "12:30 PM - 1:30 PM"


class TestBuckets:
    def test_default_operating_hours(self) -> None:
        buckets = hourly_buckets(6, 19)
        assert len(buckets) == 13
        assert buckets[0].label == "6-7 AM"
        assert buckets[-1].label == "6-7 PM"
        assert buckets[-1].start_hhmm == "18:00"

    def test_gap_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TimeSlotBucketer([TimeSlotBucket("a", 360, 420), TimeSlotBucket("b", 480, 540)])

    def test_empty_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TimeSlotBucketer([])


class TestBucketer:
    @pytest.fixture
    def bucketer(self) -> TimeSlotBucketer:
        return TimeSlotBucketer.from_settings(Settings(_env_file=None))

    def test_dense_output_for_sparse_samples(self, bucketer: TimeSlotBucketer) -> None:
        points = bucketer.bucket(
            [
                {"start_time_of_day": "08:00:00", "hourly_occupancy": 12},
                {"start_time_of_day": "17:00", "hourly_occupancy": 30},
            ]
        )
        assert [p.label for p in points] == [b.label for b in bucketer.buckets]
        values = {p.label: p.value for p in points}
        assert values["8-9 AM"] == 12
        assert values["5-6 PM"] == 30
        assert values["6-7 AM"] == 0
        assert sum(p.value for p in points) == 42

    def test_no_samples_is_all_zero(self, bucketer: TimeSlotBucketer) -> None:
        points = bucketer.bucket([])
        assert len(points) == 13
        assert all(p.value == 0 for p in points)

    def test_first_duplicate_wins(self, bucketer: TimeSlotBucketer) -> None:
        points = bucketer.bucket(
            [
                {"start_time_of_day": "09:00", "hourly_occupancy": 7},
                {"start_time_of_day": "09:00", "hourly_occupancy": 99},
            ]
        )
        assert points[3].value == 7

    def test_samples_outside_buckets_are_ignored(self, bucketer: TimeSlotBucketer) -> None:
        points = bucketer.bucket([{"start_time_of_day": "22:00", "hourly_occupancy": 5}])
        assert sum(p.value for p in points) == 0

    def test_malformed_sample_skipped(self, bucketer: TimeSlotBucketer) -> None:
        points = bucketer.bucket(
            [
                {"start_time_of_day": "xx", "hourly_occupancy": 5},
                {"start_time_of_day": "10:00", "hourly_occupancy": -4},
                {"start_time_of_day": "10:00", "hourly_occupancy": 6},
            ]
        )
        assert points[4].value == 6


class TestResolveCurrentOccupancy:
    def test_exact_match(self) -> None:
        slots = [_slot(360, 420, 3), _slot(480, 540, 5)]
        occupancy, slot = resolve_current_occupancy(slots, datetime(2024, 5, 15, 8, 30))
        assert occupancy == 5
        assert slot is slots[1]

    def test_gap_uses_nearest_boundary(self) -> None:
        slots = [_slot(360, 420, 3), _slot(480, 540, 5)]
        occupancy, _ = resolve_current_occupancy(slots, datetime(2024, 5, 15, 7, 45))
        assert occupancy == 5

    def test_tie_goes_to_first_slot(self) -> None:
        slots = [_slot(360, 420, 3), _slot(480, 540, 5)]
        occupancy, slot = resolve_current_occupancy(slots, datetime(2024, 5, 15, 7, 30))
        assert occupancy == 3
        assert slot is slots[0]

    def test_end_is_exclusive(self) -> None:
        slots = [_slot(360, 420, 3), _slot(420, 480, 9)]
        occupancy, _ = resolve_current_occupancy(slots, datetime(2024, 5, 15, 7, 0))
        assert occupancy == 9

    def test_after_hours_uses_last_slot(self) -> None:
        slots = [_slot(360, 420, 3), _slot(480, 540, 5)]
        occupancy, _ = resolve_current_occupancy(slots, datetime(2024, 5, 15, 21, 0))
        assert occupancy == 5

    def test_no_slots(self) -> None:
        assert resolve_current_occupancy([], datetime(2024, 5, 15, 8, 0)) == (0, None)
