"""Tests for field coercion, rates and booking status classification."""

from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from gympulse.analytics.parsing import (
    as_count,
    as_date,
    as_datetime,
    as_time,
    hhmm,
    local_now,
    minutes_since_midnight,
)
from gympulse.analytics.rates import absolute_change, change_type, percent, ratio, relative_change
from gympulse.analytics.status import BookingStatus, is_cancelled
from gympulse.errors import ComputationError


class TestParsing:
    def test_as_date_from_iso_timestamp(self) -> None:
        assert as_date("2024-05-15T10:30:00Z") == date(2024, 5, 15)

    def test_as_date_rejects_garbage(self) -> None:
        with pytest.raises(ComputationError):
            as_date("not-a-date")

    def test_as_datetime_converts_to_local_time(self) -> None:
        parsed = as_datetime("2024-05-15T23:30:00Z", "Asia/Makassar")
        assert parsed == datetime(2024, 5, 16, 7, 30)
        assert parsed.tzinfo is None

    def test_as_datetime_keeps_naive_values(self) -> None:
        assert as_datetime(datetime(2024, 5, 15, 8, 0)) == datetime(2024, 5, 15, 8, 0)

    def test_local_now_converts_aware_values(self) -> None:
        now = local_now(datetime(2024, 5, 31, 20, 0, tzinfo=timezone.utc), "Asia/Manila")
        assert now == datetime(2024, 6, 1, 4, 0)

    def test_local_now_keeps_naive_values(self) -> None:
        assert local_now(datetime(2024, 5, 31, 20, 0), "Asia/Manila") == datetime(2024, 5, 31, 20, 0)

    def test_local_now_defaults_to_naive_current_time(self) -> None:
        assert local_now(None, "Asia/Manila").tzinfo is None

    def test_as_time_end_of_day(self) -> None:
        assert as_time("24:00") == time(23, 59, 59)

    @pytest.mark.parametrize(("value", "expected"), [("06:00:00", "06:00"), ("7:5", "07:05"), (time(18, 30), "18:30")])
    def test_hhmm(self, value, expected: str) -> None:
        assert hhmm(value) == expected

    def test_minutes_since_midnight(self) -> None:
        assert minutes_since_midnight("08:30") == 510
        assert minutes_since_midnight("24:00") == 1440

    def test_minutes_out_of_range(self) -> None:
        with pytest.raises(ComputationError):
            minutes_since_midnight("25:00")

    def test_as_count(self) -> None:
        assert as_count(None) == 0
        assert as_count("12") == 12
        assert as_count(Decimal("3")) == 3

    @pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), 10**400, "12.7", 3.5, "abc", True])
    def test_as_count_rejects(self, value) -> None:
        with pytest.raises(ComputationError):
            as_count(value)


class TestRates:
    def test_percent_rounds_half_up(self) -> None:
        assert percent(1, 8) == Decimal("12.50")
        assert percent(1, 3) == Decimal("33.33")
        assert percent(2, 3) == Decimal("66.67")

    def test_zero_denominator(self) -> None:
        assert percent(5, 0) == Decimal("0.00")
        assert ratio(5, 0) == Decimal("0.00")

    def test_relative_change(self) -> None:
        assert relative_change(120, 100) == Decimal("20.00")
        assert relative_change(80, 100) == Decimal("-20.00")

    def test_relative_change_from_zero_is_zero(self) -> None:
        assert relative_change(10, 0) == Decimal("0.00")

    def test_absolute_change(self) -> None:
        assert absolute_change(Decimal("12.50"), Decimal("10.00")) == Decimal("2.50")

    def test_change_type(self) -> None:
        assert change_type(Decimal("0.01")) == "increase"
        assert change_type(Decimal("-3")) == "decrease"
        assert change_type(Decimal("0.00")) == "unchanged"


class TestBookingStatus:
    @pytest.mark.parametrize("status", ["cancelled", "cancelled_by_user", "cancelled_by_admin", "cancelled_late"])
    def test_cancelled_variants(self, status: str) -> None:
        assert is_cancelled(status)

    @pytest.mark.parametrize("status", ["confirmed", "attended", "no_show", "waitlisted", None])
    def test_not_cancelled(self, status) -> None:
        assert not is_cancelled(status)

    def test_enum_member(self) -> None:
        assert is_cancelled(BookingStatus.CANCELLED_BY_ADMIN)
        assert not is_cancelled(BookingStatus.PENDING)
