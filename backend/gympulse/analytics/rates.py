"""Percentages and period-over-period changes as two-place decimals."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from gympulse.schemas.analytics import ChangeType

_TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(value: Decimal | int | float) -> Decimal:
    return Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def ratio(numerator: Decimal | int | float, denominator: Decimal | int | float) -> Decimal:
    """``numerator / denominator`` rounded, or 0.00 when the denominator is 0."""
    if not denominator:
        return ZERO
    return quantize(Decimal(str(numerator)) / Decimal(str(denominator)))


def percent(numerator: Decimal | int | float, denominator: Decimal | int | float) -> Decimal:
    """``numerator / denominator * 100`` rounded, or 0.00 when the denominator is 0."""
    if not denominator:
        return ZERO
    return quantize(Decimal(str(numerator)) * 100 / Decimal(str(denominator)))


def relative_change(current: Decimal | int, previous: Decimal | int) -> Decimal:
    """Percent change from ``previous`` to ``current``; 0.00 when ``previous`` is 0."""
    if not previous:
        return ZERO
    return percent(Decimal(current) - Decimal(previous), previous)


def absolute_change(current: Decimal, previous: Decimal) -> Decimal:
    """Percentage-point difference between two values that are already percentages."""
    return quantize(Decimal(current) - Decimal(previous))


def change_type(change: Decimal) -> ChangeType:
    if change > 0:
        return "increase"
    if change < 0:
        return "decrease"
    return "unchanged"
