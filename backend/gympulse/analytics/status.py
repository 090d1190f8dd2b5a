"""Booking status vocabulary and classification."""

from __future__ import annotations

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ATTENDED = "attended"
    NO_SHOW = "no_show"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"
    CANCELLED_BY_USER = "cancelled_by_user"
    CANCELLED_BY_ADMIN = "cancelled_by_admin"


_CANCELLED_PREFIX = BookingStatus.CANCELLED.value


def is_cancelled(status: str | BookingStatus | None) -> bool:
    """True for any status starting with ``"cancelled"``.

    Matching is by prefix so variants the booking flow adds later (for example
    ``cancelled_late``) still count as cancellations.
    """
    if status is None:
        return False
    value = status.value if isinstance(status, BookingStatus) else str(status)
    return value.startswith(_CANCELLED_PREFIX)
