"""Booking model: one member's reservation of a session slot."""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gympulse.database import Base, UUIDPrimaryKeyMixin


class Booking(UUIDPrimaryKeyMixin, Base):
    """A reservation linking a user to a session date."""

    __tablename__ = "bookings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_date: Mapped[date] = mapped_column(Date, nullable=False)
    booking_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        default="confirmed",
        index=True,
    )  # pending, confirmed, attended, no_show, waitlisted, cancelled, cancelled_by_admin

    __table_args__ = (Index("ix_bookings_session_date", "session_date"),)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user_id={self.user_id}, session_date={self.session_date}, status={self.status})>"
