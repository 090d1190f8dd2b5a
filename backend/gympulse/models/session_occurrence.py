"""Session occurrence model: one scheduled time slot on one calendar day."""

import datetime as dt

from sqlalchemy import Date, Index, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from gympulse.database import Base, UUIDPrimaryKeyMixin


class SessionOccurrence(UUIDPrimaryKeyMixin, Base):
    """A session slot as it actually ran (or will run) on a given date."""

    __tablename__ = "session_occurrences"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time_of_day: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time_of_day: Mapped[dt.time] = mapped_column(Time, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    override_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    booked_slots: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    attended_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cancelled_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    waitlist_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="scheduled", nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (Index("ix_session_occurrences_date_start", "date", "start_time_of_day"),)

    def __repr__(self) -> str:
        return f"<SessionOccurrence(date={self.date}, start={self.start_time_of_day}, booked={self.booked_slots})>"
