"""Analytics rollup model: hourly occupancy samples and daily summary rows.

Daily summaries live in the same table as hourly rows and are marked by the
``00:00``/``23:59`` start/end sentinel pair.
"""

import datetime as dt

from sqlalchemy import Date, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from gympulse.database import Base

DAILY_SUMMARY_START = "00:00"
DAILY_SUMMARY_END = "23:59"


class AnalyticsRecord(Base):
    """One persisted rollup row. Append-only."""

    __tablename__ = "analytics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time_of_day: Mapped[str] = mapped_column(String(5), nullable=False)  # "HH:MM"
    end_time_of_day: Mapped[str] = mapped_column(String(5), nullable=False)  # "HH:MM"
    hourly_occupancy: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    daily_occupancy: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    booked_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    no_show_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cancelled_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    waitlist_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    peak_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    max_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(server_default=func.now())

    __table_args__ = (Index("ix_analytics_date_start", "date", "start_time_of_day"),)

    @property
    def is_daily_summary(self) -> bool:
        return self.start_time_of_day == DAILY_SUMMARY_START and self.end_time_of_day == DAILY_SUMMARY_END

    def __repr__(self) -> str:
        return f"<AnalyticsRecord(date={self.date}, {self.start_time_of_day}-{self.end_time_of_day})>"
