"""Pydantic v2 request/response schemas for analytics rollups."""

import datetime as dt

from pydantic import BaseModel, Field, model_validator

from gympulse.models.analytics_record import DAILY_SUMMARY_END, DAILY_SUMMARY_START

_HHMM = r"^([01]\d|2[0-4]):[0-5]\d$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class HourlyRollup(BaseModel):
    """Metrics for one completed time bucket."""

    date: dt.date
    start_time_of_day: str = Field(..., pattern=_HHMM)
    end_time_of_day: str = Field(..., pattern=_HHMM)
    hourly_occupancy: int = Field(0, ge=0)
    daily_occupancy: int = Field(0, ge=0)
    booked_count: int = Field(0, ge=0)
    no_show_count: int = Field(0, ge=0)
    cancelled_count: int = Field(0, ge=0)
    waitlist_count: int = Field(0, ge=0)
    peak_time: str | None = Field(None, pattern=_HHMM)
    max_capacity: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def check_times(self) -> "HourlyRollup":
        """Validate that the bucket ends after it starts and is not the daily summary span."""
        if self.end_time_of_day <= self.start_time_of_day:
            raise ValueError("end_time_of_day must be after start_time_of_day")
        if (self.start_time_of_day, self.end_time_of_day) == (DAILY_SUMMARY_START, DAILY_SUMMARY_END):
            raise ValueError(
                f"{DAILY_SUMMARY_START}-{DAILY_SUMMARY_END} is reserved for the daily summary row"
            )
        return self


class DailySummary(BaseModel):
    """Whole-day totals, stored as the 00:00-23:59 sentinel row."""

    date: dt.date
    total_occupancy: int = Field(0, ge=0)
    total_booked: int = Field(0, ge=0)
    total_no_shows: int = Field(0, ge=0)
    total_cancellations: int = Field(0, ge=0)
    total_waitlist: int = Field(0, ge=0)
    peak_occupancy: int = Field(0, ge=0)
    peak_time: str | None = Field(None, pattern=_HHMM)
    max_capacity: int | None = Field(None, gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RollupWriteResponse(BaseModel):
    """Outcome of a rollup write; ``written`` is False when an identical bucket already existed."""

    written: bool
    date: dt.date
    start_time_of_day: str
    end_time_of_day: str


class BackfillResponse(BaseModel):
    hours_logged: int
    buckets: list[RollupWriteResponse]
