"""Rollup API router: append hourly and daily analytics rows."""

from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status

from gympulse.analytics.rollup import AnalyticsRollupWriter, backfill_hourly_rollups, build_daily_summary
from gympulse.api.deps import get_settings, get_store
from gympulse.config import Settings
from gympulse.models.analytics_record import DAILY_SUMMARY_END, DAILY_SUMMARY_START
from gympulse.schemas.rollup import BackfillResponse, DailySummary, HourlyRollup, RollupWriteResponse
from gympulse.store import DataStore

router = APIRouter(prefix="/api/v1/analytics/rollups", tags=["rollups"])


@router.post("/hourly", response_model=RollupWriteResponse, status_code=status.HTTP_201_CREATED)
async def log_hourly(
    body: HourlyRollup,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RollupWriteResponse:
    """Append the rollup row for one completed time bucket."""
    written = await AnalyticsRollupWriter(store, settings).log_hourly_rollup(body)
    return RollupWriteResponse(
        written=written,
        date=body.date,
        start_time_of_day=body.start_time_of_day,
        end_time_of_day=body.end_time_of_day,
    )


@router.post("/daily", response_model=RollupWriteResponse, status_code=status.HTTP_201_CREATED)
async def log_daily(
    body: DailySummary,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RollupWriteResponse:
    """Append the day's 00:00-23:59 summary row."""
    written = await AnalyticsRollupWriter(store, settings).log_daily_summary(body)
    return RollupWriteResponse(
        written=written,
        date=body.date,
        start_time_of_day=DAILY_SUMMARY_START,
        end_time_of_day=DAILY_SUMMARY_END,
    )


@router.post("/daily/{day}/derive", response_model=RollupWriteResponse, status_code=status.HTTP_201_CREATED)
async def derive_daily(
    day: date,
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RollupWriteResponse:
    """Build the daily summary from the day's hourly rows and log it."""
    summary = await build_daily_summary(store, day)
    written = await AnalyticsRollupWriter(store, settings).log_daily_summary(summary)
    return RollupWriteResponse(
        written=written,
        date=day,
        start_time_of_day=DAILY_SUMMARY_START,
        end_time_of_day=DAILY_SUMMARY_END,
    )


@router.post("/backfill", response_model=BackfillResponse)
async def backfill(
    now: datetime | None = Query(None, description="Backfill completed hours up to this time"),
    store: DataStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> BackfillResponse:
    """Log every completed hour missing since the latest hourly row."""
    buckets = await backfill_hourly_rollups(store, settings, now)
    return BackfillResponse(hours_logged=sum(1 for b in buckets if b.written), buckets=buckets)
