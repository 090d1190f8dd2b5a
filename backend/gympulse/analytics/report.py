"""Assemble every dashboard metric group into one report.

Groups share no in-memory state and run concurrently. A group whose store
query fails is reported under ``errors`` while the remaining groups still
render.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import Any

from gympulse.analytics.insights import (
    compute_booking_insights,
    compute_peak_hours,
    compute_user_engagement,
    compute_user_type_distribution,
)
from gympulse.analytics.occupancy import get_daily_occupancy
from gympulse.analytics.parsing import local_now
from gympulse.analytics.summary import compute_summary_metrics
from gympulse.analytics.trends import build_monthly_trend, build_weekly_trend
from gympulse.config import Settings
from gympulse.errors import AnalyticsError, DataStoreError
from gympulse.schemas.analytics import AnalyticsReportResponse
from gympulse.store.base import DataStore

logger = logging.getLogger(__name__)


async def _isolated(name: str, awaitable: Awaitable[Any], errors: dict[str, str]) -> Any:
    try:
        return await awaitable
    except AnalyticsError as exc:
        logger.exception("Metric group %r failed", name)
        errors[name] = str(exc)
        return None


async def build_analytics_report(
    store: DataStore,
    settings: Settings,
    now: datetime | None = None,
) -> AnalyticsReportResponse:
    """Compute every metric group for ``now``.

    Raises:
        DataStoreError: when every group failed, so there is nothing to show.
    """
    now = local_now(now, settings.timezone)
    today = now.date()
    errors: dict[str, str] = {}

    groups: dict[str, Awaitable[Any]] = {
        "summary": compute_summary_metrics(store, settings, now),
        "weekly_trend": build_weekly_trend(store, settings, now),
        "monthly_trend": build_monthly_trend(store, settings, now),
        "daily_occupancy": get_daily_occupancy(store, settings, today),
        "peak_hours": compute_peak_hours(store, settings, today),
        "booking_insights": compute_booking_insights(store, settings, now),
        "user_engagement": compute_user_engagement(store, settings, now),
        "user_types": compute_user_type_distribution(store),
    }
    results = await asyncio.gather(*(_isolated(name, aw, errors) for name, aw in groups.items()))

    if len(errors) == len(groups):
        raise DataStoreError("all analytics groups failed: " + "; ".join(errors.values()))

    return AnalyticsReportResponse(
        generated_at=now,
        errors=errors,
        **dict(zip(groups.keys(), results)),
    )
