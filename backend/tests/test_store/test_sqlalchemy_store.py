"""Tests for the SQLAlchemy-backed data store against SQLite."""

import uuid
from collections.abc import AsyncGenerator
from datetime import date, datetime, time, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gympulse.analytics.rollup import backfill_hourly_rollups
from gympulse.analytics.summary import compute_summary_metrics
from gympulse.config import Settings
from gympulse.database import Base
from gympulse.errors import DataStoreError
from gympulse.store import ANALYTICS, BOOKINGS, SESSION_OCCURRENCES, USERS, OrderBy, SqlAlchemyDataStore
from gympulse.store.base import between, eq, gte, in_, lt

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def sql_store(tmp_path) -> AsyncGenerator[SqlAlchemyDataStore, None]:
    """A fresh schema in a throwaway SQLite file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'gympulse.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SqlAlchemyDataStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    await engine.dispose()


async def _seed_user(store: SqlAlchemyDataStore, role: str = "student") -> uuid.UUID:
    user_id = uuid.uuid4()
    await store.insert(USERS, [{"id": user_id, "user_role": role}])
    return user_id


class TestQueries:
    async def test_insert_query_roundtrip(self, sql_store: SqlAlchemyDataStore) -> None:
        user_id = await _seed_user(sql_store, "staff")
        rows = await sql_store.query(USERS, filters=[eq("id", user_id)])
        assert rows == [{"id": user_id, "user_role": "staff"}]

    async def test_range_order_and_limit(self, sql_store: SqlAlchemyDataStore) -> None:
        user_id = await _seed_user(sql_store)
        await sql_store.insert(
            BOOKINGS,
            [
                {
                    "id": uuid.uuid4(),
                    "user_id": user_id,
                    "session_date": date(2024, 5, day),
                    "booking_time": datetime(2024, 5, 1, 9, tzinfo=timezone.utc),
                    "status": "confirmed",
                }
                for day in (3, 10, 20, 31)
            ],
        )
        rows = await sql_store.query(
            BOOKINGS,
            columns=["session_date"],
            filters=between("session_date", date(2024, 5, 10), date(2024, 5, 31)),
            order=[OrderBy("session_date", descending=True)],
            limit=2,
        )
        assert [r["session_date"] for r in rows] == [date(2024, 5, 31), date(2024, 5, 20)]
        assert await sql_store.count(BOOKINGS, filters=[in_("user_id", [user_id])]) == 4

    async def test_time_of_day_filters(self, sql_store: SqlAlchemyDataStore) -> None:
        await sql_store.insert(
            SESSION_OCCURRENCES,
            [
                {
                    "id": uuid.uuid4(),
                    "date": date(2024, 5, 15),
                    "start_time_of_day": time(hour),
                    "end_time_of_day": time(hour + 1),
                    "capacity": 20,
                    "booked_slots": hour,
                    "attended_count": hour,
                }
                for hour in (7, 8, 9)
            ],
        )
        rows = await sql_store.query(
            SESSION_OCCURRENCES,
            columns=["start_time_of_day", "booked_slots"],
            filters=[gte("start_time_of_day", time(8)), lt("start_time_of_day", time(9))],
        )
        assert rows == [{"start_time_of_day": time(8), "booked_slots": 8}]

    async def test_update(self, sql_store: SqlAlchemyDataStore) -> None:
        user_id = await _seed_user(sql_store)
        assert await sql_store.update(USERS, {"user_role": "faculty"}, [eq("id", user_id)]) == 1
        rows = await sql_store.query(USERS, columns=["user_role"])
        assert rows == [{"user_role": "faculty"}]

    async def test_unknown_table(self, sql_store: SqlAlchemyDataStore) -> None:
        with pytest.raises(DataStoreError, match="unknown table"):
            await sql_store.query("guests")

    async def test_unknown_column(self, sql_store: SqlAlchemyDataStore) -> None:
        with pytest.raises(DataStoreError, match="unknown column"):
            await sql_store.count(USERS, filters=[eq("email", "x@example.com")])

    async def test_driver_error_is_wrapped(self, sql_store: SqlAlchemyDataStore) -> None:
        user_id = await _seed_user(sql_store)
        with pytest.raises(DataStoreError) as exc_info:
            await sql_store.insert(USERS, [{"id": user_id, "user_role": "student"}])
        assert exc_info.value.table == USERS


class TestAnalyticsOverSql:
    async def test_rollups_and_summary(self, sql_store: SqlAlchemyDataStore) -> None:
        settings = Settings(_env_file=None)
        await sql_store.insert(
            SESSION_OCCURRENCES,
            [
                {
                    "id": uuid.uuid4(),
                    "date": date(2024, 5, 15),
                    "start_time_of_day": time(1),
                    "end_time_of_day": time(2),
                    "capacity": 30,
                    "booked_slots": 20,
                    "attended_count": 15,
                }
            ],
        )

        results = await backfill_hourly_rollups(sql_store, settings, datetime(2024, 5, 15, 2, 30))
        assert [r.start_time_of_day for r in results] == ["00:00", "01:00"]

        # Running again picks up where the last run stopped
        assert await backfill_hourly_rollups(sql_store, settings, datetime(2024, 5, 15, 2, 30)) == []

        rows = await sql_store.query(ANALYTICS, order=[OrderBy("start_time_of_day")])
        assert [r["hourly_occupancy"] for r in rows] == [0, 15]
        assert rows[1]["no_show_count"] == 5
        assert rows[1]["created_at"] is not None
        assert await sql_store.count(ANALYTICS, filters=[eq("end_time_of_day", "23:59")]) == 0

        summary = await compute_summary_metrics(sql_store, settings, datetime(2024, 5, 20))
        assert summary.no_show_rate.value == 25
        assert summary.peak_utilization.value == 30
