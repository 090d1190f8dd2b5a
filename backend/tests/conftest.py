"""Shared test configuration and fixtures.

Analytics operations run against an ``InMemoryDataStore`` seeded per test.
The API client swaps the SQL store for that in-memory store through
``app.dependency_overrides`` so no database is needed.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import date, datetime, time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from gympulse.api.deps import get_settings, get_store
from gympulse.config import Settings
from gympulse.main import app
from gympulse.store import ANALYTICS, BOOKINGS, SESSION_OCCURRENCES, USERS, InMemoryDataStore

# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Default facility settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def store() -> InMemoryDataStore:
    return InMemoryDataStore()


@pytest_asyncio.fixture
async def client(store: InMemoryDataStore, test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


@pytest.fixture
def add_user(store: InMemoryDataStore):
    """Insert a user and return its id."""

    async def _add(role: str = "student") -> uuid.UUID:
        user_id = uuid.uuid4()
        await store.insert(USERS, [{"id": user_id, "user_role": role}])
        return user_id

    return _add


@pytest.fixture
def add_booking(store: InMemoryDataStore):
    """Insert a booking; ``booked_at`` defaults to 09:00 on the session date."""

    async def _add(
        session_date: date,
        user_id: uuid.UUID | None = None,
        status: str = "confirmed",
        booked_at: datetime | None = None,
    ) -> None:
        await store.insert(
            BOOKINGS,
            [
                {
                    "id": uuid.uuid4(),
                    "user_id": user_id or uuid.uuid4(),
                    "session_date": session_date,
                    "booking_time": booked_at or datetime.combine(session_date, time(9)),
                    "status": status,
                }
            ],
        )

    return _add


@pytest.fixture
def add_occurrence(store: InMemoryDataStore):
    """Insert a one-hour session occurrence starting at ``hour``."""

    async def _add(
        day: date,
        hour: int,
        booked: int = 0,
        attended: int = 0,
        capacity: int = 20,
        override_capacity: int | None = None,
        cancelled: int = 0,
        waitlist: int = 0,
        category: str | None = None,
    ) -> None:
        await store.insert(
            SESSION_OCCURRENCES,
            [
                {
                    "id": uuid.uuid4(),
                    "date": day,
                    "start_time_of_day": time(hour),
                    "end_time_of_day": time(hour + 1) if hour < 23 else time(23, 59),
                    "capacity": capacity,
                    "override_capacity": override_capacity,
                    "booked_slots": booked,
                    "attended_count": attended,
                    "cancelled_count": cancelled,
                    "waitlist_count": waitlist,
                    "status": "scheduled",
                    "category": category,
                }
            ],
        )

    return _add


@pytest.fixture
def add_hourly(store: InMemoryDataStore):
    """Insert an hourly analytics sample for ``[hour, hour + 1)``."""

    async def _add(day: date, hour: int, occupancy: int, **extra) -> None:
        row = {
            "date": day,
            "start_time_of_day": f"{hour:02d}:00",
            "end_time_of_day": f"{hour + 1:02d}:00",
            "hourly_occupancy": occupancy,
            "daily_occupancy": 0,
            "booked_count": 0,
            "no_show_count": 0,
            "cancelled_count": 0,
            "waitlist_count": 0,
            "peak_time": f"{hour:02d}:00",
            "max_capacity": 50,
        }
        row.update(extra)
        await store.insert(ANALYTICS, [row])

    return _add
