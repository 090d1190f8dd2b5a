"""Tests for the in-memory data store."""

import pytest

from gympulse.errors import DataStoreError
from gympulse.store import DataStore, Filter, InMemoryDataStore, OrderBy
from gympulse.store.base import between, eq, in_, neq

pytestmark = pytest.mark.asyncio


@pytest.fixture
def seeded() -> InMemoryDataStore:
    return InMemoryDataStore(
        {
            "analytics": [
                {"date": "2024-05-01", "start_time_of_day": "08:00", "hourly_occupancy": 5},
                {"date": "2024-05-02", "start_time_of_day": "07:00", "hourly_occupancy": 9},
                {"date": "2024-05-02", "start_time_of_day": "06:00", "hourly_occupancy": None},
                {"date": "2024-05-03", "start_time_of_day": "06:00", "hourly_occupancy": 2},
            ]
        }
    )


class TestInMemoryDataStore:
    async def test_satisfies_protocol(self, seeded: InMemoryDataStore) -> None:
        assert isinstance(seeded, DataStore)

    async def test_inclusive_range(self, seeded: InMemoryDataStore) -> None:
        rows = await seeded.query("analytics", filters=between("date", "2024-05-02", "2024-05-03"))
        assert len(rows) == 3

    async def test_multi_key_order_and_limit(self, seeded: InMemoryDataStore) -> None:
        rows = await seeded.query(
            "analytics",
            columns=["date", "start_time_of_day"],
            order=[OrderBy("date", descending=True), OrderBy("start_time_of_day")],
            limit=3,
        )
        assert rows == [
            {"date": "2024-05-03", "start_time_of_day": "06:00"},
            {"date": "2024-05-02", "start_time_of_day": "06:00"},
            {"date": "2024-05-02", "start_time_of_day": "07:00"},
        ]

    async def test_null_never_matches(self, seeded: InMemoryDataStore) -> None:
        assert await seeded.count("analytics", filters=[neq("hourly_occupancy", 5)]) == 2

    async def test_in_filter(self, seeded: InMemoryDataStore) -> None:
        assert await seeded.count("analytics", filters=[in_("hourly_occupancy", [2, 9])]) == 2

    async def test_unknown_table_is_empty(self, seeded: InMemoryDataStore) -> None:
        assert await seeded.query("bookings") == []

    async def test_insert_and_update(self, seeded: InMemoryDataStore) -> None:
        await seeded.insert("analytics", [{"date": "2024-05-04", "start_time_of_day": "06:00", "hourly_occupancy": 1}])
        updated = await seeded.update("analytics", {"hourly_occupancy": 0}, [eq("date", "2024-05-04")])
        assert updated == 1
        assert seeded.rows("analytics")[-1]["hourly_occupancy"] == 0

    async def test_returned_rows_are_copies(self, seeded: InMemoryDataStore) -> None:
        rows = await seeded.query("analytics", filters=[eq("date", "2024-05-01")])
        rows[0]["hourly_occupancy"] = 1000
        assert seeded.rows("analytics")[0]["hourly_occupancy"] == 5

    async def test_incomparable_values_raise(self, seeded: InMemoryDataStore) -> None:
        with pytest.raises(DataStoreError):
            await seeded.query("analytics", filters=[Filter("hourly_occupancy", "gt", "five")])

    async def test_unknown_operator(self) -> None:
        with pytest.raises(ValueError):
            Filter("date", "like", "2024-%")
