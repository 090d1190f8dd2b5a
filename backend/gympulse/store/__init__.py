"""Data store package: repository contract and its implementations."""

from gympulse.store.base import (
    ANALYTICS,
    BOOKINGS,
    SESSION_OCCURRENCES,
    USERS,
    DataStore,
    Filter,
    OrderBy,
    Row,
)
from gympulse.store.memory import InMemoryDataStore
from gympulse.store.sqlalchemy_store import SqlAlchemyDataStore

__all__ = [
    "ANALYTICS",
    "BOOKINGS",
    "SESSION_OCCURRENCES",
    "USERS",
    "DataStore",
    "Filter",
    "InMemoryDataStore",
    "OrderBy",
    "Row",
    "SqlAlchemyDataStore",
]
