"""Shared API dependencies: single import point for all routers.

Routers receive the data store and settings through these providers so tests
can swap in an in-memory store via ``app.dependency_overrides``::

    from gympulse.api.deps import get_settings, get_store
"""

from gympulse.config import Settings, settings
from gympulse.database import async_session_factory
from gympulse.store import DataStore, SqlAlchemyDataStore

_store = SqlAlchemyDataStore(async_session_factory)


def get_store() -> DataStore:
    """Return the data store backing the analytics endpoints."""
    return _store


def get_settings() -> Settings:
    return settings


__all__ = [
    "get_settings",
    "get_store",
]
