"""Exception hierarchy for the analytics engine.

Each metric group catches ``DataStoreError`` for itself so one failing query
does not blank the whole report. ``ComputationError`` marks a single bad
record and is handled by skipping that record.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for all analytics engine errors."""


class DataStoreError(AnalyticsError):
    """A query, count, insert or update against the data store failed."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        self.table = table
        super().__init__(f"{table}: {message}" if table else message)


class ComputationError(AnalyticsError):
    """A record carried a malformed or unparsable field."""


class ConfigurationError(AnalyticsError):
    """A configured constant is invalid or disagrees with another source."""
