"""Repository contract consumed by the analytics engine.

The engine never talks to a database driver directly. It receives a
``DataStore`` and expresses every read as a filtered range query over a named
table, so the SQL-backed store and the in-memory store are interchangeable.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

Row = dict[str, Any]
FilterOp = Literal["eq", "neq", "gt", "gte", "lt", "lte", "in"]

FILTER_OPS: frozenset[str] = frozenset({"eq", "neq", "gt", "gte", "lt", "lte", "in"})

# Tables the engine reads or appends to
USERS = "users"
BOOKINGS = "bookings"
SESSION_OCCURRENCES = "session_occurrences"
ANALYTICS = "analytics"


@dataclass(frozen=True)
class Filter:
    """A single column predicate, e.g. ``Filter("date", "gte", start)``."""

    column: str
    op: FilterOp
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter op {self.op!r}")


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gt(column: str, value: Any) -> Filter:
    return Filter(column, "gt", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column, "lt", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def between(column: str, start: Any, end: Any) -> tuple[Filter, Filter]:
    """Inclusive range ``start <= column <= end``."""
    return gte(column, start), lte(column, end)


@runtime_checkable
class DataStore(Protocol):
    """Filtered read/append access to named tables.

    Every method raises ``DataStoreError`` when the underlying store fails.
    """

    async def query(
        self,
        table: str,
        columns: Sequence[str] | None = None,
        filters: Sequence[Filter] = (),
        order: Sequence[OrderBy] = (),
        limit: int | None = None,
    ) -> list[Row]: ...

    async def count(self, table: str, filters: Sequence[Filter] = ()) -> int: ...

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None: ...

    async def update(
        self,
        table: str,
        patch: Mapping[str, Any],
        filters: Sequence[Filter],
    ) -> int: ...
