"""In-memory ``DataStore`` used by tests, demos and local development."""

from __future__ import annotations

import copy
import operator
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from gympulse.errors import DataStoreError
from gympulse.store.base import Filter, OrderBy, Row

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
    "in": lambda value, options: value in options,
}


class InMemoryDataStore:
    """Dict-of-lists store honouring the same filter/order/limit semantics as SQL.

    Rows with a ``None`` value never match a comparison filter, mirroring SQL
    NULL behaviour.
    """

    def __init__(self, tables: Mapping[str, Sequence[Mapping[str, Any]]] | None = None) -> None:
        self._tables: dict[str, list[Row]] = defaultdict(list)
        for name, rows in (tables or {}).items():
            self._tables[name].extend(dict(r) for r in rows)

    def rows(self, table: str) -> list[Row]:
        """Return a copy of every row in ``table`` in insertion order."""
        return copy.deepcopy(self._tables.get(table, []))

    def _matching(self, table: str, filters: Sequence[Filter]) -> list[Row]:
        matched = []
        for row in self._tables.get(table, []):
            try:
                if all(_matches(row, f) for f in filters):
                    matched.append(row)
            except TypeError as exc:
                raise DataStoreError(f"cannot compare column values: {exc}", table=table) from exc
        return matched

    async def query(
        self,
        table: str,
        columns: Sequence[str] | None = None,
        filters: Sequence[Filter] = (),
        order: Sequence[OrderBy] = (),
        limit: int | None = None,
    ) -> list[Row]:
        rows = self._matching(table, filters)
        # Stable multi-key sort: apply keys from last to first
        for key in reversed(order):
            rows = sorted(
                rows,
                key=lambda r, c=key.column: (r.get(c) is None, r.get(c)),
                reverse=key.descending,
            )
        if limit is not None:
            rows = rows[:limit]
        if columns is None:
            return [dict(r) for r in rows]
        return [{c: r.get(c) for c in columns} for r in rows]

    async def count(self, table: str, filters: Sequence[Filter] = ()) -> int:
        return len(self._matching(table, filters))

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        self._tables[table].extend(dict(r) for r in rows)

    async def update(
        self,
        table: str,
        patch: Mapping[str, Any],
        filters: Sequence[Filter],
    ) -> int:
        matched = self._matching(table, filters)
        for row in matched:
            row.update(patch)
        return len(matched)


def _matches(row: Row, flt: Filter) -> bool:
    value = row.get(flt.column)
    if value is None:
        return False
    return _COMPARATORS[flt.op](value, flt.value)
