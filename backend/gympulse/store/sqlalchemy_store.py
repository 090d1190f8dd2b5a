"""``DataStore`` backed by async SQLAlchemy Core over the ORM metadata."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import ColumnElement, Table, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import gympulse.models  # noqa: F401  registers every table on the metadata
from gympulse.database import Base
from gympulse.errors import DataStoreError
from gympulse.store.base import Filter, OrderBy, Row

logger = logging.getLogger(__name__)


class SqlAlchemyDataStore:
    """Translate filtered table requests into SQL statements.

    Each call runs in its own short-lived session, so concurrent metric groups
    never share a connection.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise DataStoreError("unknown table", table=name)
        return table

    def _column(self, table: Table, name: str):
        try:
            return table.c[name]
        except KeyError:
            raise DataStoreError(f"unknown column {name!r}", table=table.name) from None

    def _where(self, table: Table, filters: Sequence[Filter]) -> list[ColumnElement[bool]]:
        clauses = []
        for flt in filters:
            col = self._column(table, flt.column)
            if flt.op == "eq":
                clauses.append(col == flt.value)
            elif flt.op == "neq":
                clauses.append(col != flt.value)
            elif flt.op == "gt":
                clauses.append(col > flt.value)
            elif flt.op == "gte":
                clauses.append(col >= flt.value)
            elif flt.op == "lt":
                clauses.append(col < flt.value)
            elif flt.op == "lte":
                clauses.append(col <= flt.value)
            else:
                clauses.append(col.in_(list(flt.value)))
        return clauses

    async def query(
        self,
        table: str,
        columns: Sequence[str] | None = None,
        filters: Sequence[Filter] = (),
        order: Sequence[OrderBy] = (),
        limit: int | None = None,
    ) -> list[Row]:
        tbl = self._table(table)
        selected = [self._column(tbl, c) for c in columns] if columns else list(tbl.c)
        stmt = select(*selected).where(*self._where(tbl, filters))
        for key in order:
            col = self._column(tbl, key.column)
            stmt = stmt.order_by(col.desc() if key.descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as exc:
            logger.error("Query on %s failed: %s", table, exc)
            raise DataStoreError(str(exc), table=table) from exc

    async def count(self, table: str, filters: Sequence[Filter] = ()) -> int:
        tbl = self._table(table)
        stmt = select(func.count()).select_from(tbl).where(*self._where(tbl, filters))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            logger.error("Count on %s failed: %s", table, exc)
            raise DataStoreError(str(exc), table=table) from exc

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            return
        tbl = self._table(table)
        try:
            async with self._session_factory() as session:
                await session.execute(insert(tbl), [dict(r) for r in rows])
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Insert into %s failed: %s", table, exc)
            raise DataStoreError(str(exc), table=table) from exc

    async def update(
        self,
        table: str,
        patch: Mapping[str, Any],
        filters: Sequence[Filter],
    ) -> int:
        tbl = self._table(table)
        stmt = update(tbl).where(*self._where(tbl, filters)).values(**patch)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                return result.rowcount or 0
        except SQLAlchemyError as exc:
            logger.error("Update on %s failed: %s", table, exc)
            raise DataStoreError(str(exc), table=table) from exc
