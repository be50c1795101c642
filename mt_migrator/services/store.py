"""
Store adapter for the Movable Type and WordPress databases.

A thin layer over SQLAlchemy Core giving the pipelines the generic
operations they need (select, insert, delete, update and raw queries)
against reflected tables. Every operation runs in its own transaction;
nothing here wraps a whole pipeline.

Faults are recorded on ``last_error`` (cleared by every successful call)
and raised as ``StoreError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import (
    MetaData,
    Table,
    and_,
    bindparam,
    create_engine,
    inspect,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from mt_migrator.core.config import DatabaseConfig
from mt_migrator.exceptions import StoreError
from mt_migrator.types import Row
from mt_migrator.utils.logging import is_debug_sql_enabled, log_with_context

# Column filter value: a scalar means equality, a list/tuple/set means IN
Filters = Mapping[str, Any]


def _single_byte_encode(value: str, charset: str) -> bytes:
    # MySQL latin1 maps the five bytes cp1252 leaves undefined to U+0081 etc.
    encoded = bytearray()
    for char in value:
        try:
            encoded += char.encode(charset)
        except UnicodeEncodeError:
            if ord(char) > 0xFF:
                raise
            encoded.append(ord(char))
    return bytes(encoded)


def repair_utf8_text(value: Any, declared_charset: str) -> Any:
    """
    Undo UTF-8 bytes having been decoded with a single-byte charset.

    Raw ``bytes`` are decoded as UTF-8, falling back to latin-1. Strings
    that do not round-trip (already correct text) are returned unchanged,
    as is anything that is neither bytes nor a string.
    """
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.decode("latin-1")
    if not isinstance(value, str) or value.isascii():
        return value
    try:
        return _single_byte_encode(value, declared_charset).decode("utf-8")
    except UnicodeError:
        return value


# MySQL latin1 is Windows-1252
_PYTHON_CHARSETS = {"latin1": "cp1252", "utf8": "utf-8", "utf8mb4": "utf-8"}


class StoreAdapter:
    """Generic table access against one relational database."""

    def __init__(
        self,
        engine: Engine,
        name: str = "store",
        repair_charset: str | None = None,
    ) -> None:
        """
        Args:
            engine: SQLAlchemy engine to run statements on
            name: Label used in logs and errors ("source", "destination")
            repair_charset: When set, text read from this store is repaired
                with ``repair_utf8_text`` using this declared charset
        """
        self.engine = engine
        self.name = name
        self.repair_charset = (
            _PYTHON_CHARSETS.get(repair_charset.lower(), repair_charset)
            if repair_charset
            else None
        )
        self.metadata = MetaData()
        self.last_error: str | None = None

    @classmethod
    def from_config(cls, config: DatabaseConfig, name: str) -> StoreAdapter:
        """Create an adapter (and its engine) from database settings."""
        url = config.to_url()
        if config.repair_utf8 and url.get_backend_name() == "mysql":
            # Each stored latin1 byte arrives as one character, including the
            # five that PyMySQL's latin1 codec cannot decode
            url = url.update_query_dict({"charset": "utf8mb4"})
        engine = create_engine(url, echo=config.echo)
        repair_charset = config.charset if config.repair_utf8 else None
        log_with_context(
            logging.DEBUG, f"Created {name} engine for {config.display_name}"
        )
        return cls(engine, name=name, repair_charset=repair_charset)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(
        self,
        operation: str,
        table: str | None,
        error: Exception,
        statement: str | None = None,
    ) -> StoreError:
        self.last_error = str(error)
        where = f" on {table}" if table else ""
        log_with_context(
            logging.ERROR,
            f"{self.name} {operation}{where} failed: {error}",
            table=table,
        )
        if statement and is_debug_sql_enabled():
            log_with_context(
                logging.DEBUG,
                f"Failed {self.name} statement:\n{statement.strip()}",
                table=table,
            )
        return StoreError(
            f"{self.name} {operation}{where} failed: {error}",
            store=self.name,
            operation=operation,
            table=table,
        )

    def _repair(self, rows: list[Row]) -> list[Row]:
        if not self.repair_charset:
            return rows
        return [
            {key: repair_utf8_text(value, self.repair_charset) for key, value in row.items()}
            for row in rows
        ]

    def table(self, name: str) -> Table:
        """Return the reflected table, loading it on first use."""
        if name in self.metadata.tables:
            return self.metadata.tables[name]
        try:
            return Table(name, self.metadata, autoload_with=self.engine)
        except SQLAlchemyError as e:
            raise self._fail("reflect", name, e) from e

    def _where(self, table: Table, filters: Filters | None, after: tuple[str, Any] | None):
        clauses = []
        for column, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(table.c[column].in_(list(value)))
            else:
                clauses.append(table.c[column] == value)
        if after is not None:
            column, value = after
            clauses.append(table.c[column] > value)
        return and_(*clauses) if clauses else None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def select(
        self,
        table_name: str,
        fields: Sequence[str],
        filters: Filters | None = None,
        after: tuple[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """
        Select rows as dictionaries.

        Args:
            table_name: Table to read
            fields: Columns to return
            filters: Column equality / IN filters
            after: ``(column, value)`` keeping rows with column > value
            order_by: Column to sort ascending by
            limit: Maximum number of rows

        Returns:
            The selected rows
        """
        table = self.table(table_name)
        try:
            statement = select(*(table.c[f] for f in fields))
            where = self._where(table, filters, after)
            if where is not None:
                statement = statement.where(where)
            if order_by:
                statement = statement.order_by(table.c[order_by].asc())
            if limit is not None:
                statement = statement.limit(limit)

            with self.engine.connect() as conn:
                rows = [dict(row) for row in conn.execute(statement).mappings()]
        except (SQLAlchemyError, KeyError, UnicodeError) as e:
            raise self._fail("select", table_name, e) from e

        self.last_error = None
        return self._repair(rows)

    def insert(self, table_name: str, rows: Iterable[Row]) -> int:
        """Insert rows; returns the number of rows written."""
        rows = list(rows)
        if not rows:
            return 0

        table = self.table(table_name)
        try:
            with self.engine.begin() as conn:
                conn.execute(table.insert(), rows)
        except SQLAlchemyError as e:
            raise self._fail("insert", table_name, e) from e

        self.last_error = None
        return len(rows)

    def delete(self, table_name: str, filters: Filters | None = None) -> int:
        """Delete rows matching the filters (all rows when none are given)."""
        table = self.table(table_name)
        try:
            statement = table.delete()
            where = self._where(table, filters, None)
            if where is not None:
                statement = statement.where(where)
            with self.engine.begin() as conn:
                result = conn.execute(statement)
        except (SQLAlchemyError, KeyError) as e:
            raise self._fail("delete", table_name, e) from e

        self.last_error = None
        return result.rowcount

    def update(self, table_name: str, values: Row, filters: Filters) -> int:
        """Update rows matching the filters with the given column values."""
        table = self.table(table_name)
        try:
            statement = table.update().values(**values)
            where = self._where(table, filters, None)
            if where is not None:
                statement = statement.where(where)
            with self.engine.begin() as conn:
                result = conn.execute(statement)
        except (SQLAlchemyError, KeyError) as e:
            raise self._fail("update", table_name, e) from e

        self.last_error = None
        return result.rowcount

    def raw_query(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
        expanding: Iterable[str] = (),
    ) -> list[Row]:
        """
        Run a SQL query with bound parameters and return its rows.

        Args:
            sql: SQL text using ``:name`` placeholders
            params: Values for the placeholders
            expanding: Placeholder names bound to lists (``IN :name``)

        Returns:
            The result rows
        """
        statement = text(sql)
        for name in expanding:
            statement = statement.bindparams(bindparam(name, expanding=True))

        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, dict(params or {}))
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
        except (SQLAlchemyError, UnicodeError) as e:
            raise self._fail("query", None, e, statement=sql) from e

        self.last_error = None
        return self._repair(rows)

    def missing_tables(self, table_names: Iterable[str]) -> list[str]:
        """Return the given tables that do not exist in this database."""
        try:
            existing = set(inspect(self.engine).get_table_names())
        except SQLAlchemyError as e:
            raise self._fail("inspect", None, e) from e

        self.last_error = None
        return [name for name in table_names if name not in existing]

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()
