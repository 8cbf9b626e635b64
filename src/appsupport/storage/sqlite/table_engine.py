# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Schema-driven table engine over SQLite.

Every operation is synchronous and never raises for storage failures.  A
failed call returns ``False`` / ``[]`` / ``None`` and leaves the diagnostic
in :attr:`TableEngine.last_error`; that slot is overwritten by the next
failure, so read it immediately.

Usage:
    engine = TableEngine()
    conn = engine.open_database("/tmp/example.sqlite")
    schema = Schema([
        ColumnDefinition("first", ColumnType.INTEGER),
        ColumnDefinition("second", ColumnType.INTEGER),
    ])
    engine.create_table(conn, schema, "my_table")
    engine.insert(conn, "my_table", {"first": 1, "second": 2})
    rows = engine.select(conn, "my_table", [("first", 1, "AND")])
"""

from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .connections import ConnectionRegistry, default_connections
from .errors import ErrorKind, ErrorRecord, ErrorSink
from .predicates import InvalidPredicateError, WhereLike, compile_where
from .schema import Schema, is_identifier, quote_identifier

__all__ = ["Order", "SelectOrder", "TableEngine", "Row"]

Row = dict[str, Any]

# Raised by the driver while executing, or while binding an out-of-range int.
_EXECUTE_ERRORS = (sqlite3.Error, OverflowError)

log = logging.getLogger(__name__)


class Order(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class SelectOrder:
    column: str
    order: Order = Order.ASC


class _Rejected(Exception):
    """Internal: a statement was rejected before reaching the driver."""

    def __init__(self, kind: ErrorKind, query: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.query = query


def _check_table(name: object, query: str) -> str:
    if not is_identifier(name):
        raise _Rejected(ErrorKind.QUERY, query, f"Invalid table name: {name!r}")
    return quote_identifier(str(name))


def _check_row(row: Mapping[str, Any], query: str) -> list[str]:
    columns = list(row)
    for column in columns:
        if not is_identifier(column):
            raise _Rejected(ErrorKind.QUERY, query, f"Invalid column name: {column!r}")
    return columns


class TableEngine:
    """CRUD over dynamically-typed rows with a single-slot error sink."""

    def __init__(self, connections: ConnectionRegistry | None = None) -> None:
        self._connections = connections if connections is not None else default_connections()
        self._errors = ErrorSink()

    @property
    def connections(self) -> ConnectionRegistry:
        return self._connections

    @property
    def errors(self) -> ErrorSink:
        return self._errors

    @property
    def last_error(self) -> ErrorRecord | None:
        return self._errors.last

    # ------------------------------------------------------------------ #
    # Connections                                                        #
    # ------------------------------------------------------------------ #
    def open_database(self, path: str | os.PathLike[str]) -> sqlite3.Connection | None:
        """Return the shared connection for ``path``; ``None`` on failure."""

        try:
            return self._connections.open(path)
        except (sqlite3.Error, OSError, ValueError) as exc:
            self._errors.record_exception(exc, f"OPEN {os.fspath(path)}", kind=ErrorKind.CONNECTION)
            log.warning("Could not open database %s: %s", os.fspath(path), exc)
            return None

    def close_database(self, path: str | os.PathLike[str]) -> bool:
        return self._connections.close(path)

    # ------------------------------------------------------------------ #
    # Schema                                                             #
    # ------------------------------------------------------------------ #
    def create_table(self, conn: sqlite3.Connection, schema: Schema, name: str) -> bool:
        """Create ``name`` with ``schema`` unless it already exists.

        Re-creating with the same columns succeeds.  An existing table with
        different columns is a schema error: drop it first.
        """

        query = f"CREATE TABLE IF NOT EXISTS {name} (...)"
        try:
            table = _check_table(name, query)
            query = f"CREATE TABLE IF NOT EXISTS {table} ({schema.to_sql()})"
        except _Rejected as exc:
            return self._reject(exc)

        existing = self.table_columns(conn, name)
        if existing is None:
            return False
        if existing and existing != schema.names:
            self._errors.record(
                ErrorKind.SCHEMA,
                query,
                f"Table {name} already exists with columns {existing}, expected {schema.names}",
            )
            log.warning("Schema mismatch for table %s: %s != %s", name, existing, schema.names)
            return False
        return self._execute(conn, query, kind=ErrorKind.SCHEMA)

    def table_exists(self, conn: sqlite3.Connection, name: str) -> bool:
        query = "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?"
        if not self._has_connection(conn, query):
            return False
        try:
            row = conn.execute(query, (name,)).fetchone()
        except sqlite3.Error as exc:
            self._fail(exc, query, params=(name,))
            return False
        return row is not None

    def drop_table(self, conn: sqlite3.Connection, name: str) -> bool:
        query = f"DROP TABLE {name}"
        try:
            query = f"DROP TABLE {_check_table(name, query)}"
        except _Rejected as exc:
            return self._reject(exc)
        return self._execute(conn, query, kind=ErrorKind.SCHEMA)

    def table_columns(self, conn: sqlite3.Connection, name: str) -> list[str] | None:
        """Column names of ``name`` in order; ``[]`` if the table is absent."""

        query = f"PRAGMA table_info({name})"
        if not self._has_connection(conn, query):
            return None
        try:
            query = f"PRAGMA table_info({_check_table(name, query)})"
            rows = conn.execute(query).fetchall()
        except _Rejected as exc:
            self._reject(exc)
            return None
        except sqlite3.Error as exc:
            self._fail(exc, query)
            return None
        return [row[1] for row in rows]

    # ------------------------------------------------------------------ #
    # Rows                                                               #
    # ------------------------------------------------------------------ #
    def build_select(
        self,
        name: str,
        where: WhereLike = None,
        order: SelectOrder | None = None,
        limit: int | None = None,
    ) -> tuple[str, list[Any]]:
        """Return the SELECT statement and parameters.

        Raises ``ValueError`` for invalid identifiers or predicates and
        ``TypeError`` for a malformed ``order`` or ``limit``.
        """

        if not is_identifier(name):
            raise InvalidPredicateError(f"Invalid table name: {name!r}")
        parts = [f"SELECT * FROM {quote_identifier(name)}"]
        clause, params = compile_where(where)
        if clause:
            parts.append(f"WHERE {clause}")
        if order is not None:
            if not isinstance(order, SelectOrder):
                order = SelectOrder(*order)
            if not is_identifier(order.column):
                raise InvalidPredicateError(f"Invalid order column: {order.column!r}")
            parts.append(f"ORDER BY {quote_identifier(order.column)} {Order(order.order).value}")
        if limit is not None and limit >= 0:
            parts.append("LIMIT ?")
            params.append(int(limit))
        return " ".join(parts), params

    def select(
        self,
        conn: sqlite3.Connection,
        name: str,
        where: WhereLike = None,
        order: SelectOrder | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """Rows of ``name`` matching ``where``.

        ``None`` or an empty predicate list selects every row.  A failure
        also returns ``[]``; check :attr:`last_error` to tell them apart.
        """

        try:
            query, params = self.build_select(name, where, order, limit)
        except (ValueError, TypeError) as exc:
            self._errors.record(ErrorKind.QUERY, f"SELECT * FROM {name}", str(exc))
            log.warning("Rejected select on %s: %s", name, exc)
            return []
        return self.execute_select_query(conn, query, params)

    def execute_select_query(
        self, conn: sqlite3.Connection, query: str, params: Sequence[Any] = ()
    ) -> list[Row]:
        if not self._has_connection(conn, query):
            return []
        try:
            cursor = conn.execute(query, tuple(params))
            try:
                columns = [desc[0] for desc in cursor.description or ()]
                rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()
        except _EXECUTE_ERRORS as exc:
            self._fail(exc, query, params=params)
            return []
        log.debug("%s -> %d row(s)", query, len(rows))
        return rows

    def insert(self, conn: sqlite3.Connection, name: str, row: Mapping[str, Any]) -> bool:
        query = f"INSERT INTO {name}"
        try:
            table = _check_table(name, query)
            columns = _check_row(row, query)
        except _Rejected as exc:
            return self._reject(exc)
        if not columns:
            return self._execute(conn, f"INSERT INTO {table} DEFAULT VALUES")
        names = ", ".join(quote_identifier(col) for col in columns)
        marks = ", ".join("?" for _ in columns)
        query = f"INSERT INTO {table} ({names}) VALUES ({marks})"
        return self._execute(conn, query, [row[col] for col in columns])

    def update(
        self,
        conn: sqlite3.Connection,
        name: str,
        row: Mapping[str, Any],
        where: WhereLike,
    ) -> bool:
        """Set ``row`` on every row matching ``where``.

        ``where`` has no default on purpose: passing an empty list updates
        every row in the table.
        """

        query = f"UPDATE {name}"
        try:
            table = _check_table(name, query)
            columns = _check_row(row, query)
            if not columns:
                raise _Rejected(ErrorKind.QUERY, query, "Nothing to update: row is empty")
            clause, where_params = compile_where(where)
        except _Rejected as exc:
            return self._reject(exc)
        except ValueError as exc:
            return self._reject(_Rejected(ErrorKind.QUERY, query, str(exc)))

        assignments = ", ".join(f"{quote_identifier(col)} = ?" for col in columns)
        query = f"UPDATE {table} SET {assignments}"
        if clause:
            query += f" WHERE {clause}"
        else:
            log.warning("Updating every row of %s (empty predicate list)", name)
        return self._execute(conn, query, [row[col] for col in columns] + where_params)

    def delete(self, conn: sqlite3.Connection, name: str, where: WhereLike) -> bool:
        """Delete rows matching ``where``; an empty list deletes every row."""

        query = f"DELETE FROM {name}"
        try:
            table = _check_table(name, query)
            clause, params = compile_where(where)
        except _Rejected as exc:
            return self._reject(exc)
        except ValueError as exc:
            return self._reject(_Rejected(ErrorKind.QUERY, query, str(exc)))

        query = f"DELETE FROM {table}"
        if clause:
            query += f" WHERE {clause}"
        else:
            log.warning("Deleting every row of %s (empty predicate list)", name)
        return self._execute(conn, query, params)

    def exists(self, conn: sqlite3.Connection, name: str, where: WhereLike) -> bool:
        return len(self.select(conn, name, where, limit=1)) > 0

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _execute(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: Sequence[Any] = (),
        *,
        kind: ErrorKind | None = None,
    ) -> bool:
        if not self._has_connection(conn, query):
            return False
        try:
            conn.execute(query, tuple(params))
        except _EXECUTE_ERRORS as exc:
            self._fail(exc, query, params=params, kind=kind)
            return False
        log.debug("Executed %s", query)
        return True

    def _fail(
        self,
        exc: BaseException,
        query: str,
        *,
        params: Sequence[Any] = (),
        kind: ErrorKind | None = None,
    ) -> None:
        record = self._errors.record_exception(exc, query, kind=kind, params=params)
        log.warning("%s failure: %s | query=%s", record.kind.value, record.message, query)

    def _has_connection(self, conn: sqlite3.Connection | None, query: str) -> bool:
        if conn is not None:
            return True
        self._errors.record(ErrorKind.CONNECTION, query, "No open database connection")
        log.warning("No open database connection | query=%s", query)
        return False

    def _reject(self, exc: _Rejected) -> bool:
        self._errors.record(exc.kind, exc.query, str(exc))
        log.warning("Rejected statement: %s | query=%s", exc, exc.query)
        return False
