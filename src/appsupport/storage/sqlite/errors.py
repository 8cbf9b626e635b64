# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Error taxonomy and the single-slot error sink used by the table engine.

The storage core never raises for failed statements.  Operations report
failure through their return value and leave the details in an
:class:`ErrorSink`, which keeps only the most recent failure.  Callers must
inspect it right after a failing call; the next failure overwrites it and a
success leaves it untouched.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "ErrorKind",
    "ErrorRecord",
    "ErrorSink",
    "StorageError",
    "StorageConnectionError",
    "SchemaError",
    "QueryError",
    "DriverError",
    "classify_driver_error",
]


class StorageError(RuntimeError):
    """Base class for storage failures surfaced as exceptions."""

    def __init__(self, message: str, *, query: str = "", code: int | None = None):
        super().__init__(message)
        self.query = query
        self.code = code


class StorageConnectionError(StorageError):
    """A database path could not be opened or created."""


class SchemaError(StorageError):
    """Creating or dropping a table failed."""


class QueryError(StorageError):
    """A statement or predicate was malformed."""


class DriverError(StorageError):
    """The SQLite driver reported a failure code."""


class ErrorKind(str, Enum):
    CONNECTION = "connection"
    SCHEMA = "schema"
    QUERY = "query"
    DRIVER = "driver"

    @property
    def exception_type(self) -> type[StorageError]:
        return _EXCEPTION_TYPES[self]


_EXCEPTION_TYPES: dict[ErrorKind, type[StorageError]] = {
    ErrorKind.CONNECTION: StorageConnectionError,
    ErrorKind.SCHEMA: SchemaError,
    ErrorKind.QUERY: QueryError,
    ErrorKind.DRIVER: DriverError,
}

# Message fragments SQLite uses for statements that could never succeed.
_QUERY_ERROR_MARKERS = (
    "syntax error",
    "no such table",
    "no such column",
    "has no column named",
    "incomplete input",
    "unrecognized token",
)


@dataclass(frozen=True)
class ErrorRecord:
    """Failing query text plus the driver diagnostic."""

    kind: ErrorKind
    query: str
    message: str
    code: int | None = None
    params: tuple[Any, ...] = field(default_factory=tuple)

    def to_exception(self) -> StorageError:
        """Return the exception matching :attr:`kind` for callers that raise."""

        return self.kind.exception_type(self.message, query=self.query, code=self.code)

    def __str__(self) -> str:
        return f"Sqlite Error: {self.message}\nQuery: {self.query}"


def classify_driver_error(exc: BaseException) -> ErrorKind:
    """Map a driver exception onto :class:`ErrorKind` (QUERY or DRIVER)."""

    if isinstance(exc, sqlite3.IntegrityError):
        return ErrorKind.DRIVER
    if isinstance(exc, (sqlite3.OperationalError, sqlite3.ProgrammingError)):
        text = str(exc).lower()
        if any(marker in text for marker in _QUERY_ERROR_MARKERS):
            return ErrorKind.QUERY
    if isinstance(exc, (ValueError, OverflowError)):
        return ErrorKind.QUERY
    return ErrorKind.DRIVER


class ErrorSink:
    """Holds exactly one :class:`ErrorRecord`: the most recent failure."""

    def __init__(self) -> None:
        self._last: ErrorRecord | None = None

    @property
    def last(self) -> ErrorRecord | None:
        return self._last

    def record(
        self,
        kind: ErrorKind,
        query: str,
        message: str,
        *,
        code: int | None = None,
        params: Sequence[Any] = (),
    ) -> ErrorRecord:
        self._last = ErrorRecord(
            kind=kind, query=query, message=message, code=code, params=tuple(params)
        )
        return self._last

    def record_exception(
        self,
        exc: BaseException,
        query: str,
        *,
        kind: ErrorKind | None = None,
        params: Sequence[Any] = (),
    ) -> ErrorRecord:
        """Store ``exc`` as the last error, classifying it unless ``kind`` is given."""

        return self.record(
            kind or classify_driver_error(exc),
            query,
            str(exc),
            code=getattr(exc, "sqlite_errorcode", None),
            params=params,
        )

    def clear(self) -> None:
        self._last = None

    def __bool__(self) -> bool:
        return self._last is not None
