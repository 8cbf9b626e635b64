# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Column and table definitions for the generic table engine."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "ColumnType",
    "ColumnDefinition",
    "Schema",
    "column_type_name",
    "column_type",
    "is_identifier",
    "quote_identifier",
]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_identifier(name: object) -> bool:
    """Return ``True`` if ``name`` is a plain SQL identifier."""

    return isinstance(name, str) and bool(_IDENTIFIER.match(name))


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class ColumnType(Enum):
    TEXT = "TEXT"
    PK_INTEGER = "INTEGER PRIMARY KEY"
    PK_AUTOINCREMENT = "INTEGER PRIMARY KEY AUTOINCREMENT"
    INTEGER = "INTEGER"
    REAL = "REAL"
    BLOB = "BLOB"
    NULL_TYPE = "NULL"
    NONE = ""


def column_type_name(column: ColumnType) -> str:
    """Return the SQL spelling for ``column``."""

    return column.value


def column_type(type_name: str) -> ColumnType:
    """Map an SQL type spelling back to :class:`ColumnType`.

    Unknown spellings map to :attr:`ColumnType.NONE`.
    """

    normalized = " ".join((type_name or "").upper().split())
    for candidate in ColumnType:
        if candidate.value == normalized:
            return candidate
    return ColumnType.NONE


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    type: ColumnType = ColumnType.TEXT
    nullable: bool = False

    def __post_init__(self) -> None:
        if not is_identifier(self.name):
            raise ValueError(f"Invalid column name: {self.name!r}")
        if self.type is ColumnType.NONE:
            raise ValueError(f"Column {self.name!r} has no type")

    @property
    def null_text(self) -> str:
        return "" if self.nullable else "NOT NULL"

    def to_sql(self) -> str:
        parts = [quote_identifier(self.name), column_type_name(self.type), self.null_text]
        return " ".join(part for part in parts if part)


class Schema:
    """Ordered, immutable sequence of :class:`ColumnDefinition`."""

    __slots__ = ("_columns",)

    def __init__(self, columns: Iterable[ColumnDefinition]):
        cols = tuple(columns)
        if not cols:
            raise ValueError("A schema needs at least one column")
        seen: set[str] = set()
        for col in cols:
            if col.name in seen:
                raise ValueError(f"Duplicate column name: {col.name!r}")
            seen.add(col.name)
        self._columns = cols

    @property
    def columns(self) -> tuple[ColumnDefinition, ...]:
        return self._columns

    @property
    def names(self) -> list[str]:
        return [col.name for col in self._columns]

    def to_sql(self) -> str:
        return ", ".join(col.to_sql() for col in self._columns)

    def __iter__(self) -> Iterator[ColumnDefinition]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._columns == other._columns

    def __hash__(self) -> int:
        return hash(self._columns)

    def __repr__(self) -> str:
        return f"Schema({list(self._columns)!r})"
