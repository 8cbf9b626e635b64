# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Schema-driven SQLite table engine."""

from appsupport.storage.sqlite.connections import (
    ConnectionRegistry,
    default_connections,
    normalize_path,
)
from appsupport.storage.sqlite.errors import (
    DriverError,
    ErrorKind,
    ErrorRecord,
    ErrorSink,
    QueryError,
    SchemaError,
    StorageConnectionError,
    StorageError,
)
from appsupport.storage.sqlite.predicates import (
    Eq,
    Join,
    Predicate,
    and_,
    build_where,
    compile_where,
    or_,
)
from appsupport.storage.sqlite.schema import ColumnDefinition, ColumnType, Schema
from appsupport.storage.sqlite.table_engine import Order, SelectOrder, TableEngine

__all__ = [
    "ConnectionRegistry",
    "default_connections",
    "normalize_path",
    "DriverError",
    "ErrorKind",
    "ErrorRecord",
    "ErrorSink",
    "QueryError",
    "SchemaError",
    "StorageConnectionError",
    "StorageError",
    "Eq",
    "Join",
    "Predicate",
    "and_",
    "or_",
    "build_where",
    "compile_where",
    "ColumnDefinition",
    "ColumnType",
    "Schema",
    "Order",
    "SelectOrder",
    "TableEngine",
]
