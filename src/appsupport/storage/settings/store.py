# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Key-value settings store on top of the table engine.

Each :class:`SettingsStore` is bound to one ``(database path, table name)``
pair and keeps one row per key in a fixed three-column table::

    setting_name  TEXT    NOT NULL
    setting_value BLOB    NOT NULL
    setting_type  INTEGER NOT NULL

Several stores may point at the same file and table.  A successful write
that changes a value is broadcast to every live store sharing that file and
table, so observers attached to any of them see writes made through any
other.  Change notifications run in each store's own delivery context;
lifecycle signals (opened/closed/path changed) are emitted synchronously.

Usage:
    store = SettingsStore("settings.sqlite", "settings")
    store.setting_changed.connect(lambda key, old, new: print(key, old, new))
    store.write("volume", 75)
    store.read("volume")  # -> 75
    store.close()
"""

from __future__ import annotations

import locale
import logging
import os
import sqlite3
import weakref
from pathlib import Path
from typing import Any

from appsupport.core.config import StorageConfig
from appsupport.core.delivery import DeliveryContext, ThreadedDelivery
from appsupport.core.signals import Signal
from appsupport.storage.sqlite.connections import ConnectionRegistry, normalize_path
from appsupport.storage.sqlite.errors import ErrorRecord
from appsupport.storage.sqlite.predicates import Predicate
from appsupport.storage.sqlite.schema import ColumnDefinition, ColumnType, Schema
from appsupport.storage.sqlite.table_engine import TableEngine

from .registry import InstanceRegistry, SlotHandle, instance_registry
from .values import SettingValue, UnsupportedValueError

__all__ = [
    "COL_SETTING_NAME",
    "COL_SETTING_VALUE",
    "COL_SETTING_TYPE",
    "SETTINGS_SCHEMA",
    "SettingsStore",
]

COL_SETTING_NAME = "setting_name"
COL_SETTING_VALUE = "setting_value"
COL_SETTING_TYPE = "setting_type"

SETTINGS_SCHEMA = Schema(
    [
        ColumnDefinition(COL_SETTING_NAME, ColumnType.TEXT, nullable=False),
        ColumnDefinition(COL_SETTING_VALUE, ColumnType.BLOB, nullable=False),
        ColumnDefinition(COL_SETTING_TYPE, ColumnType.INTEGER, nullable=False),
    ]
)

DEFAULT_DATABASE_NAME = "settings.sqlite"
DEFAULT_TABLE_NAME = "settings"

log = logging.getLogger(__name__)


def _release(registry: InstanceRegistry, handle: SlotHandle, delivery: DeliveryContext) -> None:
    registry.unregister(handle)
    delivery.close()


class SettingsStore:
    """Persistent key-value settings with cross-instance change notification."""

    def __init__(
        self,
        database_name: str = DEFAULT_DATABASE_NAME,
        table_name: str = DEFAULT_TABLE_NAME,
        *,
        data_dir: str | os.PathLike[str] | None = None,
        config: StorageConfig | None = None,
        connections: ConnectionRegistry | None = None,
        registry: InstanceRegistry | None = None,
        delivery: DeliveryContext | None = None,
    ) -> None:
        if Path(database_name).is_absolute():
            raise ValueError("database_name must be a file name relative to the data directory")

        self.setting_changed = Signal("setting_changed")
        self.database_opened = Signal("database_opened")
        self.database_closed = Signal("database_closed")
        self.database_path_changed = Signal("database_path_changed")
        self.table_name_changed = Signal("table_name_changed")

        config = config or StorageConfig.from_env()
        self._data_dir = Path(data_dir) if data_dir is not None else config.data_dir
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._database_name = database_name
        self._table_name = table_name
        self._engine = TableEngine(connections)
        self._conn: sqlite3.Connection | None = None
        self._opened = False
        self._closed = False

        self._registry = registry if registry is not None else instance_registry()
        if delivery is None:
            delivery = ThreadedDelivery(name=f"settings-{table_name}")
        self._delivery = delivery
        self._handle = self._registry.register(self)
        self._finalizer = weakref.finalize(
            self, _release, self._registry, self._handle, self._delivery
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def database_path(self) -> Path:
        return self._data_dir / self._database_name

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def store_key(self) -> tuple[str, str]:
        return normalize_path(self.database_path), self._table_name

    @property
    def handle(self) -> SlotHandle:
        return self._handle

    @property
    def engine(self) -> TableEngine:
        return self._engine

    @property
    def last_error(self) -> ErrorRecord | None:
        return self._engine.last_error

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Key-value API
    # ------------------------------------------------------------------
    def write(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``.

        Changed values are broadcast to every store sharing this file and
        table.  A failed write returns ``False`` and broadcasts nothing.
        """

        try:
            new = SettingValue.of(value)
        except UnsupportedValueError as exc:
            log.error("Cannot write setting %s: %s", key, exc)
            return False

        conn = self._ensure_table()
        if conn is None:
            return False

        match = [Predicate(COL_SETTING_NAME, key)]
        payload, tag = new.encode_with_tag()
        row = {COL_SETTING_NAME: key, COL_SETTING_VALUE: payload, COL_SETTING_TYPE: tag}

        before = self._engine.last_error
        existing = self._engine.select(conn, self._table_name, match, limit=1)
        if self._engine.last_error is not before:
            return False
        if existing:
            old = self._decode(existing[0])
            ok = self._engine.update(conn, self._table_name, row, match)
        else:
            old = None
            ok = self._engine.insert(conn, self._table_name, row)

        if ok:
            self._registry.broadcast(self, key, old, new)
        return ok

    def read(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default``.

        With the default ``default`` an absent key and a stored ``None`` look
        the same; use :meth:`lookup` to tell them apart.
        """

        found = self.lookup(key)
        return default if found is None else found.value

    def lookup(self, key: str) -> SettingValue | None:
        """Return the tagged value for ``key`` or ``None`` when absent."""

        conn = self._ensure_table()
        if conn is None:
            return None
        rows = self._engine.select(
            conn, self._table_name, [Predicate(COL_SETTING_NAME, key)], limit=1
        )
        if not rows:
            return None
        return self._decode(rows[0])

    def remove(self, key: str) -> bool:
        conn = self._ensure_table()
        if conn is None:
            return False
        return self._engine.delete(conn, self._table_name, [Predicate(COL_SETTING_NAME, key)])

    def exists(self, key: str) -> bool:
        conn = self._ensure_table()
        if conn is None:
            return False
        return self._engine.exists(conn, self._table_name, [Predicate(COL_SETTING_NAME, key)])

    # ------------------------------------------------------------------
    # Retargeting
    # ------------------------------------------------------------------
    def set_database_name(self, database_name: str) -> bool:
        """Point the store at another file inside the data directory."""

        if Path(database_name).is_absolute():
            log.error("Absolute path given (%s); the database name is just the file name", database_name)
            return False
        if database_name == self._database_name:
            return True
        previous = self.database_path
        self._database_name = database_name
        self.database_path_changed.emit()
        return self._restart(previous)

    def set_table_name(self, table_name: str) -> bool:
        if table_name == self._table_name:
            return True
        self._table_name = table_name
        self.table_name_changed.emit()
        return self._restart(self.database_path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def deliver_change(self, key: str, old: Any, new: Any) -> bool:
        """Queue a change notification on this store's delivery context."""

        if self._closed:
            return False
        return self._delivery.post(lambda: self.setting_changed.emit(key, old, new))

    def flush(self) -> None:
        """Wait until queued change notifications have been delivered."""

        if not self._closed:
            self._delivery.barrier()

    def close(self) -> None:
        """Unregister the store and stop its delivery context.

        The shared connection stays open for other stores on the same file.
        """

        if self._closed:
            return
        self._closed = True
        self._conn = None
        self._opened = False
        self._finalizer()

    def __enter__(self) -> SettingsStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SettingsStore {self.database_path}:{self._table_name}>"

    @staticmethod
    def system_language() -> str:
        """Two-letter language code of the current locale (``"en"`` for en_US)."""

        name = locale.getlocale()[0] or os.environ.get("LANG", "") or "C"
        return name.split("_")[0].split(".")[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_table(self) -> sqlite3.Connection | None:
        if self._closed:
            log.warning("Settings store %s:%s is closed", self.database_path, self._table_name)
            return None
        return self._open()

    def _open(self) -> sqlite3.Connection | None:
        conn = self._engine.open_database(self.database_path)
        if conn is None:
            return None
        if not self._opened:
            self._opened = True
            self.database_opened.emit()
        if conn is not self._conn:
            # New handle: first use, retarget, or another store closed the path.
            if not self._engine.create_table(conn, SETTINGS_SCHEMA, self._table_name):
                self._conn = None
                return None
            self._conn = conn
        return conn

    def _restart(self, previous_path: Path) -> bool:
        if self._opened:
            self._engine.close_database(previous_path)
            self._opened = False
            self._conn = None
            self.database_closed.emit()
        return self._open() is not None

    def _decode(self, row: dict[str, Any]) -> SettingValue | None:
        try:
            return SettingValue.decode(row[COL_SETTING_VALUE], row[COL_SETTING_TYPE])
        except (KeyError, TypeError, ValueError, UnicodeDecodeError) as exc:
            log.error("Cannot decode setting %s: %s", row.get(COL_SETTING_NAME), exc)
            return None
