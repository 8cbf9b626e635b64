# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Qt bindings for the settings store and the named-signal bus."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

from PyQt5.QtCore import (
    QCoreApplication,
    QLocale,
    QObject,
    Qt,
    pyqtProperty,
    pyqtSignal,
    pyqtSlot,
)

from appsupport.storage.settings.registry import InstanceRegistry
from appsupport.storage.settings.signal_bus import SignalBus
from appsupport.storage.settings.store import (
    DEFAULT_DATABASE_NAME,
    DEFAULT_TABLE_NAME,
    SettingsStore,
)

__all__ = ["QtDelivery", "SettingsBridge", "SignalBusBridge", "system_language"]

log = logging.getLogger(__name__)


def system_language() -> str:
    """Two-letter language of the Qt default locale (``"en"`` for ``en_US``)."""

    name = QLocale().name()
    return name.split("_")[0]


class QtDelivery(QObject):
    """Delivery context that runs callables on this object's Qt thread.

    Posting goes through a queued connection, so callables run from the
    event loop of the thread that owns the object, one at a time and in the
    order they were posted.
    """

    _posted = pyqtSignal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._closed = False
        self._posted.connect(self._run, Qt.QueuedConnection)

    def post(self, func: Callable[[], Any]) -> bool:
        if self._closed:
            return False
        try:
            self._posted.emit(func)
        except RuntimeError:
            # Underlying C++ object already deleted during shutdown.
            return False
        return True

    def barrier(self) -> None:
        """Deliver pending callables now (call from the owning thread)."""

        if self._closed:
            return
        QCoreApplication.sendPostedEvents(None, 0)

    def close(self) -> None:
        self._closed = True

    @pyqtSlot(object)
    def _run(self, func: Callable[[], Any]) -> None:
        if self._closed:
            return
        try:
            func()
        except Exception:
            log.exception("Delivered callback %r raised", func)


class SettingsBridge(QObject):
    """Expose a settings store to Qt widgets and QML.

    ``settingChanged`` is emitted on the bridge's thread for writes made
    through any store sharing the same database file and table.
    """

    settingChanged = pyqtSignal(str, object, object)
    databaseOpened = pyqtSignal()
    databaseClosed = pyqtSignal()
    databasePathChanged = pyqtSignal()
    settingsTableNameChanged = pyqtSignal()

    def __init__(
        self,
        database_name: str = DEFAULT_DATABASE_NAME,
        table_name: str = DEFAULT_TABLE_NAME,
        parent: QObject | None = None,
        *,
        data_dir: str | os.PathLike[str] | None = None,
        **store_options: Any,
    ) -> None:
        super().__init__(parent)
        self._delivery = QtDelivery(self)
        self._store = SettingsStore(
            database_name,
            table_name,
            data_dir=data_dir,
            delivery=self._delivery,
            **store_options,
        )
        self._store.setting_changed.connect(self.settingChanged.emit)
        self._store.database_opened.connect(self.databaseOpened.emit)
        self._store.database_closed.connect(self.databaseClosed.emit)
        self._store.database_path_changed.connect(self.databasePathChanged.emit)
        self._store.table_name_changed.connect(self.settingsTableNameChanged.emit)

    @property
    def store(self) -> SettingsStore:
        return self._store

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    def _get_database_name(self) -> str:
        return self._store.database_name

    def _set_database_name(self, name: str) -> None:
        self._store.set_database_name(name)

    databaseName = pyqtProperty(
        str, fget=_get_database_name, fset=_set_database_name, notify=databasePathChanged
    )

    def _get_table_name(self) -> str:
        return self._store.table_name

    def _set_table_name(self, name: str) -> None:
        self._store.set_table_name(name)

    settingsTableName = pyqtProperty(
        str, fget=_get_table_name, fset=_set_table_name, notify=settingsTableNameChanged
    )

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @pyqtSlot(str, "QVariant", result=bool)
    def write(self, key: str, value: Any) -> bool:
        return self._store.write(key, value)

    @pyqtSlot(str, result="QVariant")
    def read(self, key: str) -> Any:
        return self._store.read(key)

    @pyqtSlot(str, result=bool)
    def remove(self, key: str) -> bool:
        return self._store.remove(key)

    @pyqtSlot(str, result=bool)
    def exists(self, key: str) -> bool:
        return self._store.exists(key)

    @pyqtSlot(result=str)
    def systemLanguage(self) -> str:
        return system_language()

    def flush(self) -> None:
        self._store.flush()

    def close(self) -> None:
        self._store.close()


class SignalBusBridge(QObject):
    """Qt participant on the named-signal bus, addressed by ``objectName``."""

    signalReceived = pyqtSignal(str, object)

    def __init__(
        self,
        object_name: str = "",
        parent: QObject | None = None,
        *,
        registry: InstanceRegistry | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName(object_name)
        self._bus = SignalBus(object_name, registry=registry, delivery=QtDelivery(self))
        self._bus.signal_received.connect(self.signalReceived.emit)
        self.objectNameChanged.connect(self._rename)

    @property
    def bus(self) -> SignalBus:
        return self._bus

    @pyqtSlot(str, str, "QVariantMap", result=int)
    def emitSignal(self, name: str, target: str = "", data: dict | None = None) -> int:
        return self._bus.emit_signal(name, target, data)

    def flush(self) -> None:
        self._bus.flush()

    def close(self) -> None:
        self._bus.close()

    def _rename(self, name: str) -> None:
        self._bus.object_name = name
