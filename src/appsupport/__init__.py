# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Public package interface for AppSupport: SQLite table engine and settings store."""

from importlib import import_module

from appsupport.core.config import APP_NAME, StorageConfig, app_data_dir
from appsupport.core.delivery import ImmediateDelivery, ThreadedDelivery
from appsupport.core.logging_config import setup_logging
from appsupport.storage.settings import SettingsStore, SettingValue, SignalBus, TypeTag
from appsupport.storage.sqlite import (
    ColumnDefinition,
    ColumnType,
    ErrorKind,
    Predicate,
    Schema,
    TableEngine,
    build_where,
)

__version__ = "1.0.0"

_UI_EXPORTS = {
    "SettingsBridge": ("appsupport.ui.settings_bridge", "SettingsBridge"),
    "SignalBusBridge": ("appsupport.ui.settings_bridge", "SignalBusBridge"),
    "QtDelivery": ("appsupport.ui.settings_bridge", "QtDelivery"),
}


def __getattr__(name: str):
    if name in _UI_EXPORTS:
        module_name, attr = _UI_EXPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'appsupport' has no attribute {name!r}")


__all__ = [
    "APP_NAME",
    "StorageConfig",
    "app_data_dir",
    "setup_logging",
    "ImmediateDelivery",
    "ThreadedDelivery",
    "ColumnDefinition",
    "ColumnType",
    "ErrorKind",
    "Predicate",
    "Schema",
    "TableEngine",
    "build_where",
    "SettingsStore",
    "SignalBus",
    "SettingValue",
    "TypeTag",
    "SettingsBridge",
    "SignalBusBridge",
    "QtDelivery",
    "__version__",
]
