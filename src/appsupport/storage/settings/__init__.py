# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Key-value settings persisted through the table engine."""

from appsupport.storage.settings.registry import (
    InstanceRegistry,
    SlotHandle,
    StaleHandleError,
    instance_registry,
)
from appsupport.storage.settings.signal_bus import SignalBus, bus_registry
from appsupport.storage.settings.store import (
    DEFAULT_DATABASE_NAME,
    DEFAULT_TABLE_NAME,
    SETTINGS_SCHEMA,
    SettingsStore,
)
from appsupport.storage.settings.values import SettingValue, TypeTag, UnsupportedValueError

__all__ = [
    "InstanceRegistry",
    "SlotHandle",
    "StaleHandleError",
    "instance_registry",
    "SignalBus",
    "bus_registry",
    "DEFAULT_DATABASE_NAME",
    "DEFAULT_TABLE_NAME",
    "SETTINGS_SCHEMA",
    "SettingsStore",
    "SettingValue",
    "TypeTag",
    "UnsupportedValueError",
]
