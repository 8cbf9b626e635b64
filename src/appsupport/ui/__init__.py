# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

from importlib import import_module

__all__ = ["SettingsBridge", "SignalBusBridge", "QtDelivery"]


def __getattr__(name: str):
    if name in __all__:
        module = import_module("appsupport.ui.settings_bridge")
        value = getattr(module, name)
    else:
        raise AttributeError(f"module 'appsupport.ui' has no attribute {name!r}")
    globals()[name] = value
    return value
