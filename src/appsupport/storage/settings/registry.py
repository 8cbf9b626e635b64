# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Process-wide registry of live settings stores and the change broadcaster.

Stores are kept in a generational slot map.  A store's :class:`SlotHandle`
stays valid for its lifetime.  Unregistering clears the slot and bumps its
generation; slots are never handed out again, so a handle kept past its
store's lifetime is reported as stale instead of aliasing a newer store.
Stores are referenced weakly: a collected store counts as unregistered.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from typing import Any, Protocol

from .values import SettingValue

__all__ = [
    "SlotHandle",
    "StaleHandleError",
    "InstanceRegistry",
    "BroadcastTarget",
    "instance_registry",
]

log = logging.getLogger(__name__)


class StaleHandleError(LookupError):
    """Raised when a handle refers to an instance that is no longer live."""


class BroadcastTarget(Protocol):
    @property
    def store_key(self) -> tuple[str, str]: ...

    def deliver_change(self, key: str, old: Any, new: Any) -> bool: ...


@dataclass(frozen=True)
class SlotHandle:
    index: int
    generation: int


class _Slot:
    __slots__ = ("ref", "generation")

    def __init__(self, ref: weakref.ReferenceType | None, generation: int) -> None:
        self.ref = ref
        self.generation = generation

    def instance(self) -> Any | None:
        return None if self.ref is None else self.ref()


class InstanceRegistry:
    """Index-addressed registry of live instances with stale-handle detection."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._slots: list[_Slot] = []

    def register(self, instance: Any) -> SlotHandle:
        with self._lock:
            index = len(self._slots)
            self._slots.append(_Slot(weakref.ref(instance), 0))
            log.debug("Registered %s in slot %d", type(instance).__name__, index)
            return SlotHandle(index, 0)

    def unregister(self, handle: SlotHandle) -> bool:
        """Clear the slot behind ``handle``; ``False`` if the handle is stale."""

        with self._lock:
            slot = self._slot_for(handle)
            if slot is None or slot.ref is None:
                return False
            slot.ref = None
            slot.generation += 1
            log.debug("Unregistered slot %d", handle.index)
            return True

    def get(self, handle: SlotHandle) -> Any:
        with self._lock:
            slot = self._slot_for(handle)
            instance = None if slot is None else slot.instance()
            if instance is None:
                raise StaleHandleError(f"No live instance for {handle}")
            return instance

    def is_live(self, handle: SlotHandle) -> bool:
        with self._lock:
            slot = self._slot_for(handle)
            return slot is not None and slot.instance() is not None

    def live_instances(self) -> list[Any]:
        with self._lock:
            instances = [slot.instance() for slot in self._slots]
        return [instance for instance in instances if instance is not None]

    def __len__(self) -> int:
        return len(self.live_instances())

    def broadcast(self, source: BroadcastTarget, key: str, old: Any, new: Any) -> int:
        """Deliver ``(key, old, new)`` to every live instance sharing ``source``'s store.

        ``old`` and ``new`` may be plain values or :class:`SettingValue`; an
        absent previous value is ``None``.  Nothing is sent when they are equal
        (type tags included, NaN equal to NaN).  Each target receives plain
        values through its own delivery context.  Returns the number of
        instances reached.
        """

        old_value = SettingValue.of(old)
        new_value = SettingValue.of(new)
        if old_value.same_as(new_value):
            return 0
        store_key = source.store_key
        targets = [
            instance
            for instance in self.live_instances()
            if instance.store_key == store_key
        ]
        delivered = 0
        for target in targets:
            if target.deliver_change(key, old_value.value, new_value.value):
                delivered += 1
        log.debug("Broadcast %s to %d instance(s) of %s", key, delivered, store_key)
        return delivered

    def _slot_for(self, handle: SlotHandle) -> _Slot | None:
        if not 0 <= handle.index < len(self._slots):
            return None
        slot = self._slots[handle.index]
        if slot.generation != handle.generation:
            return None
        return slot


_DEFAULT_REGISTRY = InstanceRegistry()


def instance_registry() -> InstanceRegistry:
    return _DEFAULT_REGISTRY
