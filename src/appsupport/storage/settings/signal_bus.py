# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Process-wide bus of named signals.

Every live :class:`SignalBus` is a participant.  ``emit_signal(name, target,
data)`` hands ``(name, data)`` to every participant, or only to those whose
``object_name`` equals ``target`` when a target is given.  Each participant
receives the signal through its own delivery context, never inside the
emitter's call.

Usage:
    inbox = SignalBus("inbox")
    inbox.signal_received.connect(lambda name, data: print(name, data))
    SignalBus().emit_signal("refresh", "inbox", {"page": 2})
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Mapping
from typing import Any

from appsupport.core.delivery import DeliveryContext, ThreadedDelivery
from appsupport.core.signals import Signal

from .registry import InstanceRegistry, SlotHandle

__all__ = ["SignalBus", "bus_registry"]

log = logging.getLogger(__name__)

_BUS_REGISTRY = InstanceRegistry()


def bus_registry() -> InstanceRegistry:
    return _BUS_REGISTRY


def _release(registry: InstanceRegistry, handle: SlotHandle, delivery: DeliveryContext) -> None:
    registry.unregister(handle)
    delivery.close()


class SignalBus:
    """One participant on the named-signal bus."""

    def __init__(
        self,
        object_name: str = "",
        *,
        registry: InstanceRegistry | None = None,
        delivery: DeliveryContext | None = None,
    ) -> None:
        self.object_name = object_name
        self.signal_received = Signal("signal_received")
        self._closed = False
        self._registry = registry if registry is not None else bus_registry()
        if delivery is None:
            delivery = ThreadedDelivery(name=f"bus-{object_name or 'anonymous'}")
        self._delivery = delivery
        self._handle = self._registry.register(self)
        self._finalizer = weakref.finalize(
            self, _release, self._registry, self._handle, self._delivery
        )

    @property
    def handle(self) -> SlotHandle:
        return self._handle

    @property
    def closed(self) -> bool:
        return self._closed

    def emit_signal(
        self, name: str, target: str = "", data: Mapping[str, Any] | None = None
    ) -> int:
        """Send ``name`` with ``data`` to matching participants.

        An empty ``target`` reaches every participant, this one included.
        Each receiver gets its own copy of ``data``.  Returns the number of
        participants the signal was queued for.
        """

        payload = dict(data or {})
        delivered = 0
        for participant in self._registry.live_instances():
            if not isinstance(participant, SignalBus):
                continue
            if target and participant.object_name != target:
                continue
            if participant.deliver_signal(name, payload):
                delivered += 1
        log.debug("Signal %s sent to %d participant(s) (target=%r)", name, delivered, target)
        return delivered

    def deliver_signal(self, name: str, data: Mapping[str, Any]) -> bool:
        if self._closed:
            return False
        payload = dict(data)
        return self._delivery.post(lambda: self.signal_received.emit(name, payload))

    def flush(self) -> None:
        """Wait until queued signals for this participant have been delivered."""

        if not self._closed:
            self._delivery.barrier()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._finalizer()

    def __enter__(self) -> SignalBus:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SignalBus {self.object_name or '?'}>"
