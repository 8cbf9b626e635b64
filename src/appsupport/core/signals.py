# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Minimal callback registry with a Qt-like ``connect``/``emit`` API."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

__all__ = ["Signal"]

log = logging.getLogger(__name__)


class Signal:
    """Synchronous callback list.

    Slots run in the context that calls :meth:`emit`, in connection order.
    A slot that raises is logged and does not stop the remaining slots.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._slots: list[Callable[..., Any]] = []
        self._lock = threading.Lock()

    def connect(self, slot: Callable[..., Any]) -> Callable[..., Any]:
        """Connect ``slot``; returns it so this can be used as a decorator."""

        with self._lock:
            self._slots.append(slot)
        return slot

    def disconnect(self, slot: Callable[..., Any] | None = None) -> bool:
        """Disconnect ``slot`` (or every slot when ``None``)."""

        with self._lock:
            if slot is None:
                had_slots = bool(self._slots)
                self._slots.clear()
                return had_slots
            try:
                self._slots.remove(slot)
            except ValueError:
                return False
            return True

    def emit(self, *args: Any) -> None:
        with self._lock:
            slots = list(self._slots)
        for slot in slots:
            try:
                slot(*args)
            except Exception:
                log.exception("Slot %r connected to %s raised", slot, self.name or "signal")

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def __repr__(self) -> str:
        return f"<Signal {self.name or '?'} slots={len(self)}>"
