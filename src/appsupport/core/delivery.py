# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Delivery contexts: where a store instance runs its change notifications.

Each settings store owns one delivery context.  The broadcaster never calls
another instance's observers directly; it posts a callable to that
instance's context, which runs posted callables one at a time in FIFO order.

* :class:`ThreadedDelivery` runs callables on a dedicated worker thread.
* :class:`ImmediateDelivery` runs them synchronously in the poster's thread.
* ``appsupport.ui.settings_bridge.QtDelivery`` runs them on a Qt thread.

Usage:
    delivery = ThreadedDelivery(name="settings")
    delivery.post(lambda: print("changed"))
    delivery.barrier()  # wait until everything posted so far has run
    delivery.close()
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "DeliveryClosed",
    "DeliveryContext",
    "ImmediateDelivery",
    "ThreadedDelivery",
]

log = logging.getLogger(__name__)


class DeliveryClosed(RuntimeError):
    """Raised when waiting on a delivery context that has been closed."""


@runtime_checkable
class DeliveryContext(Protocol):
    def post(self, func: Callable[[], Any]) -> bool: ...

    def barrier(self) -> None: ...

    def close(self) -> None: ...


def _run_logged(func: Callable[[], Any]) -> None:
    try:
        func()
    except Exception:
        log.exception("Delivered callback %r raised", func)


class ImmediateDelivery:
    """Run posted callables right away in the caller's thread."""

    def __init__(self) -> None:
        self._closed = False

    def post(self, func: Callable[[], Any]) -> bool:
        if self._closed:
            return False
        _run_logged(func)
        return True

    def barrier(self) -> None:
        return None

    def close(self) -> None:
        self._closed = True


class ThreadedDelivery:
    """FIFO queue drained by one daemon worker thread."""

    def __init__(self, *, name: str = "delivery") -> None:
        self._queue: queue.Queue[tuple[Future, Callable[[], Any]] | None] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._worker, name=f"Delivery-{name}", daemon=True)
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def post(self, func: Callable[[], Any]) -> bool:
        """Queue ``func``; returns ``False`` once the context is closed."""

        with self._lock:
            if self._closed:
                return False
            self._queue.put((Future(), func))
        return True

    def barrier(self, timeout: float | None = 10.0) -> None:
        """Block until every callable posted before this call has run."""

        if threading.current_thread() is self._thread:
            return
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise DeliveryClosed("Delivery context is closed")
            self._queue.put((future, lambda: None))
        future.result(timeout=timeout)

    def close(self, timeout: float = 5.0) -> None:
        """Stop accepting work, drain what is queued and stop the worker."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(None)
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)

    # ------------------------------------------------------------------ #
    # Internal worker                                                    #
    # ------------------------------------------------------------------ #
    def _worker(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                future, func = item
                _run_logged(func)
                future.set_result(None)
            finally:
                self._queue.task_done()

    def __enter__(self) -> ThreadedDelivery:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
