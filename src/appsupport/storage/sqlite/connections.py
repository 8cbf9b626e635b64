# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Connection registry: at most one open SQLite handle per database path.

The registry does no locking of its own.  Code that touches the same path
from several threads must serialise those calls itself.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, cast

from appsupport.core.config import StorageConfig

__all__ = [
    "MEMORY_PATH",
    "ConnectionRegistry",
    "default_connections",
    "normalize_path",
    "set_pragmas",
]

MEMORY_PATH = ":memory:"

log = logging.getLogger(__name__)


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Return the registry key for ``path`` (absolute, resolved)."""

    text = os.fspath(path)
    if text == MEMORY_PATH:
        return text
    return str(Path(text).expanduser().resolve(strict=False))


def _journal_mode(value: object) -> str:
    mode = str(value).strip().upper()
    if not mode.isalpha():
        raise ValueError(f"Invalid journal mode: {value!r}")
    return f"PRAGMA journal_mode={mode}"


_PRAGMA_STATEMENTS: dict[str, Callable[[object], str]] = {
    "foreign_keys": lambda value: f"PRAGMA foreign_keys={'ON' if value else 'OFF'}",
    "journal_mode": _journal_mode,
    "busy_timeout_ms": lambda value: f"PRAGMA busy_timeout={int(cast(Any, value))}",
}


def set_pragmas(conn: sqlite3.Connection, opts: Mapping[str, object]) -> None:
    """Apply the options :meth:`StorageConfig.pragmas` produces.

    Keys are case-insensitive: ``foreign_keys``, ``journal_mode`` and
    ``busy_timeout_ms``.  Unknown keys are skipped.
    """

    for key, value in opts.items():
        statement = _PRAGMA_STATEMENTS.get(str(key).lower())
        if statement is None:
            log.debug("Ignoring unsupported pragma option %s", key)
            continue
        conn.execute(statement(value))


class ConnectionRegistry:
    """Open/reuse one ``sqlite3.Connection`` per absolute database path."""

    def __init__(
        self,
        *,
        pragmas: Mapping[str, object] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._pragmas = dict(pragmas or {})
        self._timeout = timeout
        self._connections: dict[str, sqlite3.Connection] = {}

    def open(self, path: str | os.PathLike[str]) -> sqlite3.Connection:
        """Return the cached handle for ``path``, opening it if needed.

        Raises ``sqlite3.Error`` or ``OSError`` if the file cannot be opened and
        ``ValueError`` for an invalid journal mode.
        """

        key = normalize_path(path)
        conn = self._connections.get(key)
        if conn is not None:
            return conn

        if key != MEMORY_PATH:
            Path(key).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            key, timeout=self._timeout, isolation_level=None, check_same_thread=False
        )
        try:
            conn.row_factory = sqlite3.Row
            set_pragmas(conn, self._pragmas)
        except (sqlite3.Error, ValueError):
            conn.close()
            raise
        self._connections[key] = conn
        log.info("Opened database %s", key)
        return conn

    def close(self, path: str | os.PathLike[str]) -> bool:
        """Close and evict the handle for ``path``; ``False`` if none was open."""

        key = normalize_path(path)
        conn = self._connections.pop(key, None)
        if conn is None:
            return False
        try:
            conn.close()
        except sqlite3.Error as exc:
            log.warning("Error while closing %s: %s", key, exc)
        log.info("Closed database %s", key)
        return True

    def close_all(self) -> None:
        for key in list(self._connections):
            self.close(key)

    def is_open(self, path: str | os.PathLike[str]) -> bool:
        return normalize_path(path) in self._connections

    def paths(self) -> list[str]:
        return list(self._connections)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return self.is_open(path)

    def __len__(self) -> int:
        return len(self._connections)


_DEFAULT_REGISTRY: ConnectionRegistry | None = None


def default_connections() -> ConnectionRegistry:
    """Return the process-wide registry, configured from the environment."""

    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        config = StorageConfig.from_env()
        _DEFAULT_REGISTRY = ConnectionRegistry(
            pragmas=config.pragmas(), timeout=config.connect_timeout
        )
    return _DEFAULT_REGISTRY
