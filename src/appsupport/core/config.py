# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Runtime configuration for storage: data directory and SQLite pragmas."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["APP_NAME", "StorageConfig", "app_data_dir"]

APP_NAME = "AppSupport"

DEFAULT_BUSY_TIMEOUT_MS = 5000
DEFAULT_CONNECT_TIMEOUT = 30.0

log = logging.getLogger(__name__)


def app_data_dir(app_name: str = APP_NAME) -> Path:
    """
    Return the writable application-data directory.

    ``APPSUPPORT_DATA_DIR`` overrides the platform default:

    - Windows: %APPDATA%\\AppName
    - macOS: ~/Library/Application Support/AppName
    - Linux: $XDG_DATA_HOME/AppName (default ~/.local/share/AppName)
    """
    override = os.environ.get("APPSUPPORT_DATA_DIR")
    if override:
        return Path(override).expanduser()

    home = Path.home()
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
        return base / app_name
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / app_name
    xdg_data_home = os.environ.get("XDG_DATA_HOME", home / ".local" / "share")
    return Path(xdg_data_home) / app_name


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring invalid integer %s=%r; using %s", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("Ignoring invalid number %s=%r; using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class StorageConfig:
    data_dir: Path = field(default_factory=app_data_dir)
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    journal_mode: str | None = None
    foreign_keys: bool = True
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Build a config from ``APPSUPPORT_*`` environment variables."""

        busy = _env_int("APPSUPPORT_BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS)
        if busy < 0:
            log.warning("APPSUPPORT_BUSY_TIMEOUT_MS must be >= 0, got %s", busy)
            busy = DEFAULT_BUSY_TIMEOUT_MS
        journal = os.environ.get("APPSUPPORT_JOURNAL_MODE") or None
        foreign_keys = os.environ.get("APPSUPPORT_FOREIGN_KEYS", "1") != "0"
        return cls(
            data_dir=app_data_dir(),
            busy_timeout_ms=busy,
            journal_mode=journal.upper() if journal else None,
            foreign_keys=foreign_keys,
            connect_timeout=_env_float("APPSUPPORT_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
        )

    def pragmas(self) -> dict[str, object]:
        """Pragmas applied to every connection opened with this config."""

        opts: dict[str, object] = {
            "foreign_keys": self.foreign_keys,
            "busy_timeout_ms": self.busy_timeout_ms,
        }
        if self.journal_mode:
            opts["journal_mode"] = self.journal_mode
        return opts
