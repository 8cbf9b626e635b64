# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Rotating-file logging for applications built on AppSupport.

Library modules only call ``logging.getLogger(__name__)``; an application
opts in to file output once at startup::

    from appsupport.core.logging_config import setup_logging
    log_dir = setup_logging("MyApp")
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from appsupport.core.config import APP_NAME

__all__ = ["PACKAGE_LOGGER", "setup_logging", "teardown_logging", "get_log_directory"]

PACKAGE_LOGGER = "appsupport"

_MB = 1024 * 1024
_HANDLER_TAG = "_appsupport_handler"

# Package logger level before setup_logging raised it; None when not installed.
_saved_level: int | None = None

_FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
_CONSOLE_FORMAT = logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")


def setup_logging(
    app_name: str = APP_NAME,
    console_level: int = logging.INFO,
    log_dir: str | os.PathLike[str] | None = None,
) -> Path:
    """
    Attach rotating log files and a console handler.

    ``appsupport.log`` receives DEBUG and above from the ``appsupport``
    package (10 MB, 5 backups).  ``errors.log`` receives ERROR and above from
    every logger (5 MB, 3 backups).  Handlers from an earlier call are
    closed and replaced; handlers installed by the host application are left
    alone.

    Args:
        app_name: Used to pick the default log directory
        console_level: Threshold for stdout output
        log_dir: Overrides the platform log directory

    Returns:
        The directory holding the log files
    """
    directory = Path(log_dir) if log_dir is not None else get_log_directory(app_name)
    directory.mkdir(parents=True, exist_ok=True)

    global _saved_level
    teardown_logging()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    _saved_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)

    _attach(package_logger, _rotating(directory / "appsupport.log", logging.DEBUG, 10 * _MB, 5))
    _attach(logging.getLogger(), _rotating(directory / "errors.log", logging.ERROR, 5 * _MB, 3))

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(_CONSOLE_FORMAT)
    _attach(package_logger, console)

    log = logging.getLogger(__name__)
    log.info("%s logging initialized in %s", app_name, directory)
    log.debug("Platform: %s, Python: %s", sys.platform, sys.version.split()[0])
    return directory


def teardown_logging() -> None:
    """Remove the handlers installed by :func:`setup_logging` and restore the level."""

    global _saved_level
    for logger in (logging.getLogger(), logging.getLogger(PACKAGE_LOGGER)):
        for handler in list(logger.handlers):
            if getattr(handler, _HANDLER_TAG, False):
                logger.removeHandler(handler)
                handler.close()
    if _saved_level is not None:
        logging.getLogger(PACKAGE_LOGGER).setLevel(_saved_level)
        _saved_level = None


def get_log_directory(app_name: str = APP_NAME) -> Path:
    """
    Platform log directory for ``app_name``.

    - Windows: %LOCALAPPDATA%\\AppName\\logs
    - macOS: ~/Library/Logs/AppName
    - Linux: $XDG_DATA_HOME/AppName/logs
    """
    home = Path.home()
    if sys.platform == "win32":
        return Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local")) / app_name / "logs"
    if sys.platform == "darwin":
        return home / "Library" / "Logs" / app_name
    return Path(os.environ.get("XDG_DATA_HOME", home / ".local" / "share")) / app_name / "logs"


def _rotating(path: Path, level: int, max_bytes: int, backups: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(_FILE_FORMAT)
    return handler


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_TAG, True)
    logger.addHandler(handler)
