# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
DataFrame views over engine tables.
"""

from __future__ import annotations

import logging
import sqlite3

import pandas as pd

from .errors import ErrorKind
from .predicates import WhereLike
from .table_engine import SelectOrder, TableEngine

__all__ = ["select_dataframe"]

log = logging.getLogger(__name__)


def select_dataframe(
    engine: TableEngine,
    conn: sqlite3.Connection,
    name: str,
    where: WhereLike = None,
    order: SelectOrder | None = None,
    limit: int | None = None,
) -> pd.DataFrame:
    """Return the rows :meth:`TableEngine.select` would return, as a DataFrame.

    Follows the engine's failure contract: an empty frame is returned and the
    diagnostic lands in ``engine.last_error``.
    """

    try:
        query, params = engine.build_select(name, where, order, limit)
    except (ValueError, TypeError) as exc:
        engine.errors.record(ErrorKind.QUERY, f"SELECT * FROM {name}", str(exc))
        log.warning("Rejected dataframe select on %s: %s", name, exc)
        return pd.DataFrame()

    if conn is None:
        engine.errors.record(ErrorKind.CONNECTION, query, "No open database connection")
        return pd.DataFrame()

    try:
        df = pd.read_sql_query(query, conn, params=params)
    except (sqlite3.Error, pd.errors.DatabaseError) as exc:
        cause = exc.__cause__ if isinstance(exc.__cause__, (sqlite3.Error, OverflowError)) else exc
        engine.errors.record_exception(cause, query, params=params)
        log.warning("Dataframe select failed on %s: %s", name, exc)
        return pd.DataFrame()
    return df
