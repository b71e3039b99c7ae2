"""Existence checks run before dependent writes.

Table and column names are only ever supplied by this package, never by user
input; values are always bound parameters.
"""

from __future__ import annotations

import sqlite3
from typing import Any

import structlog

from rate_my_official.ratings.exceptions import NotFoundError

logger = structlog.get_logger(__name__)


def row_exists(conn: sqlite3.Connection, table: str, **criteria: Any) -> bool:
    """
    Return True if ``table`` has at least one row matching every criterion.

    Example:
        if not row_exists(conn, "event_officials", official_id=7, event_id=3):
            raise OfficialNotAssignedError(7, 3)
    """
    if not criteria:
        raise ValueError("row_exists needs at least one criterion")
    where = " AND ".join(f"{column} = ?" for column in criteria)
    cursor = conn.execute(
        f"SELECT 1 FROM {table} WHERE {where} LIMIT 1",  # noqa: S608
        tuple(criteria.values()),
    )
    return cursor.fetchone() is not None


def require_row(
    conn: sqlite3.Connection,
    table: str,
    row_id: int,
    error_cls: type[NotFoundError],
) -> None:
    """Raise ``error_cls(row_id)`` unless ``table`` holds a row with that id."""
    if not row_exists(conn, table, id=row_id):
        logger.debug("Referenced row missing", table=table, row_id=row_id)
        raise error_cls(row_id)


def missing_ids(conn: sqlite3.Connection, table: str, ids: list[int]) -> list[int]:
    """Return the subset of ``ids`` with no row in ``table``, preserving order."""
    return [row_id for row_id in ids if not row_exists(conn, table, id=row_id)]
