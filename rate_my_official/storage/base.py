"""Base class for repositories."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import Any

import structlog

from rate_my_official.ratings.aggregator import RatingAggregator, RefreshSummary

logger = structlog.get_logger(__name__)


def utc_now() -> str:
    """Current UTC time as the ISO-8601 text stored in timestamp columns."""
    return datetime.now(UTC).isoformat()


class BaseRepository:
    """
    Shared plumbing for the table repositories.

    The connection is injected rather than looked up, so each repository can be
    pointed at a throwaway database in tests.
    """

    table: str

    def __init__(self, conn: sqlite3.Connection, aggregator: RatingAggregator | None = None):
        self.conn = conn
        self.aggregator = aggregator or RatingAggregator(conn)
        self.logger = logger.bind(table=self.table)

    def _update_fields(self, row_id: int, fields: dict[str, Any]) -> int:
        """Apply a partial update and return the number of rows changed."""
        if not fields:
            return 0
        assignments = ", ".join(f"{column} = ?" for column in fields)
        cursor = self.conn.execute(
            f"UPDATE {self.table} SET {assignments} WHERE id = ?",  # noqa: S608
            (*fields.values(), row_id),
        )
        return cursor.rowcount

    def _refresh_ratings(self, reason: str) -> RefreshSummary:
        """Run a full rating refresh after a deletion that may touch many officials."""
        self.logger.info("Triggering global rating refresh", reason=reason)
        return self.aggregator.recompute_all()
