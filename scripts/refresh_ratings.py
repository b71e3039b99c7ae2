"""Recompute every official's cached rating from their current reviews.

Intended for cron or manual repair after bulk data changes. Each official is
recomputed independently: a failure on one is logged and the run moves on to
the next. The process exits with code 1 if any official failed.

Usage:
    uv run python scripts/refresh_ratings.py

    # Against a specific database file
    uv run python scripts/refresh_ratings.py --db-path data/rate_my_official.sqlite

    # Write the run summary as JSON
    uv run python scripts/refresh_ratings.py --status-file logs/refresh.json

Log files:
    All output is written to logs/rate_my_official_YYYYMMDD_HHMMSS.log as JSON lines.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

# Ensure rate_my_official is importable when running as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

# Configure logging BEFORE any rate_my_official imports that call structlog.
from rate_my_official.utils.logging import get_active_log_file, setup_logging

setup_logging()

import structlog  # noqa: E402, I001
from rate_my_official.ratings.aggregator import RatingAggregator, RefreshSummary  # noqa: E402
from rate_my_official.schema.connection import get_db_connection  # noqa: E402

logger = structlog.get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recompute cached official ratings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite database file (default: DB_PATH setting)",
    )
    parser.add_argument(
        "--status-file",
        default=None,
        help="Path to write the JSON run summary (e.g. logs/refresh.json)",
    )
    return parser.parse_args(argv)


def write_status(path: Path, summary: RefreshSummary, started_at: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "started_at": started_at,
        "finished_at": datetime.now(UTC).isoformat(),
        "attempted": summary.attempted,
        "succeeded": len(summary.succeeded),
        "failed": {str(k): v for k, v in summary.failed.items()},
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    started_at = datetime.now(UTC).isoformat()
    logger.info("refresh_start", db_path=args.db_path, log_file=str(get_active_log_file()))

    try:
        conn = get_db_connection(Path(args.db_path) if args.db_path else None)
    except RuntimeError as exc:
        logger.error("refresh_cannot_open_database", error=str(exc))
        return 1

    try:
        summary = RatingAggregator(conn).recompute_all()
    finally:
        conn.close()

    if args.status_file:
        write_status(Path(args.status_file), summary, started_at)

    exit_code = 0 if summary.ok else 1
    logger.info(
        "refresh_complete",
        exit_code=exit_code,
        attempted=summary.attempted,
        failed=sorted(summary.failed),
    )
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
