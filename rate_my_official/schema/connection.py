"""Database connection and transaction management."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from rate_my_official.ratings.exceptions import StorageError, TransientStorageError
from rate_my_official.utils.config import get_settings

logger = structlog.get_logger(__name__)

_TRANSIENT_MARKERS = ("database is locked", "database is busy", "database table is locked")


def get_db_connection(db_path: Path | None = None, timeout: float | None = None) -> sqlite3.Connection:
    """
    Get a SQLite database connection with integrity settings applied.

    Args:
        db_path: Path to the database file. If None, uses default from settings.
        timeout: Seconds to wait on a locked database. If None, uses ``db_timeout``.

    Returns:
        SQLite connection in autocommit mode with foreign keys enforced.

    Raises:
        RuntimeError: If the database directory cannot be created or the database
            cannot be opened.
    """
    settings = get_settings()
    db_path = db_path or Path(settings.db_path)
    timeout = settings.db_timeout if timeout is None else timeout

    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except (PermissionError, OSError) as e:
        raise RuntimeError(f"Cannot create database directory '{db_path.parent}': {e}") from e

    try:
        # Autocommit: every multi-statement write goes through transaction().
        conn = sqlite3.connect(str(db_path), timeout=timeout, isolation_level=None)
    except sqlite3.OperationalError as e:
        raise RuntimeError(f"Cannot open database at '{db_path}': {e}") from e

    conn.row_factory = sqlite3.Row

    try:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute(f"PRAGMA busy_timeout = {int(timeout * 1000)}")
    except sqlite3.Error as e:
        conn.close()
        raise RuntimeError(f"Failed to configure database pragmas for '{db_path}': {e}") from e

    logger.debug("Database connection established", db_path=str(db_path), timeout=timeout)
    return conn


def is_transient(error: sqlite3.Error) -> bool:
    """Return True for lock/busy errors that a caller may safely retry."""
    if not isinstance(error, sqlite3.OperationalError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Run the enclosed statements in one ``BEGIN IMMEDIATE`` transaction.

    The write lock is taken up front, so a read-check-insert sequence cannot
    interleave with another writer. When the connection is already inside a
    transaction the block joins it and the outermost caller commits.

    Raises:
        TransientStorageError: If the database stayed locked past the busy timeout.
    """
    if conn.in_transaction:
        yield conn
        return

    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.OperationalError as e:
        if is_transient(e):
            raise TransientStorageError(f"Database is busy: {e}") from e
        raise StorageError(f"Cannot start transaction: {e}") from e

    try:
        yield conn
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise

    try:
        conn.execute("COMMIT")
    except sqlite3.OperationalError as e:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        if is_transient(e):
            raise TransientStorageError(f"Database is busy: {e}") from e
        raise StorageError(f"Commit failed: {e}") from e


def init_database(db_path: Path | None = None) -> None:
    """
    Initialize the database schema.

    This should be called once on first run or after schema changes.

    Args:
        db_path: Path to the database file. If None, uses default from settings.

    Raises:
        RuntimeError: If the database cannot be opened or migrations fail.
    """
    from rate_my_official.schema.migrations import run_migrations  # noqa: PLC0415

    conn = get_db_connection(db_path)
    conn.close()
    try:
        run_migrations(db_path)
        logger.info("Database initialized successfully")
    except Exception as e:
        raise RuntimeError(f"Failed to initialize database: {e}") from e


def close_connection(conn: sqlite3.Connection) -> None:
    """Close a database connection cleanly."""
    conn.close()
    logger.debug("Database connection closed")
