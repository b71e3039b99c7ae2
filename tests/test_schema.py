"""Tests for database schema, migrations and transactions."""

import sqlite3

import pytest

from rate_my_official.ratings.exceptions import StorageError, TransientStorageError


def test_database_initialization(temp_db_path):
    """Test that database initializes correctly."""
    from rate_my_official.schema.connection import init_database

    init_database(temp_db_path)

    assert temp_db_path.exists()

    conn = sqlite3.connect(temp_db_path)
    tables = {
        row[0]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    }
    conn.close()

    for table in ("users", "officials", "events", "event_officials", "teams", "event_teams", "reviews"):
        assert table in tables


def test_init_database_is_repeatable(temp_db_path):
    from rate_my_official.schema.connection import init_database
    from rate_my_official.schema.migrations import run_migrations

    init_database(temp_db_path)

    assert run_migrations(temp_db_path) == 0


def test_indexes_created(db_connection):
    """Test that lookup indexes are created."""
    indexes = {
        row[0]
        for row in db_connection.execute(
            "SELECT name FROM sqlite_master WHERE type='index' AND name LIKE 'idx_%'"
        ).fetchall()
    }

    assert {"idx_reviews_official", "idx_reviews_event", "idx_event_officials_official"} <= indexes


def test_rollback_migration(temp_db_path):
    from rate_my_official.schema.migrations import rollback_migration, run_migrations

    assert run_migrations(temp_db_path) == 2
    assert rollback_migration(temp_db_path, steps=1) == 1

    conn = sqlite3.connect(temp_db_path)
    indexes = conn.execute(
        "SELECT COUNT(*) FROM sqlite_master WHERE type='index' AND name LIKE 'idx_%'"
    ).fetchone()[0]
    conn.close()
    assert indexes == 0


def test_connection_pragmas(db_connection):
    assert db_connection.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    assert db_connection.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
    assert db_connection.isolation_level is None


def test_foreign_key_constraints(db_connection):
    """Test that foreign key constraints are enforced."""
    with pytest.raises(sqlite3.IntegrityError):
        db_connection.execute(
            "INSERT INTO event_officials (event_id, official_id) VALUES (99999, 99999)"
        )


def test_review_uniqueness_constraint(db_connection, seed):
    official = seed.official()
    event = seed.event(officials=[official])
    user = seed.user()
    sql = """
        INSERT INTO reviews (official_id, user_id, event_id, mechanics, professionalism,
            positioning, stalling, consistency, appearance, created_at)
        VALUES (?, ?, ?, 3, 3, 3, 3, 3, 3, '2024-01-01T00:00:00+00:00')
    """
    db_connection.execute(sql, (official.id, user.id, event.id))

    with pytest.raises(sqlite3.IntegrityError, match="UNIQUE constraint failed: reviews"):
        db_connection.execute(sql, (official.id, user.id, event.id))


def test_review_score_check_constraint(db_connection, seed):
    official = seed.official()
    event = seed.event(officials=[official])
    user = seed.user()

    with pytest.raises(sqlite3.IntegrityError):
        db_connection.execute(
            """
            INSERT INTO reviews (official_id, user_id, event_id, mechanics, professionalism,
                positioning, stalling, consistency, appearance, created_at)
            VALUES (?, ?, ?, 6, 3, 3, 3, 3, 3, '2024-01-01T00:00:00+00:00')
            """,
            (official.id, user.id, event.id),
        )


def test_transaction_commits(db_connection):
    from rate_my_official.schema.connection import transaction

    with transaction(db_connection):
        db_connection.execute("INSERT INTO teams (name, created_at) VALUES ('A', 'now')")

    assert not db_connection.in_transaction
    assert db_connection.execute("SELECT COUNT(*) FROM teams").fetchone()[0] == 1


def test_transaction_rolls_back_on_error(db_connection):
    from rate_my_official.schema.connection import transaction

    with pytest.raises(RuntimeError):
        with transaction(db_connection):
            db_connection.execute("INSERT INTO teams (name, created_at) VALUES ('B', 'now')")
            raise RuntimeError("abort")

    assert not db_connection.in_transaction
    assert db_connection.execute("SELECT COUNT(*) FROM teams").fetchone()[0] == 0


def test_nested_transaction_joins_outer(db_connection):
    from rate_my_official.schema.connection import transaction

    with pytest.raises(RuntimeError):
        with transaction(db_connection):
            with transaction(db_connection):
                db_connection.execute("INSERT INTO teams (name, created_at) VALUES ('C', 'now')")
            assert db_connection.in_transaction
            raise RuntimeError("abort outer")

    assert db_connection.execute("SELECT COUNT(*) FROM teams").fetchone()[0] == 0


def test_locked_database_raises_transient_error(db_path):
    from rate_my_official.schema.connection import get_db_connection, transaction

    holder = get_db_connection(db_path)
    waiter = get_db_connection(db_path, timeout=0.1)
    holder.execute("BEGIN IMMEDIATE")
    try:
        with pytest.raises(TransientStorageError):
            with transaction(waiter):
                pass
    finally:
        holder.execute("ROLLBACK")
        holder.close()
        waiter.close()

    assert issubclass(TransientStorageError, StorageError)


def test_is_transient():
    from rate_my_official.schema.connection import is_transient

    assert is_transient(sqlite3.OperationalError("database is locked"))
    assert not is_transient(sqlite3.OperationalError("no such table: x"))
    assert not is_transient(sqlite3.IntegrityError("database is locked"))


def test_get_db_connection_unwritable_dir(tmp_path):
    from unittest.mock import patch

    from rate_my_official.schema.connection import get_db_connection

    with patch("pathlib.Path.mkdir", side_effect=PermissionError("denied")):
        with pytest.raises(RuntimeError, match="Cannot create database directory"):
            get_db_connection(tmp_path / "sub" / "x.db")
