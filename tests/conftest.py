"""Pytest configuration and fixtures."""

import datetime as dt
import itertools
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path

import pytest

from rate_my_official.models import EventCreate, EventOfficialAssignment, OfficialCreate, UserCreate
from rate_my_official.models.review import ReviewCreate


@pytest.fixture
def temp_db_path():
    """Create a temporary database path for testing."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp) / "test.db"


@pytest.fixture(scope="session")
def migrated_db_path(tmp_path_factory):
    """Run migrations exactly once per session into a template database.

    Tests never write to this file; ``db_path`` hands each test its own copy.
    """
    from rate_my_official.schema.migrations import run_migrations

    db = tmp_path_factory.mktemp("session_db") / "template.db"
    run_migrations(db)
    return db


@pytest.fixture
def db_path(migrated_db_path, tmp_path):
    """A private, fully migrated database file for one test."""
    path = tmp_path / "test.db"
    shutil.copy(migrated_db_path, path)
    return path


@pytest.fixture
def db_connection(db_path):
    """Open a connection with the production pragmas against the per-test database.

    The connection is in autocommit mode; repositories and the ledger manage
    their own BEGIN IMMEDIATE / COMMIT.
    """
    from rate_my_official.schema.connection import get_db_connection

    conn = get_db_connection(db_path)
    yield conn
    conn.close()


@pytest.fixture
def waiter(db_path):
    """A second connection that gives up on a locked database after 0.1s."""
    from rate_my_official.schema.connection import get_db_connection

    conn = get_db_connection(db_path, timeout=0.1)
    yield conn
    conn.close()


@pytest.fixture
def write_lock(db_connection):
    """Context manager that holds the write lock on the per-test database."""

    @contextmanager
    def _hold():
        db_connection.execute("BEGIN IMMEDIATE")
        try:
            yield
        finally:
            db_connection.execute("ROLLBACK")

    return _hold


class Seeder:
    """Factory for the rows a review needs: users, officials and events."""

    def __init__(self, conn):
        from rate_my_official.storage import EventRepository, OfficialRepository, UserRepository

        self.conn = conn
        self.users = UserRepository(conn)
        self.officials = OfficialRepository(conn)
        self.events = EventRepository(conn)
        self._seq = itertools.count(1)

    def user(self, user_type="Coach", verified=True, **overrides):
        n = next(self._seq)
        data = {
            "email": f"coach{n}@example.com",
            "first_name": "Casey",
            "last_name": f"Coach{n}",
            "user_type": user_type,
            "school": "Central High" if user_type == "Coach" else None,
            "region": "North",
        }
        data.update(overrides)
        user = self.users.create(UserCreate(**data))
        if verified:
            user = self.users.approve(user.id)
        return user

    def official(self, **overrides):
        n = next(self._seq)
        data = {
            "first_name": "Robin",
            "last_name": f"Ref{n}",
            "age": 40,
            "location": "Springfield",
            "association": "State Officials Association",
            "years_experience": 12,
        }
        data.update(overrides)
        return self.officials.create(OfficialCreate(**data))

    def event(self, officials=(), teams=(), **overrides):
        n = next(self._seq)
        data = {
            "name": f"Dual Meet {n}",
            "date": dt.date(2024, 1, 1) + dt.timedelta(days=n),
            "venue": "Main Gym",
            "event_type": "Dual Meet",
            "host": "Central High",
        }
        data.update(overrides)
        return self.events.create(
            EventCreate(
                **data,
                officials=[EventOfficialAssignment(official_id=o.id) for o in officials],
                teams=[t.id for t in teams],
            )
        )


@pytest.fixture
def seed(db_connection):
    """Row factory bound to the per-test connection."""
    return Seeder(db_connection)


def make_review(event_id, score=None, **scores):
    """Build a ReviewCreate with every category at ``score`` unless overridden."""
    from rate_my_official.models.review import CATEGORIES

    values = dict.fromkeys(CATEGORIES, score if score is not None else 3)
    values.update(scores)
    return ReviewCreate(event_id=event_id, **values)


@pytest.fixture
def review_form():
    """Return the ``make_review`` builder."""
    return make_review


@pytest.fixture
def sample_settings(tmp_path):
    """Sample settings for testing."""
    from rate_my_official.utils.config import Settings

    return Settings(
        db_path=str(tmp_path / "missing.sqlite"),
        log_level="DEBUG",
        log_format="console",
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def mock_conn():
    """Return a mock SQLite connection with sensible cursor defaults."""
    from unittest.mock import MagicMock

    conn = MagicMock()
    cursor = MagicMock()
    cursor.fetchall.return_value = []
    cursor.fetchone.return_value = (0, 0)
    conn.execute.return_value = cursor
    return conn


@pytest.fixture
def patch_db_connection(mock_conn):
    """Patch get_db_connection in the admin commands with the mock connection."""
    from unittest.mock import patch

    with patch("rate_my_official.cli.admin.get_db_connection", return_value=mock_conn):
        yield mock_conn


@pytest.fixture
def cli_db(db_path):
    """Point every CLI command group at the per-test database."""
    from unittest.mock import patch

    from rate_my_official.schema.connection import get_db_connection

    def _connect():
        return get_db_connection(db_path)

    with (
        patch("rate_my_official.cli.common.get_db_connection", side_effect=_connect),
        patch("rate_my_official.cli.admin.get_db_connection", side_effect=_connect),
    ):
        yield db_path


@pytest.fixture
def patch_settings(sample_settings):
    """Patch get_settings globally for CLI tests."""
    from unittest.mock import patch

    with (
        patch("rate_my_official.cli.admin.get_settings", return_value=sample_settings),
        patch("rate_my_official.utils.config.get_settings", return_value=sample_settings),
    ):
        yield sample_settings
