"""User repository: registration, approval and removal of coaches and supervisors."""

from __future__ import annotations

import sqlite3

from rate_my_official.models.team import TeamCreate
from rate_my_official.models.user import User, UserCreate, UserProfileUpdate
from rate_my_official.ratings.exceptions import EmailAlreadyRegisteredError, UserNotFoundError
from rate_my_official.schema.connection import transaction
from rate_my_official.storage.base import BaseRepository, utc_now
from rate_my_official.storage.integrity import require_row
from rate_my_official.storage.teams import TeamRepository


class UserRepository(BaseRepository):
    table = "users"

    def create(self, user: UserCreate) -> User:
        """
        Register a user. New accounts wait for approval (``is_verified`` false).

        A coach's school is added to the teams table when no team of that name
        exists yet, in the same transaction as the account.

        Raises:
            EmailAlreadyRegisteredError: An account with this email already exists.
        """
        data = user.model_dump()
        data["created_at"] = utc_now()
        data["is_verified"] = 0

        with transaction(self.conn):
            if self.get_by_email(user.email) is not None:
                self.logger.info("Rejected duplicate registration", email=user.email)
                raise EmailAlreadyRegisteredError(user.email)

            if user.user_type == "Coach" and user.school:
                self._ensure_school_team(user.school)

            try:
                cursor = self.conn.execute(
                    f"INSERT INTO users ({', '.join(data)}) "  # noqa: S608
                    f"VALUES ({', '.join('?' for _ in data)})",
                    tuple(data.values()),
                )
            except sqlite3.IntegrityError as e:
                if "UNIQUE constraint failed: users.email" in str(e):
                    raise EmailAlreadyRegisteredError(user.email) from e
                raise

        self.logger.info("User registered", user_id=cursor.lastrowid, user_type=user.user_type)
        return self.get(cursor.lastrowid)

    def _ensure_school_team(self, school: str) -> None:
        TeamRepository(self.conn, self.aggregator).create(TeamCreate(name=school))

    def get(self, user_id: int) -> User:
        row = self.conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            raise UserNotFoundError(user_id)
        return User.model_validate(dict(row))

    def get_by_email(self, email: str) -> User | None:
        row = self.conn.execute(
            "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
        ).fetchone()
        return User.model_validate(dict(row)) if row else None

    def pending(self) -> list[User]:
        """Unverified non-admin accounts awaiting approval, oldest first."""
        rows = self.conn.execute(
            "SELECT * FROM users WHERE is_verified = 0 AND role = 'user' ORDER BY created_at, id"
        ).fetchall()
        return [User.model_validate(dict(row)) for row in rows]

    def coaches(self, region: str | None = None) -> list[User]:
        """Verified coaches, optionally only those in a supervisor's region."""
        sql = "SELECT * FROM users WHERE is_verified = 1 AND user_type = 'Coach'"
        params: tuple = ()
        if region is not None:
            sql += " AND region = ?"
            params = (region,)
        rows = self.conn.execute(f"{sql} ORDER BY last_name, first_name", params).fetchall()
        return [User.model_validate(dict(row)) for row in rows]

    def approve(self, user_id: int) -> User:
        with transaction(self.conn):
            require_row(self.conn, "users", user_id, UserNotFoundError)
            self._update_fields(user_id, {"is_verified": 1})
        self.logger.info("User approved", user_id=user_id)
        return self.get(user_id)

    def reject(self, user_id: int) -> None:
        """Turn down a pending registration by removing the account."""
        self.delete(user_id)

    def update_profile(self, user_id: int, changes: UserProfileUpdate) -> User:
        """Apply profile changes; a new school gets a team like it does at registration."""
        with transaction(self.conn):
            require_row(self.conn, "users", user_id, UserNotFoundError)
            if changes.school:
                self._ensure_school_team(changes.school)
            self._update_fields(user_id, changes.model_dump(exclude_unset=True))
        return self.get(user_id)

    def delete(self, user_id: int) -> None:
        """
        Remove a user and every review they wrote.

        Order: reviews, then the user row, in one transaction. The reviews may
        have touched any number of officials, so a global rating refresh
        follows the commit.
        """
        with transaction(self.conn):
            require_row(self.conn, "users", user_id, UserNotFoundError)
            reviews = self.conn.execute(
                "DELETE FROM reviews WHERE user_id = ?", (user_id,)
            ).rowcount
            self.conn.execute("DELETE FROM users WHERE id = ?", (user_id,))

        self.logger.info("User deleted", user_id=user_id, reviews_removed=reviews)
        self._refresh_ratings("user_deleted")
