"""Official repository."""

from __future__ import annotations

from rate_my_official.models.event import Event
from rate_my_official.models.official import Official, OfficialCreate, OfficialUpdate
from rate_my_official.ratings.exceptions import OfficialNotFoundError
from rate_my_official.schema.connection import transaction
from rate_my_official.storage.base import BaseRepository
from rate_my_official.storage.integrity import require_row


class OfficialRepository(BaseRepository):
    """Create, look up, edit and remove officials.

    The rating caches (``average_rating``, ``total_reviews``) start at zero and
    are only ever written by the rating aggregator.
    """

    table = "officials"

    def create(self, official: OfficialCreate) -> Official:
        data = official.model_dump()
        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        with transaction(self.conn):
            cursor = self.conn.execute(
                f"INSERT INTO officials ({columns}, average_rating, total_reviews) "  # noqa: S608
                f"VALUES ({placeholders}, 0, 0)",
                tuple(data.values()),
            )
        self.logger.info("Official created", official_id=cursor.lastrowid)
        return self.get(cursor.lastrowid)

    def find(self, official_id: int) -> Official | None:
        row = self.conn.execute("SELECT * FROM officials WHERE id = ?", (official_id,)).fetchone()
        return Official.model_validate(dict(row)) if row else None

    def get(self, official_id: int) -> Official:
        official = self.find(official_id)
        if official is None:
            raise OfficialNotFoundError(official_id)
        return official

    def list_page(self, page: int = 1, limit: int = 20) -> tuple[list[Official], int]:
        """Return one page of officials ordered by id, and the total count."""
        page = max(page, 1)
        rows = self.conn.execute(
            "SELECT * FROM officials ORDER BY id LIMIT ? OFFSET ?",
            (limit, (page - 1) * limit),
        ).fetchall()
        total = self.conn.execute("SELECT COUNT(*) FROM officials").fetchone()[0]
        return [Official.model_validate(dict(row)) for row in rows], total

    def search(self, query: str) -> list[Official]:
        """Case-insensitive substring match on first name, last name or location."""
        term = f"%{query}%"
        rows = self.conn.execute(
            """
            SELECT * FROM officials
            WHERE first_name LIKE ? OR last_name LIKE ? OR location LIKE ?
            ORDER BY last_name, first_name
            """,
            (term, term, term),
        ).fetchall()
        return [Official.model_validate(dict(row)) for row in rows]

    def update(self, official_id: int, changes: OfficialUpdate) -> Official:
        with transaction(self.conn):
            require_row(self.conn, "officials", official_id, OfficialNotFoundError)
            self._update_fields(official_id, changes.model_dump(exclude_unset=True))
        return self.get(official_id)

    def events_for_official(self, official_id: int) -> list[Event]:
        """Events the official was assigned to, most recent first."""
        rows = self.conn.execute(
            """
            SELECT e.* FROM event_officials AS eo
            JOIN events AS e ON e.id = eo.event_id
            WHERE eo.official_id = ?
            ORDER BY e.date DESC
            """,
            (official_id,),
        ).fetchall()
        return [Event.model_validate(dict(row)) for row in rows]

    def delete(self, official_id: int) -> None:
        """
        Remove an official with its event assignments and reviews.

        Order: event_officials, reviews, then the official row, in one
        transaction. A global rating refresh follows the commit.
        """
        with transaction(self.conn):
            require_row(self.conn, "officials", official_id, OfficialNotFoundError)
            assignments = self.conn.execute(
                "DELETE FROM event_officials WHERE official_id = ?", (official_id,)
            ).rowcount
            reviews = self.conn.execute(
                "DELETE FROM reviews WHERE official_id = ?", (official_id,)
            ).rowcount
            self.conn.execute("DELETE FROM officials WHERE id = ?", (official_id,))

        self.logger.info(
            "Official deleted",
            official_id=official_id,
            assignments_removed=assignments,
            reviews_removed=reviews,
        )
        self._refresh_ratings("official_deleted")
