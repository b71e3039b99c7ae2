"""Event repository, including official and team assignments."""

from __future__ import annotations

from rate_my_official.models.event import Event, EventCreate, SearchFilters
from rate_my_official.models.official import Official
from rate_my_official.models.team import Team
from rate_my_official.ratings.exceptions import (
    EventNotFoundError,
    OfficialNotFoundError,
    TeamNotFoundError,
)
from rate_my_official.schema.connection import transaction
from rate_my_official.storage.base import BaseRepository
from rate_my_official.storage.integrity import missing_ids, require_row

_EVENT_COLUMNS = ("name", "date", "start_time", "venue", "description", "event_type", "host")


class EventRepository(BaseRepository):
    """Events and the officials and teams assigned to them."""

    table = "events"

    def _event_values(self, event: EventCreate) -> tuple:
        data = event.model_dump(include=set(_EVENT_COLUMNS))
        data["date"] = event.date.isoformat()
        return tuple(data[column] for column in _EVENT_COLUMNS)

    def _check_references(self, event: EventCreate) -> None:
        official_ids = [a.official_id for a in event.officials]
        if missing := missing_ids(self.conn, "officials", official_ids):
            raise OfficialNotFoundError(missing[0])
        if missing := missing_ids(self.conn, "teams", event.teams):
            raise TeamNotFoundError(missing[0])

    def _assign(self, event_id: int, event: EventCreate) -> None:
        self.conn.executemany(
            "INSERT INTO event_officials (event_id, official_id, role) VALUES (?, ?, ?)",
            [(event_id, a.official_id, a.role or None) for a in event.officials],
        )
        self.conn.executemany(
            "INSERT INTO event_teams (event_id, team_id) VALUES (?, ?)",
            [(event_id, team_id) for team_id in event.teams],
        )

    def create(self, event: EventCreate) -> Event:
        """Create an event with its official and team assignments in one transaction."""
        with transaction(self.conn):
            self._check_references(event)
            cursor = self.conn.execute(
                f"INSERT INTO events ({', '.join(_EVENT_COLUMNS)}) "  # noqa: S608
                f"VALUES ({', '.join('?' for _ in _EVENT_COLUMNS)})",
                self._event_values(event),
            )
            event_id = cursor.lastrowid
            self._assign(event_id, event)

        self.logger.info(
            "Event created",
            event_id=event_id,
            officials=len(event.officials),
            teams=len(event.teams),
        )
        return self.get(event_id)

    def update(self, event_id: int, event: EventCreate) -> Event:
        """Replace an event's details and both assignment sets."""
        with transaction(self.conn):
            require_row(self.conn, "events", event_id, EventNotFoundError)
            self._check_references(event)
            assignments = ", ".join(f"{column} = ?" for column in _EVENT_COLUMNS)
            self.conn.execute(
                f"UPDATE events SET {assignments} WHERE id = ?",  # noqa: S608
                (*self._event_values(event), event_id),
            )
            self.conn.execute("DELETE FROM event_officials WHERE event_id = ?", (event_id,))
            self.conn.execute("DELETE FROM event_teams WHERE event_id = ?", (event_id,))
            self._assign(event_id, event)

        self.logger.info("Event updated", event_id=event_id)
        return self.get(event_id)

    def find(self, event_id: int) -> Event | None:
        row = self.conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
        return Event.model_validate(dict(row)) if row else None

    def get(self, event_id: int) -> Event:
        event = self.find(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def all(self) -> list[Event]:
        rows = self.conn.execute("SELECT * FROM events ORDER BY date DESC, id DESC").fetchall()
        return [Event.model_validate(dict(row)) for row in rows]

    def search(self, query: str, filters: SearchFilters | None = None) -> list[Event]:
        """Substring match on name, venue, description or host, narrowed by ``filters``."""
        term = f"%{query}%"
        clauses = ["(name LIKE ? OR venue LIKE ? OR COALESCE(description, '') LIKE ? OR host LIKE ?)"]
        params: list = [term, term, term, term]

        if filters is not None:
            if filters.start_date is not None:
                clauses.append("date >= ?")
                params.append(filters.start_date.isoformat())
            if filters.end_date is not None:
                clauses.append("date <= ?")
                params.append(filters.end_date.isoformat())
            for column in ("event_type", "venue", "host"):
                value = getattr(filters, column)
                if value:
                    clauses.append(f"{column} = ?")
                    params.append(value)

        rows = self.conn.execute(
            f"SELECT * FROM events WHERE {' AND '.join(clauses)} ORDER BY date DESC",  # noqa: S608
            params,
        ).fetchall()
        return [Event.model_validate(dict(row)) for row in rows]

    def officials_for_event(self, event_id: int) -> list[Official]:
        rows = self.conn.execute(
            """
            SELECT o.* FROM event_officials AS eo
            JOIN officials AS o ON o.id = eo.official_id
            WHERE eo.event_id = ?
            ORDER BY o.last_name, o.first_name
            """,
            (event_id,),
        ).fetchall()
        return [Official.model_validate(dict(row)) for row in rows]

    def teams_for_event(self, event_id: int) -> list[Team]:
        rows = self.conn.execute(
            """
            SELECT t.* FROM event_teams AS et
            JOIN teams AS t ON t.id = et.team_id
            WHERE et.event_id = ?
            ORDER BY t.name
            """,
            (event_id,),
        ).fetchall()
        return [Team.model_validate(dict(row)) for row in rows]

    def delete(self, event_id: int) -> None:
        """
        Remove an event with everything that hangs off it.

        Order: event_officials, event_teams, reviews, then the event row, in one
        transaction. Reviews of several officials may be gone, so a global
        rating refresh follows the commit.
        """
        with transaction(self.conn):
            require_row(self.conn, "events", event_id, EventNotFoundError)
            self.conn.execute("DELETE FROM event_officials WHERE event_id = ?", (event_id,))
            self.conn.execute("DELETE FROM event_teams WHERE event_id = ?", (event_id,))
            reviews = self.conn.execute(
                "DELETE FROM reviews WHERE event_id = ?", (event_id,)
            ).rowcount
            self.conn.execute("DELETE FROM events WHERE id = ?", (event_id,))

        self.logger.info("Event deleted", event_id=event_id, reviews_removed=reviews)
        self._refresh_ratings("event_deleted")
