"""Team repository."""

from __future__ import annotations

import sqlite3

from rate_my_official.models.event import Event
from rate_my_official.models.team import Team, TeamCreate
from rate_my_official.ratings.exceptions import DuplicateTeamError, TeamNotFoundError
from rate_my_official.schema.connection import transaction
from rate_my_official.storage.base import BaseRepository, utc_now
from rate_my_official.storage.integrity import require_row


class TeamRepository(BaseRepository):
    table = "teams"

    def create(self, team: TeamCreate) -> Team:
        """Create a team, or return the existing one whose name matches ignoring case."""
        with transaction(self.conn):
            existing = self.find_by_name(team.name)
            if existing is not None:
                return existing
            cursor = self.conn.execute(
                "INSERT INTO teams (name, created_at) VALUES (?, ?)", (team.name, utc_now())
            )

        self.logger.info("Team created", team_id=cursor.lastrowid, name=team.name)
        return self.get(cursor.lastrowid)

    def find_by_name(self, name: str) -> Team | None:
        row = self.conn.execute(
            "SELECT * FROM teams WHERE name = ? COLLATE NOCASE ORDER BY id LIMIT 1", (name,)
        ).fetchone()
        return Team.model_validate(dict(row)) if row else None

    def get(self, team_id: int) -> Team:
        row = self.conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        if row is None:
            raise TeamNotFoundError(team_id)
        return Team.model_validate(dict(row))

    def all(self) -> list[Team]:
        rows = self.conn.execute("SELECT * FROM teams ORDER BY name").fetchall()
        return [Team.model_validate(dict(row)) for row in rows]

    def rename(self, team_id: int, name: str) -> Team:
        with transaction(self.conn):
            require_row(self.conn, "teams", team_id, TeamNotFoundError)
            try:
                self._update_fields(team_id, {"name": name})
            except sqlite3.IntegrityError as e:
                if "UNIQUE constraint failed: teams.name" in str(e):
                    raise DuplicateTeamError(name) from e
                raise
        return self.get(team_id)

    def events_for_school(self, school: str) -> list[Event]:
        """Events a coach's school takes part in, matched on the team name."""
        rows = self.conn.execute(
            """
            SELECT e.* FROM teams AS t
            JOIN event_teams AS et ON et.team_id = t.id
            JOIN events AS e ON e.id = et.event_id
            WHERE t.name = ? COLLATE NOCASE
            ORDER BY e.date DESC
            """,
            (school,),
        ).fetchall()
        return [Event.model_validate(dict(row)) for row in rows]

    def delete(self, team_id: int) -> None:
        """Remove a team after its event links. Reviews are unaffected."""
        with transaction(self.conn):
            require_row(self.conn, "teams", team_id, TeamNotFoundError)
            self.conn.execute("DELETE FROM event_teams WHERE team_id = ?", (team_id,))
            self.conn.execute("DELETE FROM teams WHERE id = ?", (team_id,))
        self.logger.info("Team deleted", team_id=team_id)
