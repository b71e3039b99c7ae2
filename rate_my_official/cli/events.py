"""Event management commands: add, list, show, delete."""

from datetime import datetime

import pydantic
import structlog
import typer

from rate_my_official.cli.common import fail, open_db
from rate_my_official.models.event import EventCreate, EventOfficialAssignment
from rate_my_official.ratings.exceptions import NotFoundError, RatingsError
from rate_my_official.storage.events import EventRepository

events_app = typer.Typer(help="Event management commands.")

logger = structlog.get_logger(__name__)


def _parse_assignment(value: str) -> EventOfficialAssignment:
    """Parse ``ID`` or ``ID:Role`` into an assignment."""
    official_id, _, role = value.partition(":")
    return EventOfficialAssignment(official_id=int(official_id), role=role or None)


@events_app.command()
def add(
    name: str = typer.Option(..., "--name"),
    date: datetime = typer.Option(..., "--date", formats=["%Y-%m-%d"]),
    venue: str = typer.Option(..., "--venue"),
    event_type: str = typer.Option(..., "--type"),
    host: str = typer.Option(..., "--host"),
    start_time: str = typer.Option(None, "--start-time", help="HH:MM"),
    description: str = typer.Option(None, "--description"),
    officials: list[str] = typer.Option(
        None, "--official", help="Official ID, optionally with role as ID:Role"
    ),
    teams: list[int] = typer.Option(None, "--team", help="Team ID"),
) -> None:
    """Create an event and assign officials and teams to it."""
    try:
        data = EventCreate(
            name=name,
            date=date.date(),
            start_time=start_time,
            venue=venue,
            description=description,
            event_type=event_type,
            host=host,
            officials=[_parse_assignment(v) for v in officials or []],
            teams=teams or [],
        )
    except (pydantic.ValidationError, ValueError) as e:
        fail("Invalid event data", e)

    conn = open_db()
    try:
        event = EventRepository(conn).create(data)
    except NotFoundError as e:
        fail(str(e))
    finally:
        conn.close()
    typer.echo(f"[OK] Event #{event.id} {event.name} created")


@events_app.command("list")
def list_events(query: str = typer.Argument(None, help="Optional search text")) -> None:
    """List events, most recent first."""
    conn = open_db()
    try:
        repo = EventRepository(conn)
        events = repo.search(query) if query else repo.all()
    finally:
        conn.close()

    for event in events:
        typer.echo(f"  #{event.id} {event.date} {event.name} @ {event.venue} ({event.event_type})")


@events_app.command()
def show(event_id: int = typer.Argument(..., help="Event ID")) -> None:
    """Show an event with its officials and teams."""
    conn = open_db()
    try:
        repo = EventRepository(conn)
        event = repo.get(event_id)
        officials = repo.officials_for_event(event_id)
        teams = repo.teams_for_event(event_id)
    except NotFoundError as e:
        fail(str(e))
    finally:
        conn.close()

    typer.echo(f"{event.name} - {event.date} {event.start_time or ''} @ {event.venue}")
    typer.echo(f"  Host: {event.host} | Type: {event.event_type}")
    typer.echo("  Officials: " + (", ".join(o.full_name for o in officials) or "none"))
    typer.echo("  Teams: " + (", ".join(t.name for t in teams) or "none"))


@events_app.command()
def delete(
    event_id: int = typer.Argument(..., help="Event ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete an event with its assignments and reviews."""
    if not yes:
        typer.confirm(f"Delete event #{event_id} and all its reviews?", abort=True)

    conn = open_db()
    try:
        EventRepository(conn).delete(event_id)
    except NotFoundError as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to delete event", e)
    finally:
        conn.close()
    typer.echo(f"[OK] Event #{event_id} deleted")
