"""Official management commands: add, list, search, show, delete."""

import pydantic
import structlog
import typer

from rate_my_official.cli.common import fail, open_db
from rate_my_official.models.official import Official, OfficialCreate
from rate_my_official.ratings.exceptions import OfficialNotFoundError, RatingsError
from rate_my_official.storage.officials import OfficialRepository
from rate_my_official.utils.config import get_settings

officials_app = typer.Typer(help="Official management commands.")

logger = structlog.get_logger(__name__)


def _echo_official(official: Official) -> None:
    typer.echo(
        f"  #{official.id} {official.full_name} - {official.location}, {official.association} "
        f"| {official.average_rating}/5 ({official.total_reviews} review(s))"
    )


@officials_app.command()
def add(
    first_name: str = typer.Option(..., "--first-name"),
    last_name: str = typer.Option(..., "--last-name"),
    age: int = typer.Option(..., "--age"),
    location: str = typer.Option(..., "--location"),
    association: str = typer.Option(..., "--association"),
    years_experience: int = typer.Option(..., "--years-experience"),
    photo_url: str = typer.Option(None, "--photo-url"),
) -> None:
    """Add an official. Ratings start at zero."""
    try:
        data = OfficialCreate(
            first_name=first_name,
            last_name=last_name,
            age=age,
            location=location,
            association=association,
            years_experience=years_experience,
            photo_url=photo_url,
        )
    except pydantic.ValidationError as e:
        fail("Invalid official data", e)

    conn = open_db()
    try:
        official = OfficialRepository(conn).create(data)
    except RatingsError as e:
        fail("Failed to create official", e)
    finally:
        conn.close()
    typer.echo(f"[OK] Official #{official.id} {official.full_name} created")


@officials_app.command("list")
def list_officials(
    page: int = typer.Option(1, "--page", "-p", min=1),
    limit: int = typer.Option(None, "--limit", "-l", help="Officials per page"),
) -> None:
    """List officials with their cached ratings."""
    limit = limit or get_settings().officials_page_size
    conn = open_db()
    try:
        officials, total = OfficialRepository(conn).list_page(page=page, limit=limit)
    finally:
        conn.close()

    typer.echo(f"Officials (page {page}, {total:,} total)")
    for official in officials:
        _echo_official(official)


@officials_app.command()
def search(query: str = typer.Argument(..., help="Name or location fragment")) -> None:
    """Search officials by name or location."""
    conn = open_db()
    try:
        officials = OfficialRepository(conn).search(query)
    finally:
        conn.close()

    if not officials:
        typer.echo("No officials found.")
    for official in officials:
        _echo_official(official)


@officials_app.command()
def show(official_id: int = typer.Argument(..., help="Official ID")) -> None:
    """Show an official and the events they worked."""
    conn = open_db()
    try:
        repo = OfficialRepository(conn)
        official = repo.get(official_id)
        events = repo.events_for_official(official_id)
    except OfficialNotFoundError as e:
        fail(str(e))
    finally:
        conn.close()

    _echo_official(official)
    typer.echo(f"  {official.years_experience} year(s) experience, age {official.age}")
    for event in events:
        typer.echo(f"    - {event.date} {event.name} @ {event.venue}")


@officials_app.command()
def delete(
    official_id: int = typer.Argument(..., help="Official ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete an official with their assignments and reviews."""
    if not yes:
        typer.confirm(f"Delete official #{official_id} and all their reviews?", abort=True)

    conn = open_db()
    try:
        OfficialRepository(conn).delete(official_id)
    except OfficialNotFoundError as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to delete official", e)
    finally:
        conn.close()
    typer.echo(f"[OK] Official #{official_id} deleted")
