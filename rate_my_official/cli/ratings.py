"""Rating maintenance commands: refresh, recompute, show."""

import structlog
import typer

from rate_my_official.cli.common import fail, open_db
from rate_my_official.models.review import CATEGORIES
from rate_my_official.ratings.aggregator import RatingAggregator
from rate_my_official.ratings.exceptions import OfficialNotFoundError, RatingsError
from rate_my_official.storage.officials import OfficialRepository

ratings_app = typer.Typer(help="Rating aggregation commands.")

logger = structlog.get_logger(__name__)


@ratings_app.command()
def refresh() -> None:
    """
    Recompute every official's cached rating from their current reviews.

    Failures on individual officials are reported but do not stop the run.
    """
    conn = open_db()
    try:
        summary = RatingAggregator(conn).recompute_all()
    except RatingsError as e:
        fail("Failed to refresh official ratings", e)
    finally:
        conn.close()

    for official_id, error in summary.failed.items():
        typer.echo(f"  ✗ official {official_id}: {error}", err=True)

    if not summary.ok:
        typer.echo(
            f"[FAIL] Refreshed {len(summary.succeeded)}/{summary.attempted} official rating(s)",
            err=True,
        )
        raise typer.Exit(code=1)
    typer.echo(f"[OK] Refreshed {summary.attempted} official rating(s)")


@ratings_app.command()
def recompute(official_id: int = typer.Argument(..., help="Official ID")) -> None:
    """Recompute one official's cached rating."""
    conn = open_db()
    try:
        officials = OfficialRepository(conn)
        officials.get(official_id)
        officials.aggregator.recompute_official(official_id)
        official = officials.get(official_id)
    except OfficialNotFoundError as e:
        fail("Official not found", e)
    except RatingsError as e:
        fail("Failed to recompute rating", e)
    finally:
        conn.close()

    typer.echo(
        f"[OK] {official.full_name}: {official.average_rating}/5 "
        f"from {official.total_reviews} review(s)"
    )


@ratings_app.command()
def show(official_id: int = typer.Argument(..., help="Official ID")) -> None:
    """Show an official's per-category averages."""
    conn = open_db()
    try:
        official = OfficialRepository(conn).get(official_id)
        averages = RatingAggregator(conn).get_category_averages(official_id)
    except OfficialNotFoundError as e:
        fail("Official not found", e)
    finally:
        conn.close()

    typer.echo(f"\n{official.full_name} ({official.total_reviews} review(s))")
    for category in CATEGORIES:
        score = getattr(averages, category)
        typer.echo(f"  {category:<16} {'★' * score}{'☆' * (5 - score)} {score}")
    typer.echo(f"  {'overall':<16} {'★' * averages.overall}{'☆' * (5 - averages.overall)} {averages.overall}")
