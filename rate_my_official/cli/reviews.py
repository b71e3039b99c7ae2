"""Review commands: submit, list, report, reported, delete."""

import pydantic
import structlog
import typer

from rate_my_official.cli.common import fail, open_db
from rate_my_official.models.review import CATEGORIES, ReviewCreate, ReviewWithDetails
from rate_my_official.ratings.exceptions import (
    DuplicateReviewError,
    NotFoundError,
    OfficialNotAssignedError,
    RatingsError,
)
from rate_my_official.ratings.ledger import ReviewLedger

reviews_app = typer.Typer(help="Review submission and moderation commands.")

logger = structlog.get_logger(__name__)

_SCORE_HELP = "Score from 1 to 5"


def _echo_review(review: ReviewWithDetails) -> None:
    flags = " [reported]" if review.is_reported else ""
    scores = " ".join(f"{c[:4]}={getattr(review, c)}" for c in CATEGORIES)
    typer.echo(
        f"  #{review.id} {review.event.name} ({review.event.date}) "
        f"by {review.reviewer_display_name}: {scores}{flags}"
    )
    if review.comment:
        typer.echo(f"      {review.comment}")


@reviews_app.command()
def submit(
    official_id: int = typer.Option(..., "--official", "-o", help="Official being reviewed"),
    event_id: int = typer.Option(..., "--event", "-e", help="Event the official worked"),
    user_id: int = typer.Option(..., "--user", "-u", help="Reviewing user"),
    mechanics: int = typer.Option(..., help=_SCORE_HELP),
    professionalism: int = typer.Option(..., help=_SCORE_HELP),
    positioning: int = typer.Option(..., help=_SCORE_HELP),
    stalling: int = typer.Option(..., help=_SCORE_HELP),
    consistency: int = typer.Option(..., help=_SCORE_HELP),
    appearance: int = typer.Option(..., help=_SCORE_HELP),
    comment: str = typer.Option(None, "--comment", "-m", help="Optional comment"),
    anonymous: bool = typer.Option(False, "--anonymous", help="Hide the reviewer's name"),
) -> None:
    """Submit a review of an official for an event they worked."""
    try:
        review = ReviewCreate(
            event_id=event_id,
            mechanics=mechanics,
            professionalism=professionalism,
            positioning=positioning,
            stalling=stalling,
            consistency=consistency,
            appearance=appearance,
            comment=comment,
            is_anonymous=anonymous,
        )
    except pydantic.ValidationError as e:
        fail("Invalid review data", e)

    conn = open_db()
    try:
        created = ReviewLedger(conn).submit_review(official_id, user_id, review)
    except (DuplicateReviewError, OfficialNotAssignedError, NotFoundError) as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to submit review", e)
    finally:
        conn.close()

    typer.echo(f"[OK] Review #{created.id} submitted")


@reviews_app.command("list")
def list_reviews(official_id: int = typer.Argument(..., help="Official ID")) -> None:
    """List an official's reviews, newest first."""
    conn = open_db()
    try:
        reviews = ReviewLedger(conn).get_reviews_for_official(official_id)
    finally:
        conn.close()

    if not reviews:
        typer.echo("No reviews yet.")
        return
    for review in reviews:
        _echo_review(review)


@reviews_app.command()
def reported() -> None:
    """Show the moderation queue of reported reviews."""
    conn = open_db()
    try:
        reviews = ReviewLedger(conn).get_reported_reviews()
    finally:
        conn.close()

    typer.echo(f"{len(reviews)} reported review(s)")
    for review in reviews:
        _echo_review(review)


@reviews_app.command()
def report(review_id: int = typer.Argument(..., help="Review ID")) -> None:
    """Flag a review for moderation."""
    conn = open_db()
    try:
        ReviewLedger(conn).report_review(review_id)
    except NotFoundError as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to report review", e)
    finally:
        conn.close()
    typer.echo(f"[OK] Review #{review_id} reported")


@reviews_app.command()
def delete(review_id: int = typer.Argument(..., help="Review ID")) -> None:
    """Delete a review and recompute the official's rating."""
    conn = open_db()
    try:
        ReviewLedger(conn).delete_review(review_id)
    except NotFoundError as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to delete review", e)
    finally:
        conn.close()
    typer.echo(f"[OK] Review #{review_id} deleted")
