"""Command-line interface for RateMyOfficial."""

import typer

from rate_my_official.utils.config import ensure_directories
from rate_my_official.utils.logging import setup_logging

from .admin import admin_app
from .events import events_app
from .officials import officials_app
from .ratings import ratings_app
from .reviews import reviews_app
from .users import users_app

ensure_directories()
setup_logging()

app = typer.Typer(
    name="rmo",
    help="RateMyOfficial - reviews and ratings for wrestling officials",
    add_completion=False,
)

app.add_typer(admin_app, name="admin")
app.add_typer(ratings_app, name="ratings")
app.add_typer(reviews_app, name="reviews")
app.add_typer(officials_app, name="officials")
app.add_typer(events_app, name="events")
app.add_typer(users_app, name="users")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
