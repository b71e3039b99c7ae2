"""User approval commands: pending, approve, reject, delete."""

import structlog
import typer

from rate_my_official.cli.common import fail, open_db
from rate_my_official.ratings.exceptions import RatingsError, UserNotFoundError
from rate_my_official.storage.users import UserRepository

users_app = typer.Typer(help="User approval and removal commands.")

logger = structlog.get_logger(__name__)


@users_app.command()
def pending() -> None:
    """List registrations awaiting approval."""
    conn = open_db()
    try:
        users = UserRepository(conn).pending()
    finally:
        conn.close()

    typer.echo(f"{len(users)} pending user(s)")
    for user in users:
        where = user.school if user.user_type == "Coach" else user.region
        typer.echo(f"  #{user.id} {user.first_name} {user.last_name} <{user.email}> "
                   f"{user.user_type} ({where or '-'})")


@users_app.command()
def approve(user_id: int = typer.Argument(..., help="User ID")) -> None:
    """Approve a pending registration."""
    conn = open_db()
    try:
        user = UserRepository(conn).approve(user_id)
    except UserNotFoundError as e:
        fail(str(e))
    finally:
        conn.close()
    typer.echo(f"[OK] {user.email} approved")


@users_app.command()
def reject(user_id: int = typer.Argument(..., help="User ID")) -> None:
    """Reject a pending registration, removing the account."""
    conn = open_db()
    try:
        UserRepository(conn).reject(user_id)
    except UserNotFoundError as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to reject user", e)
    finally:
        conn.close()
    typer.echo(f"[OK] User #{user_id} rejected")


@users_app.command()
def delete(
    user_id: int = typer.Argument(..., help="User ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a user and every review they wrote, then refresh all ratings."""
    if not yes:
        typer.confirm(f"Delete user #{user_id} and all their reviews?", abort=True)

    conn = open_db()
    try:
        UserRepository(conn).delete(user_id)
    except UserNotFoundError as e:
        fail(str(e))
    except RatingsError as e:
        fail("Failed to delete user", e)
    finally:
        conn.close()
    typer.echo(f"[OK] User #{user_id} deleted")
