"""Admin commands: init, migrate, status, validate."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import typer

from rate_my_official.ratings.aggregator import RatingAggregator
from rate_my_official.schema.connection import get_db_connection, init_database
from rate_my_official.schema.migrations import rollback_migration
from rate_my_official.utils.config import get_settings

admin_app = typer.Typer(help="Database administration commands.")

logger = structlog.get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""

    check_name: str
    passed: bool
    message: str
    details: dict[str, Any] | None = None


def validate_fk_integrity(conn) -> ValidationResult:
    """Validate foreign key integrity across all tables."""
    violations = conn.execute("PRAGMA foreign_key_check").fetchall()

    return ValidationResult(
        check_name="fk_integrity",
        passed=len(violations) == 0,
        message=f"{len(violations)} foreign key violation(s) found",
        details={"violations": [tuple(v) for v in violations]} if violations else None,
    )


def validate_unique_reviews(conn) -> ValidationResult:
    """Check that no (user, official, event) triple has more than one review."""
    duplicates = conn.execute(
        """
        SELECT user_id, official_id, event_id, COUNT(*) AS n
        FROM reviews
        GROUP BY user_id, official_id, event_id
        HAVING n > 1
        """
    ).fetchall()

    return ValidationResult(
        check_name="unique_reviews",
        passed=len(duplicates) == 0,
        message=f"{len(duplicates)} duplicated review triple(s) found",
        details={"duplicates": [tuple(d) for d in duplicates]} if duplicates else None,
    )


def validate_rating_cache(conn) -> ValidationResult:
    """Compare each official's cached rating with a fresh computation."""
    aggregator = RatingAggregator(conn)
    drifted: list[int] = []
    for row in conn.execute(
        "SELECT id, average_rating, total_reviews FROM officials ORDER BY id"
    ).fetchall():
        averages = aggregator.get_category_averages(row[0])
        count = conn.execute(
            """
            SELECT COUNT(*) FROM reviews AS r
            JOIN users AS u ON u.id = r.user_id
            JOIN events AS e ON e.id = r.event_id
            WHERE r.official_id = ?
            """,
            (row[0],),
        ).fetchone()[0]
        if (row[1], row[2]) != (averages.overall, count):
            drifted.append(row[0])

    return ValidationResult(
        check_name="rating_cache",
        passed=not drifted,
        message=f"{len(drifted)} official(s) with stale ratings"
        + (" (run 'rmo ratings refresh')" if drifted else ""),
        details={"official_ids": drifted} if drifted else None,
    )


def validate_schema_version(conn) -> ValidationResult:
    """Validate a migration has been applied."""
    result = conn.execute(
        "SELECT migration_id FROM _yoyo_migration ORDER BY applied_at_utc DESC LIMIT 1"
    ).fetchone()
    version = result[0] if result else None

    return ValidationResult(
        check_name="schema_version",
        passed=version is not None,
        message=f"Schema version: {version or 'unknown'}",
    )


VALIDATORS = {
    "fk_integrity": validate_fk_integrity,
    "unique_reviews": validate_unique_reviews,
    "rating_cache": validate_rating_cache,
    "schema_version": validate_schema_version,
}


@admin_app.command()
def init(
    db_path: Path = typer.Option(
        None,
        "--db-path",
        help="Path to SQLite database file",
        envvar="DB_PATH",
    ),
) -> None:
    """
    Initialize the database schema.

    Creates the database file and runs all pending migrations.
    """
    logger.info("Initializing database", db_path=str(db_path))
    try:
        init_database(db_path)
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        typer.echo(f"[FAIL] Failed to initialize database: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(f"[OK] Database initialized at {db_path or get_settings().db_path}")


@admin_app.command()
def migrate(
    rollback: bool = typer.Option(
        False,
        "--rollback",
        "-r",
        help="Rollback the most recent migration",
    ),
    steps: int = typer.Option(
        1,
        "--steps",
        "-n",
        help="Number of migrations to rollback",
    ),
) -> None:
    """
    Run database migrations.

    Applies pending migrations by default. Use --rollback to undo migrations.
    """
    try:
        if rollback:
            logger.info("Rolling back migrations", steps=steps)
            rolled_back = rollback_migration(steps=steps)
            typer.echo(f"[OK] Rolled back {rolled_back} migration(s)")
        else:
            from rate_my_official.schema.migrations import run_migrations  # noqa: PLC0415

            logger.info("Running migrations")
            run_migrations()
            typer.echo("[OK] Migrations applied successfully")
    except Exception as e:
        logger.error("Migration failed", error=str(e))
        typer.echo(f"[FAIL] Migration failed: {e}", err=True)
        raise typer.Exit(code=1) from e


@admin_app.command()
def status() -> None:
    """Show table row counts and the rating overview."""
    settings = get_settings()
    db_path = Path(settings.db_path)

    if not db_path.exists():
        typer.echo("Database not found. Run 'rmo admin init' to create it.")
        raise typer.Exit(code=1)

    try:
        conn = get_db_connection()
    except RuntimeError as e:
        logger.error("Cannot open database", error=str(e))
        typer.echo(f"[FAIL] Cannot open database: {e}", err=True)
        raise typer.Exit(code=1) from e

    try:
        table_names = [
            row[0]
            for row in conn.execute(
                """
                SELECT name FROM sqlite_master
                WHERE type = 'table'
                    AND name NOT LIKE 'sqlite_%'
                    AND name NOT LIKE '_yoyo_%'
                    AND name != 'yoyo_lock'
                ORDER BY name
                """
            ).fetchall()
        ]
        typer.echo(f"\nDatabase Status: {db_path}\n")
        typer.echo("Tables:")
        for table_name in table_names:
            count = conn.execute(f'SELECT COUNT(*) FROM "{table_name}"').fetchone()[0]  # noqa: S608
            typer.echo(f"  - {table_name}: {f'{count:,} rows' if count else '(empty)'}")

        rated, reported = conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM officials WHERE total_reviews > 0),
                (SELECT COUNT(*) FROM reviews WHERE is_reported = 1)
            """
        ).fetchone()
        typer.echo("\nRatings:")
        typer.echo(f"  - officials with reviews: {rated:,}")
        typer.echo(f"  - reported reviews awaiting moderation: {reported:,}")
    except Exception as e:
        logger.error("Failed to get status", error=str(e))
        typer.echo(f"[FAIL] Failed to get status: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        conn.close()


@admin_app.command()
def validate(
    checks: list[str] = typer.Option(
        None,
        "--check",
        "-c",
        help="Specific validation checks to run (default: all)",
    ),
) -> None:
    """
    Validate database integrity and rating consistency.

    Available checks: fk_integrity, unique_reviews, rating_cache, schema_version.
    """
    logger.info("Running validation", checks=checks or ["all"])

    unknown = [name for name in checks or [] if name not in VALIDATORS]
    if unknown:
        typer.echo(f"[FAIL] Unknown check(s): {', '.join(unknown)}", err=True)
        raise typer.Exit(code=1)

    try:
        conn = get_db_connection()
    except RuntimeError as e:
        logger.error("Cannot open database", error=str(e))
        typer.echo(f"[FAIL] Cannot open database: {e}", err=True)
        raise typer.Exit(code=1) from e

    try:
        results = [VALIDATORS[name](conn) for name in checks or list(VALIDATORS)]
    except Exception as e:
        logger.error("Validation failed", error=str(e))
        typer.echo(f"[FAIL] Validation failed: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        conn.close()

    for result in results:
        status_icon = "✓" if result.passed else "✗"
        typer.echo(f"  {status_icon} {result.check_name}: {result.message}")

    failed_count = sum(1 for r in results if not r.passed)
    if failed_count:
        typer.echo(f"\n[FAIL] {failed_count}/{len(results)} validation check(s) failed", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"\n[OK] All {len(results)} validation check(s) passed")
