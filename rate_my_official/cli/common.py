"""Helpers shared by the CLI command groups."""

import sqlite3
from typing import NoReturn

import structlog
import typer

from rate_my_official.schema.connection import get_db_connection

logger = structlog.get_logger(__name__)


def open_db() -> sqlite3.Connection:
    """Open the configured database or exit with code 1."""
    try:
        return get_db_connection()
    except RuntimeError as e:
        logger.error("Cannot open database", error=str(e))
        typer.echo(f"[FAIL] Cannot open database: {e}", err=True)
        raise typer.Exit(code=1) from e


def fail(message: str, error: Exception | None = None) -> NoReturn:
    """Report a failed command on stderr and exit with code 1."""
    logger.error(message, error=str(error) if error else None)
    detail = f"{message}: {error}" if error else message
    typer.echo(f"[FAIL] {detail}", err=True)
    raise typer.Exit(code=1) from error
