"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.types import Processor

    from rate_my_official.utils.config import Settings

from rate_my_official.utils.config import get_settings

# Path of the JSON log file opened by setup_logging(), if any.
_active_log_file: Path | None = None


def get_active_log_file() -> Path | None:
    """Return the path of the log file opened by the current process, if any."""
    return _active_log_file


def _open_file_handler(log_dir: Path, level: int) -> logging.FileHandler | None:
    """Open the per-run JSON log file, or return None when the directory is unusable."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except (PermissionError, OSError) as e:
        print(
            f"Warning: Could not create log directory '{log_dir}': {e}. "
            "Falling back to stdout-only logging.",
            file=sys.stderr,
        )
        return None

    log_file = log_dir / f"rate_my_official_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    try:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except (PermissionError, OSError) as e:
        print(f"Warning: Could not open log file '{log_file}': {e}.", file=sys.stderr)
        return None

    handler.setLevel(level)
    handler.set_name(str(log_file))
    return handler


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog to render through the stdlib root logger.

    Two sinks are installed:

    * stdout, rendered by ``ConsoleRenderer`` or ``JSONRenderer`` depending on
      ``log_format``;
    * ``<log_dir>/rate_my_official_YYYYMMDD_HHMMSS.log``, always JSON lines, so
      refresh runs and moderation actions leave a machine-readable trail.

    Calling it again replaces the handlers from the previous call.
    """
    global _active_log_file  # noqa: PLW0603

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    console_renderer: Processor = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=console_renderer))
    root.addHandler(console_handler)

    file_handler = _open_file_handler(Path(settings.log_dir), level)
    if file_handler is not None:
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer())
        )
        root.addHandler(file_handler)
        _active_log_file = Path(file_handler.get_name())
    else:
        _active_log_file = None

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        # exc_info must be rendered here, before the stdlib formatter sees it.
        structlog.processors.ExceptionRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if _active_log_file is not None:
        structlog.get_logger(__name__).info("logging_initialized", log_file=str(_active_log_file))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Configured bound logger.
    """
    return structlog.get_logger(name).bind(logger=name)


def log_context(**kwargs: Any) -> None:
    """Bind key-value pairs into every subsequent log line of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context(*keys: str) -> None:
    """Remove the named context keys, or all of them when none are given."""
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()
