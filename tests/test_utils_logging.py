"""Tests for structured logging utilities."""

import json
import logging
from unittest.mock import patch

import structlog


def test_setup_logging_console_format(tmp_path):
    """setup_logging configures ConsoleRenderer when log_format is 'console'."""
    from rate_my_official.utils.config import Settings
    from rate_my_official.utils.logging import setup_logging

    settings = Settings(log_dir=str(tmp_path / "logs"), log_format="console")

    with patch("rate_my_official.utils.logging.get_settings", return_value=settings):
        setup_logging()

    renderers = [
        type(h.formatter.processors[-1]).__name__
        for h in logging.getLogger().handlers
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    ]
    assert renderers[0] == "ConsoleRenderer"


def test_setup_logging_json_format(tmp_path):
    """setup_logging attaches JSONRenderer to the console handler when log_format is 'json'."""
    from rate_my_official.utils.config import Settings
    from rate_my_official.utils.logging import setup_logging

    settings = Settings(log_dir=str(tmp_path / "logs"), log_format="json")

    with patch("rate_my_official.utils.logging.get_settings", return_value=settings):
        setup_logging()

    formatter_processor_types = []
    for handler in logging.getLogger().handlers:
        fmt = handler.formatter
        if fmt is not None and hasattr(fmt, "processors"):
            formatter_processor_types.extend(type(p).__name__ for p in fmt.processors)
    assert "JSONRenderer" in formatter_processor_types


def test_setup_logging_writes_json_file(tmp_path):
    """The per-run log file receives JSON lines."""
    from rate_my_official.utils.config import Settings
    from rate_my_official.utils.logging import get_active_log_file, setup_logging

    log_dir = tmp_path / "new_logs_dir"
    assert not log_dir.exists()

    setup_logging(Settings(log_dir=str(log_dir), log_format="console", log_level="INFO"))
    structlog.get_logger("tests").info("review_submitted", review_id=7)
    for handler in logging.getLogger().handlers:
        handler.flush()

    log_file = get_active_log_file()
    assert log_file is not None
    assert log_file.parent == log_dir
    assert log_file.name.startswith("rate_my_official_")
    events = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert any(e.get("event") == "review_submitted" and e.get("review_id") == 7 for e in events)


def test_setup_logging_replaces_handlers(tmp_path):
    from rate_my_official.utils.config import Settings
    from rate_my_official.utils.logging import setup_logging

    settings = Settings(log_dir=str(tmp_path / "logs"))
    setup_logging(settings)
    setup_logging(settings)

    assert len(logging.getLogger().handlers) == 2


def test_setup_logging_handles_permission_error(tmp_path, capsys):
    """setup_logging falls back to stdout-only when the log dir cannot be created."""
    from rate_my_official.utils.config import Settings
    from rate_my_official.utils.logging import get_active_log_file, setup_logging

    settings = Settings(log_dir=str(tmp_path / "denied"), log_format="console")

    with patch("pathlib.Path.mkdir", side_effect=PermissionError("permission denied")):
        setup_logging(settings)

    assert get_active_log_file() is None
    assert "Falling back to stdout-only logging" in capsys.readouterr().err


def test_get_logger_returns_bound_logger():
    """get_logger returns a structlog BoundLogger with the name bound."""
    from rate_my_official.utils.logging import get_logger

    logger = get_logger("test.module")
    assert logger is not None


def test_log_context_binds_variables():
    """log_context adds key-value pairs to structlog context vars."""
    from rate_my_official.utils.logging import clear_log_context, log_context

    clear_log_context()
    log_context(official_id=12, user_id=3)

    ctx = structlog.contextvars.get_contextvars()
    assert ctx.get("official_id") == 12
    assert ctx.get("user_id") == 3

    clear_log_context()


def test_clear_log_context_specific_keys():
    """clear_log_context with args removes only the named keys."""
    from rate_my_official.utils.logging import clear_log_context, log_context

    log_context(keep_me="yes", remove_me="no")
    clear_log_context("remove_me")

    ctx = structlog.contextvars.get_contextvars()
    assert "remove_me" not in ctx
    assert ctx.get("keep_me") == "yes"

    clear_log_context()
