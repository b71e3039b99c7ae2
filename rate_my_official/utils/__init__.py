"""Utility functions and configuration management."""

from rate_my_official.utils.config import get_settings
from rate_my_official.utils.logging import get_logger

__all__ = ["get_settings", "get_logger"]
