"""Utility modules for duracron."""

from duracron.utils.logging import ContextLogger, get_default_logger, setup_logger
from duracron.utils.time import get_timezone, parse_iso_datetime, to_iso, utc_now

__all__ = [
    "setup_logger",
    "get_default_logger",
    "ContextLogger",
    "get_timezone",
    "parse_iso_datetime",
    "to_iso",
    "utc_now",
]
