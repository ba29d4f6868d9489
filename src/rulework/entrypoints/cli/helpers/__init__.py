"""Small helpers shared by CLI commands."""

from .db_url import sanitize_url
from .log_level_parser import parse_log_level

__all__ = ["parse_log_level", "sanitize_url"]
