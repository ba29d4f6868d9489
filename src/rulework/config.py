"""Configuration utilities for rulework.

Settings come from the environment. The CLI reads the same variables through
Click's `envvar` support; library code reads them through the helpers here.
"""

import os
from pathlib import Path

from platformdirs import user_log_dir

DB_URL_ENV = "RULEWORK_DB_URL"  # pragma: no mutate
LOG_PATH_ENV = "RULEWORK_LOG_PATH"  # pragma: no mutate
LOGGER_LEVELS_ENV = "RULEWORK_LOGGER_LEVELS"  # pragma: no mutate
FLIGHT_RECORDER_ENV = "RULEWORK_FLIGHT_RECORDER"  # pragma: no mutate
FLIGHT_RECORDER_CAPACITY_ENV = "RULEWORK_FLIGHT_RECORDER_CAPACITY"  # pragma: no mutate
FORCE_FLUSH_ENV = "RULEWORK_FORCE_FLUSH_FLIGHT_RECORDER"  # pragma: no mutate


class DatabaseUrlNotSetError(Exception):
    """Raised when the RULEWORK_DB_URL environment variable is not set."""

    def __init__(self) -> None:
        super().__init__(f"{DB_URL_ENV} is not set.")


def get_db_url() -> str:
    """Get the database URL used by the SQLAlchemy query evaluator.

    Returns:
        The value of the `RULEWORK_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `RULEWORK_DB_URL` is not set or empty.
    """
    if not (url := os.environ.get(DB_URL_ENV)):
        raise DatabaseUrlNotSetError
    return url


def default_log_path() -> Path:
    """Default flight-recorder file, in the user's log directory."""
    return Path(user_log_dir("rulework", appauthor=False)) / "latest.log"
