"""Logging helpers used by the rulework CLI.

The library itself only creates module-level loggers and never configures
handlers. Applications (and the `rulework` CLI) use the helpers below to set up
console logging with Rich and an optional in-memory "flight recorder" that
buffers records and writes them to disk when something goes wrong.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "rulework"

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]

FLIGHT_RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] "
    "%(levelname)s %(name)s:%(lineno)d: %(message)s"
)


class ThirdPartyPrefixFilter(logging.Filter):
    """Annotate third-party log records with a short prefix.

    Console output mixes rulework's own messages with those of the libraries it
    drives (mostly SQLAlchemy). Records whose logger name falls outside
    `project_prefix` get `record.prefix` set to the top-level package of their
    logger in brackets, e.g. "[sqlalchemy]"; rulework records get an empty
    prefix. The console formatter reads `%(prefix)s`, so the attribute must be
    present on every record that reaches it.

    Args:
        project_prefix: Logger-name prefix of the project's own loggers.
    """

    def __init__(self, project_prefix: str = PROJECT_PREFIX) -> None:
        super().__init__()
        self.project_prefix = project_prefix

    def filter(self, record: logging.LogRecord) -> bool:
        """Set `record.prefix` and let the record through.

        Args:
            record: The LogRecord being processed.

        Returns:
            bool: Always True; this filter annotates and never drops records.
        """
        if record.name.startswith(self.project_prefix):
            record.prefix = ""
        else:
            # "sqlalchemy.engine.Engine" -> "[sqlalchemy]"
            record.prefix = f"[{record.name.partition('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich console handler used by the CLI.

    The handler writes to stderr so that command output on stdout (JSON, SQL)
    stays machine-readable. In normal mode records are shown as
    "<prefix> <message>" at `level` and above. In debug mode the level drops to
    DEBUG, each line carries a timestamp and the logger name, and Rich shows the
    source file and line of the call.

    Args:
        level: Minimum level for console output. Ignored in debug mode, which
            always logs at DEBUG.
        debug_mode: Enable developer formatting (timestamps, logger names,
            source paths) instead of the short third-party prefix.
        color: Let Rich pick a color system when True; emit plain text when
            False, matching click-extra's `--no-color`.

    Returns:
        RichHandler: Handler ready to attach to the root logger.
    """
    # None disables styling entirely, "auto" lets Rich detect the terminal
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    if debug_mode:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )

    if debug_mode:
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())

    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Build the in-memory flight recorder.

    The recorder keeps up to `capacity` records at DEBUG granularity regardless
    of the console verbosity. When a record at `flush_level` or above arrives,
    or the buffer fills up, everything buffered so far is written to `path`.
    The file is truncated when the handler is created, so it only ever holds
    the records of the latest run. Records buffered after the last flush are
    dropped on exit unless `flush_on_close` is set.

    Args:
        path: File receiving flushed records. Its directory must exist.
        capacity: Number of records buffered between flushes.
        flush_level: Level at or above which the buffer is flushed.
        flush_on_close: Flush whatever is buffered when the handler is closed
            (at `logging.shutdown`).

    Returns:
        MemoryHandler: Buffering handler whose target is a truncating
        FileHandler on `path`.
    """
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FLIGHT_RECORDER_FORMAT))
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    flight_capacity: int | None,
    force_flush: bool,
    logger_levels: dict[str, int],
) -> None:
    """Log a one-line startup summary, plus diagnostics at DEBUG.

    Args:
        logger: Logger used to emit startup messages.
        app_version: Application version string to display.
        level: Effective console logging level (numeric).
        handlers: Active logging handlers attached to the root logger.
        log_path: Flight-recorder output file, or None when it is disabled.
        flight_capacity: Flight-recorder buffer size, or None when it is disabled.
        force_flush: Whether the flight recorder flushes on close.
        logger_levels: Mapping of logger names to their configured numeric levels.
    """
    logger.info(
        "rulework %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if log_path else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("SQLAlchemy: %s", sqlalchemy.__version__)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if log_path:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            log_path,
            flight_capacity,
            force_flush,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
