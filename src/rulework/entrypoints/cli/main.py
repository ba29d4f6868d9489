"""rulework CLI entry point.

Defines the top-level ``rulework`` command (via Click-Extra), which configures
logging and registers the rule commands:

- ``rulework explain``: show a rule's description and predicate.
- ``rulework filter``: filter a JSON array with a rule.
- ``rulework sql``: render a rule as a SQL ``SELECT`` statement.
- ``rulework query``: run a rule against a database table.

Rules are read from JSON files in the format produced by
`rulework.domain.codec.rule_to_dict`.

Examples
    $ rulework explain positive.json
    $ rulework -v filter positive.json counters.json
    $ rulework sql positive.json --table counters --dialect postgresql
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx

from rulework import __version__
from rulework.config import (
    FLIGHT_RECORDER_CAPACITY_ENV,
    FLIGHT_RECORDER_ENV,
    FORCE_FLUSH_ENV,
    LOG_PATH_ENV,
    LOGGER_LEVELS_ENV,
    default_log_path,
)
from rulework.logging import config_console_handler, config_flight_recorder, log_startup

from .commands import explain, filter_cmd, query, sql
from .helpers import parse_log_level

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)

HELP = """rulework command-line interface.

    Inspect and apply rules stored as JSON: print their predicate, filter JSON
    data with them, or translate them to SQL.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase the default WARNING verbosity by one level per repetition.",
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Decrease the default WARNING verbosity by one level per repetition.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug mode (DEBUG output with logger names and source paths).",
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=default_log_path,
    envvar=LOG_PATH_ENV,
    show_default="user log directory",
    show_envvar=True,
    help="Flight-recorder output file.",
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar=FLIGHT_RECORDER_CAPACITY_ENV,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    default=True,
    envvar=FLIGHT_RECORDER_ENV,
    show_envvar=True,
    help=(
        "Keep the last records at DEBUG granularity in memory and write them to "
        "--log-path when a WARNING or ERROR occurs. Console output is unchanged."
    ),
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush",
    default=False,
    envvar=FORCE_FLUSH_ENV,
    show_default=True,
    show_envvar=True,
    help="Also write the flight-recorder buffer to --log-path on exit.",
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    envvar=LOGGER_LEVELS_ENV,
    show_envvar=True,
    default=("sqlalchemy=WARNING",),
    show_default=True,
    help="Set the minimum level of specific loggers (NAME=LEVEL). Repeatable.",
)
@clickx.pass_context
def rulework(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush: bool,
    logger_levels: dict[str, int],
) -> None:
    """rulework command-line interface."""

    # 0) compute effective verbosity
    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    # 1) console handler
    handlers: list[Handler] = [
        config_console_handler(
            level=level, debug_mode=debug, color=ctx.color is not False
        )
    ]

    # 2) flight recorder
    if flight_recorder:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush,
            )
        )

    # 3) root logger captures everything; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # 4) per-logger overrides
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path if flight_recorder else None,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush=force_flush,
        logger_levels=logger_levels,
    )

    ctx.call_on_close(logging.shutdown)


rulework.add_command(explain)
rulework.add_command(filter_cmd)
rulework.add_command(sql)
rulework.add_command(query)
