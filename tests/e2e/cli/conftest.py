"""Fixtures and test helpers for end-to-end CLI tests.

Provides a test-only `log-demo` Click command that emits log messages at every
level, fixtures to register it and to obtain a CliRunner inside an isolated
filesystem, and rule/candidate JSON files for the rule commands.
"""

import logging
from pathlib import Path

import click
import pytest
from click.testing import CliRunner
from sqlalchemy import insert

from rulework.adapters.db.engine import make_engine
from rulework.domain.codec import rule_to_dict
from rulework.domain.rules import rule
from rulework.entrypoints.cli.main import rulework
from tests.fixtures.sqlite import COUNTER_ROWS, counters_table, metadata
from tests.helpers.files import write_json

# pylint: disable=redefined-outer-name


@click.command()
def log_demo():
    """Emit representative log messages for CLI/flight-recorder tests.

    Emits DEBUG/INFO/WARNING/ERROR/CRITICAL messages on the 'rulework.demo'
    logger and additional messages on a 'some.thirdparty' logger to exercise
    logger-level filtering and flight-recorder behavior.
    """
    logger = logging.getLogger("rulework.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


@pytest.fixture(autouse=True)
def _log_path_in_tmp(monkeypatch, tmp_path):
    """Keep the default flight-recorder file out of the user's log directory."""
    monkeypatch.setenv("RULEWORK_LOG_PATH", str(tmp_path / "latest.log"))


@pytest.fixture
def registered_log_demo():
    """Register the 'log-demo' command for the duration of a test."""
    rulework.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        rulework.commands.pop("log-demo", None)
        # Cloup also keeps commands in its section registries.
        if hasattr(rulework, "_default_section"):
            rulework._default_section.commands.pop("log-demo", None)  # pylint: disable=protected-access
        for sec in getattr(rulework, "_sections", []):
            getattr(sec, "commands", {}).pop("log-demo", None)


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Run the test inside an isolated working directory."""
    with runner.isolated_filesystem():
        yield


@pytest.fixture
def rule_file(fs) -> Path:
    """JSON file holding the rule `0 < counter < 10`, described."""
    between = rule(lambda c: (c.counter > 0) & (c.counter < 10), "between one and nine")
    return write_json("between.json", rule_to_dict(between))


@pytest.fixture
def candidates_file(fs) -> Path:
    """JSON array of counters."""
    return write_json(
        "counters.json",
        [{"id": row["id"], "counter": row["counter"]} for row in COUNTER_ROWS],
    )


@pytest.fixture
def sqlite_db(fs) -> str:
    """URL of a SQLite file holding the counters table."""
    url = "sqlite:///counters.db"
    engine = make_engine(url)
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(insert(counters_table), COUNTER_ROWS)
    engine.dispose()
    return url
