"""Fixtures for query_evaluator contract tests."""

from collections.abc import Iterable

import pytest

from rulework.adapters.query import InMemoryQueryEvaluator, SqlAlchemyQueryEvaluator
from rulework.interfaces.query_evaluator import QueryEvaluator
from tests.fixtures.sqlite import COUNTER_ROWS, counters_table


@pytest.fixture(params=["memory", "sqlalchemy"])
def query_evaluator(request: pytest.FixtureRequest) -> Iterable[QueryEvaluator]:
    """Return a QueryEvaluator over `COUNTER_ROWS` for the requested backend.

    Supported params:
      - `"memory"` → InMemoryQueryEvaluator over the row dicts
      - `"sqlalchemy"` → SqlAlchemyQueryEvaluator over an in-memory SQLite table
    """
    match request.param:
        case "memory":
            yield InMemoryQueryEvaluator(dict(row) for row in COUNTER_ROWS)
        case "sqlalchemy":
            conn = request.getfixturevalue("counters_connection")
            yield SqlAlchemyQueryEvaluator(conn, counters_table)
        case _:
            raise ValueError(f"unknown query evaluator type: {request.param}")
