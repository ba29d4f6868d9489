"""Integration tests translating predicates to SQLAlchemy clauses."""

import pytest
from sqlalchemy import column, select, table
from sqlalchemy.orm import DeclarativeBase

from rulework.adapters.query import SqlAlchemyQueryEvaluator, to_clause
from rulework.domain.errors import UnsupportedExpressionError
from rulework.domain.rules import rule
from tests.fixtures.sqlite import counters_table

# pylint: disable=too-few-public-methods


class Base(DeclarativeBase):
    """Declarative base for the ORM tests."""


class CounterRow(Base):
    """ORM mapping of the counters table."""

    __table__ = counters_table


def _sql(clause) -> str:
    return str(clause.compile(compile_kwargs={"literal_binds": True}))


def test_compare_renders_column_and_literal():
    """Comparisons map to columns of the selectable."""
    assert _sql(to_clause(rule(lambda c: c.counter > 0), counters_table)) == (
        "counters.counter > 0"
    )


def test_none_comparisons_become_null_checks():
    """== None and != None render IS NULL and IS NOT NULL."""
    is_null = to_clause(rule(lambda c: c.label == None), counters_table)  # noqa: E711
    not_null = to_clause(rule(lambda c: c.label != None), counters_table)  # noqa: E711
    assert _sql(is_null) == "counters.label IS NULL"
    assert _sql(not_null) == "counters.label IS NOT NULL"


def test_membership_and_negation():
    """in_ maps to IN and ~ to NOT."""
    clause = to_clause(rule(lambda c: ~c.counter.in_([1, 2])), counters_table)
    assert "counters.counter NOT IN (1, 2)" in _sql(clause)


def test_lightweight_table_clause():
    """Any FromClause with a column collection works."""
    source = table("things", column("size"))
    assert _sql(to_clause(rule(lambda c: c.size <= 3), source)) == "things.size <= 3"


def test_orm_entity():
    """Mapped classes resolve columns by attribute."""
    clause = to_clause(rule(lambda c: c.counter == 5), CounterRow)
    assert _sql(clause) == "counters.counter = 5"


@pytest.mark.parametrize(
    "builder, message",
    [
        (lambda c: c.missing > 0, "Unknown column 'missing'"),
        (lambda c: c.owner.name == "x", "Cannot translate attribute access"),
        (lambda c: c == 1, "cannot be used as a value"),
    ],
)
def test_untranslatable_predicates(builder, message):
    """Constructs with no SQL counterpart raise."""
    with pytest.raises(UnsupportedExpressionError, match=message):
        to_clause(rule(builder), counters_table)


def test_null_rows_are_excluded_by_sql(counters_connection):
    """Rows with a NULL label never satisfy a comparison on it in SQL."""
    evaluator = SqlAlchemyQueryEvaluator(counters_connection, counters_table)
    rows = evaluator.filter(rule(lambda c: c.label != "five"))
    assert [row["id"] for row in rows] == [1, 4]
    assert [row["id"] for row in evaluator.filter(rule(lambda c: c.label == None))] == [3]  # noqa: E711


def test_statement_orders_by_primary_key():
    """Results are ordered by the primary key."""
    evaluator = SqlAlchemyQueryEvaluator(None, counters_table)  # type: ignore[arg-type]
    sql = str(evaluator.statement(rule(lambda c: c.counter > 0)))
    assert sql.endswith("ORDER BY counters.id")


def test_clause_runs_in_select(counters_connection):
    """A translated clause works in a hand-written select."""
    stmt = select(counters_table.c.id).where(
        to_clause(rule(lambda c: (c.counter > 0) & (c.active == True)), counters_table)  # noqa: E712
    )
    assert counters_connection.execute(stmt).scalars().all() == [3]


def test_columns_named_like_node_fields():
    """Columns called `name` and `target` translate like any other column."""
    people = table("people", column("name"), column("target"))
    clause = to_clause(rule(lambda c: (c.name == "bob") & (c.target > 2)), people)
    assert _sql(clause) == "people.name = 'bob' AND people.target > 2"
