"""End-to-end tests for the rule commands: explain, filter, sql and query."""

import json

import pytest

from rulework.domain.codec import rule_to_dict
from rulework.domain.rules import rule
from rulework.entrypoints.cli.main import rulework
from tests.helpers.files import write_json

# pylint: disable=unused-argument


def test_explain(runner, rule_file):
    """explain prints the description, predicate and attributes."""
    result = runner.invoke(rulework, ["explain", str(rule_file)])
    assert result.exit_code == 0, result.output
    assert "description: between one and nine" in result.stdout
    assert (
        "predicate:   lambda c: ((c.counter > 0) and (c.counter < 10))" in result.stdout
    )
    assert "attributes:  counter" in result.stdout


def test_explain_undescribed_rule(runner, fs):
    """A rule without description is shown as such."""
    path = write_json("bare.json", rule_to_dict(rule(lambda c: c.x == 1)))
    result = runner.invoke(rulework, ["explain", str(path)])
    assert result.exit_code == 0
    assert "description: <none>" in result.stdout


def test_explain_rejects_invalid_json(runner, fs):
    """Unparseable files are reported without a traceback."""
    with open("broken.json", "w", encoding="utf-8") as f:
        f.write("{not json")
    result = runner.invoke(rulework, ["explain", "broken.json"])
    assert result.exit_code == 1
    assert "invalid JSON" in result.output


def test_explain_rejects_malformed_rule(runner, fs):
    """Files that are JSON but not a rule are reported."""
    path = write_json("weird.json", {"predicate": {"node": "constant"}})
    result = runner.invoke(rulework, ["explain", str(path)])
    assert result.exit_code == 1
    assert "lambda" in result.output


def test_filter(runner, rule_file, candidates_file):
    """filter prints the matching objects in input order."""
    result = runner.invoke(rulework, ["filter", str(rule_file), str(candidates_file)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"id": 2, "counter": 5}]


def test_filter_requires_array(runner, rule_file, fs):
    """The candidates file must hold a JSON array."""
    path = write_json("object.json", {"counter": 1})
    result = runner.invoke(rulework, ["filter", str(rule_file), str(path)])
    assert result.exit_code == 1
    assert "expected a JSON array" in result.output


def test_filter_reports_missing_attributes(runner, rule_file, fs):
    """Candidates lacking an attribute the rule reads are reported."""
    path = write_json("partial.json", [{"id": 1}])
    result = runner.invoke(rulework, ["filter", str(rule_file), str(path)])
    assert result.exit_code == 1
    assert "Cannot evaluate rule" in result.output


@pytest.mark.parametrize("dialect", ["sqlite", "postgresql"])
def test_sql(runner, rule_file, dialect):
    """sql renders the rule as a SELECT with literal values."""
    result = runner.invoke(
        rulework, ["sql", str(rule_file), "--table", "counters", "--dialect", dialect]
    )
    assert result.exit_code == 0, result.output
    assert "FROM counters" in result.stdout
    assert "counters.counter > 0 AND counters.counter < 10" in result.stdout


def test_sql_renders_null_and_membership(runner, fs):
    """Comparisons with None and membership tests map to IS NULL and IN."""
    path = write_json(
        "labels.json",
        rule_to_dict(rule(lambda c: (c.label == None) | c.counter.in_([1, 2]))),  # noqa: E711
    )
    result = runner.invoke(rulework, ["sql", str(path), "--table", "counters"])
    assert result.exit_code == 0, result.output
    assert "counters.label IS NULL OR counters.counter IN (1, 2)" in result.stdout


def test_query(runner, rule_file, sqlite_db):
    """query runs the rule against a database table."""
    result = runner.invoke(
        rulework, ["query", str(rule_file), "--table", "counters", "--db-url", sqlite_db]
    )
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert [row["id"] for row in rows] == [2]
    assert rows[0]["label"] == "five"


def test_query_reads_url_from_environment(runner, rule_file, sqlite_db):
    """Without --db-url, the environment variable is used."""
    result = runner.invoke(
        rulework,
        ["query", str(rule_file), "--table", "counters"],
        env={"RULEWORK_DB_URL": sqlite_db},
    )
    assert result.exit_code == 0, result.output
    assert [row["id"] for row in json.loads(result.stdout)] == [2]


def test_query_without_url(runner, rule_file):
    """A missing database URL is a CLI error."""
    result = runner.invoke(
        rulework,
        ["query", str(rule_file), "--table", "counters"],
        env={"RULEWORK_DB_URL": None},
    )
    assert result.exit_code == 1
    assert "RULEWORK_DB_URL is not set" in result.output


def test_query_unknown_table(runner, rule_file, sqlite_db):
    """Querying a missing table is reported by name."""
    result = runner.invoke(
        rulework, ["query", str(rule_file), "--table", "nope", "--db-url", sqlite_db]
    )
    assert result.exit_code == 1
    assert "No such table: nope" in result.output


def test_query_unknown_column(runner, sqlite_db):
    """Rules reading a column the table lacks are reported."""
    path = write_json("missing.json", rule_to_dict(rule(lambda c: c.missing == 1)))
    result = runner.invoke(
        rulework, ["query", str(path), "--table", "counters", "--db-url", sqlite_db]
    )
    assert result.exit_code == 1
    assert "Unknown column 'missing'" in result.output
