"""Rule commands of the ``rulework`` CLI."""

import json
import logging
from pathlib import Path
from typing import Any

import click
from sqlalchemy import MetaData, Table, column, literal_column, select, table
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from rulework.adapters.db.dialects import DialectName
from rulework.adapters.db.engine import make_engine
from rulework.adapters.query.memory import filter_candidates
from rulework.adapters.query.sqlalchemy_evaluator import SqlAlchemyQueryEvaluator, to_clause
from rulework.config import DB_URL_ENV, DatabaseUrlNotSetError, get_db_url
from rulework.domain.codec import rule_from_dict
from rulework.domain.errors import ExpressionError
from rulework.domain.rules import ExpressionRule
from rulework.domain.visitors import referenced_attributes

from .helpers import sanitize_url

logger = logging.getLogger(__name__)

JSON_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def load_rule(path: Path) -> ExpressionRule[Any]:
    """Read a rule from a JSON file, turning decode errors into CLI errors."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path}: invalid JSON ({e})") from e
    try:
        loaded = rule_from_dict(data)
    except ExpressionError as e:
        raise click.ClickException(f"{path}: {e}") from e
    logger.debug("Loaded rule from %s: %s", path, loaded.predicate)
    return loaded


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


@click.command()
@click.argument("rule_file", type=JSON_FILE)
def explain(rule_file: Path) -> None:
    """Print the description and predicate of RULE_FILE."""
    loaded = load_rule(rule_file)
    click.echo(f"description: {loaded.description or '<none>'}")
    click.echo(f"predicate:   {loaded.predicate}")
    click.echo(f"attributes:  {', '.join(referenced_attributes(loaded.predicate))}")


@click.command(name="filter")
@click.argument("rule_file", type=JSON_FILE)
@click.argument("candidates_file", type=JSON_FILE)
def filter_cmd(rule_file: Path, candidates_file: Path) -> None:
    """Print the objects of CANDIDATES_FILE (a JSON array) satisfying RULE_FILE."""
    loaded = load_rule(rule_file)
    candidates = json.loads(candidates_file.read_text(encoding="utf-8"))
    if not isinstance(candidates, list):
        raise click.ClickException(f"{candidates_file}: expected a JSON array")
    try:
        matches = filter_candidates(candidates, loaded)
    except (LookupError, AttributeError, TypeError) as e:
        raise click.ClickException(f"Cannot evaluate rule on candidates: {e!r}") from e
    logger.info("%d of %d candidates satisfy the rule", len(matches), len(candidates))
    click.echo(_dump(matches))


@click.command()
@click.argument("rule_file", type=JSON_FILE)
@click.option("--table", "table_name", required=True, help="Table to select from.")
@click.option(
    "--dialect",
    type=click.Choice([d.value for d in DialectName], case_sensitive=False),
    default=DialectName.SQLITE.value,
    show_default=True,
    help="SQL dialect to render.",
)
def sql(rule_file: Path, table_name: str, dialect: str) -> None:
    """Print the SELECT statement equivalent to RULE_FILE."""
    loaded = load_rule(rule_file)
    columns = [column(name) for name in referenced_attributes(loaded.predicate)]
    source = table(table_name, *columns)
    try:
        stmt = select(literal_column("*")).select_from(source).where(to_clause(loaded, source))
    except ExpressionError as e:
        raise click.ClickException(str(e)) from e
    compiled = stmt.compile(
        dialect=DialectName.from_string(dialect).to_sqlalchemy(),
        compile_kwargs={"literal_binds": True},
    )
    click.echo(str(compiled))


@click.command()
@click.argument("rule_file", type=JSON_FILE)
@click.option("--table", "table_name", required=True, help="Table to query.")
@click.option(
    "--db-url",
    default=None,
    help=f"SQLAlchemy database URL. Defaults to ${DB_URL_ENV}.",
)
def query(rule_file: Path, table_name: str, db_url: str | None) -> None:
    """Print the rows of a database table satisfying RULE_FILE."""
    loaded = load_rule(rule_file)
    if db_url is None:
        try:
            db_url = get_db_url()
        except DatabaseUrlNotSetError as e:
            raise click.ClickException(f"{e} Pass --db-url or set it.") from e
    engine = make_engine(db_url, read_only=True)
    logger.info("Querying %s on %s", table_name, sanitize_url(db_url))
    try:
        with engine.connect() as conn:
            source = Table(table_name, MetaData(), autoload_with=conn)
            rows = SqlAlchemyQueryEvaluator(conn, source).filter(loaded)
    except NoSuchTableError as e:
        raise click.ClickException(f"No such table: {table_name}") from e
    except ExpressionError as e:
        raise click.ClickException(str(e)) from e
    except SQLAlchemyError as e:
        logger.exception("Query failed on %s", sanitize_url(db_url))
        raise click.ClickException(f"Query failed: {e}") from e
    finally:
        engine.dispose()
    click.echo(_dump([dict(row) for row in rows]))
