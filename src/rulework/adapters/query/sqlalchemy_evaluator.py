"""QueryEvaluator implementation using SQLAlchemy.

Predicates are translated into SQLAlchemy Core `ColumnElement[bool]` clauses by
`to_clause`, so the filtering happens in the database:

| Expression node           | SQLAlchemy construct                        |
|---------------------------|---------------------------------------------|
| `c.name`                  | `source.c["name"]` (or ORM entity attribute) |
| `Constant(v)`             | bound parameter                              |
| `==` / `!=` against None  | `IS NULL` / `IS NOT NULL`                    |
| `x.in_(values)`           | `x IN (...)`                                 |
| `&`, `|`, `~`             | `and_()`, `or_()`, `not_()`                  |

Only first-level attributes of the bound parameter can be translated; the
parameter itself and nested attributes have no column to map to.

Note: SQL uses three-valued logic. A comparison against a NULL column is never
true in the database, where in-memory evaluation would raise instead.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, false, func, literal, not_, or_, select, true

from rulework.domain.errors import UnsupportedExpressionError
from rulework.domain.expressions import (
    Attribute,
    BoolOp,
    BoolOperator,
    Compare,
    CompareOp,
    Constant,
    Expression,
    Lambda,
    Not,
    Parameter,
)
from rulework.domain.rules import Rule, as_predicate
from rulework.domain.visitors import ExpressionVisitor
from rulework.interfaces.query_evaluator import QueryEvaluator

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, RowMapping
    from sqlalchemy.sql import ColumnElement, FromClause, Select

_OPERATORS: dict[CompareOp, Callable[[Any, Any], Any]] = {
    CompareOp.EQ: operator.eq,
    CompareOp.NE: operator.ne,
    CompareOp.LT: operator.lt,
    CompareOp.LE: operator.le,
    CompareOp.GT: operator.gt,
    CompareOp.GE: operator.ge,
}


class _ClauseCompiler(ExpressionVisitor):
    """Translate an expression tree into SQLAlchemy column expressions."""

    def __init__(self, parameter: Parameter, source: Any) -> None:
        self.parameter = parameter
        self.source = source

    def visit_Parameter(self, node: Parameter) -> Any:  # pylint: disable=invalid-name
        raise UnsupportedExpressionError(
            f"Parameter '{node.param_name}' cannot be used as a value in SQL."
        )

    def visit_Attribute(self, node: Attribute) -> Any:  # pylint: disable=invalid-name
        if node.attr_target is not self.parameter:
            raise UnsupportedExpressionError(
                f"Cannot translate attribute access '{node}' to a column."
            )
        return self._column(node.attr_name)

    def visit_Constant(self, node: Constant) -> Any:  # pylint: disable=invalid-name
        if node.value is True:
            return true()
        if node.value is False:
            return false()
        return literal(node.value)

    def visit_Compare(self, node: Compare) -> Any:  # pylint: disable=invalid-name
        left = self.visit(node.left)
        if node.op is CompareOp.IN:
            if not isinstance(node.right, Constant):
                raise UnsupportedExpressionError(
                    "Membership tests need a constant collection on the right."
                )
            return left.in_(list(node.right.value))

        right = self._operand(node.right)
        if right is None and node.op is CompareOp.EQ:
            return left.is_(None)
        if right is None and node.op is CompareOp.NE:
            return left.is_not(None)
        return _OPERATORS[node.op](left, right)

    def visit_BoolOp(self, node: BoolOp) -> Any:  # pylint: disable=invalid-name
        left = self.visit(node.left)
        right = self.visit(node.right)
        if node.op is BoolOperator.AND:
            return and_(left, right)
        return or_(left, right)

    def visit_Not(self, node: Not) -> Any:  # pylint: disable=invalid-name
        return not_(self.visit(node.operand))

    def generic_visit(self, node):
        raise UnsupportedExpressionError(
            f"Cannot translate expression node {type(node).__name__} to SQL."
        )

    # --- helpers ---

    def _operand(self, node: Expression) -> Any:
        # constants on the right stay plain values so SQLAlchemy binds them
        # with the column's type
        if isinstance(node, Constant):
            return node.value
        return self.visit(node)

    def _column(self, name: str) -> Any:
        if (columns := getattr(self.source, "c", None)) is not None:
            try:
                return columns[name]
            except KeyError as e:
                raise UnsupportedExpressionError(
                    f"Unknown column '{name}' on {self.source}."
                ) from e
        try:
            return getattr(self.source, name)
        except AttributeError as e:
            raise UnsupportedExpressionError(
                f"Unknown attribute '{name}' on {self.source}."
            ) from e


def to_clause(source: Rule[Any] | Lambda, selectable: Any) -> ColumnElement[bool]:
    """Translate a rule or predicate into a SQLAlchemy boolean clause.

    Args:
        source: The rule (or bare predicate) to translate.
        selectable: A table or other `FromClause` whose `.c` collection holds the
            columns, or a mapped ORM class.

    Returns:
        A clause usable in `Select.where()`.

    Raises:
        UnsupportedExpressionError: If the predicate uses a construct or a column
            that cannot be translated.
    """
    predicate = as_predicate(source)
    return _ClauseCompiler(predicate.parameter, selectable).visit(predicate.body)


class SqlAlchemyQueryEvaluator(QueryEvaluator["RowMapping"]):
    """QueryEvaluator over the rows of a table.

    Rows are returned as mappings, ordered by the table's primary key (if it
    has one) so results keep the table's insertion order.
    """

    def __init__(self, connection: Connection, table: FromClause) -> None:
        self.connection = connection
        self.table = table

    def statement(self, source: Rule[Any] | Lambda) -> Select:
        """Build the SELECT statement used to filter the table."""
        stmt = select(self.table).where(to_clause(source, self.table))
        if primary_key := list(self.table.primary_key):
            stmt = stmt.order_by(*primary_key)
        return stmt

    def filter(self, source: Rule[Any] | Lambda) -> list[RowMapping]:
        rows = self.connection.execute(self.statement(source)).mappings()
        return list(rows)

    def count(self, source: Rule[Any] | Lambda) -> int:
        stmt = select(func.count()).select_from(self.table).where(
            to_clause(source, self.table)
        )
        return int(self.connection.execute(stmt).scalar_one())
