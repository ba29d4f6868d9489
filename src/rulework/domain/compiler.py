"""Compile predicate expressions into plain Python callables.

The compiled callable is how rules evaluate themselves, so a rule's boolean check
and its expression tree can never disagree.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping
from typing import Any

from .errors import UnsupportedExpressionError
from .expressions import (
    Attribute,
    BoolOp,
    BoolOperator,
    Compare,
    CompareOp,
    Constant,
    Lambda,
    Not,
    Parameter,
)
from .visitors import ExpressionVisitor

Evaluator = Callable[[Any], Any]

_COMPARATORS: dict[CompareOp, Callable[[Any, Any], Any]] = {
    CompareOp.EQ: operator.eq,
    CompareOp.NE: operator.ne,
    CompareOp.LT: operator.lt,
    CompareOp.LE: operator.le,
    CompareOp.GT: operator.gt,
    CompareOp.GE: operator.ge,
    CompareOp.IN: lambda value, values: value in values,
}


def read_attribute(obj: Any, name: str) -> Any:
    """Read `name` from a candidate: item access for mappings, else `getattr`."""
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


class _Compiler(ExpressionVisitor):
    """Turn each node into a closure taking the candidate."""

    def __init__(self, parameter: Parameter) -> None:
        self.parameter = parameter

    def visit_Parameter(self, node: Parameter) -> Evaluator:  # pylint: disable=invalid-name
        if node is not self.parameter:
            raise UnsupportedExpressionError(
                f"Parameter '{node.param_name}' is not bound by the predicate."
            )
        return lambda candidate: candidate

    def visit_Attribute(self, node: Attribute) -> Evaluator:  # pylint: disable=invalid-name
        target = self.visit(node.attr_target)
        name = node.attr_name
        return lambda candidate: read_attribute(target(candidate), name)

    def visit_Constant(self, node: Constant) -> Evaluator:  # pylint: disable=invalid-name
        value = node.value
        return lambda candidate: value

    def visit_Compare(self, node: Compare) -> Evaluator:  # pylint: disable=invalid-name
        compare = _COMPARATORS[node.op]
        left = self.visit(node.left)
        right = self.visit(node.right)
        return lambda candidate: compare(left(candidate), right(candidate))

    def visit_BoolOp(self, node: BoolOp) -> Evaluator:  # pylint: disable=invalid-name
        left = self.visit(node.left)
        right = self.visit(node.right)
        if node.op is BoolOperator.AND:
            return lambda candidate: bool(left(candidate)) and bool(right(candidate))
        return lambda candidate: bool(left(candidate)) or bool(right(candidate))

    def visit_Not(self, node: Not) -> Evaluator:  # pylint: disable=invalid-name
        operand = self.visit(node.operand)
        return lambda candidate: not operand(candidate)

    def generic_visit(self, node):
        raise UnsupportedExpressionError(
            f"Cannot compile expression node {type(node).__name__}."
        )


def compile_predicate(predicate: Lambda) -> Callable[[Any], bool]:
    """Compile a predicate into a callable returning `bool`.

    Args:
        predicate: The predicate to compile.

    Returns:
        A function evaluating the predicate against one candidate.

    Raises:
        UnsupportedExpressionError: If the body refers to a parameter other than
            the predicate's own, or contains an unknown node type.
    """
    evaluate = _Compiler(predicate.parameter).visit(predicate.body)
    return lambda candidate: bool(evaluate(candidate))
