"""Expression visitors and predicate composition.

Two predicates built independently each carry their own `Parameter`. Joining
their bodies directly would produce a tree referring to two different variables,
which neither the in-memory compiler nor a query translator can bind. The
composition helpers below first rebind each body to one shared parameter and only
then join them under the boolean operator.
"""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any

from .errors import IncompatibleExpressionsError
from .expressions import (
    Attribute,
    BoolOp,
    BoolOperator,
    Expression,
    Lambda,
    Not,
    Parameter,
)

logger = logging.getLogger(__name__)


class ExpressionVisitor:
    """Walk an expression tree, dispatching to `visit_<NodeClass>` methods.

    Works like `ast.NodeVisitor`: subclasses implement the `visit_*` methods they
    care about, everything else falls back to `generic_visit`.
    """

    def visit(self, node: Expression) -> Any:
        """Visit a node and return the visitor's result for it."""
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: Expression) -> Any:
        """Visit every child expression of `node`."""
        for child in _children(node):
            self.visit(child)
        return None


class ExpressionTransformer(ExpressionVisitor):
    """Visitor that returns a (possibly) rewritten tree.

    Nodes are immutable, so a node is rebuilt only when one of its children
    changed; untouched subtrees are shared with the input.
    """

    def generic_visit(self, node: Expression) -> Expression:
        changes = {}
        for f in fields(node):  # type: ignore[arg-type]
            value = getattr(node, f.name)
            if isinstance(value, Expression):
                new_value = self.visit(value)
                if new_value is not value:
                    changes[f.name] = new_value
        return replace(node, **changes) if changes else node  # type: ignore[type-var]


class ParameterReplacer(ExpressionTransformer):
    """Substitute every occurrence of one parameter with another."""

    def __init__(self, target: Parameter, replacement: Parameter) -> None:
        self.target = target
        self.replacement = replacement

    def visit_Parameter(self, node: Parameter) -> Parameter:  # pylint: disable=invalid-name
        return self.replacement if node is self.target else node


class ParameterCollector(ExpressionVisitor):
    """Collect the distinct parameters referenced by a tree, in visit order."""

    def __init__(self) -> None:
        self.parameters: list[Parameter] = []

    def visit_Parameter(self, node: Parameter) -> None:  # pylint: disable=invalid-name
        if not any(p is node for p in self.parameters):
            self.parameters.append(node)


class AttributeNameCollector(ExpressionVisitor):
    """Collect the first-level attribute names read from the bound parameter."""

    def __init__(self, parameter: Parameter) -> None:
        self.parameter = parameter
        self.names: list[str] = []

    def visit_Attribute(self, node: Attribute) -> None:  # pylint: disable=invalid-name
        if node.attr_target is self.parameter and node.attr_name not in self.names:
            self.names.append(node.attr_name)
        self.visit(node.attr_target)


def _children(node: Expression) -> list[Expression]:
    return [
        value
        for f in fields(node)  # type: ignore[arg-type]
        if isinstance(value := getattr(node, f.name), Expression)
    ]


# ============================================================================
#                           Predicate helpers
# ============================================================================


def free_parameters(predicate: Lambda) -> list[Parameter]:
    """Return parameters used in the body other than the lambda's own."""
    collector = ParameterCollector()
    collector.visit(predicate.body)
    return [p for p in collector.parameters if p is not predicate.parameter]


def referenced_attributes(predicate: Lambda) -> list[str]:
    """Return the attribute names the predicate reads from its candidate."""
    collector = AttributeNameCollector(predicate.parameter)
    collector.visit(predicate.body)
    return collector.names


def rebind(predicate: Lambda, parameter: Parameter) -> Expression:
    """Return the body of `predicate` rewritten to use `parameter`."""
    return ParameterReplacer(predicate.parameter, parameter).visit(predicate.body)


def combine(op: BoolOperator, left: Lambda, right: Lambda) -> Lambda:
    """Join two predicates under `op`, over a single shared parameter.

    Raises:
        IncompatibleExpressionsError: If both predicates declare a candidate
            type and the types differ.
    """
    candidate_type = _common_candidate_type(left, right)
    shared = Parameter(left.parameter.param_name)
    body = BoolOp(op, rebind(left, shared), rebind(right, shared))
    return Lambda(shared, body, candidate_type)


def conjoin(left: Lambda, right: Lambda) -> Lambda:
    """Predicate satisfied when both inputs are."""
    return combine(BoolOperator.AND, left, right)


def disjoin(left: Lambda, right: Lambda) -> Lambda:
    """Predicate satisfied when at least one input is."""
    return combine(BoolOperator.OR, left, right)


def negate(predicate: Lambda) -> Lambda:
    """Predicate satisfied exactly when the input is not."""
    shared = Parameter(predicate.parameter.param_name)
    return Lambda(shared, Not(rebind(predicate, shared)), predicate.candidate_type)


def _common_candidate_type(left: Lambda, right: Lambda) -> type | None:
    if left.candidate_type is None:
        return right.candidate_type
    if right.candidate_type is None or right.candidate_type is left.candidate_type:
        return left.candidate_type
    logger.error(
        "Refusing to combine predicates over %s and %s",
        left.candidate_type.__name__,
        right.candidate_type.__name__,
    )
    raise IncompatibleExpressionsError(left.candidate_type, right.candidate_type)


def same_structure(a: Lambda | Expression, b: Lambda | Expression) -> bool:
    """Return True if two predicates (or two expressions) have the same shape.

    Nodes are compared field by field. For two lambdas, each one's bound parameter
    stands in for the other's, so `lambda_(lambda c: c.counter > 0)` built twice
    compares equal even though the two parameters are different objects. Any
    other parameter only matches itself. Candidate types are not compared.
    """
    if isinstance(a, Lambda) and isinstance(b, Lambda):
        return _same(a.body, b.body, (a.parameter, b.parameter))
    if isinstance(a, Lambda) or isinstance(b, Lambda):
        return False
    return _same(a, b, None)


def _same(
    a: Expression, b: Expression, bound: tuple[Parameter, Parameter] | None
) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, Parameter):
        if bound is not None and (a is bound[0] or b is bound[1]):
            return a is bound[0] and b is bound[1]
        return a is b
    for f in fields(a):  # type: ignore[arg-type]
        left, right = getattr(a, f.name), getattr(b, f.name)
        if isinstance(left, Expression):
            if not isinstance(right, Expression) or not _same(left, right, bound):
                return False
        elif type(left) is not type(right) or left != right:
            return False
    return True
