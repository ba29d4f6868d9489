"""Rules: composable predicates over a candidate type.

A rule exposes the same test two ways:

- `predicate`, an expression tree (`Lambda`) that query evaluators can
  translate, e.g. into a SQL `WHERE` clause;
- `is_satisfied(candidate)`, evaluated by compiling `predicate`, so the two views
  never drift apart.

Rules combine with `&`, `|` and `~` (or `and_`, `or_`, `not_`). Composites keep
references to their operands and never modify them, so one rule may take part in
any number of compositions.

A rule is immutable apart from its `description`, which is meant to be set once
(usually through `describe`) before the rule is shared between threads.
"""

from __future__ import annotations

import abc
from collections.abc import Callable
from functools import cached_property
from typing import Any, Generic, TypeVar

from .compiler import compile_predicate
from .expressions import Constant, Lambda, Parameter, lambda_
from .visitors import conjoin, disjoin, negate

T = TypeVar("T")

R = TypeVar("R", bound="Rule[Any]")


class Rule(abc.ABC, Generic[T]):
    """Base class for all rules."""

    def __init__(self, description: str | None = None) -> None:
        self.description = description

    @property
    @abc.abstractmethod
    def predicate(self) -> Lambda:
        """The structural form of this rule."""

    @cached_property
    def _evaluate(self) -> Callable[[Any], bool]:
        return compile_predicate(self.predicate)

    def is_satisfied(self, candidate: T) -> bool:
        """Return True if `candidate` satisfies this rule."""
        return self._evaluate(candidate)

    def __call__(self, candidate: T) -> bool:
        return self.is_satisfied(candidate)

    # --- algebra ---

    def and_(self, other: Rule[T]) -> Rule[T]:
        """Return a rule satisfied when both this rule and `other` are."""
        return AndRule(self, other)

    def or_(self, other: Rule[T]) -> Rule[T]:
        """Return a rule satisfied when this rule or `other` is."""
        return OrRule(self, other)

    def not_(self) -> Rule[T]:
        """Return a rule satisfied exactly when this rule is not."""
        return NotRule(self)

    def __and__(self, other: Rule[T]) -> Rule[T]:
        return self.and_(other)

    def __or__(self, other: Rule[T]) -> Rule[T]:
        return self.or_(other)

    def __invert__(self) -> Rule[T]:
        return self.not_()

    def describe(self: R, description: str) -> R:
        """Set the description and return this same rule."""
        self.description = description
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.predicate}, description={self.description!r})"


class ExpressionRule(Rule[T]):
    """Atomic rule defined by an expression.

    Args:
        predicate: Either a ready `Lambda`, or a builder called with the
            parameter, e.g. `lambda c: c.counter > 0`.
        description: Optional human-readable description.
        candidate_type: Optional candidate type, recorded on the lambda when a
            builder is given.
    """

    def __init__(
        self,
        predicate: Lambda | Callable[[Parameter], object],
        description: str | None = None,
        candidate_type: type | None = None,
    ) -> None:
        super().__init__(description)
        if not isinstance(predicate, Lambda):
            predicate = lambda_(predicate, candidate_type)
        self._predicate = predicate

    @property
    def predicate(self) -> Lambda:
        return self._predicate


class AndRule(Rule[T]):
    """Composite rule where both operands must be satisfied."""

    def __init__(self, left: Rule[T], right: Rule[T]) -> None:
        super().__init__()
        self.left = left
        self.right = right

    @cached_property
    def predicate(self) -> Lambda:  # type: ignore[override]
        return conjoin(self.left.predicate, self.right.predicate)


class OrRule(Rule[T]):
    """Composite rule where at least one operand must be satisfied."""

    def __init__(self, left: Rule[T], right: Rule[T]) -> None:
        super().__init__()
        self.left = left
        self.right = right

    @cached_property
    def predicate(self) -> Lambda:  # type: ignore[override]
        return disjoin(self.left.predicate, self.right.predicate)


class NotRule(Rule[T]):
    """Rule that inverts its operand."""

    def __init__(self, operand: Rule[T]) -> None:
        super().__init__()
        self.operand = operand

    @cached_property
    def predicate(self) -> Lambda:  # type: ignore[override]
        return negate(self.operand.predicate)


# ============================================================================
#                         Functional API
# ============================================================================


def rule(
    builder: Callable[[Parameter], object],
    description: str | None = None,
    candidate_type: type | None = None,
) -> ExpressionRule[Any]:
    """Build an atomic rule from an expression builder."""
    return ExpressionRule(builder, description, candidate_type)


def and_(left: Rule[T], right: Rule[T]) -> Rule[T]:
    """Rule satisfied when both `left` and `right` are."""
    return left.and_(right)


def or_(left: Rule[T], right: Rule[T]) -> Rule[T]:
    """Rule satisfied when `left` or `right` is."""
    return left.or_(right)


def not_(operand: Rule[T]) -> Rule[T]:
    """Rule satisfied exactly when `operand` is not."""
    return operand.not_()


def describe(target: R, description: str) -> R:
    """Set `target.description` and return `target`."""
    return target.describe(description)


def always() -> ExpressionRule[Any]:
    """Rule satisfied by every candidate."""
    return ExpressionRule(lambda c: Constant(True))


def never() -> ExpressionRule[Any]:
    """Rule satisfied by no candidate."""
    return ExpressionRule(lambda c: Constant(False))


def as_predicate(source: Rule[Any] | Lambda) -> Lambda:
    """Return the `Lambda` of a rule, or `source` itself if it already is one."""
    if isinstance(source, Lambda):
        return source
    return source.predicate


__all__ = [
    "AndRule",
    "ExpressionRule",
    "NotRule",
    "OrRule",
    "Rule",
    "always",
    "and_",
    "as_predicate",
    "describe",
    "never",
    "not_",
    "or_",
    "rule",
]
