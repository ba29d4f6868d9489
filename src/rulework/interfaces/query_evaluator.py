"""Interface for evaluating rule predicates against a collection of candidates.

A `QueryEvaluator` is the boundary between the rule algebra and whatever holds
the candidates: a Python sequence, a database table, ... Implementations only
receive the predicate's expression tree (`Lambda`), never a compiled callable,
so they are free to translate it into their own query language.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from rulework.domain.expressions import Lambda
    from rulework.domain.rules import Rule

T = TypeVar("T")


class QueryEvaluator(abc.ABC, Generic[T]):
    """Filter a collection of candidates with a predicate."""

    @abc.abstractmethod
    def filter(self, source: Rule[Any] | Lambda) -> list[T]:
        """Return the candidates satisfying a rule or predicate.

        Candidates are returned in the collection's own order.

        Args:
            source: A rule, or the bare predicate of one.

        Returns:
            The matching candidates.

        Raises:
            UnsupportedExpressionError: If the predicate cannot be evaluated by
                this implementation.
        """

    def count(self, source: Rule[Any] | Lambda) -> int:
        """Return the number of candidates satisfying a rule or predicate."""
        return len(self.filter(source))
