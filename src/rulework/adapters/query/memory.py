"""In-memory QueryEvaluator implementation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from rulework.domain.compiler import compile_predicate
from rulework.domain.expressions import Lambda
from rulework.domain.rules import Rule, as_predicate
from rulework.interfaces.query_evaluator import QueryEvaluator

T = TypeVar("T")


def filter_candidates(
    candidates: Iterable[T], source: Rule[Any] | Lambda
) -> list[T]:
    """Return the candidates satisfying `source`, preserving their order.

    The predicate is compiled from its expression tree, the same way a query
    engine would receive it, rather than going through `Rule.is_satisfied`.
    """
    matches = compile_predicate(as_predicate(source))
    return [candidate for candidate in candidates if matches(candidate)]


class InMemoryQueryEvaluator(QueryEvaluator[T]):
    """QueryEvaluator over a Python collection.

    The collection is copied on construction; later changes to the original
    iterable are not seen.
    """

    def __init__(self, candidates: Iterable[T]) -> None:
        self.candidates: list[T] = list(candidates)

    def filter(self, source: Rule[Any] | Lambda) -> list[T]:
        return filter_candidates(self.candidates, source)
