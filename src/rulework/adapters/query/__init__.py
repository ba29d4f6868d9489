"""Query evaluator implementations."""

from .memory import InMemoryQueryEvaluator, filter_candidates
from .sqlalchemy_evaluator import SqlAlchemyQueryEvaluator, to_clause

__all__ = [
    "InMemoryQueryEvaluator",
    "SqlAlchemyQueryEvaluator",
    "filter_candidates",
    "to_clause",
]
