"""RULEWORK

Composable business rules and precondition-guarded workflows.

Rules are predicates over any candidate type, combined with `&`, `|` and `~`.
Each rule is backed by an expression tree, so the same rule can check a single
object, filter a Python collection, or become a SQL `WHERE` clause. Workflows
run a state transition only after their precondition rule accepts the
candidate, and chain through the `Flowable` wrapper.
"""

from rulework.domain.errors import PreconditionViolationError
from rulework.domain.expressions import Lambda, lambda_
from rulework.domain.flowable import NOTHING, Flowable, chain, satisfies, wrap
from rulework.domain.rules import (
    ExpressionRule,
    Rule,
    always,
    and_,
    describe,
    never,
    not_,
    or_,
    rule,
)
from rulework.domain.workflows import InPlaceWorkflow, Workflow, flow

__all__ = [
    "NOTHING",
    "ExpressionRule",
    "Flowable",
    "InPlaceWorkflow",
    "Lambda",
    "PreconditionViolationError",
    "Rule",
    "Workflow",
    "__version__",
    "always",
    "and_",
    "chain",
    "describe",
    "flow",
    "lambda_",
    "never",
    "not_",
    "or_",
    "rule",
    "satisfies",
    "wrap",
]
__version__ = "0.1.0"
