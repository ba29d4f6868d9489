"""Domain-layer error definitions."""

from typing import Any

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


# ============================================================================
#                       Expression related errors
# ============================================================================


class ExpressionError(DomainError):
    """Base class for errors raised while building or translating expressions."""


class IncompatibleExpressionsError(ExpressionError):
    """Raised when two predicates over different candidate types are combined."""

    def __init__(self, left_type: type, right_type: type) -> None:
        super().__init__(
            f"Cannot combine a predicate over '{left_type.__name__}' "
            f"with a predicate over '{right_type.__name__}'."
        )
        self.left_type = left_type
        self.right_type = right_type


class UnsupportedExpressionError(ExpressionError):
    """Raised when an expression node cannot be handled by a compiler or evaluator."""


class ExpressionDecodeError(ExpressionError):
    """Raised when a serialized expression payload is malformed."""


# ============================================================================
#                         Workflow related errors
# ============================================================================


class WorkflowError(DomainError):
    """Base class for workflow errors."""


class PreconditionViolationError(WorkflowError):
    """Raised when a workflow precondition is not satisfied by the candidate.

    The message is the precondition's description, or an empty string when the
    rule was never described.
    """

    def __init__(self, rule: Any, candidate: Any) -> None:
        super().__init__(rule.description or "")
        self.rule = rule
        self.candidate = candidate


# ============================================================================
#                         Flowable related errors
# ============================================================================


class EmptyFlowableError(DomainError, LookupError):
    """Raised when reading the value of an empty flowable."""

    def __init__(self) -> None:
        super().__init__("Flowable has no value.")
