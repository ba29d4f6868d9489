"""Workflows: state transitions guarded by an optional precondition rule.

Every call to `Workflow.execute` runs the same sequence:

1. If a precondition is configured, evaluate it against the candidate as it is
   *before* the transition.
2. If it is not satisfied, raise `PreconditionViolationError` carrying the rule's
   description. The transition does not run.
3. Otherwise run the transition and return its result.

The candidate is passed through untouched: no copy is made, so the transition
observes exactly the object the precondition saw. Errors raised by the
transition itself propagate unchanged.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, ClassVar, Generic, TypeVar

from .errors import PreconditionViolationError
from .rules import Rule

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger(__name__)


class Workflow(abc.ABC, Generic[T, U]):
    """Base class for all workflows.

    `T` is the candidate type and `U` the result of the transition. Workflows
    that return their (mutated) candidate subclass `InPlaceWorkflow[T]`, which
    fixes `U` to `T`.

    Args:
        precondition: Rule the candidate must satisfy before the transition runs.
    """

    candidate_type: ClassVar[type | None] = None
    """Type of the candidates this workflow accepts.

    Optional. When set, `WorkflowRegistry.get` uses it to reject requests for an
    incompatible candidate type.
    """

    def __init__(self, precondition: Rule[T] | None = None) -> None:
        self.precondition = precondition

    def execute(self, candidate: T) -> U:
        """Validate the precondition, then run the transition.

        Args:
            candidate: The object to transition.

        Returns:
            The result of the transition.

        Raises:
            PreconditionViolationError: If the precondition is not satisfied.
        """
        self._validate(candidate)
        logger.debug("Executing workflow %s", self.name)
        return self._execute(candidate)

    def _validate(self, candidate: T) -> None:
        """Internal gate. Do not override."""
        rule = self.precondition
        if rule is None:
            return
        if not rule.is_satisfied(candidate):
            logger.info(
                "Workflow %s rejected candidate: %s",
                self.name,
                rule.description or "<no description>",
            )
            raise PreconditionViolationError(rule, candidate)
        logger.debug("Precondition of workflow %s satisfied", self.name)

    @abc.abstractmethod
    def _execute(self, candidate: T) -> U:
        """Run the transition on an already validated candidate."""

    @property
    def name(self) -> str:
        """Name used in log messages."""
        return type(self).__name__


class InPlaceWorkflow(Workflow[T, T]):
    """Workflow that mutates its candidate and returns it.

    Subclasses implement `_mutate` instead of `_execute`.
    """

    def _execute(self, candidate: T) -> T:
        self._mutate(candidate)
        return candidate

    @abc.abstractmethod
    def _mutate(self, candidate: T) -> None:
        """Apply the transition to `candidate` in place."""


def flow(candidate: T, workflow: Workflow[T, Any]) -> T:
    """Pass `candidate` through `workflow` and return the candidate itself.

    Allows chaining in-place transitions on a bare object:
    `flow(flow(counter, increment), increment)`.
    """
    workflow.execute(candidate)
    return candidate
