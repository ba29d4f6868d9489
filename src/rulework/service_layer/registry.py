"""Name-keyed registry of workflow factories.

Applications register a factory per workflow name at start-up and resolve
workflows by name later, e.g. from a command handler:

```py
registry = WorkflowRegistry()
registry.register("increment", IncrementCounter)
workflow = registry.get("increment", Counter)
```

Registration is expected to finish before the registry is shared between
threads; lookups do not lock.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from rulework.domain.workflows import Workflow

logger = logging.getLogger(__name__)

WorkflowFactory = Callable[[], Workflow[Any, Any]]


class WorkflowResolutionError(LookupError):
    """Base class for errors resolving a workflow by name."""


class WorkflowNotRegisteredError(WorkflowResolutionError):
    """Raised when no workflow is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unable to resolve workflow with name: {name}")
        self.name = name


class WorkflowTypeMismatchError(WorkflowResolutionError):
    """Raised when the resolved workflow does not accept the requested candidate type.

    Attributes:
        name (str): The requested workflow name.
        expected (str): What the caller asked for.
        actual (str): What the factory produced.
    """

    def __init__(self, name: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Workflow '{name}' resolved to {actual}, which does not accept {expected}."
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class DuplicateWorkflowError(ValueError):
    """Raised when a name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"A workflow is already registered with name: {name}")
        self.name = name


class WorkflowRegistry:
    """Resolve workflows by name.

    Args:
        factories: Optional initial mapping of names to factories. Factories are
            zero-argument callables (often the workflow class itself) and are
            called on every `get`, so each lookup returns a fresh workflow.
    """

    def __init__(self, factories: Mapping[str, WorkflowFactory] | None = None) -> None:
        self._factories: dict[str, WorkflowFactory] = {}
        for name, factory in (factories or {}).items():
            self.register(name, factory)

    def register(self, name: str, factory: WorkflowFactory) -> None:
        """Register `factory` under `name`.

        Raises:
            DuplicateWorkflowError: If `name` is already registered.
        """
        if name in self._factories:
            raise DuplicateWorkflowError(name)
        self._factories[name] = factory
        logger.debug("Registered workflow %s", name)

    def get(self, name: str, candidate_type: type | None = None) -> Workflow[Any, Any]:
        """Build the workflow registered under `name`.

        Args:
            name: The registered name.
            candidate_type: If given, the type of candidate the caller intends to
                pass. Checked against the workflow's `candidate_type` when the
                workflow declares one.

        Returns:
            A workflow instance produced by the registered factory.

        Raises:
            WorkflowNotRegisteredError: If nothing is registered under `name`.
            WorkflowTypeMismatchError: If the factory did not produce a workflow,
                or the workflow does not accept `candidate_type`.
            Exception: Whatever the factory itself raises.
        """
        if (factory := self._factories.get(name)) is None:
            logger.error("No workflow registered with name %s", name)
            raise WorkflowNotRegisteredError(name)

        workflow = factory()
        if not isinstance(workflow, Workflow):
            logger.error("Factory for %s did not return a workflow", name)
            raise WorkflowTypeMismatchError(name, "a Workflow", type(workflow).__name__)

        accepted = workflow.candidate_type
        if (
            candidate_type is not None
            and accepted is not None
            and not issubclass(candidate_type, accepted)
        ):
            logger.error(
                "Workflow %s accepts %s, not %s",
                name,
                accepted.__name__,
                candidate_type.__name__,
            )
            raise WorkflowTypeMismatchError(
                name, candidate_type.__name__, f"{workflow.name}[{accepted.__name__}]"
            )

        logger.debug("Resolved workflow %s to %s", name, workflow.name)
        return workflow

    def names(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)
