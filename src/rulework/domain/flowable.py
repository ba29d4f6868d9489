"""Optional-value wrapper for chaining workflows.

A `Flowable` either holds a value or is empty. Feeding it through workflows
builds a pipeline where each step may change the value's type:

```py
result = wrap(counter).then(increment).then(increment).then(duplicate)
```

An empty flowable passes through every further step without invoking the
workflow. Emptiness comes from wrapping `None`, or from a workflow returning
`None`. A precondition violation is *not* turned into emptiness: the error
propagates out of `then`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar, cast

from .errors import EmptyFlowableError

if TYPE_CHECKING:
    from .rules import Rule
    from .workflows import Workflow

T = TypeVar("T")
U = TypeVar("U")

# pylint: disable=too-few-public-methods


class _Empty:
    """Marker stored in the canonical empty flowable."""

    def __repr__(self) -> str:
        return "<empty>"


_EMPTY = _Empty()


class Flowable(Generic[T]):
    """A value of type `T`, or nothing.

    Construct through `wrap`; `Flowable(value)` always holds `value`, even
    `None`. The empty instance is the shared `NOTHING`.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def has_value(self) -> bool:
        """True unless this is the empty flowable."""
        return self._value is not _EMPTY

    @property
    def value(self) -> T:
        """The wrapped value.

        Raises:
            EmptyFlowableError: If the flowable is empty.
        """
        if self._value is _EMPTY:
            raise EmptyFlowableError
        return self._value

    def value_or(self, default: U) -> T | U:
        """Return the wrapped value, or `default` if empty."""
        return default if self._value is _EMPTY else self._value

    def then(self, workflow: Workflow[T, U]) -> Flowable[U]:
        """Execute `workflow` on the value and wrap its result.

        Empty flowables are returned as-is and the workflow is not invoked.
        """
        if self._value is _EMPTY:
            return cast(Flowable[U], NOTHING)
        return wrap(workflow.execute(self._value))

    def satisfies(self, rule: Rule[T]) -> bool:
        """Return False if empty, else whether the value satisfies `rule`."""
        return self._value is not _EMPTY and rule.is_satisfied(self._value)

    def __repr__(self) -> str:
        if self._value is _EMPTY:
            return "NOTHING"
        return f"Flowable({self._value!r})"


NOTHING: Flowable[Any] = Flowable(_EMPTY)
"""The canonical empty flowable."""


def wrap(value: T | None) -> Flowable[T]:
    """Wrap `value`, returning `NOTHING` when it is None."""
    if value is None:
        return cast(Flowable[T], NOTHING)
    return Flowable(value)


def chain(flowable: Flowable[T], workflow: Workflow[T, U]) -> Flowable[U]:
    """Functional form of `Flowable.then`."""
    return flowable.then(workflow)


def satisfies(flowable: Flowable[T], rule: Rule[T]) -> bool:
    """Functional form of `Flowable.satisfies`."""
    return flowable.satisfies(rule)
