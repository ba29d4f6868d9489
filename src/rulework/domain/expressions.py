"""Predicate expression trees.

Rules describe their test as data rather than as an opaque callable, so that the
same test can be evaluated in memory or translated by a query engine. This module
defines the node types of that tree and the small operator-overloading builder
used to write them:

```py
is_small = lambda_(lambda c: (c.counter > 0) & (c.counter < 10))
```

Python's `and`, `or`, `not` and chained comparisons cannot be overloaded, so
expressions refuse to be used as booleans; combine them with `&`, `|` and `~`.

Attribute shorthand (`c.counter`, `c.name`) works for any name that does not
start with an underscore, except the public names of `Parameter` and `Attribute`
nodes: `in_`, `param_name`, `attr_target` and `attr_name`. Item access
(`c["in_"]`) reaches those.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "Attribute",
    "BoolOp",
    "BoolOperator",
    "Compare",
    "CompareOp",
    "Constant",
    "Expression",
    "Lambda",
    "Not",
    "Parameter",
    "as_expression",
    "lambda_",
]

DEFAULT_PARAMETER_NAME = "c"


class CompareOp(str, Enum):
    """Comparison operators supported by `Compare` nodes."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IN = "in"


class BoolOperator(str, Enum):
    """Binary boolean operators supported by `BoolOp` nodes."""

    AND = "and"
    OR = "or"


class Expression:
    """Base class for all expression nodes.

    Comparison and bitwise operators build new nodes instead of evaluating.
    Hashing is by identity, which is what parameter binding relies on.
    """

    __slots__ = ()

    # --- comparisons ---

    def __eq__(self, other: object) -> Compare:  # type: ignore[override]
        return Compare(CompareOp.EQ, self, as_expression(other))

    def __ne__(self, other: object) -> Compare:  # type: ignore[override]
        return Compare(CompareOp.NE, self, as_expression(other))

    def __lt__(self, other: object) -> Compare:
        return Compare(CompareOp.LT, self, as_expression(other))

    def __le__(self, other: object) -> Compare:
        return Compare(CompareOp.LE, self, as_expression(other))

    def __gt__(self, other: object) -> Compare:
        return Compare(CompareOp.GT, self, as_expression(other))

    def __ge__(self, other: object) -> Compare:
        return Compare(CompareOp.GE, self, as_expression(other))

    def in_(self, values: Iterable[Any]) -> Compare:
        """Build a membership test against a fixed collection of values."""
        return Compare(CompareOp.IN, self, Constant(tuple(values)))

    # --- boolean algebra ---

    def __and__(self, other: object) -> BoolOp:
        return BoolOp(BoolOperator.AND, self, as_expression(other))

    def __rand__(self, other: object) -> BoolOp:
        return BoolOp(BoolOperator.AND, as_expression(other), self)

    def __or__(self, other: object) -> BoolOp:
        return BoolOp(BoolOperator.OR, self, as_expression(other))

    def __ror__(self, other: object) -> BoolOp:
        return BoolOp(BoolOperator.OR, as_expression(other), self)

    def __invert__(self) -> Not:
        return Not(self)

    # --- plumbing ---

    def __bool__(self) -> bool:
        raise TypeError(
            "Boolean value of an expression is not defined; "
            "use '&', '|' and '~' instead of 'and', 'or' and 'not'."
        )

    def __hash__(self) -> int:
        return id(self)


class _Navigable(Expression):
    """Mixin for nodes whose value is a candidate (or part of one)."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Attribute:
        if name.startswith("_"):
            raise AttributeError(name)
        return Attribute(self, name)

    def __getitem__(self, name: str) -> Attribute:
        return Attribute(self, name)


@dataclass(frozen=True, eq=False, slots=True)
class Parameter(_Navigable):
    """The bound variable of a predicate.

    Two parameters with the same name are still two different variables.
    """

    _name: str = DEFAULT_PARAMETER_NAME

    @property
    def param_name(self) -> str:
        """Display name of the parameter."""
        return self._name

    def __str__(self) -> str:
        return self._name


@dataclass(frozen=True, eq=False, slots=True)
class Attribute(_Navigable):
    """Field or property access on the value of `attr_target`."""

    _target: Expression
    _name: str

    @property
    def attr_target(self) -> Expression:
        """The expression whose value is read."""
        return self._target

    @property
    def attr_name(self) -> str:
        """The field or key read from that value."""
        return self._name

    def __str__(self) -> str:
        return f"{self._target}.{self._name}"


@dataclass(frozen=True, eq=False, slots=True)
class Constant(Expression):
    """A literal value."""

    value: Any

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True, eq=False, slots=True)
class Compare(Expression):
    """A binary comparison."""

    op: CompareOp
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


@dataclass(frozen=True, eq=False, slots=True)
class BoolOp(Expression):
    """A binary boolean operation."""

    op: BoolOperator
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


@dataclass(frozen=True, eq=False, slots=True)
class Not(Expression):
    """Logical negation."""

    operand: Expression

    def __str__(self) -> str:
        return f"(not {self.operand})"


@dataclass(frozen=True, eq=False, slots=True)
class Lambda:
    """A complete predicate: a parameter and the boolean body that uses it.

    Args:
        parameter: The variable the body refers to.
        body: The boolean expression.
        candidate_type: Optional type of the candidates this predicate is
            written for. Only used to reject combining unrelated predicates.
    """

    parameter: Parameter
    body: Expression
    candidate_type: type | None = field(default=None)

    def __str__(self) -> str:
        return f"lambda {self.parameter}: {self.body}"


def as_expression(value: object) -> Expression:
    """Return `value` unchanged if it is an expression, else wrap it in a `Constant`."""
    if isinstance(value, Expression):
        return value
    return Constant(value)


def lambda_(
    builder: Callable[[Parameter], object],
    candidate_type: type | None = None,
    *,
    name: str = DEFAULT_PARAMETER_NAME,
) -> Lambda:
    """Build a `Lambda` by calling `builder` with a fresh parameter.

    Args:
        builder: Callable receiving the parameter and returning the body.
        candidate_type: Optional candidate type recorded on the lambda.
        name: Display name of the parameter.

    Returns:
        The predicate built by `builder`.

    Raises:
        TypeError: If `builder` returns something other than an expression,
            e.g. a plain `bool`. Wrap constants in `Constant` explicitly.
    """
    parameter = Parameter(name)
    body = builder(parameter)
    if not isinstance(body, Expression):
        raise TypeError(
            f"Predicate builder must return an expression, got {type(body).__name__} "
            f"({body!r}); use Constant(...) for a constant predicate."
        )
    return Lambda(parameter, body, candidate_type)
