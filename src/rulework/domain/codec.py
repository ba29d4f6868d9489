"""Serialize predicates to and from JSON-compatible dicts.

Each node becomes a dict with a `"node"` discriminator:

```json
{"node": "lambda", "parameter": "c",
 "body": {"node": "compare", "op": ">",
          "left": {"node": "attribute", "name": "counter",
                   "target": {"node": "parameter", "name": "c"}},
          "right": {"node": "constant", "value": 0}}}
```

Parameters are stored by name and rebound to the lambda's parameter on decode.
Candidate types are not serialized.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import ExpressionDecodeError
from .expressions import (
    Attribute,
    BoolOp,
    BoolOperator,
    Compare,
    CompareOp,
    Constant,
    Expression,
    Lambda,
    Not,
    Parameter,
)
from .rules import ExpressionRule, Rule
from .visitors import ExpressionVisitor

_SCALARS = (type(None), bool, int, float, str)


class _Encoder(ExpressionVisitor):

    def visit_Parameter(self, node: Parameter) -> dict[str, Any]:  # pylint: disable=invalid-name
        return {"node": "parameter", "name": node.param_name}

    def visit_Attribute(self, node: Attribute) -> dict[str, Any]:  # pylint: disable=invalid-name
        return {"node": "attribute", "name": node.attr_name, "target": self.visit(node.attr_target)}

    def visit_Constant(self, node: Constant) -> dict[str, Any]:  # pylint: disable=invalid-name
        value = node.value
        if isinstance(value, tuple):
            value = list(value)
        return {"node": "constant", "value": value}

    def visit_Compare(self, node: Compare) -> dict[str, Any]:  # pylint: disable=invalid-name
        return {
            "node": "compare",
            "op": node.op.value,
            "left": self.visit(node.left),
            "right": self.visit(node.right),
        }

    def visit_BoolOp(self, node: BoolOp) -> dict[str, Any]:  # pylint: disable=invalid-name
        return {
            "node": "bool",
            "op": node.op.value,
            "left": self.visit(node.left),
            "right": self.visit(node.right),
        }

    def visit_Not(self, node: Not) -> dict[str, Any]:  # pylint: disable=invalid-name
        return {"node": "not", "operand": self.visit(node.operand)}


def to_dict(predicate: Lambda) -> dict[str, Any]:
    """Encode a predicate as a JSON-compatible dict."""
    return {
        "node": "lambda",
        "parameter": predicate.parameter.param_name,
        "body": _Encoder().visit(predicate.body),
    }


def from_dict(data: Mapping[str, Any]) -> Lambda:
    """Decode a predicate produced by `to_dict`.

    Raises:
        ExpressionDecodeError: If the payload is malformed, uses an unknown node
            or operator, or refers to a parameter other than the lambda's own.
    """
    if not isinstance(data, Mapping) or data.get("node") != "lambda":
        raise ExpressionDecodeError("Expected a 'lambda' node at the top level.")
    parameter = Parameter(_require(data, "parameter", str))
    body = _decode(_require(data, "body", Mapping), parameter)
    return Lambda(parameter, body)


def rule_to_dict(source: Rule[Any]) -> dict[str, Any]:
    """Encode a rule as its description plus its predicate."""
    return {"description": source.description, "predicate": to_dict(source.predicate)}


def rule_from_dict(data: Mapping[str, Any]) -> ExpressionRule[Any]:
    """Decode a rule produced by `rule_to_dict`."""
    if not isinstance(data, Mapping):
        raise ExpressionDecodeError("Expected a rule object.")
    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise ExpressionDecodeError("Rule description must be a string.")
    return ExpressionRule(from_dict(_require(data, "predicate", Mapping)), description)


def _decode(data: Mapping[str, Any], parameter: Parameter) -> Expression:
    match data.get("node"):
        case "parameter":
            name = _require(data, "name", str)
            if name != parameter.param_name:
                raise ExpressionDecodeError(f"Unbound parameter '{name}'.")
            return parameter
        case "attribute":
            target = _decode(_require(data, "target", Mapping), parameter)
            return Attribute(target, _require(data, "name", str))
        case "constant":
            return Constant(_decode_constant(data.get("value")))
        case "compare":
            return Compare(
                _decode_operator(CompareOp, data.get("op")),
                _decode(_require(data, "left", Mapping), parameter),
                _decode(_require(data, "right", Mapping), parameter),
            )
        case "bool":
            return BoolOp(
                _decode_operator(BoolOperator, data.get("op")),
                _decode(_require(data, "left", Mapping), parameter),
                _decode(_require(data, "right", Mapping), parameter),
            )
        case "not":
            return Not(_decode(_require(data, "operand", Mapping), parameter))
        case other:
            raise ExpressionDecodeError(f"Unknown expression node: {other!r}")


def _decode_constant(value: Any) -> Any:
    if isinstance(value, list):
        if not all(isinstance(item, _SCALARS) for item in value):
            raise ExpressionDecodeError("Constant lists may only hold scalars.")
        return tuple(value)
    if not isinstance(value, _SCALARS):
        raise ExpressionDecodeError(f"Unsupported constant: {value!r}")
    return value


def _decode_operator(enum_type: type[CompareOp] | type[BoolOperator], raw: Any) -> Any:
    try:
        return enum_type(raw)
    except ValueError as e:
        raise ExpressionDecodeError(f"Unknown operator: {raw!r}") from e


def _require(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if not isinstance(value := data.get(key), kind):
        raise ExpressionDecodeError(
            f"Field '{key}' of a '{data.get('node')}' node must be a {kind.__name__}."
        )
    return value
