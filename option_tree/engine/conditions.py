"""
Condition evaluation against a line item's current selections.

Every leaf operator is fail-closed: a ref with no selection, or a stored
value of the wrong shape, evaluates to False. An option gated on a
condition that cannot be resolved stays hidden rather than shown.

A selection whose value is an explicit null is present, not absent: it
equals a condition value of null and differs from any other value.
"""

import math
from collections.abc import Mapping
from typing import Any, assert_never

from pydantic import TypeAdapter, ValidationError

from option_tree.schemas.conditions import (
    AndCondition,
    ConditionExpr,
    ContainsCondition,
    EqualsCondition,
    NotCondition,
    NotEqualsCondition,
    OrCondition,
    TruthyCondition,
)
from option_tree.schemas.selections import SelectionEntry

Selected = Mapping[str, SelectionEntry | Mapping[str, Any]]

# Sentinel for "no selection"; distinct from every JSON value.
_ABSENT = object()

_condition_adapter: TypeAdapter[ConditionExpr] = TypeAdapter(ConditionExpr)


def evaluate_condition(expr: ConditionExpr | Mapping[str, Any], selected: Selected) -> bool:
    """
    Evaluate a condition expression against the current selections.

    Total over every ConditionExpr variant: never raises, no side effects.

    Args:
        expr: Parsed condition expression, or its raw JSON mapping
              (a mapping that is not a valid condition evaluates to False)
        selected: Map of ref -> selection entry (model or `{"value": ...}` mapping)

    Returns:
        True only when the condition definitely holds

    Example:
        >>> expr = EqualsCondition(op="equals", ref="Q1", value="yes")
        >>> evaluate_condition(expr, {"Q1": {"value": "yes"}})
        True
        >>> evaluate_condition({"op": "truthy", "ref": "Q1"}, {})
        False
    """
    if isinstance(expr, Mapping):
        try:
            expr = _condition_adapter.validate_python(expr)
        except ValidationError:
            return False

    match expr:
        case EqualsCondition():
            value = _selected_value(selected, expr.ref)
            if value is _ABSENT:
                return False
            return _strict_equals(value, _expected_value(expr))
        case NotEqualsCondition():
            # Absence is neither equal nor not-equal: it hides.
            value = _selected_value(selected, expr.ref)
            if value is _ABSENT:
                return False
            return not _strict_equals(value, _expected_value(expr))
        case TruthyCondition():
            value = _selected_value(selected, expr.ref)
            if value is _ABSENT:
                return False
            return _is_truthy(value)
        case ContainsCondition():
            value = _selected_value(selected, expr.ref)
            if value is _ABSENT or not isinstance(value, list | tuple):
                return False
            expected = _expected_value(expr)
            return any(_strict_equals(item, expected) for item in value)
        case AndCondition():
            return all(evaluate_condition(arg, selected) for arg in expr.args)
        case OrCondition():
            return any(evaluate_condition(arg, selected) for arg in expr.args)
        case NotCondition():
            return not evaluate_condition(expr.arg, selected)
        case _:
            assert_never(expr)


def _selected_value(selected: Selected, ref: str) -> Any:
    """Stored value for `ref`, or _ABSENT when there is no entry or its value was never set."""
    if not isinstance(selected, Mapping):
        return _ABSENT
    entry = selected.get(ref)
    if entry is None:
        return _ABSENT
    if isinstance(entry, Mapping):
        return entry["value"] if "value" in entry else _ABSENT
    if isinstance(entry, SelectionEntry):
        return entry.value if "value" in entry.model_fields_set else _ABSENT
    return _ABSENT


def _expected_value(expr: EqualsCondition | NotEqualsCondition | ContainsCondition) -> Any:
    """Condition value; a condition written without one equals no stored value."""
    return expr.value if "value" in expr.model_fields_set else _ABSENT


def _strict_equals(left: Any, right: Any) -> bool:
    """
    Type-strict equality for JSON values.

    Booleans never equal numbers (True != 1), ints and floats compare
    numerically, everything else must share a type.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, int | float) and isinstance(right, int | float):
        return left == right
    return type(left) is type(right) and left == right


def _is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)
