"""Condition evaluation against an answer bag. Pure and total: never raises."""

from __future__ import annotations

import math
from typing import Any, Mapping

from .model import Condition, Operator

_NAN = float("nan")


def _to_number(v: Any) -> float:
    if isinstance(v, bool):
        return _NAN
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return _NAN
        try:
            return float(s)
        except ValueError:
            return _NAN
    return _NAN


def _strict_equals(a: Any, b: Any) -> bool:
    """Equality without coercion: "1" != 1 and True != 1."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_strict_equals(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b


def _contains(haystack: Any, needle: Any) -> bool:
    if isinstance(haystack, (list, tuple, set, frozenset)):
        return any(_strict_equals(item, needle) for item in haystack)
    return str(needle) in str(haystack)


def _between(actual: Any, bounds: Any) -> bool:
    if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
        return False
    n = _to_number(actual)
    low, high = _to_number(bounds[0]), _to_number(bounds[1])
    if math.isnan(low) or math.isnan(high) or low > high:
        return False
    return low <= n <= high


def evaluate(condition: Condition, inputs: Mapping[str, Any]) -> bool:
    """True when the condition holds for inputs. Missing fields and unknown operators are False."""
    actual = inputs.get(condition.field)
    if actual is None:
        return False
    op = condition.operator
    expected = condition.value
    if op == Operator.EQUALS:
        return _strict_equals(actual, expected)
    if op == Operator.NOT_EQUALS:
        return not _strict_equals(actual, expected)
    if op == Operator.GREATER_THAN:
        return _to_number(actual) > _to_number(expected)
    if op == Operator.LESS_THAN:
        return _to_number(actual) < _to_number(expected)
    if op == Operator.CONTAINS:
        return _contains(actual, expected)
    if op == Operator.BETWEEN:
        return _between(actual, expected)
    return False
