"""Evaluate workflow match conditions against flat event data.

Pure functions, no I/O. A field that is absent or null is "missing":
every operator except not_exists is false for it. Numeric operators
coerce numbers and numeric strings (never booleans); anything that does
not coerce makes the condition false rather than raising.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from agencyflow.application.dtos.workflow_config import Condition, TriggerConfig
from agencyflow.domain.enums import ConditionLogic, ConditionOperator
from agencyflow.domain.exceptions import ValidationException

_MISSING = object()


def parse_trigger_config(raw: Mapping[str, Any] | TriggerConfig | None) -> TriggerConfig:
    """Validate stored trigger_config JSON. Raises ValidationException when malformed."""
    if isinstance(raw, TriggerConfig):
        return raw
    if not raw:
        return TriggerConfig()
    try:
        return TriggerConfig.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationException(
            f"Invalid trigger_config at {location or 'root'}: {first.get('msg')}",
            field="trigger_config",
        ) from e


def evaluate(trigger_config: TriggerConfig, event_data: Mapping[str, Any]) -> bool:
    """Return True if event_data satisfies trigger_config."""
    return evaluate_conditions(
        trigger_config.conditions, trigger_config.logic, event_data
    )


def evaluate_conditions(
    conditions: Iterable[Condition],
    logic: ConditionLogic,
    data: Mapping[str, Any],
) -> bool:
    """Combine conditions with AND/OR. An empty condition list matches."""
    conditions = list(conditions)
    if not conditions:
        return True
    combine = any if logic == ConditionLogic.OR else all
    return combine(evaluate_condition(c, data) for c in conditions)


def evaluate_condition(condition: Condition, data: Mapping[str, Any]) -> bool:
    """Evaluate one condition against data (flat key lookup)."""
    actual = data.get(condition.field, _MISSING)
    if actual is None:
        actual = _MISSING
    op = condition.operator
    expected = condition.value

    if op == ConditionOperator.NOT_EXISTS:
        return actual is _MISSING
    if actual is _MISSING:
        return False
    if op == ConditionOperator.EXISTS:
        return True
    if op == ConditionOperator.EQUALS:
        return _equals(actual, expected)
    if op == ConditionOperator.NOT_EQUALS:
        return not _equals(actual, expected)
    if op == ConditionOperator.CONTAINS:
        return _contains(actual, expected) is True
    if op == ConditionOperator.NOT_CONTAINS:
        return _contains(actual, expected) is False
    if op == ConditionOperator.IN:
        if not isinstance(expected, (list, tuple, set)):
            return False
        return any(_equals(actual, item) for item in expected)
    return _compare(op, actual, expected)


def _to_number(value: Any) -> float | None:
    """Coerce ints, floats, decimals and numeric strings to float; None otherwise."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _equals(actual: Any, expected: Any) -> bool:
    # Booleans only equal booleans; True must not match 1.
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    left, right = _to_number(actual), _to_number(expected)
    if left is not None and right is not None:
        return left == right
    return actual == expected


def _contains(actual: Any, expected: Any) -> bool | None:
    """Substring, list membership or mapping key test. None when the types don't support it."""
    if expected is None:
        return None
    if isinstance(actual, str):
        if isinstance(expected, (dict, list, tuple, set)):
            return None
        return str(expected) in actual
    if isinstance(actual, (list, tuple, set)):
        return any(_equals(item, expected) for item in actual)
    if isinstance(actual, Mapping):
        try:
            return expected in actual
        except TypeError:
            return None
    return None


def _compare(op: ConditionOperator, actual: Any, expected: Any) -> bool:
    left, right = _to_number(actual), _to_number(expected)
    if left is None or right is None:
        return False
    if op == ConditionOperator.GREATER_THAN:
        return left > right
    if op == ConditionOperator.LESS_THAN:
        return left < right
    if op == ConditionOperator.GREATER_THAN_OR_EQUAL:
        return left >= right
    if op == ConditionOperator.LESS_THAN_OR_EQUAL:
        return left <= right
    return False
