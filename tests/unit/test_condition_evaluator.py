"""Condition evaluator: operators, AND/OR logic and missing-field semantics."""

import pytest

from agencyflow.application.dtos.workflow_config import Condition, TriggerConfig
from agencyflow.application.services.condition_evaluator import (
    evaluate,
    evaluate_condition,
    evaluate_conditions,
    parse_trigger_config,
)
from agencyflow.domain.enums import ConditionLogic, ConditionOperator
from agencyflow.domain.exceptions import ValidationException


def _cond(field: str, operator: str, value=None) -> Condition:
    return Condition(field=field, operator=ConditionOperator(operator), value=value)


@pytest.mark.parametrize(
    ("operator", "actual", "expected", "result"),
    [
        ("equals", "won", "won", True),
        ("equals", "10", 10, True),
        ("equals", 10.0, "10", True),
        ("equals", "won", "lost", False),
        ("not_equals", "won", "lost", True),
        ("contains", "Acme Corp", "Corp", True),
        ("contains", ["vip", "new"], "vip", True),
        ("contains", 42, "4", False),
        ("not_contains", "Acme Corp", "Inc", True),
        ("not_contains", 42, "4", False),
        ("greater_than", 1500, 1000, True),
        ("greater_than", "1500.50", "1000", True),
        ("greater_than", "abc", 1000, False),
        ("greater_than", True, 0, False),
        ("less_than", 5, 10, True),
        ("greater_than_or_equal", 10, 10, True),
        ("less_than_or_equal", 11, 10, False),
        ("in", "sent", ["sent", "viewed"], True),
        ("in", "paid", ["sent", "viewed"], False),
        ("in", "sent", "sent", False),
        ("exists", "", None, True),
        ("not_exists", "x", None, False),
    ],
)
def test_operators(operator, actual, expected, result) -> None:
    """Each operator against a present field."""
    assert evaluate_condition(_cond("f", operator, expected), {"f": actual}) is result


@pytest.mark.parametrize("operator", [o.value for o in ConditionOperator if o.value != "not_exists"])
def test_missing_field_is_false_for_every_operator_but_not_exists(operator) -> None:
    """An absent field fails every operator except not_exists."""
    assert evaluate_condition(_cond("missing", operator, 1), {"other": 1}) is False


def test_null_field_counts_as_missing() -> None:
    """A null value is treated like an absent key."""
    assert evaluate_condition(_cond("f", "not_exists"), {"f": None}) is True
    assert evaluate_condition(_cond("f", "exists"), {"f": None}) is False
    assert evaluate_condition(_cond("f", "not_equals", "x"), {"f": None}) is False


def test_nan_and_infinity_do_not_compare() -> None:
    """Non-finite numbers never satisfy numeric comparisons."""
    assert evaluate_condition(_cond("f", "greater_than", 0), {"f": float("inf")}) is False
    assert evaluate_condition(_cond("f", "less_than", 0), {"f": "nan"}) is False


@pytest.mark.parametrize(
    ("operator", "actual", "expected", "result"),
    [
        ("equals", True, 1, False),
        ("equals", 1, True, False),
        ("equals", False, 0, False),
        ("equals", "true", True, False),
        ("equals", True, True, True),
        ("equals", False, False, True),
        ("not_equals", True, 1, True),
        ("in", 1, [True], False),
        ("in", True, [True, "x"], True),
        ("contains", [1, 2], True, False),
    ],
)
def test_booleans_only_equal_booleans(operator, actual, expected, result) -> None:
    """A boolean never matches a number or string, in either position."""
    assert evaluate_condition(_cond("f", operator, expected), {"f": actual}) is result


def test_and_logic_requires_all() -> None:
    """AND is true only when every condition holds."""
    conditions = [_cond("a", "equals", 1), _cond("b", "equals", 2)]
    assert evaluate_conditions(conditions, ConditionLogic.AND, {"a": 1, "b": 2}) is True
    assert evaluate_conditions(conditions, ConditionLogic.AND, {"a": 1, "b": 3}) is False


def test_or_logic_requires_any() -> None:
    """OR is true when at least one condition holds."""
    conditions = [_cond("a", "equals", 1), _cond("b", "equals", 2)]
    assert evaluate_conditions(conditions, ConditionLogic.OR, {"a": 0, "b": 2}) is True
    assert evaluate_conditions(conditions, ConditionLogic.OR, {"a": 0, "b": 0}) is False


def test_empty_conditions_match_any_event() -> None:
    """No conditions means the trigger always matches."""
    assert evaluate(TriggerConfig(), {}) is True
    assert evaluate_conditions([], ConditionLogic.OR, {"a": 1}) is True


def test_parse_trigger_config_accepts_stored_json() -> None:
    """Stored JSON (string enums) parses into a TriggerConfig."""
    config = parse_trigger_config(
        {
            "logic": "OR",
            "conditions": [{"field": "amount", "operator": "greater_than", "value": 100}],
        }
    )
    assert config.logic == ConditionLogic.OR
    assert evaluate(config, {"amount": 150}) is True


def test_parse_trigger_config_empty_is_match_all() -> None:
    """None and {} both mean no conditions."""
    assert parse_trigger_config(None).conditions == []
    assert parse_trigger_config({}).conditions == []


def test_parse_trigger_config_rejects_unknown_operator() -> None:
    """Malformed config raises ValidationException on trigger_config."""
    with pytest.raises(ValidationException) as exc_info:
        parse_trigger_config(
            {"conditions": [{"field": "a", "operator": "matches", "value": "x"}]}
        )
    assert exc_info.value.details == {"field": "trigger_config"}
