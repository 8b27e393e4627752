"""StepHandlerRegistry: registration, lookup and config validation."""

import pytest

from agencyflow.application.dtos.step import StepContext, StepResult
from agencyflow.application.dtos.workflow_config import WaitDelayStepConfig
from agencyflow.application.services.step_registry import StepHandlerRegistry
from agencyflow.domain.enums import StepType
from agencyflow.domain.exceptions import ValidationException


async def _noop(config: dict, context: StepContext) -> StepResult:
    return StepResult.ok()


def test_register_and_get_by_enum_or_string() -> None:
    """Handlers resolve by StepType or its string value."""
    registry = StepHandlerRegistry()
    registry.register(StepType.WAIT_DELAY, _noop, WaitDelayStepConfig)
    assert registry.get("wait_delay") is _noop
    assert registry.get(StepType.WAIT_DELAY) is _noop
    assert registry.is_registered("wait_delay")
    assert registry.registered_types() == ["wait_delay"]


def test_get_unregistered_returns_none() -> None:
    """Unknown step types resolve to None, not an error."""
    assert StepHandlerRegistry().get("create_task") is None


def test_duplicate_registration_raises() -> None:
    """Registering the same step type twice is a programming error."""
    registry = StepHandlerRegistry()
    registry.register("webhook", _noop)
    with pytest.raises(ValueError):
        registry.register(StepType.WEBHOOK, _noop)


def test_validate_config_normalizes() -> None:
    """Valid configs come back normalized with schema_version."""
    registry = StepHandlerRegistry()
    registry.register(StepType.WAIT_DELAY, _noop, WaitDelayStepConfig)
    assert registry.validate_config("wait_delay", {"seconds": 2}) == {
        "schema_version": 1,
        "seconds": 2.0,
    }


def test_validate_config_rejects_invalid() -> None:
    """Config that fails its model raises ValidationException on config."""
    registry = StepHandlerRegistry()
    registry.register(StepType.WAIT_DELAY, _noop, WaitDelayStepConfig)
    with pytest.raises(ValidationException) as exc_info:
        registry.validate_config("wait_delay", {"seconds": -1})
    assert exc_info.value.details == {"field": "config"}


def test_validate_config_rejects_unregistered_type() -> None:
    """A step type without a handler cannot be saved."""
    with pytest.raises(ValidationException) as exc_info:
        StepHandlerRegistry().validate_config("create_task", {})
    assert "No handler registered" in exc_info.value.message


def test_validate_config_without_model_passes_through() -> None:
    """Handlers registered without a model accept any dict."""
    registry = StepHandlerRegistry()
    registry.register("add_tag", _noop)
    assert registry.validate_config("add_tag", {"tag": "vip"}) == {"tag": "vip"}
