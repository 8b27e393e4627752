"""Step handler registry: step type -> async handler (+ optional config model).

Handlers are registered once at process start. The API consults the
registry at save time to reject step types with no handler; the executor
resolves handlers at run time and fails a step gracefully when none is
registered.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from agencyflow.application.dtos.step import StepContext, StepResult
from agencyflow.domain.enums import StepType
from agencyflow.domain.exceptions import ValidationException

StepHandler = Callable[[dict[str, Any], StepContext], Awaitable[StepResult]]


@dataclass(frozen=True)
class _Registration:
    handler: StepHandler
    config_model: type[BaseModel] | None


def _key(step_type: StepType | str) -> str:
    return step_type.value if isinstance(step_type, StepType) else str(step_type)


class StepHandlerRegistry:
    """Maps step type strings to handlers."""

    def __init__(self) -> None:
        self._registrations: dict[str, _Registration] = {}

    def register(
        self,
        step_type: StepType | str,
        handler: StepHandler,
        config_model: type[BaseModel] | None = None,
    ) -> None:
        """Register handler for step_type. Raises ValueError if already registered."""
        key = _key(step_type)
        if key in self._registrations:
            raise ValueError(f"Step handler already registered for {key!r}")
        self._registrations[key] = _Registration(handler, config_model)

    def get(self, step_type: StepType | str) -> StepHandler | None:
        registration = self._registrations.get(_key(step_type))
        return registration.handler if registration else None

    def is_registered(self, step_type: StepType | str) -> bool:
        return _key(step_type) in self._registrations

    def registered_types(self) -> list[str]:
        return sorted(self._registrations)

    def validate_config(
        self, step_type: StepType | str, config: dict[str, Any] | None
    ) -> dict[str, Any]:
        """Validate config against the step type's model and return it normalized.

        Raises:
            ValidationException: Unregistered step type or invalid config.
        """
        key = _key(step_type)
        registration = self._registrations.get(key)
        if registration is None:
            raise ValidationException(
                f"No handler registered for step type: {key}", field="step_type"
            )
        if registration.config_model is None:
            return dict(config or {})
        try:
            model = registration.config_model.model_validate(config or {})
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(p) for p in first.get("loc", ()))
            raise ValidationException(
                f"Invalid config for {key} step at {location or 'root'}: {first.get('msg')}",
                field="config",
            ) from e
        return model.model_dump(mode="json", exclude_none=True)
