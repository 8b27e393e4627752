"""Versioned configuration models stored as JSON on workflows and steps.

trigger_config and each step's config are validated against these models
when a workflow is saved. schema_version lets stored documents evolve
without guessing at their shape.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agencyflow.domain.enums import ConditionLogic, ConditionOperator


class Condition(BaseModel):
    """Single rule: compare the event field to value using operator."""

    model_config = ConfigDict(extra="forbid")

    field: str = Field(..., min_length=1, max_length=128)
    operator: ConditionOperator
    value: Any = None


class TriggerConfig(BaseModel):
    """Match rules for a workflow trigger. No conditions means always match."""

    model_config = ConfigDict(extra="forbid")

    schema_version: Literal[1] = 1
    logic: ConditionLogic = ConditionLogic.AND
    conditions: list[Condition] = Field(default_factory=list)


class StepConfig(BaseModel):
    """Base for per-step-type configs. Unknown keys are kept for forward compatibility."""

    model_config = ConfigDict(extra="allow")

    schema_version: Literal[1] = 1


class ConditionStepConfig(StepConfig):
    """Gate the remaining steps on the accumulated run data."""

    logic: ConditionLogic = ConditionLogic.AND
    conditions: list[Condition] = Field(..., min_length=1)
    halt_on_false: bool = True


class WaitDelayStepConfig(StepConfig):
    """Pause the run. Bounded by the engine's wait limit and the step timeout."""

    seconds: float = Field(..., ge=0)


class WebhookStepConfig(StepConfig):
    """POST the run's trigger data (plus custom payload) to an external URL."""

    url: str = Field(..., min_length=1, max_length=2048)
    method: Literal["POST", "PUT", "PATCH"] = "POST"
    auth_header: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        # Templates are allowed; only the scheme of a literal URL can be checked here.
        if "{{" not in value and not value.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return value


class SendEmailStepConfig(StepConfig):
    """Email with templated recipient, subject and body."""

    to: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    body: str = ""


class SendNotificationStepConfig(StepConfig):
    """In-app notification. recipient_id defaults to the user who triggered the run."""

    recipient_id: str | None = None
    title: str = Field(..., min_length=1)
    message: str = ""
    action_url: str | None = None
