"""Workflow API schemas.

Responses are built from the application DTOs (frozen dataclasses) via
from_attributes.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from agencyflow.application.dtos.workflow import StepDefinition

WorkflowStatusLiteral = Literal["active", "inactive", "draft"]


class StepIn(BaseModel):
    """One step in a create/update request. step_type and config are validated by the service."""

    step_order: int = Field(..., ge=0)
    step_type: str = Field(..., min_length=1, max_length=64)
    config: dict[str, Any] = Field(default_factory=dict)
    continue_on_error: bool = False
    timeout_seconds: float | None = Field(default=None, gt=0)

    def to_definition(self) -> StepDefinition:
        return StepDefinition(
            step_order=self.step_order,
            step_type=self.step_type,
            config=self.config,
            continue_on_error=self.continue_on_error,
            timeout_seconds=self.timeout_seconds,
        )


class WorkflowCreateRequest(BaseModel):
    """Request body for POST /workflows."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    trigger_type: str = Field(..., min_length=1, max_length=64)
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    status: WorkflowStatusLiteral = "active"
    steps: list[StepIn] = Field(default_factory=list)


class WorkflowUpdateRequest(BaseModel):
    """Request body for PUT /workflows/{id}. Omitted fields are unchanged; steps replace all."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger_type: str | None = Field(default=None, min_length=1, max_length=64)
    trigger_config: dict[str, Any] | None = None
    status: WorkflowStatusLiteral | None = None
    steps: list[StepIn] | None = None


class WorkflowStatusUpdate(BaseModel):
    """Request body for PATCH /workflows/{id}/status."""

    status: WorkflowStatusLiteral


class TemplateInstallRequest(BaseModel):
    """Optional body for POST /workflows/templates/{template_id}/install."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: WorkflowStatusLiteral = "draft"


class TemplateStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    step_type: str
    config: dict[str, Any]
    continue_on_error: bool


class WorkflowTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    category: str
    icon: str
    popular: bool
    trigger_type: str
    trigger_config: dict[str, Any]
    steps: list[TemplateStepResponse]
    variables: list[str]


class StepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    step_order: int
    step_type: str
    config: dict[str, Any]
    continue_on_error: bool
    timeout_seconds: float | None


class WorkflowResponse(BaseModel):
    """Workflow summary (list view)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    description: str | None
    trigger_type: str
    trigger_config: dict[str, Any]
    status: str
    created_by: str | None
    created_at: datetime | None
    updated_at: datetime | None
    step_count: int


class WorkflowDetailResponse(WorkflowResponse):
    """Workflow with its ordered steps."""

    steps: list[StepResponse]


class ManualRunRequest(BaseModel):
    """Optional body for POST /workflows/{id}/execute."""

    trigger_data: dict[str, Any] | None = None


class ManualRunResponse(BaseModel):
    run_id: str
    status: str = "running"


class StepExecutionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    step_id: str | None
    step_order: int
    step_type: str
    status: str
    output: dict[str, Any] | None
    error: str | None
    executed_at: datetime | None


class WorkflowRunResponse(BaseModel):
    """Run summary (history list)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    workflow_id: str | None
    trigger_type: str
    entity_type: str | None
    entity_id: str | None
    trigger_data: dict[str, Any]
    status: str
    started_at: datetime
    ended_at: datetime | None
    triggered_by: str
    error_message: str | None


class WorkflowRunDetailResponse(WorkflowRunResponse):
    """Run with its step executions in step order."""

    step_executions: list[StepExecutionResponse]
