"""DTOs for workflow definitions, runs and step executions.

Repositories return these frozen dataclasses instead of ORM rows so the
engine and the API never hold session-bound objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class StepDefinition:
    """One step as submitted for create/update (validated before persisting)."""

    step_order: int
    step_type: str
    config: dict[str, Any] = field(default_factory=dict)
    continue_on_error: bool = False
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class WorkflowDefinition:
    """A complete workflow as submitted for creation."""

    name: str
    trigger_type: str
    trigger_config: dict[str, Any] = field(default_factory=dict)
    steps: tuple[StepDefinition, ...] = ()
    description: str | None = None
    status: str = "active"


@dataclass(frozen=True)
class WorkflowChanges:
    """Partial update. None means "leave unchanged"; steps replace all existing steps."""

    name: str | None = None
    description: str | None = None
    trigger_type: str | None = None
    trigger_config: dict[str, Any] | None = None
    status: str | None = None
    steps: tuple[StepDefinition, ...] | None = None


@dataclass(frozen=True)
class WorkflowStepResult:
    """Persisted workflow step."""

    id: str
    workflow_id: str
    step_order: int
    step_type: str
    config: dict[str, Any]
    continue_on_error: bool
    timeout_seconds: float | None


@dataclass(frozen=True)
class WorkflowResult:
    """Persisted workflow. steps is only populated by detail queries."""

    id: str
    tenant_id: str
    name: str
    description: str | None
    trigger_type: str
    trigger_config: dict[str, Any]
    status: str
    created_by: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    step_count: int = 0
    steps: tuple[WorkflowStepResult, ...] = ()


@dataclass(frozen=True)
class StepExecutionRecord:
    """Outcome of one step within a run, as written by the executor."""

    step_id: str | None
    step_order: int
    step_type: str
    status: str
    output: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    executed_at: datetime | None = None


@dataclass(frozen=True)
class StepExecutionResult:
    """Persisted step execution row."""

    id: str
    run_id: str
    step_id: str | None
    step_order: int
    step_type: str
    status: str
    output: dict[str, Any] | None
    error: str | None
    executed_at: datetime | None


@dataclass(frozen=True)
class WorkflowRunResult:
    """Persisted run. step_executions is only populated by detail queries."""

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
    step_executions: tuple[StepExecutionResult, ...] = ()


@dataclass(frozen=True)
class PreparedRun:
    """A run row that exists in status running but whose steps have not executed yet."""

    run_id: str
    workflow_id: str
    tenant_id: str
    user_id: str
    trigger_data: dict[str, Any]


@dataclass(frozen=True)
class SweepResult:
    """Counters reported by the invoice overdue sweep."""

    triggered: int
    total_overdue: int
    skipped_already_triggered: int
