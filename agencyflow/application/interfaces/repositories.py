"""Repository interfaces (ports) for the application layer.

All methods take tenant_id explicitly; implementations must filter by it.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Protocol

from agencyflow.application.dtos.invoice import InvoiceResult
from agencyflow.application.dtos.workflow import (
    StepDefinition,
    StepExecutionRecord,
    WorkflowResult,
    WorkflowRunResult,
    WorkflowStepResult,
)


class IWorkflowRepository(Protocol):
    """Protocol for workflow definitions and their steps."""

    async def get_by_id_and_tenant(
        self, workflow_id: str, tenant_id: str, *, include_steps: bool = False
    ) -> WorkflowResult | None: ...

    async def list_steps(
        self, workflow_id: str, tenant_id: str
    ) -> list[WorkflowStepResult]:
        """Return steps ordered by step_order, then insertion order."""
        ...

    async def list_active_by_trigger(
        self, tenant_id: str, trigger_type: str
    ) -> list[WorkflowResult]:
        """Return only status=active workflows for trigger_type in the tenant."""
        ...

    async def list_by_tenant(
        self,
        tenant_id: str,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowResult]: ...

    async def create_workflow(
        self,
        tenant_id: str,
        created_by: str | None,
        name: str,
        trigger_type: str,
        trigger_config: dict[str, Any],
        status: str,
        steps: Sequence[StepDefinition],
        description: str | None = None,
    ) -> WorkflowResult: ...

    async def update_workflow(
        self,
        workflow_id: str,
        tenant_id: str,
        values: dict[str, Any],
        steps: Sequence[StepDefinition] | None = None,
    ) -> WorkflowResult | None:
        """Apply column values and, when steps is given, replace all steps."""
        ...

    async def delete_workflow(self, workflow_id: str, tenant_id: str) -> bool: ...


class IWorkflowRunRepository(Protocol):
    """Protocol for run and step-execution bookkeeping."""

    async def create_run(
        self,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_data: dict[str, Any],
        triggered_by: str,
        started_at: datetime,
    ) -> str:
        """Insert a run in status running; return its id."""
        ...

    async def record_step(
        self, run_id: str, tenant_id: str, record: StepExecutionRecord
    ) -> None: ...

    async def finish_run(
        self,
        run_id: str,
        tenant_id: str,
        status: str,
        ended_at: datetime,
        error_message: str | None = None,
    ) -> bool:
        """Set the terminal status only if the run is still running. Return True if updated."""
        ...

    async def has_run_for_entity_between(
        self,
        tenant_id: str,
        trigger_type: str,
        entity_type: str,
        entity_id: str,
        start: datetime,
        end: datetime,
    ) -> bool: ...

    async def list_by_workflow(
        self, workflow_id: str, tenant_id: str, *, skip: int = 0, limit: int = 100
    ) -> list[WorkflowRunResult]: ...

    async def get_by_id_and_tenant(
        self, run_id: str, tenant_id: str
    ) -> WorkflowRunResult | None:
        """Return the run with its step executions (ascending step_order)."""
        ...


class IInvoiceRepository(Protocol):
    """Protocol for the invoice reads/writes the overdue sweep needs (all tenants)."""

    async def list_overdue_candidates(self, before: date) -> list[InvoiceResult]:
        """Collectable invoices (sent/viewed/partially_paid/overdue) due before the date."""
        ...

    async def mark_overdue(self, invoice_ids: Sequence[str]) -> int: ...
