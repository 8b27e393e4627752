"""In-memory implementations of the repository and facade ports, for tests without a database."""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from agencyflow.application.dtos.invoice import InvoiceResult
from agencyflow.application.dtos.workflow import (
    PreparedRun,
    StepDefinition,
    StepExecutionRecord,
    StepExecutionResult,
    SweepResult,
    WorkflowResult,
    WorkflowRunResult,
    WorkflowStepResult,
)
from agencyflow.domain.exceptions import WorkflowNotFoundException
from agencyflow.shared.enums import OVERDUE_CANDIDATE_STATUSES, InvoiceStatus, RunStatus
from agencyflow.shared.utils.datetime import utc_now

_ids = itertools.count(1)


def _next_id(prefix: str) -> str:
    return f"{prefix}{next(_ids)}"


class InMemoryWorkflowRepository:
    def __init__(self) -> None:
        self.workflows: dict[str, WorkflowResult] = {}
        self.steps: dict[str, list[WorkflowStepResult]] = {}
        self.fail_list_active = False

    def add(
        self,
        tenant_id: str,
        trigger_type: str,
        steps: Sequence[StepDefinition] = (),
        *,
        status: str = "active",
        trigger_config: dict[str, Any] | None = None,
        name: str = "wf",
        workflow_id: str | None = None,
    ) -> WorkflowResult:
        """Seed a workflow directly, bypassing validation."""
        workflow = WorkflowResult(
            id=workflow_id or _next_id("wf"),
            tenant_id=tenant_id,
            name=name,
            description=None,
            trigger_type=trigger_type,
            trigger_config=trigger_config or {},
            status=status,
            created_by="u1",
            created_at=utc_now(),
            updated_at=utc_now(),
        )
        self.workflows[workflow.id] = workflow
        self._set_steps(workflow.id, steps)
        return workflow

    def _set_steps(self, workflow_id: str, steps: Sequence[StepDefinition]) -> None:
        self.steps[workflow_id] = [
            WorkflowStepResult(
                id=_next_id("step"),
                workflow_id=workflow_id,
                step_order=s.step_order,
                step_type=s.step_type,
                config=dict(s.config),
                continue_on_error=s.continue_on_error,
                timeout_seconds=s.timeout_seconds,
            )
            for s in steps
        ]

    def _result(self, workflow: WorkflowResult, *, with_steps: bool) -> WorkflowResult:
        steps = self._sorted_steps(workflow.id)
        return replace(
            workflow,
            step_count=len(steps),
            steps=tuple(steps) if with_steps else (),
        )

    def _sorted_steps(self, workflow_id: str) -> list[WorkflowStepResult]:
        # sorted() is stable, so equal orders keep insertion order.
        return sorted(self.steps.get(workflow_id, []), key=lambda s: s.step_order)

    async def get_by_id_and_tenant(
        self, workflow_id: str, tenant_id: str, *, include_steps: bool = False
    ) -> WorkflowResult | None:
        workflow = self.workflows.get(workflow_id)
        if workflow is None or workflow.tenant_id != tenant_id:
            return None
        return self._result(workflow, with_steps=include_steps)

    async def list_steps(self, workflow_id: str, tenant_id: str) -> list[WorkflowStepResult]:
        workflow = self.workflows.get(workflow_id)
        if workflow is None or workflow.tenant_id != tenant_id:
            return []
        return self._sorted_steps(workflow_id)

    async def list_active_by_trigger(
        self, tenant_id: str, trigger_type: str
    ) -> list[WorkflowResult]:
        if self.fail_list_active:
            raise RuntimeError("database unavailable")
        return [
            self._result(w, with_steps=False)
            for w in self.workflows.values()
            if w.tenant_id == tenant_id
            and w.trigger_type == trigger_type
            and w.status == "active"
        ]

    async def list_by_tenant(
        self,
        tenant_id: str,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowResult]:
        matches = [
            self._result(w, with_steps=False)
            for w in self.workflows.values()
            if w.tenant_id == tenant_id and (status is None or w.status == status)
        ]
        return matches[skip : skip + limit]

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
    ) -> WorkflowResult:
        workflow = self.add(
            tenant_id,
            trigger_type,
            steps,
            status=status,
            trigger_config=trigger_config,
            name=name,
        )
        workflow = replace(workflow, description=description, created_by=created_by)
        self.workflows[workflow.id] = workflow
        return self._result(workflow, with_steps=True)

    async def update_workflow(
        self,
        workflow_id: str,
        tenant_id: str,
        values: dict[str, Any],
        steps: Sequence[StepDefinition] | None = None,
    ) -> WorkflowResult | None:
        workflow = self.workflows.get(workflow_id)
        if workflow is None or workflow.tenant_id != tenant_id:
            return None
        workflow = replace(workflow, **values, updated_at=utc_now())
        self.workflows[workflow_id] = workflow
        if steps is not None:
            self._set_steps(workflow_id, steps)
        return self._result(workflow, with_steps=True)

    async def delete_workflow(self, workflow_id: str, tenant_id: str) -> bool:
        workflow = self.workflows.get(workflow_id)
        if workflow is None or workflow.tenant_id != tenant_id:
            return False
        del self.workflows[workflow_id]
        self.steps.pop(workflow_id, None)
        return True


class InMemoryWorkflowRunRepository:
    def __init__(self) -> None:
        self.runs: dict[str, WorkflowRunResult] = {}
        self.executions: dict[str, list[StepExecutionResult]] = {}

    async def create_run(
        self,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_data: dict[str, Any],
        triggered_by: str,
        started_at: datetime,
    ) -> str:
        run_id = _next_id("run")
        self.runs[run_id] = WorkflowRunResult(
            id=run_id,
            tenant_id=tenant_id,
            workflow_id=workflow_id,
            trigger_type=trigger_type,
            entity_type=trigger_data.get("entity_type"),
            entity_id=trigger_data.get("entity_id"),
            trigger_data=dict(trigger_data),
            status=RunStatus.RUNNING.value,
            started_at=started_at,
            ended_at=None,
            triggered_by=triggered_by,
            error_message=None,
        )
        self.executions[run_id] = []
        return run_id

    async def record_step(
        self, run_id: str, tenant_id: str, record: StepExecutionRecord
    ) -> None:
        self.executions[run_id].append(
            StepExecutionResult(
                id=_next_id("exec"),
                run_id=run_id,
                step_id=record.step_id,
                step_order=record.step_order,
                step_type=record.step_type,
                status=record.status,
                output=dict(record.output) if record.output else None,
                error=record.error,
                executed_at=record.executed_at,
            )
        )

    async def finish_run(
        self,
        run_id: str,
        tenant_id: str,
        status: str,
        ended_at: datetime,
        error_message: str | None = None,
    ) -> bool:
        run = self.runs.get(run_id)
        if run is None or run.tenant_id != tenant_id or run.status != RunStatus.RUNNING.value:
            return False
        self.runs[run_id] = replace(
            run, status=status, ended_at=ended_at, error_message=error_message
        )
        return True

    async def has_run_for_entity_between(
        self,
        tenant_id: str,
        trigger_type: str,
        entity_type: str,
        entity_id: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        return any(
            r.tenant_id == tenant_id
            and r.trigger_type == trigger_type
            and r.entity_type == entity_type
            and r.entity_id == entity_id
            and start <= r.started_at < end
            for r in self.runs.values()
        )

    async def list_by_workflow(
        self, workflow_id: str, tenant_id: str, *, skip: int = 0, limit: int = 100
    ) -> list[WorkflowRunResult]:
        runs = [
            r
            for r in self.runs.values()
            if r.workflow_id == workflow_id and r.tenant_id == tenant_id
        ]
        return runs[skip : skip + limit]

    async def get_by_id_and_tenant(
        self, run_id: str, tenant_id: str
    ) -> WorkflowRunResult | None:
        run = self.runs.get(run_id)
        if run is None or run.tenant_id != tenant_id:
            return None
        executions = sorted(self.executions[run_id], key=lambda e: e.step_order)
        return replace(run, step_executions=tuple(executions))

    def runs_for(self, workflow_id: str) -> list[WorkflowRunResult]:
        return [r for r in self.runs.values() if r.workflow_id == workflow_id]

    def statuses(self, run_id: str) -> list[tuple[int, str]]:
        return [(e.step_order, e.status) for e in self.executions[run_id]]


class InMemoryInvoiceRepository:
    def __init__(self, invoices: Sequence[InvoiceResult] = ()) -> None:
        self.invoices = {i.id: i for i in invoices}

    async def list_overdue_candidates(self, before: date) -> list[InvoiceResult]:
        candidates = {s.value for s in OVERDUE_CANDIDATE_STATUSES}
        return [
            i
            for i in self.invoices.values()
            if i.status in candidates and i.due_date < before
        ]

    async def mark_overdue(self, invoice_ids: Sequence[str]) -> int:
        changed = 0
        for invoice_id in invoice_ids:
            invoice = self.invoices[invoice_id]
            if invoice.status != InvoiceStatus.OVERDUE.value:
                self.invoices[invoice_id] = replace(
                    invoice, status=InvoiceStatus.OVERDUE.value
                )
                changed += 1
        return changed


class RecordingDispatcher:
    """ITriggerDispatcher that only records calls."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def check_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None:
        self.calls.append(
            {
                "trigger_type": trigger_type,
                "event_data": event_data,
                "tenant_id": tenant_id,
                "user_id": user_id,
            }
        )


class FakeAutomation:
    """IWorkflowAutomation stand-in for API tests."""

    def __init__(self, workflow_repo: InMemoryWorkflowRepository) -> None:
        self._workflow_repo = workflow_repo
        self.started: list[PreparedRun] = []
        self.finished: list[PreparedRun] = []
        self.sweep_result = SweepResult(triggered=2, total_overdue=3, skipped_already_triggered=1)

    async def check_triggers(self, trigger_type, event_data, tenant_id, user_id) -> None:
        return None

    async def fire_triggers(self, trigger_type, event_data, tenant_id, user_id) -> None:
        return None

    async def execute_workflow(self, workflow_id, trigger_data, tenant_id, user_id) -> str:
        prepared = await self.start_manual_run(workflow_id, trigger_data, tenant_id, user_id)
        await self.finish_manual_run(prepared)
        return prepared.run_id

    async def start_manual_run(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> PreparedRun:
        if await self._workflow_repo.get_by_id_and_tenant(workflow_id, tenant_id) is None:
            raise WorkflowNotFoundException(workflow_id)
        prepared = PreparedRun(
            run_id=_next_id("run"),
            workflow_id=workflow_id,
            tenant_id=tenant_id,
            user_id=user_id,
            trigger_data=dict(trigger_data),
        )
        self.started.append(prepared)
        return prepared

    async def finish_manual_run(self, prepared: PreparedRun) -> None:
        self.finished.append(prepared)

    async def run_invoice_overdue_sweep(self) -> SweepResult:
        return self.sweep_result
