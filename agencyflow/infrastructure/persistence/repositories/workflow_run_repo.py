"""Workflow run repository: run rows and step executions (implements IWorkflowRunRepository)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic_core import to_jsonable_python
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agencyflow.application.dtos.workflow import (
    StepExecutionRecord,
    StepExecutionResult,
    WorkflowRunResult,
)
from agencyflow.infrastructure.persistence.models.workflow import (
    WorkflowRun,
    WorkflowStepExecution,
)
from agencyflow.infrastructure.persistence.repositories.base import BaseRepository
from agencyflow.shared.enums import RunStatus
from agencyflow.shared.utils.datetime import ensure_utc
from agencyflow.shared.utils.ids import generate_cuid


def _json_safe(value: dict[str, Any] | None) -> dict[str, Any]:
    """Make payloads storable in JSON columns (dates, decimals, enums become strings/numbers)."""
    return to_jsonable_python(value or {}, fallback=str)


def _entity_ref(trigger_data: dict[str, Any]) -> tuple[str | None, str | None]:
    entity_type = trigger_data.get("entity_type")
    entity_id = trigger_data.get("entity_id")
    return (
        str(entity_type) if entity_type is not None else None,
        str(entity_id) if entity_id is not None else None,
    )


def _execution_to_result(row: WorkflowStepExecution) -> StepExecutionResult:
    return StepExecutionResult(
        id=row.id,
        run_id=row.run_id,
        step_id=row.step_id,
        step_order=row.step_order,
        step_type=row.step_type,
        status=row.status,
        output=row.output,
        error=row.error,
        executed_at=ensure_utc(row.executed_at),
    )


def _to_result(
    run: WorkflowRun, executions: list[WorkflowStepExecution] | None = None
) -> WorkflowRunResult:
    return WorkflowRunResult(
        id=run.id,
        tenant_id=run.tenant_id,
        workflow_id=run.workflow_id,
        trigger_type=run.trigger_type,
        entity_type=run.entity_type,
        entity_id=run.entity_id,
        trigger_data=dict(run.trigger_data or {}),
        status=run.status,
        started_at=ensure_utc(run.started_at),
        ended_at=ensure_utc(run.ended_at),
        triggered_by=run.triggered_by,
        error_message=run.error_message,
        step_executions=tuple(_execution_to_result(e) for e in executions or ()),
    )


class WorkflowRunRepository(BaseRepository[WorkflowRun]):
    """Run bookkeeping. Build with autocommit=True inside the engine."""

    def __init__(self, db: AsyncSession, *, autocommit: bool = False) -> None:
        super().__init__(db, WorkflowRun, autocommit=autocommit)

    async def create_run(
        self,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_data: dict[str, Any],
        triggered_by: str,
        started_at: datetime,
    ) -> str:
        data = _json_safe(trigger_data)
        entity_type, entity_id = _entity_ref(data)
        run = WorkflowRun(
            id=generate_cuid(),
            tenant_id=tenant_id,
            workflow_id=workflow_id,
            trigger_type=trigger_type,
            entity_type=entity_type,
            entity_id=entity_id,
            trigger_data=data,
            status=RunStatus.RUNNING.value,
            started_at=started_at,
            triggered_by=triggered_by,
        )
        self.db.add(run)
        await self._save()
        return run.id

    async def record_step(
        self, run_id: str, tenant_id: str, record: StepExecutionRecord
    ) -> None:
        row = WorkflowStepExecution(
            id=generate_cuid(),
            tenant_id=tenant_id,
            run_id=run_id,
            step_id=record.step_id,
            step_order=record.step_order,
            step_type=record.step_type,
            status=record.status,
            output=_json_safe(record.output) if record.output else None,
            error=record.error,
        )
        if record.executed_at is not None:
            row.executed_at = record.executed_at
        self.db.add(row)
        await self._save()

    async def finish_run(
        self,
        run_id: str,
        tenant_id: str,
        status: str,
        ended_at: datetime,
        error_message: str | None = None,
    ) -> bool:
        """Only a run still in status running is updated, so terminal states never change."""
        result = await self.db.execute(
            update(WorkflowRun)
            .where(
                WorkflowRun.id == run_id,
                WorkflowRun.tenant_id == tenant_id,
                WorkflowRun.status == RunStatus.RUNNING.value,
            )
            .values(status=status, ended_at=ended_at, error_message=error_message)
        )
        await self._save()
        return (result.rowcount or 0) > 0

    async def has_run_for_entity_between(
        self,
        tenant_id: str,
        trigger_type: str,
        entity_type: str,
        entity_id: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        result = await self.db.execute(
            select(WorkflowRun.id)
            .where(
                WorkflowRun.tenant_id == tenant_id,
                WorkflowRun.trigger_type == trigger_type,
                WorkflowRun.entity_type == entity_type,
                WorkflowRun.entity_id == entity_id,
                WorkflowRun.started_at >= start,
                WorkflowRun.started_at < end,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_by_workflow(
        self, workflow_id: str, tenant_id: str, *, skip: int = 0, limit: int = 100
    ) -> list[WorkflowRunResult]:
        result = await self.db.execute(
            select(WorkflowRun)
            .where(
                WorkflowRun.workflow_id == workflow_id,
                WorkflowRun.tenant_id == tenant_id,
            )
            .order_by(WorkflowRun.started_at.desc(), WorkflowRun.id)
            .offset(skip)
            .limit(limit)
        )
        return [_to_result(r) for r in result.scalars().all()]

    async def get_by_id_and_tenant(
        self, run_id: str, tenant_id: str
    ) -> WorkflowRunResult | None:
        run = await self._get_scoped(run_id, tenant_id)
        if run is None:
            return None
        result = await self.db.execute(
            select(WorkflowStepExecution)
            .where(
                WorkflowStepExecution.run_id == run_id,
                WorkflowStepExecution.tenant_id == tenant_id,
            )
            .order_by(
                WorkflowStepExecution.step_order.asc(),
                WorkflowStepExecution.executed_at.asc(),
            )
        )
        return _to_result(run, list(result.scalars().all()))
