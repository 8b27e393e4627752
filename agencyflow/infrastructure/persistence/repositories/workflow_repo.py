"""Workflow repository: definitions and their ordered steps (implements IWorkflowRepository)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agencyflow.application.dtos.workflow import (
    StepDefinition,
    WorkflowResult,
    WorkflowStepResult,
)
from agencyflow.infrastructure.persistence.models.workflow import Workflow, WorkflowStep
from agencyflow.infrastructure.persistence.repositories.base import BaseRepository
from agencyflow.shared.enums import WorkflowStatus
from agencyflow.shared.utils.ids import generate_cuid

_UPDATABLE_COLUMNS = frozenset({"name", "description", "trigger_config", "status"})


def _step_to_result(step: WorkflowStep) -> WorkflowStepResult:
    return WorkflowStepResult(
        id=step.id,
        workflow_id=step.workflow_id,
        step_order=step.step_order,
        step_type=step.step_type,
        config=dict(step.config or {}),
        continue_on_error=step.continue_on_error,
        timeout_seconds=step.timeout_seconds,
    )


def _to_result(
    workflow: Workflow,
    *,
    step_count: int = 0,
    steps: Sequence[WorkflowStep] = (),
) -> WorkflowResult:
    return WorkflowResult(
        id=workflow.id,
        tenant_id=workflow.tenant_id,
        name=workflow.name,
        description=workflow.description,
        trigger_type=workflow.trigger_type,
        trigger_config=dict(workflow.trigger_config or {}),
        status=workflow.status,
        created_by=workflow.created_by,
        created_at=workflow.created_at,
        updated_at=workflow.updated_at,
        step_count=len(steps) if steps else step_count,
        steps=tuple(_step_to_result(s) for s in steps),
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Workflow repository. Every query is filtered by tenant_id."""

    def __init__(self, db: AsyncSession, *, autocommit: bool = False) -> None:
        super().__init__(db, Workflow, autocommit=autocommit)

    async def get_by_id_and_tenant(
        self, workflow_id: str, tenant_id: str, *, include_steps: bool = False
    ) -> WorkflowResult | None:
        workflow = await self._get_scoped(workflow_id, tenant_id)
        if workflow is None:
            return None
        if include_steps:
            steps = await self._load_steps(workflow_id, tenant_id)
            return _to_result(workflow, steps=steps)
        return _to_result(workflow, step_count=await self._count_steps(workflow_id))

    async def list_steps(
        self, workflow_id: str, tenant_id: str
    ) -> list[WorkflowStepResult]:
        return [_step_to_result(s) for s in await self._load_steps(workflow_id, tenant_id)]

    async def list_active_by_trigger(
        self, tenant_id: str, trigger_type: str
    ) -> list[WorkflowResult]:
        result = await self.db.execute(
            select(Workflow)
            .where(
                Workflow.tenant_id == tenant_id,
                Workflow.trigger_type == trigger_type,
                Workflow.status == WorkflowStatus.ACTIVE.value,
            )
            .order_by(Workflow.created_at.asc(), Workflow.id.asc())
        )
        return [_to_result(w) for w in result.scalars().all()]

    async def list_by_tenant(
        self,
        tenant_id: str,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowResult]:
        step_count = (
            select(func.count(WorkflowStep.id))
            .where(WorkflowStep.workflow_id == Workflow.id)
            .correlate(Workflow)
            .scalar_subquery()
        )
        q = select(Workflow, step_count).where(Workflow.tenant_id == tenant_id)
        if status is not None:
            q = q.where(Workflow.status == status)
        q = q.order_by(Workflow.created_at.desc(), Workflow.id).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_to_result(w, step_count=count or 0) for w, count in result.all()]

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
        """Insert the workflow and all of its steps in the current transaction."""
        workflow = Workflow(
            id=generate_cuid(),
            tenant_id=tenant_id,
            name=name,
            description=description,
            trigger_type=trigger_type,
            trigger_config=trigger_config,
            status=status,
            created_by=created_by,
        )
        self.db.add(workflow)
        await self.db.flush()
        self._add_steps(workflow.id, tenant_id, steps)
        await self._save()
        await self.db.refresh(workflow)
        return _to_result(workflow, steps=await self._load_steps(workflow.id, tenant_id))

    async def update_workflow(
        self,
        workflow_id: str,
        tenant_id: str,
        values: dict[str, Any],
        steps: Sequence[StepDefinition] | None = None,
    ) -> WorkflowResult | None:
        """Update columns and optionally replace all steps. Returns None if not found."""
        unknown = set(values) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update workflow columns: {sorted(unknown)}")
        workflow = await self._get_scoped(workflow_id, tenant_id)
        if workflow is None:
            return None
        if values:
            await self.db.execute(
                update(Workflow)
                .where(Workflow.id == workflow_id, Workflow.tenant_id == tenant_id)
                .values(**values, updated_at=func.now())
            )
        if steps is not None:
            # Delete first so the (workflow_id, step_order) constraint holds for the new rows.
            await self.db.execute(
                delete(WorkflowStep).where(
                    WorkflowStep.workflow_id == workflow_id,
                    WorkflowStep.tenant_id == tenant_id,
                )
            )
            self._add_steps(workflow_id, tenant_id, steps)
        await self._save()
        await self.db.refresh(workflow)
        return _to_result(workflow, steps=await self._load_steps(workflow_id, tenant_id))

    async def delete_workflow(self, workflow_id: str, tenant_id: str) -> bool:
        """Delete the workflow; steps cascade and runs keep a NULL workflow_id."""
        result = await self.db.execute(
            delete(Workflow).where(
                Workflow.id == workflow_id, Workflow.tenant_id == tenant_id
            )
        )
        await self._save()
        return (result.rowcount or 0) > 0

    def _add_steps(
        self, workflow_id: str, tenant_id: str, steps: Sequence[StepDefinition]
    ) -> None:
        for step in steps:
            self.db.add(
                WorkflowStep(
                    id=generate_cuid(),
                    tenant_id=tenant_id,
                    workflow_id=workflow_id,
                    step_order=step.step_order,
                    step_type=step.step_type,
                    config=dict(step.config),
                    continue_on_error=step.continue_on_error,
                    timeout_seconds=step.timeout_seconds,
                )
            )

    async def _load_steps(self, workflow_id: str, tenant_id: str) -> list[WorkflowStep]:
        result = await self.db.execute(
            select(WorkflowStep)
            .where(
                WorkflowStep.workflow_id == workflow_id,
                WorkflowStep.tenant_id == tenant_id,
            )
            .order_by(
                WorkflowStep.step_order.asc(),
                WorkflowStep.created_at.asc(),
                WorkflowStep.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def _count_steps(self, workflow_id: str) -> int:
        result = await self.db.execute(
            select(func.count(WorkflowStep.id)).where(
                WorkflowStep.workflow_id == workflow_id
            )
        )
        return result.scalar_one() or 0
