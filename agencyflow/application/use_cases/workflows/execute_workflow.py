"""Run one workflow's ordered steps for one trigger event and record the outcome."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from agencyflow.application.dtos.step import StepContext, StepResult, trigger_depth
from agencyflow.application.dtos.workflow import (
    PreparedRun,
    StepExecutionRecord,
    WorkflowStepResult,
)
from agencyflow.application.interfaces.repositories import (
    IWorkflowRepository,
    IWorkflowRunRepository,
)
from agencyflow.application.services.step_registry import StepHandlerRegistry
from agencyflow.domain.exceptions import WorkflowNotFoundException
from agencyflow.shared.enums import RunStatus, StepExecutionStatus
from agencyflow.shared.telemetry.logging import get_logger
from agencyflow.shared.telemetry.tracing import add_span_attributes, traced
from agencyflow.shared.utils.datetime import utc_now

logger = get_logger(__name__)

DEFAULT_STEP_TIMEOUT_SECONDS = 30.0


class WorkflowExecutor:
    """Executes workflow steps sequentially and persists a run plus one row per step.

    A failing step without continue_on_error ends the run as failed and the
    remaining steps are recorded as skipped. Failures of continue_on_error
    steps end the run as partial. Persistence errors propagate.
    """

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        run_repo: IWorkflowRunRepository,
        registry: StepHandlerRegistry,
        *,
        step_timeout_seconds: float = DEFAULT_STEP_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._run_repo = run_repo
        self._registry = registry
        self._step_timeout = step_timeout_seconds
        self._clock = clock

    @traced("workflow.execute")
    async def execute_workflow(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> str:
        """Create a run, execute all steps, set the terminal status; return the run id.

        Raises:
            WorkflowNotFoundException: Workflow missing or owned by another tenant (no run created).
        """
        prepared = await self.start_run(
            workflow_id=workflow_id,
            trigger_data=trigger_data,
            tenant_id=tenant_id,
            user_id=user_id,
        )
        await self.run_steps(prepared)
        return prepared.run_id

    async def start_run(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> PreparedRun:
        """Load the workflow (tenant-scoped) and insert its run in status running."""
        workflow = await self._workflow_repo.get_by_id_and_tenant(workflow_id, tenant_id)
        if workflow is None:
            raise WorkflowNotFoundException(workflow_id)
        data = dict(trigger_data or {})
        run_id = await self._run_repo.create_run(
            tenant_id=tenant_id,
            workflow_id=workflow.id,
            trigger_type=workflow.trigger_type,
            trigger_data=data,
            triggered_by=user_id,
            started_at=self._clock(),
        )
        logger.info(
            "Workflow run started: run_id=%s workflow_id=%s trigger=%s tenant_id=%s",
            run_id,
            workflow.id,
            workflow.trigger_type,
            tenant_id,
        )
        return PreparedRun(
            run_id=run_id,
            workflow_id=workflow.id,
            tenant_id=tenant_id,
            user_id=user_id,
            trigger_data=data,
        )

    @traced("workflow.run_steps")
    async def run_steps(self, prepared: PreparedRun) -> RunStatus:
        """Execute the steps of a prepared run and finish it. Returns the terminal status."""
        add_span_attributes(run_id=prepared.run_id, workflow_id=prepared.workflow_id)
        steps = await self._workflow_repo.list_steps(
            prepared.workflow_id, prepared.tenant_id
        )
        self._warn_on_duplicate_orders(prepared.workflow_id, steps)
        context = StepContext(
            tenant_id=prepared.tenant_id,
            user_id=prepared.user_id,
            workflow_id=prepared.workflow_id,
            run_id=prepared.run_id,
            depth=trigger_depth(prepared.trigger_data),
            data=dict(prepared.trigger_data),
        )

        status = RunStatus.SUCCEEDED
        error_message: str | None = None
        for index, step in enumerate(steps):
            result = await self._run_step(step, context)
            if result.success:
                context.merge_output(step.step_order, result.output)
                await self._record(prepared, step, StepExecutionStatus.SUCCEEDED, result)
                if result.halt:
                    await self._skip(
                        prepared,
                        steps[index + 1 :],
                        f"Halted by condition at step {step.step_order}",
                    )
                    break
                continue

            await self._record(prepared, step, StepExecutionStatus.FAILED, result)
            failure = f"Step {step.step_order} ({step.step_type}) failed: {result.error}"
            error_message = error_message or failure
            if step.continue_on_error:
                context.merge_output(step.step_order, result.output)
                status = RunStatus.PARTIAL
                continue
            status = RunStatus.FAILED
            error_message = failure
            await self._skip(
                prepared,
                steps[index + 1 :],
                f"Skipped after step {step.step_order} failed",
            )
            break

        await self._run_repo.finish_run(
            run_id=prepared.run_id,
            tenant_id=prepared.tenant_id,
            status=status.value,
            ended_at=self._clock(),
            error_message=error_message,
        )
        log = logger.info if status == RunStatus.SUCCEEDED else logger.warning
        log(
            "Workflow run finished: run_id=%s workflow_id=%s status=%s",
            prepared.run_id,
            prepared.workflow_id,
            status.value,
        )
        return status

    async def _run_step(
        self, step: WorkflowStepResult, context: StepContext
    ) -> StepResult:
        handler = self._registry.get(step.step_type)
        if handler is None:
            logger.warning(
                "No handler for step type %r (workflow_id=%s, step_id=%s)",
                step.step_type,
                step.workflow_id,
                step.id,
            )
            return StepResult.failed(
                f"Unknown step type: {step.step_type} "
                f"(workflow {step.workflow_id}, step {step.id})"
            )
        timeout = step.timeout_seconds or self._step_timeout
        try:
            return await asyncio.wait_for(
                handler(dict(step.config or {}), context), timeout=timeout
            )
        except TimeoutError:
            logger.warning(
                "Step timed out after %ss (workflow_id=%s, step_id=%s, type=%s)",
                timeout,
                step.workflow_id,
                step.id,
                step.step_type,
            )
            return StepResult.failed(f"Step timed out after {timeout:g}s")
        except Exception as e:
            logger.warning(
                "Step raised %s (workflow_id=%s, step_id=%s, type=%s): %s",
                type(e).__name__,
                step.workflow_id,
                step.id,
                step.step_type,
                e,
                exc_info=True,
            )
            return StepResult.failed(str(e) or type(e).__name__)

    async def _record(
        self,
        prepared: PreparedRun,
        step: WorkflowStepResult,
        status: StepExecutionStatus,
        result: StepResult,
    ) -> None:
        await self._run_repo.record_step(
            prepared.run_id,
            prepared.tenant_id,
            StepExecutionRecord(
                step_id=step.id,
                step_order=step.step_order,
                step_type=step.step_type,
                status=status.value,
                output=result.output,
                error=result.error,
                executed_at=self._clock(),
            ),
        )

    async def _skip(
        self,
        prepared: PreparedRun,
        remaining: Sequence[WorkflowStepResult],
        reason: str,
    ) -> None:
        for step in remaining:
            await self._run_repo.record_step(
                prepared.run_id,
                prepared.tenant_id,
                StepExecutionRecord(
                    step_id=step.id,
                    step_order=step.step_order,
                    step_type=step.step_type,
                    status=StepExecutionStatus.SKIPPED.value,
                    error=reason,
                    executed_at=self._clock(),
                ),
            )

    @staticmethod
    def _warn_on_duplicate_orders(
        workflow_id: str, steps: Sequence[WorkflowStepResult]
    ) -> None:
        duplicates = [
            order
            for order, count in Counter(s.step_order for s in steps).items()
            if count > 1
        ]
        if duplicates:
            logger.warning(
                "Workflow %s has duplicate step_order values %s; using insertion order",
                workflow_id,
                sorted(duplicates),
            )
