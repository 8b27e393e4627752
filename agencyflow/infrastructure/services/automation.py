"""WorkflowAutomation: engine entry points wired to their own database sessions.

Business code calls fire_triggers after its own transaction commits; the
API uses start_manual_run/finish_manual_run; the cron endpoint and script
use run_invoice_overdue_sweep. None of these share the caller's session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agencyflow.application.dtos.workflow import PreparedRun, SweepResult
from agencyflow.application.services.step_registry import StepHandlerRegistry
from agencyflow.application.use_cases.workflows import (
    IdempotencyGuard,
    InvoiceOverdueSweep,
    TriggerDispatcher,
    WorkflowExecutor,
)
from agencyflow.core.config import Settings, get_settings
from agencyflow.infrastructure.persistence.repositories import (
    InvoiceRepository,
    WorkflowRepository,
    WorkflowRunRepository,
)
from agencyflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _Engine:
    executor: WorkflowExecutor
    dispatcher: TriggerDispatcher
    run_repo: WorkflowRunRepository
    session: AsyncSession


class WorkflowAutomation:
    """Implements IWorkflowAutomation on top of an async session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: StepHandlerRegistry,
        settings: Settings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._registry = registry
        self._settings = settings or get_settings()

    @asynccontextmanager
    async def _engine(self) -> AsyncIterator[_Engine]:
        # Every write commits on its own so a run row survives a later step failure.
        async with self._session_factory() as session:
            workflow_repo = WorkflowRepository(session, autocommit=True)
            run_repo = WorkflowRunRepository(session, autocommit=True)
            executor = WorkflowExecutor(
                workflow_repo,
                run_repo,
                self._registry,
                step_timeout_seconds=self._settings.workflow_step_timeout_seconds,
            )
            dispatcher = TriggerDispatcher(
                workflow_repo,
                executor,
                max_depth=self._settings.workflow_max_trigger_depth,
            )
            yield _Engine(executor, dispatcher, run_repo, session)

    async def check_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None:
        async with self._engine() as engine:
            await engine.dispatcher.check_triggers(
                trigger_type=trigger_type,
                event_data=event_data,
                tenant_id=tenant_id,
                user_id=user_id,
            )

    async def fire_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None:
        """Call after the business transaction commits. Never raises."""
        try:
            await self.check_triggers(trigger_type, event_data, tenant_id, user_id)
        except Exception:
            logger.exception(
                "Workflow triggers for %s failed (tenant_id=%s)", trigger_type, tenant_id
            )

    async def execute_workflow(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> str:
        async with self._engine() as engine:
            return await engine.executor.execute_workflow(
                workflow_id=workflow_id,
                trigger_data=trigger_data,
                tenant_id=tenant_id,
                user_id=user_id,
            )

    async def start_manual_run(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> PreparedRun:
        """Create the run row now; raises WorkflowNotFoundException for missing/foreign ids."""
        async with self._engine() as engine:
            return await engine.executor.start_run(
                workflow_id=workflow_id,
                trigger_data=trigger_data,
                tenant_id=tenant_id,
                user_id=user_id,
            )

    async def finish_manual_run(self, prepared: PreparedRun) -> None:
        """Run the steps of a prepared run. Runs as a background task, so errors are logged."""
        try:
            async with self._engine() as engine:
                await engine.executor.run_steps(prepared)
        except Exception:
            logger.exception(
                "Manual run %s of workflow %s failed (tenant_id=%s)",
                prepared.run_id,
                prepared.workflow_id,
                prepared.tenant_id,
            )

    async def run_invoice_overdue_sweep(self) -> SweepResult:
        async with self._engine() as engine:
            sweep = InvoiceOverdueSweep(
                InvoiceRepository(engine.session, autocommit=True),
                IdempotencyGuard(engine.run_repo),
                engine.dispatcher,
            )
            return await sweep.run()
