"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import Any, Protocol

from agencyflow.application.dtos.workflow import PreparedRun, SweepResult


class ITriggerDispatcher(Protocol):
    """Fan an event out to every matching active workflow in the tenant."""

    async def check_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None:
        """Never raises; per-workflow failures are logged."""


class INotificationService(Protocol):
    """Outbound email and in-app notifications used by step handlers."""

    async def send_email(
        self, tenant_id: str, to: list[str], subject: str, body: str
    ) -> None: ...

    async def notify(
        self,
        tenant_id: str,
        recipient_id: str,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> None: ...


class IFeatureGate(Protocol):
    """Plan-based feature gating, owned by billing."""

    async def is_enabled(self, tenant_id: str, feature: str) -> bool: ...


class IWorkflowAutomation(Protocol):
    """Engine entry points for business code, the API and the cron sweep.

    Each call runs on its own database session, independent of the caller's
    transaction, so business code calls these after its own commit.
    """

    async def check_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None: ...

    async def fire_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None:
        """Like check_triggers but also swallows session/setup failures."""
        ...

    async def execute_workflow(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> str: ...

    async def start_manual_run(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> PreparedRun: ...

    async def finish_manual_run(self, prepared: PreparedRun) -> None: ...

    async def run_invoice_overdue_sweep(self) -> SweepResult: ...
