"""Same-day dedup for externally repeatable events (the daily cron sweep).

Key: (tenant, trigger_type, entity_type, entity_id, calendar day). The
check is read-then-write without a lock, so two concurrent sweeps can
both pass it; the guarantee is at-least-once, not exactly-once.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from agencyflow.application.interfaces.repositories import IWorkflowRunRepository
from agencyflow.shared.utils.datetime import day_bounds, local_now


class IdempotencyGuard:
    """Answers "did this entity already trigger this event today?" from run history."""

    def __init__(
        self,
        run_repo: IWorkflowRunRepository,
        *,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._run_repo = run_repo
        self._clock = clock

    async def already_triggered(
        self,
        tenant_id: str,
        trigger_type: str,
        entity_type: str,
        entity_id: str,
    ) -> bool:
        """True if a run for this trigger and entity started during today (process-local day)."""
        start, end = day_bounds(self._clock())
        return await self._run_repo.has_run_for_entity_between(
            tenant_id=tenant_id,
            trigger_type=trigger_type,
            entity_type=entity_type,
            entity_id=entity_id,
            start=start,
            end=end,
        )
