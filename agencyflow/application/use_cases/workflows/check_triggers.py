"""Dispatch a business event to every matching active workflow in the tenant."""

from __future__ import annotations

from typing import Any, Protocol

from agencyflow.application.dtos.step import WORKFLOW_DEPTH_KEY, trigger_depth
from agencyflow.application.interfaces.repositories import IWorkflowRepository
from agencyflow.application.services.condition_evaluator import (
    evaluate,
    parse_trigger_config,
)
from agencyflow.domain.exceptions import ValidationException
from agencyflow.shared.enums import WorkflowStatus
from agencyflow.shared.telemetry.logging import get_logger
from agencyflow.shared.telemetry.tracing import traced

logger = get_logger(__name__)

DEFAULT_MAX_TRIGGER_DEPTH = 5


class _Executor(Protocol):
    async def execute_workflow(
        self,
        workflow_id: str,
        trigger_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> str: ...


class TriggerDispatcher:
    """Finds active workflows for a trigger, evaluates their conditions, runs matches.

    Workflows run one after another. A failure in one workflow is logged and
    never prevents its siblings from running; check_triggers itself never raises.
    """

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        executor: _Executor,
        *,
        max_depth: int = DEFAULT_MAX_TRIGGER_DEPTH,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._executor = executor
        self._max_depth = max_depth

    @traced("workflow.check_triggers")
    async def check_triggers(
        self,
        trigger_type: str,
        event_data: dict[str, Any],
        tenant_id: str,
        user_id: str,
    ) -> None:
        event_data = dict(event_data or {})
        depth = trigger_depth(event_data)
        if depth >= self._max_depth:
            logger.warning(
                "Max trigger depth %d reached for %s (tenant_id=%s); not dispatching",
                self._max_depth,
                trigger_type,
                tenant_id,
            )
            return

        try:
            workflows = await self._workflow_repo.list_active_by_trigger(
                tenant_id, trigger_type
            )
        except Exception:
            logger.exception(
                "Could not load workflows for trigger %s (tenant_id=%s)",
                trigger_type,
                tenant_id,
            )
            return

        payload = {**event_data, WORKFLOW_DEPTH_KEY: depth + 1}
        for workflow in workflows:
            if workflow.status != WorkflowStatus.ACTIVE.value:
                continue
            try:
                config = parse_trigger_config(workflow.trigger_config)
                if not evaluate(config, event_data):
                    logger.debug(
                        "Workflow %s conditions not met for %s", workflow.id, trigger_type
                    )
                    continue
                await self._executor.execute_workflow(
                    workflow_id=workflow.id,
                    trigger_data=payload,
                    tenant_id=tenant_id,
                    user_id=user_id,
                )
            except ValidationException as e:
                logger.warning(
                    "Workflow %s skipped for trigger %s: %s", workflow.id, trigger_type, e
                )
            except Exception:
                logger.exception(
                    "Workflow %s failed for trigger %s (tenant_id=%s)",
                    workflow.id,
                    trigger_type,
                    tenant_id,
                )
