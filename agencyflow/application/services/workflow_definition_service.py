"""Create, update and query workflow definitions with save-time validation.

Validation happens here so nothing invalid reaches storage: trigger types
must be known, step types must be known and have a registered handler,
configs must match their versioned models, and step orders must be unique.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from agencyflow.application.dtos.workflow import (
    StepDefinition,
    WorkflowChanges,
    WorkflowDefinition,
    WorkflowResult,
)
from agencyflow.application.dtos.workflow_templates import get_template
from agencyflow.application.interfaces.repositories import IWorkflowRepository
from agencyflow.application.interfaces.services import IFeatureGate
from agencyflow.application.services.condition_evaluator import parse_trigger_config
from agencyflow.application.services.step_registry import StepHandlerRegistry
from agencyflow.domain.enums import StepType, TriggerType
from agencyflow.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
    WorkflowNotFoundException,
)
from agencyflow.shared.enums import WorkflowStatus
from agencyflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

WORKFLOWS_FEATURE = "workflows"


class WorkflowDefinitionService:
    """Use cases behind the /workflows CRUD endpoints."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        registry: StepHandlerRegistry,
        feature_gate: IFeatureGate | None = None,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._registry = registry
        self._feature_gate = feature_gate

    async def create_workflow(
        self, tenant_id: str, user_id: str, definition: WorkflowDefinition
    ) -> WorkflowResult:
        """Validate and persist a workflow with its steps (one transaction)."""
        if self._feature_gate and not await self._feature_gate.is_enabled(
            tenant_id, WORKFLOWS_FEATURE
        ):
            raise AuthorizationException(
                resource="workflow",
                action="create",
                message="Workflow automation is not available on the current plan",
            )
        self._validate_trigger_type(definition.trigger_type)
        self._validate_status(definition.status)
        trigger_config = self._validate_trigger_config(definition.trigger_config)
        steps = self._validate_steps(definition.steps)
        created = await self._workflow_repo.create_workflow(
            tenant_id=tenant_id,
            created_by=user_id,
            name=definition.name,
            trigger_type=definition.trigger_type,
            trigger_config=trigger_config,
            status=definition.status,
            steps=steps,
            description=definition.description,
        )
        logger.info(
            "Workflow created: id=%s trigger=%s steps=%d tenant_id=%s",
            created.id,
            created.trigger_type,
            len(steps),
            tenant_id,
        )
        return created

    async def install_template(
        self,
        tenant_id: str,
        user_id: str,
        template_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        status: str = WorkflowStatus.DRAFT.value,
    ) -> WorkflowResult:
        """Create a workflow from a catalog template.

        Installs as a draft by default so the tenant can review recipients
        and wording before it starts firing. Goes through create_workflow,
        so the feature gate and save-time validation apply unchanged.
        """
        template = get_template(template_id)
        if template is None:
            raise ResourceNotFoundException("workflow_template", template_id)
        definition = WorkflowDefinition(
            name=name or template.name,
            description=description if description is not None else template.description,
            trigger_type=template.trigger_type,
            trigger_config=dict(template.trigger_config),
            status=status,
            steps=tuple(
                StepDefinition(
                    step_order=order,
                    step_type=step.step_type,
                    config=dict(step.config),
                    continue_on_error=step.continue_on_error,
                )
                for order, step in enumerate(template.steps, start=1)
            ),
        )
        created = await self.create_workflow(tenant_id, user_id, definition)
        logger.info("Template %s installed as workflow %s", template_id, created.id)
        return created

    async def update_workflow(
        self, workflow_id: str, tenant_id: str, changes: WorkflowChanges
    ) -> WorkflowResult:
        """Apply a partial update. trigger_type cannot change; steps are replaced wholesale."""
        existing = await self.get_workflow(workflow_id, tenant_id)
        if changes.trigger_type is not None and changes.trigger_type != existing.trigger_type:
            raise ValidationException(
                "trigger_type cannot be changed after creation; create a new workflow instead",
                field="trigger_type",
            )
        values: dict[str, Any] = {}
        if changes.name is not None:
            values["name"] = changes.name
        if changes.description is not None:
            values["description"] = changes.description
        if changes.trigger_config is not None:
            values["trigger_config"] = self._validate_trigger_config(changes.trigger_config)
        if changes.status is not None:
            self._validate_status(changes.status)
            values["status"] = changes.status
        steps = self._validate_steps(changes.steps) if changes.steps is not None else None
        updated = await self._workflow_repo.update_workflow(
            workflow_id, tenant_id, values, steps=steps
        )
        if updated is None:
            raise WorkflowNotFoundException(workflow_id)
        return updated

    async def set_status(
        self, workflow_id: str, tenant_id: str, status: str
    ) -> WorkflowResult:
        self._validate_status(status)
        updated = await self._workflow_repo.update_workflow(
            workflow_id, tenant_id, {"status": status}
        )
        if updated is None:
            raise WorkflowNotFoundException(workflow_id)
        logger.info("Workflow %s status set to %s", workflow_id, status)
        return updated

    async def delete_workflow(self, workflow_id: str, tenant_id: str) -> None:
        """Delete the workflow and its steps; past runs are kept for audit."""
        if not await self._workflow_repo.delete_workflow(workflow_id, tenant_id):
            raise WorkflowNotFoundException(workflow_id)

    async def get_workflow(self, workflow_id: str, tenant_id: str) -> WorkflowResult:
        workflow = await self._workflow_repo.get_by_id_and_tenant(
            workflow_id, tenant_id, include_steps=True
        )
        if workflow is None:
            raise WorkflowNotFoundException(workflow_id)
        return workflow

    async def list_workflows(
        self,
        tenant_id: str,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowResult]:
        if status is not None:
            self._validate_status(status)
        return await self._workflow_repo.list_by_tenant(
            tenant_id, status=status, skip=skip, limit=limit
        )

    @staticmethod
    def _validate_trigger_type(trigger_type: str) -> None:
        if trigger_type not in TriggerType.values():
            raise ValidationException(
                f"Unknown trigger type: {trigger_type}", field="trigger_type"
            )

    @staticmethod
    def _validate_status(status: str) -> None:
        if status not in WorkflowStatus.values():
            raise ValidationException(
                f"Invalid status {status!r}; expected one of {WorkflowStatus.values()}",
                field="status",
            )

    @staticmethod
    def _validate_trigger_config(raw: dict[str, Any] | None) -> dict[str, Any]:
        return parse_trigger_config(raw).model_dump(mode="json")

    def _validate_steps(
        self, steps: Sequence[StepDefinition]
    ) -> list[StepDefinition]:
        seen: set[int] = set()
        validated: list[StepDefinition] = []
        for step in steps:
            if step.step_order in seen:
                raise ValidationException(
                    f"Duplicate step_order {step.step_order}", field="steps"
                )
            seen.add(step.step_order)
            if step.step_type not in StepType.values():
                raise ValidationException(
                    f"Unknown step type: {step.step_type}", field="step_type"
                )
            if step.timeout_seconds is not None and step.timeout_seconds <= 0:
                raise ValidationException(
                    "timeout_seconds must be positive", field="timeout_seconds"
                )
            config = self._registry.validate_config(step.step_type, step.config)
            validated.append(replace(step, config=config))
        return sorted(validated, key=lambda s: s.step_order)
