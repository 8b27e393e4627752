"""Workflow repositories, services and the automation facade (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agencyflow.application.interfaces.services import IFeatureGate, IWorkflowAutomation
from agencyflow.application.services.step_registry import StepHandlerRegistry
from agencyflow.application.services.workflow_definition_service import (
    WorkflowDefinitionService,
)
from agencyflow.core.config import get_settings
from agencyflow.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    get_session_factory,
)
from agencyflow.infrastructure.persistence.repositories import (
    WorkflowRepository,
    WorkflowRunRepository,
)
from agencyflow.infrastructure.services.automation import WorkflowAutomation
from agencyflow.infrastructure.services.feature_gate import AllowAllFeatureGate
from agencyflow.infrastructure.services.step_handlers import build_default_registry


async def get_workflow_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowRepository:
    """Workflow repository for reads."""
    return WorkflowRepository(db)


async def get_workflow_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> WorkflowRepository:
    """Workflow repository for create/update/delete; the request transaction commits."""
    return WorkflowRepository(db)


async def get_run_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowRunRepository:
    """Run history reads."""
    return WorkflowRunRepository(db)


def get_step_registry(request: Request) -> StepHandlerRegistry:
    """Registry built at startup; built lazily when the lifespan did not run."""
    registry = getattr(request.app.state, "step_registry", None)
    if registry is None:
        settings = get_settings()
        registry = build_default_registry(
            webhook_timeout_seconds=settings.webhook_timeout_seconds,
            wait_delay_max_seconds=settings.wait_delay_max_seconds,
        )
        request.app.state.step_registry = registry
    return registry


def get_feature_gate() -> IFeatureGate:
    return AllowAllFeatureGate()


async def get_workflow_definition_service(
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    registry: Annotated[StepHandlerRegistry, Depends(get_step_registry)],
    feature_gate: Annotated[IFeatureGate, Depends(get_feature_gate)],
) -> WorkflowDefinitionService:
    return WorkflowDefinitionService(workflow_repo, registry, feature_gate)


async def get_workflow_definition_service_for_write(
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo_for_write)],
    registry: Annotated[StepHandlerRegistry, Depends(get_step_registry)],
    feature_gate: Annotated[IFeatureGate, Depends(get_feature_gate)],
) -> WorkflowDefinitionService:
    return WorkflowDefinitionService(workflow_repo, registry, feature_gate)


def get_workflow_automation(
    request: Request,
    registry: Annotated[StepHandlerRegistry, Depends(get_step_registry)],
) -> IWorkflowAutomation:
    """Facade from startup; built on demand (raises 503 when no database is configured)."""
    automation = getattr(request.app.state, "workflow_automation", None)
    if automation is None:
        automation = WorkflowAutomation(get_session_factory(), registry, get_settings())
        request.app.state.workflow_automation = automation
    return automation
