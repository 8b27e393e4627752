"""Workflow API: CRUD over definitions, templates, manual runs and run history.

Thin routes; validation lives in WorkflowDefinitionService and execution
in the WorkflowAutomation facade.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response

from agencyflow.api.v1.dependencies import (
    CurrentUser,
    get_current_user,
    get_run_repo,
    get_tenant_id,
    get_workflow_automation,
    get_workflow_definition_service,
    get_workflow_definition_service_for_write,
)
from agencyflow.application.dtos.workflow import WorkflowChanges, WorkflowDefinition
from agencyflow.application.dtos.workflow_templates import TemplateCategory, list_templates
from agencyflow.application.interfaces.repositories import IWorkflowRunRepository
from agencyflow.application.interfaces.services import IWorkflowAutomation
from agencyflow.application.services.workflow_definition_service import (
    WorkflowDefinitionService,
)
from agencyflow.core.limiter import limit_manual_execute, limit_writes
from agencyflow.domain.exceptions import ResourceNotFoundException
from agencyflow.schemas.workflow import (
    ManualRunRequest,
    ManualRunResponse,
    TemplateInstallRequest,
    WorkflowCreateRequest,
    WorkflowDetailResponse,
    WorkflowResponse,
    WorkflowRunDetailResponse,
    WorkflowRunResponse,
    WorkflowStatusLiteral,
    WorkflowStatusUpdate,
    WorkflowTemplateResponse,
    WorkflowUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=WorkflowDetailResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[
        WorkflowDefinitionService, Depends(get_workflow_definition_service_for_write)
    ],
):
    """Create a workflow with its steps (400 on unknown types or invalid configs)."""
    workflow = await service.create_workflow(
        tenant_id,
        current_user.id,
        WorkflowDefinition(
            name=body.name,
            description=body.description,
            trigger_type=body.trigger_type,
            trigger_config=body.trigger_config,
            status=body.status,
            steps=tuple(s.to_definition() for s in body.steps),
        ),
    )
    return WorkflowDetailResponse.model_validate(workflow)


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows(
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[WorkflowDefinitionService, Depends(get_workflow_definition_service)],
    status: WorkflowStatusLiteral | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List the tenant's workflows, newest first, with step counts."""
    workflows = await service.list_workflows(
        tenant_id, status=status, skip=skip, limit=limit
    )
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.get("/templates", response_model=list[WorkflowTemplateResponse])
async def list_workflow_templates(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    category: TemplateCategory | None = None,
    popular: bool | None = None,
):
    """Built-in templates, optionally filtered by category or popularity."""
    return [
        WorkflowTemplateResponse.model_validate(t)
        for t in list_templates(category=category, popular=popular)
    ]


@router.post(
    "/templates/{template_id}/install",
    response_model=WorkflowDetailResponse,
    status_code=201,
)
@limit_writes
async def install_workflow_template(
    request: Request,
    template_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[
        WorkflowDefinitionService, Depends(get_workflow_definition_service_for_write)
    ],
    body: TemplateInstallRequest | None = None,
):
    """Create a workflow from a template. Installs as draft unless a status is given."""
    body = body or TemplateInstallRequest()
    workflow = await service.install_template(
        tenant_id,
        current_user.id,
        template_id,
        name=body.name,
        description=body.description,
        status=body.status,
    )
    return WorkflowDetailResponse.model_validate(workflow)


@router.get("/runs/{run_id}", response_model=WorkflowRunDetailResponse)
async def get_run(
    run_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    run_repo: Annotated[IWorkflowRunRepository, Depends(get_run_repo)],
):
    """Run with its step executions. Tenant-scoped."""
    run = await run_repo.get_by_id_and_tenant(run_id, tenant_id)
    if run is None:
        raise ResourceNotFoundException("workflow_run", run_id)
    return WorkflowRunDetailResponse.model_validate(run)


@router.get("/{workflow_id}", response_model=WorkflowDetailResponse)
async def get_workflow(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[WorkflowDefinitionService, Depends(get_workflow_definition_service)],
):
    workflow = await service.get_workflow(workflow_id, tenant_id)
    return WorkflowDetailResponse.model_validate(workflow)


@router.put("/{workflow_id}", response_model=WorkflowDetailResponse)
@limit_writes
async def update_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowUpdateRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[
        WorkflowDefinitionService, Depends(get_workflow_definition_service_for_write)
    ],
):
    """Partial update; steps, when sent, replace all existing steps."""
    workflow = await service.update_workflow(
        workflow_id,
        tenant_id,
        WorkflowChanges(
            name=body.name,
            description=body.description,
            trigger_type=body.trigger_type,
            trigger_config=body.trigger_config,
            status=body.status,
            steps=(
                tuple(s.to_definition() for s in body.steps)
                if body.steps is not None
                else None
            ),
        ),
    )
    return WorkflowDetailResponse.model_validate(workflow)


@router.patch("/{workflow_id}/status", response_model=WorkflowDetailResponse)
@limit_writes
async def set_workflow_status(
    request: Request,
    workflow_id: str,
    body: WorkflowStatusUpdate,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[
        WorkflowDefinitionService, Depends(get_workflow_definition_service_for_write)
    ],
):
    workflow = await service.set_status(workflow_id, tenant_id, body.status)
    return WorkflowDetailResponse.model_validate(workflow)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[
        WorkflowDefinitionService, Depends(get_workflow_definition_service_for_write)
    ],
):
    """Delete a workflow and its steps. Run history is kept."""
    await service.delete_workflow(workflow_id, tenant_id)
    return Response(status_code=204)


@router.post("/{workflow_id}/execute", response_model=ManualRunResponse, status_code=202)
@limit_manual_execute
async def execute_workflow(
    request: Request,
    workflow_id: str,
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    automation: Annotated[IWorkflowAutomation, Depends(get_workflow_automation)],
    body: ManualRunRequest | None = None,
):
    """Start a manual run and return its id; steps run after the response is sent.

    The workflow runs regardless of its status or trigger conditions.
    """
    trigger_data = (
        body.trigger_data
        if body is not None and body.trigger_data is not None
        else {"manual": True}
    )
    prepared = await automation.start_manual_run(
        workflow_id, trigger_data, tenant_id, current_user.id
    )
    background_tasks.add_task(automation.finish_manual_run, prepared)
    return ManualRunResponse(run_id=prepared.run_id)


@router.get("/{workflow_id}/runs", response_model=list[WorkflowRunResponse])
async def list_workflow_runs(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[WorkflowDefinitionService, Depends(get_workflow_definition_service)],
    run_repo: Annotated[IWorkflowRunRepository, Depends(get_run_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
):
    """Run history for a workflow, newest first. 404 for unknown or foreign workflows."""
    await service.get_workflow(workflow_id, tenant_id)
    runs = await run_repo.list_by_workflow(workflow_id, tenant_id, skip=skip, limit=limit)
    return [WorkflowRunResponse.model_validate(r) for r in runs]
