"""FastAPI dependencies (composition root). Routes import from here only."""

from agencyflow.api.v1.dependencies.auth import (
    CurrentUser,
    get_current_user,
    get_current_user_optional,
    get_tenant_id,
)
from agencyflow.api.v1.dependencies.cron import verify_cron_secret
from agencyflow.api.v1.dependencies.workflow import (
    get_feature_gate,
    get_run_repo,
    get_step_registry,
    get_workflow_automation,
    get_workflow_definition_service,
    get_workflow_definition_service_for_write,
    get_workflow_repo,
    get_workflow_repo_for_write,
)

__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_current_user_optional",
    "get_feature_gate",
    "get_run_repo",
    "get_step_registry",
    "get_tenant_id",
    "get_workflow_automation",
    "get_workflow_definition_service",
    "get_workflow_definition_service_for_write",
    "get_workflow_repo",
    "get_workflow_repo_for_write",
    "verify_cron_secret",
]
