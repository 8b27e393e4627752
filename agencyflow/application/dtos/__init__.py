"""Data transfer objects for the application layer."""

from agencyflow.application.dtos.invoice import InvoiceResult
from agencyflow.application.dtos.step import (
    WORKFLOW_DEPTH_KEY,
    StepContext,
    StepResult,
    trigger_depth,
)
from agencyflow.application.dtos.workflow import (
    PreparedRun,
    StepDefinition,
    StepExecutionRecord,
    StepExecutionResult,
    SweepResult,
    WorkflowChanges,
    WorkflowDefinition,
    WorkflowResult,
    WorkflowRunResult,
    WorkflowStepResult,
)
from agencyflow.application.dtos.workflow_templates import (
    WORKFLOW_TEMPLATES,
    TemplateStep,
    WorkflowTemplate,
    get_template,
    list_templates,
)

__all__ = [
    "WORKFLOW_DEPTH_KEY",
    "WORKFLOW_TEMPLATES",
    "InvoiceResult",
    "PreparedRun",
    "StepContext",
    "StepDefinition",
    "StepExecutionRecord",
    "StepExecutionResult",
    "StepResult",
    "SweepResult",
    "TemplateStep",
    "WorkflowChanges",
    "WorkflowDefinition",
    "WorkflowResult",
    "WorkflowRunResult",
    "WorkflowStepResult",
    "WorkflowTemplate",
    "get_template",
    "list_templates",
    "trigger_depth",
]
