"""ORM models. Importing this package registers every table on Base.metadata."""

from agencyflow.infrastructure.persistence.models.invoice import Invoice
from agencyflow.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowRun,
    WorkflowStep,
    WorkflowStepExecution,
)

__all__ = [
    "Invoice",
    "Workflow",
    "WorkflowRun",
    "WorkflowStep",
    "WorkflowStepExecution",
]
