"""SQLAlchemy repositories returning application DTOs."""

from agencyflow.infrastructure.persistence.repositories.invoice_repo import (
    InvoiceRepository,
)
from agencyflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowRepository,
)
from agencyflow.infrastructure.persistence.repositories.workflow_run_repo import (
    WorkflowRunRepository,
)

__all__ = [
    "InvoiceRepository",
    "WorkflowRepository",
    "WorkflowRunRepository",
]
