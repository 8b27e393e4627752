"""Workflow engine use cases: execute, dispatch, dedup, invoice sweep."""

from agencyflow.application.use_cases.workflows.check_triggers import TriggerDispatcher
from agencyflow.application.use_cases.workflows.execute_workflow import WorkflowExecutor
from agencyflow.application.use_cases.workflows.idempotency import IdempotencyGuard
from agencyflow.application.use_cases.workflows.invoice_overdue_sweep import (
    InvoiceOverdueSweep,
    build_overdue_payload,
)

__all__ = [
    "IdempotencyGuard",
    "InvoiceOverdueSweep",
    "TriggerDispatcher",
    "WorkflowExecutor",
    "build_overdue_payload",
]
