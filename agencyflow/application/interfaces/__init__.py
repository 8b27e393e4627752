"""Ports implemented by infrastructure and consumed by use cases."""

from agencyflow.application.interfaces.repositories import (
    IInvoiceRepository,
    IWorkflowRepository,
    IWorkflowRunRepository,
)
from agencyflow.application.interfaces.services import (
    IFeatureGate,
    INotificationService,
    ITriggerDispatcher,
    IWorkflowAutomation,
)

__all__ = [
    "IFeatureGate",
    "IInvoiceRepository",
    "INotificationService",
    "ITriggerDispatcher",
    "IWorkflowAutomation",
    "IWorkflowRepository",
    "IWorkflowRunRepository",
]
