"""Shared enumerations for the agencyflow service.

Cross-cutting enums used by application and infrastructure (workflow
lifecycle, run and step bookkeeping). Domain vocabularies (trigger types,
step types, condition operators) live in agencyflow.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowStatus(_ValuesMixin, str, Enum):
    """Workflow definition status. Only ACTIVE workflows are dispatched."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


class RunStatus(_ValuesMixin, str, Enum):
    """Workflow run lifecycle status. RUNNING is the only non-terminal value."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PARTIAL = "partial"


class StepExecutionStatus(_ValuesMixin, str, Enum):
    """Outcome recorded for a single step of a run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class InvoiceStatus(_ValuesMixin, str, Enum):
    """Invoice status as owned by billing (read by the overdue sweep)."""

    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    PARTIALLY_PAID = "partially_paid"
    OVERDUE = "overdue"
    PAID = "paid"
    CANCELLED = "cancelled"


# Invoices in these statuses are still collectable and can become overdue.
OVERDUE_CANDIDATE_STATUSES: tuple[InvoiceStatus, ...] = (
    InvoiceStatus.SENT,
    InvoiceStatus.VIEWED,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
)

SYSTEM_USER_ID = "system"
