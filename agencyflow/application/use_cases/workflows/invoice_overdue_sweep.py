"""Daily sweep: mark past-due invoices overdue and emit invoice_overdue events."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from datetime import date
from typing import Any

from agencyflow.application.dtos.invoice import InvoiceResult
from agencyflow.application.dtos.workflow import SweepResult
from agencyflow.application.interfaces.repositories import IInvoiceRepository
from agencyflow.application.interfaces.services import ITriggerDispatcher
from agencyflow.application.use_cases.workflows.idempotency import IdempotencyGuard
from agencyflow.domain.enums import TriggerType
from agencyflow.shared.enums import SYSTEM_USER_ID, InvoiceStatus
from agencyflow.shared.telemetry.logging import get_logger
from agencyflow.shared.telemetry.tracing import traced
from agencyflow.shared.utils.datetime import local_today

logger = get_logger(__name__)

INVOICE_ENTITY_TYPE = "invoice"


def build_overdue_payload(invoice: InvoiceResult, today: date) -> dict[str, Any]:
    """Flat event payload for invoice_overdue (JSON-safe values only)."""
    return {
        "entity_id": invoice.id,
        "entity_type": INVOICE_ENTITY_TYPE,
        "entity_name": invoice.invoice_number,
        "invoice_number": invoice.invoice_number,
        "invoice_amount": float(invoice.total),
        "currency": invoice.currency,
        "client_id": invoice.client_id,
        "client_name": invoice.client_name,
        "due_date": invoice.due_date.isoformat(),
        "days_overdue": (today - invoice.due_date).days,
    }


class InvoiceOverdueSweep:
    """Re-derives invoice_overdue events once per day for every past-due invoice.

    Invoices still in a collectable status are marked overdue. Each one
    triggers at most once per calendar day per the idempotency guard.
    """

    def __init__(
        self,
        invoice_repo: IInvoiceRepository,
        guard: IdempotencyGuard,
        dispatcher: ITriggerDispatcher,
        *,
        today: Callable[[], date] = local_today,
    ) -> None:
        self._invoice_repo = invoice_repo
        self._guard = guard
        self._dispatcher = dispatcher
        self._today = today

    @traced("workflow.invoice_overdue_sweep")
    async def run(self) -> SweepResult:
        today = self._today()
        invoices = await self._invoice_repo.list_overdue_candidates(before=today)
        newly_overdue = [i.id for i in invoices if i.status != InvoiceStatus.OVERDUE.value]
        if newly_overdue:
            marked = await self._invoice_repo.mark_overdue(newly_overdue)
            logger.info("Marked %d invoice(s) overdue", marked)

        by_tenant: dict[str, list[InvoiceResult]] = defaultdict(list)
        for invoice in invoices:
            by_tenant[invoice.tenant_id].append(invoice)

        triggered = 0
        skipped = 0
        for tenant_id, tenant_invoices in by_tenant.items():
            for invoice in tenant_invoices:
                if await self._guard.already_triggered(
                    tenant_id=tenant_id,
                    trigger_type=TriggerType.INVOICE_OVERDUE.value,
                    entity_type=INVOICE_ENTITY_TYPE,
                    entity_id=invoice.id,
                ):
                    skipped += 1
                    continue
                await self._dispatcher.check_triggers(
                    trigger_type=TriggerType.INVOICE_OVERDUE.value,
                    event_data=build_overdue_payload(invoice, today),
                    tenant_id=tenant_id,
                    user_id=SYSTEM_USER_ID,
                )
                triggered += 1

        result = SweepResult(
            triggered=triggered,
            total_overdue=len(invoices),
            skipped_already_triggered=skipped,
        )
        logger.info(
            "Invoice overdue sweep done: total_overdue=%d triggered=%d skipped=%d",
            result.total_overdue,
            result.triggered,
            result.skipped_already_triggered,
        )
        return result
