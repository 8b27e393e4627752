"""Invoice repository for the overdue sweep (implements IInvoiceRepository).

The sweep is a system job, so these queries span all tenants; each
returned invoice carries its tenant_id for per-tenant dispatch.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agencyflow.application.dtos.invoice import InvoiceResult
from agencyflow.infrastructure.persistence.models.invoice import Invoice
from agencyflow.infrastructure.persistence.repositories.base import BaseRepository
from agencyflow.shared.enums import OVERDUE_CANDIDATE_STATUSES, InvoiceStatus


def _to_result(invoice: Invoice) -> InvoiceResult:
    return InvoiceResult(
        id=invoice.id,
        tenant_id=invoice.tenant_id,
        invoice_number=invoice.invoice_number,
        client_id=invoice.client_id,
        client_name=invoice.client_name,
        total=invoice.total,
        currency=invoice.currency,
        status=invoice.status,
        due_date=invoice.due_date,
    )


class InvoiceRepository(BaseRepository[Invoice]):
    """Invoice reads and the overdue status transition."""

    def __init__(self, db: AsyncSession, *, autocommit: bool = False) -> None:
        super().__init__(db, Invoice, autocommit=autocommit)

    async def list_overdue_candidates(self, before: date) -> list[InvoiceResult]:
        result = await self.db.execute(
            select(Invoice)
            .where(
                Invoice.status.in_([s.value for s in OVERDUE_CANDIDATE_STATUSES]),
                Invoice.due_date < before,
            )
            .order_by(Invoice.tenant_id, Invoice.due_date, Invoice.id)
        )
        return [_to_result(i) for i in result.scalars().all()]

    async def mark_overdue(self, invoice_ids: Sequence[str]) -> int:
        """Set status=overdue on still-collectable invoices; return rows changed."""
        if not invoice_ids:
            return 0
        result = await self.db.execute(
            update(Invoice)
            .where(
                Invoice.id.in_(list(invoice_ids)),
                Invoice.status.in_([s.value for s in OVERDUE_CANDIDATE_STATUSES]),
                Invoice.status != InvoiceStatus.OVERDUE.value,
            )
            .values(status=InvoiceStatus.OVERDUE.value, updated_at=func.now())
        )
        await self._save()
        return result.rowcount or 0
