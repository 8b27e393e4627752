"""DTOs for invoices read by the overdue sweep."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class InvoiceResult:
    """Billing invoice fields needed to build an invoice_overdue event."""

    id: str
    tenant_id: str
    invoice_number: str
    client_id: str | None
    client_name: str | None
    total: Decimal
    currency: str
    status: str
    due_date: date
