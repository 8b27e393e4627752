"""Invoice ORM model (billing-owned table; the overdue sweep reads it and sets status)."""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from agencyflow.infrastructure.persistence.database import Base
from agencyflow.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    status_check,
)
from agencyflow.shared.enums import InvoiceStatus


class Invoice(MultiTenantModel, Base):
    """Client invoice. Table: invoice."""

    __tablename__ = "invoice"

    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False)
    client_id: Mapped[str | None] = mapped_column(String, nullable=True)
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=InvoiceStatus.DRAFT.value
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        Index("ix_invoice_status_due_date", "status", "due_date"),
        CheckConstraint(
            status_check("status", InvoiceStatus.values()),
            name="invoice_status_check",
        ),
    )
