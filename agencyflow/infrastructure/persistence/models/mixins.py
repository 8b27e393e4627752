"""SQLAlchemy mixins shared by the workflow and invoice models.

Tenants and users live in other services' tables, so tenant_id and user
references are plain indexed strings without foreign keys.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from agencyflow.shared.utils.ids import generate_cuid


class CuidMixin:
    """CUID primary key."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """Owning tenant id (indexed, not a foreign key)."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class TimestampMixin:
    """created_at / updated_at with server defaults (timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class MultiTenantModel(CuidMixin, TenantMixin, TimestampMixin):
    """CUID + tenant_id + timestamps."""

    __abstract__ = True


class TenantScopedRow(CuidMixin, TenantMixin):
    """CUID + tenant_id for append-only rows that carry their own timestamps."""

    __abstract__ = True


def status_check(column: str, values: list[str]) -> str:
    """Return a CHECK constraint expression restricting column to values."""
    quoted = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    return f"{column} IN ({quoted})"
