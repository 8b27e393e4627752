"""Cron endpoint schemas."""

from pydantic import BaseModel


class SweepResponse(BaseModel):
    """Counters from GET /cron/invoice-overdue."""

    triggered: int
    total_overdue: int
    skipped_already_triggered: int
