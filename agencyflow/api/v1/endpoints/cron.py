"""Scheduler-invoked routes (bearer CRON_SECRET)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from agencyflow.api.v1.dependencies import get_workflow_automation, verify_cron_secret
from agencyflow.application.interfaces.services import IWorkflowAutomation
from agencyflow.core.limiter import limit_cron
from agencyflow.schemas.cron import SweepResponse

router = APIRouter()


@router.get(
    "/invoice-overdue",
    response_model=SweepResponse,
    dependencies=[Depends(verify_cron_secret)],
)
@limit_cron
async def invoice_overdue(
    request: Request,
    automation: Annotated[IWorkflowAutomation, Depends(get_workflow_automation)],
) -> SweepResponse:
    """Mark past-due invoices overdue and fire invoice_overdue (once per invoice per day)."""
    result = await automation.run_invoice_overdue_sweep()
    return SweepResponse(
        triggered=result.triggered,
        total_overdue=result.total_overdue,
        skipped_already_triggered=result.skipped_already_triggered,
    )
