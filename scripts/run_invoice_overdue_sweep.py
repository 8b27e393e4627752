"""Run the invoice overdue sweep once (alternative to GET /api/v1/cron/invoice-overdue).

Usage:
    python -m scripts.run_invoice_overdue_sweep
Requires DATABASE_URL and SECRET_KEY in the environment or .env.
"""

import asyncio
import sys

import agencyflow.infrastructure.persistence.database as database
from agencyflow.core.config import get_settings
from agencyflow.infrastructure.services.automation import WorkflowAutomation
from agencyflow.infrastructure.services.step_handlers import build_default_registry
from agencyflow.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Sweep all tenants and print the counters."""
    settings = get_settings()
    setup_logging()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    registry = build_default_registry(
        webhook_timeout_seconds=settings.webhook_timeout_seconds,
        wait_delay_max_seconds=settings.wait_delay_max_seconds,
    )
    automation = WorkflowAutomation(database.AsyncSessionLocal, registry, settings)
    try:
        result = await automation.run_invoice_overdue_sweep()
    finally:
        if database.engine is not None:
            await database.engine.dispose()

    print(
        f"Done. total_overdue={result.total_overdue} triggered={result.triggered} "
        f"skipped_already_triggered={result.skipped_already_triggered}"
    )


if __name__ == "__main__":
    asyncio.run(main())
