"""Application lifespan: startup and shutdown wiring.

Startup builds the shared webhook HTTP client, the step handler registry
and the WorkflowAutomation facade (when a database is configured), then
engine and logging instrumentation when create_app() enabled telemetry.
Shutdown reverses it and disposes the SQL engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from agencyflow.core.config import get_settings
from agencyflow.domain.exceptions import SqlNotConfiguredException
from agencyflow.infrastructure.services.automation import WorkflowAutomation
from agencyflow.infrastructure.services.step_handlers import build_default_registry
from agencyflow.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.http_client = httpx.AsyncClient(timeout=settings.webhook_timeout_seconds)
    app.state.step_registry = build_default_registry(
        http_client=app.state.http_client,
        webhook_timeout_seconds=settings.webhook_timeout_seconds,
        wait_delay_max_seconds=settings.wait_delay_max_seconds,
    )

    from agencyflow.infrastructure.persistence import database

    try:
        app.state.workflow_automation = WorkflowAutomation(
            database.get_session_factory(), app.state.step_registry, settings
        )
    except SqlNotConfiguredException:
        app.state.workflow_automation = None
        logger.warning("Database not configured; workflow automation disabled")

    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is not None:
        if database.engine is not None:
            telemetry.instrument_engine(database.engine)
        telemetry.instrument_logging()

    yield

    # ---- Shutdown ----
    await app.state.http_client.aclose()
    app.state.http_client = None
    logger.info("Webhook HTTP client closed")

    if telemetry is not None:
        telemetry.shutdown()
        logger.info("Telemetry shutdown complete")

    if database.engine is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
