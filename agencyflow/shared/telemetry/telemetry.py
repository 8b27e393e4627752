"""OpenTelemetry tracing for the API and the workflow engine.

create_app() builds a WorkflowTelemetry from Settings and instruments the
FastAPI app before it starts serving; the lifespan instruments the SQL
engine and logging once the engine exists, and shuts the provider down.
Workflow runs, trigger dispatch and the overdue sweep add their own spans
through shared.telemetry.tracing.traced.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from agencyflow.core.config import Settings

logger = logging.getLogger(__name__)

# Liveness and readiness probes are not traced.
EXCLUDED_URLS = "/api/v1/health,/api/v1/health/ready"


def _build_exporter(kind: str, otlp_endpoint: str | None) -> SpanExporter | None:
    if kind == "none":
        return None
    if kind == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        logger.warning("TELEMETRY_EXPORTER=otlp without TELEMETRY_OTLP_ENDPOINT; using console")
    elif kind != "console":
        logger.warning("Unknown telemetry exporter %r; using console", kind)
    return ConsoleSpanExporter()


class WorkflowTelemetry:
    """Tracer provider plus the instrumentations agencyflow enables."""

    def __init__(self, provider: TracerProvider) -> None:
        self.provider = provider
        self._sqlalchemy_instrumented = False

    @classmethod
    def from_settings(cls, settings: Settings) -> WorkflowTelemetry:
        """Create the provider and register it globally."""
        resource = Resource(
            attributes={
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.telemetry_environment,
            }
        )
        provider = TracerProvider(
            resource=resource,
            sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_rate)),
        )
        exporter = _build_exporter(
            settings.telemetry_exporter, settings.telemetry_otlp_endpoint
        )
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        logger.info(
            "OpenTelemetry initialized: service=%s version=%s exporter=%s sample_rate=%s",
            settings.app_name,
            settings.app_version,
            settings.telemetry_exporter,
            settings.telemetry_sample_rate,
        )
        return cls(provider)

    def instrument_app(self, app: FastAPI) -> None:
        """Must run before the app starts; the instrumentation adds middleware."""
        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=self.provider, excluded_urls=EXCLUDED_URLS
        )

    def instrument_engine(self, engine: AsyncEngine) -> None:
        if self._sqlalchemy_instrumented:
            return
        SQLAlchemyInstrumentor().instrument(
            engine=engine.sync_engine, tracer_provider=self.provider
        )
        self._sqlalchemy_instrumented = True

    def instrument_logging(self) -> None:
        """Add trace_id/span_id to log records."""
        LoggingInstrumentor().instrument(tracer_provider=self.provider)

    def shutdown(self) -> None:
        """Flush pending spans. Errors are logged; shutdown continues."""
        try:
            self.provider.shutdown()
        except Exception:
            logger.exception("Telemetry shutdown failed")
