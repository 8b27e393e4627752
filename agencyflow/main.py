"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers. Settings
are resolved inside create_app() so tests can set the environment first.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from agencyflow.api.v1 import api_router
from agencyflow.core.config import get_settings
from agencyflow.core.exception_handlers import register_exception_handlers
from agencyflow.core.lifespan import create_lifespan
from agencyflow.core.limiter import limiter
from agencyflow.middleware import RequestIDMiddleware


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Last added = outermost: request id wraps CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")

    if settings.telemetry_enabled:
        from agencyflow.shared.telemetry.telemetry import WorkflowTelemetry

        app.state.telemetry = WorkflowTelemetry.from_settings(settings)
        app.state.telemetry.instrument_app(app)
    return app


app = create_app()
