"""Health check endpoints: liveness, and readiness (database reachable)."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from agencyflow.core.config import get_settings
from agencyflow.domain.exceptions import SqlNotConfiguredException
from agencyflow.infrastructure.persistence.database import get_session_factory
from agencyflow.schemas.health import HealthResponse, ReadinessErrorResponse
from agencyflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok for liveness probes."""
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check() -> HealthResponse | JSONResponse:
    """Return 200 when a SELECT 1 succeeds; 503 otherwise."""
    try:
        factory = get_session_factory()
        async with factory() as session:
            await session.execute(text("SELECT 1"))
    except (SqlNotConfiguredException, SQLAlchemyError, OSError) as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="Database unavailable").model_dump(),
        )
    return HealthResponse(version=get_settings().app_version)
