"""API v1 router aggregation."""

from fastapi import APIRouter

from agencyflow.api.v1.endpoints import cron, health, workflows

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
