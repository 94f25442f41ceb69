"""Top-level API router."""

from fastapi import APIRouter

from crewboard.api.routes.archives import router as archives_router
from crewboard.api.routes.assignments import router as assignments_router
from crewboard.api.routes.dashboard import router as dashboard_router
from crewboard.api.routes.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(assignments_router)
api_router.include_router(dashboard_router)
api_router.include_router(archives_router)
