"""Root API router with health endpoints and module mounting."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from orgaccess.config import settings
from orgaccess.modules import access, users


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str


# Create root API router
api_router = APIRouter()

# Health check endpoints (no /api/v1 prefix)
health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health/live",
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def liveness() -> HealthResponse:
    """Liveness probe endpoint."""
    return HealthResponse(status="alive")


@health_router.get(
    "/info",
    summary="Application info",
)
async def info() -> dict[str, Any]:
    """Application info endpoint."""
    return {
        "app": settings.app_name,
        "environment": settings.environment,
    }


# Versioned API router
v1_router = APIRouter(prefix="/api/v1")

for module in (access, users):
    module.register_routes()
    v1_router.include_router(module.router)

api_router.include_router(health_router)
api_router.include_router(v1_router)
