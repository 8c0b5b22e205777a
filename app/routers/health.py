# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides liveness, readiness and version endpoints for monitoring,
# load balancers and the web shell.
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import SettingsDep
from core.constants import APP_NAME

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Liveness response."""
    ok: bool
    app: str


class ReadinessResponse(BaseModel):
    """Readiness response."""
    ready: bool


class VersionResponse(BaseModel):
    """Deployed version."""
    version: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/healthz", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns {"ok": true, "app": "Kori"} while the process is serving.
    """
    return HealthResponse(ok=True, app=APP_NAME)


@router.get("/readyz", response_model=ReadinessResponse)
async def readiness_check():
    """Readiness check endpoint."""
    return ReadinessResponse(ready=True)


@router.get("/version", response_model=VersionResponse)
async def version(settings: SettingsDep):
    """Return the configured APP_VERSION."""
    return VersionResponse(version=settings.APP_VERSION)
