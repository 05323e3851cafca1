"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from modules.users.interfaces import IUserStore
from shared.config import get_settings
from shared.exceptions import UpstreamUnavailableError
from shared.timeouts import call_with_timeout

from ..dependencies import get_user_store

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    user_store: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(store: IUserStore = Depends(get_user_store)):
    """
    Readiness check endpoint.

    Returns 503 when the user store cannot be reached.
    """
    try:
        reachable = await call_with_timeout(
            store.ping(), get_settings().store_timeout_seconds, "user-store"
        )
    except UpstreamUnavailableError:
        reachable = False

    if not reachable:
        body = ReadinessResponse(status="unavailable", user_store="unreachable")
        return JSONResponse(status_code=503, content=body.model_dump())
    return ReadinessResponse(status="ready", user_store="connected")
