"""
Finalizer: Health Check Route
===============================

What:  Liveness endpoint for the demo server.
Why:   Load balancers and Docker probes need something cheap to poll; it is
       also the usual candidate for ACCESS_LOG_EXCLUDE_PATHS.
"""

import time

from fastapi import APIRouter
from pydantic import BaseModel, Field

from finalizer import __version__

router = APIRouter(tags=["Health"])

_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check payload returned by GET /health."""
    status: str = Field(description="Overall service status")
    version: str = Field(description="Package version")
    uptime_seconds: float = Field(description="Seconds since service started")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
