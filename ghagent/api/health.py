"""
Health check endpoints.

Provides application health status and readiness checks.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter()

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    version: str
    checks: Dict[str, Any]


@router.get(
    "/",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=VERSION,
        checks={"api": "ok"},
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check",
    description="Ready once the GitHub service has started and cached its installations",
)
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Returns:
        200 with status "ready", or 503 with status "not_ready"
    """
    service = getattr(request.app.state, "github_service", None)

    checks: Dict[str, Any] = {"github_service": "ok" if service is not None else "not_started"}
    if service is not None:
        checks["installations"] = len(service.clients)

    ready = service is not None
    body = HealthResponse(
        status="ready" if ready else "not_ready",
        timestamp=datetime.now(timezone.utc),
        version=VERSION,
        checks=checks,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )


@router.get(
    "/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check():
    """Simple probe for container orchestration."""
    return {"status": "alive"}
