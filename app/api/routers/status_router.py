"""
app/api/routers/status_router.py

Liveness endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.config import get_api_settings
from app.schemas.use_cases import StatusResponse

router = APIRouter(tags=["status"])


@router.get("/health")
def healthcheck() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/api/status", response_model=StatusResponse)
def api_status(request: Request) -> StatusResponse:
    """
    Echo request details so deployments can be smoke-tested.
    """

    return StatusResponse(
        status="API is working!",
        method=request.method,
        url=str(request.url.path),
        timestamp=datetime.now(timezone.utc).isoformat(),
        env=get_api_settings().environment,
    )
