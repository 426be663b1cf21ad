"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Reports whether SharePoint credentials are configured; it does not
    contact Azure AD or Graph.
    """
    settings = request.app.state.settings
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=request.app.version,
        services={
            "api": "up",
            "sharepoint": "unconfigured" if settings.missing_credentials() else "configured",
            "token_cache": "enabled" if request.app.state.token_cache is not None else "disabled",
        }
    )


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe for Kubernetes."""
    return {"status": "alive"}
