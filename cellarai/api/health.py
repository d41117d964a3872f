"""
Cellar AI — Health Endpoint
============================
Reports which upstream providers have credentials configured.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from cellarai.core.config import Provider, ProviderConfig

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    providers: dict[str, str]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns whether each upstream provider has an API key.",
)
async def health_check() -> HealthResponse:
    """
    Health endpoint.

    Each provider is 'configured' or 'missing_key'.  Overall status is
    'healthy' if at least one provider can be served.
    """
    providers = {
        provider.value: (
            "configured"
            if ProviderConfig.from_settings(provider).api_key
            else "missing_key"
        )
        for provider in Provider
    }
    overall = "healthy" if "configured" in providers.values() else "degraded"
    return HealthResponse(status=overall, providers=providers)
