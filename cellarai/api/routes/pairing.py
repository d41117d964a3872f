"""
Cellar AI — Pairing Routes
===========================
Food-pairing endpoints backing the cellar views.

Endpoints:
    POST   /api/pairing/food   — Food suggestions for one wine
    POST   /api/pairing/wine   — Best wines from the cellar for a dish
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import Field

from cellarai.api.deps import get_proxy_service
from cellarai.api.responses import render_result
from cellarai.models.wine import ProviderChoice, WineSummary
from cellarai.services.prompts import food_pairing_request, wine_for_food_request
from cellarai.services.proxy_service import ProxyService

router = APIRouter(prefix="/api/pairing", tags=["pairing"])


# ── Request Schemas ─────────────────────────────────────────────────────────


class FoodPairingRequest(ProviderChoice):
    """Request body for wine → food suggestions."""
    wine: WineSummary


class WineForFoodRequest(ProviderChoice):
    """Request body for food → wine suggestions."""
    food: str = Field(default="", max_length=500)
    wines: list[WineSummary] = Field(default_factory=list, max_length=500)


# ── Endpoints ───────────────────────────────────────────────────────────────


@router.post("/food")
async def suggest_food(
    body: FoodPairingRequest,
    service: ProxyService = Depends(get_proxy_service),
) -> JSONResponse:
    """Suggest 3-5 dishes for the selected wine."""
    engine = service.engine_for(body.provider)
    result = await engine.run(food_pairing_request(body.wine, body.model))
    return render_result(result)


@router.post("/wine")
async def suggest_wine(
    body: WineForFoodRequest,
    service: ProxyService = Depends(get_proxy_service),
) -> JSONResponse:
    """Pick the best match (plus up to two alternatives) from the cellar."""
    engine = service.engine_for(body.provider)
    result = await engine.run(
        wine_for_food_request(body.food, body.wines, body.model)
    )
    return render_result(result)
