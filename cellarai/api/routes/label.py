"""
Cellar AI — Label Scan Route
=============================
Transcribes the text on a wine-label photo so the add-wine form can be
pre-filled.

Endpoints:
    POST   /api/label/scan   — Image data URL in, label text out
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import Field

from cellarai.api.deps import get_proxy_service
from cellarai.api.responses import render_result
from cellarai.models.wine import ProviderChoice
from cellarai.proxy.models import ProxySuccess
from cellarai.services.prompts import label_scan_request
from cellarai.services.proxy_service import ProxyService

router = APIRouter(prefix="/api/label", tags=["label"])

NO_TEXT_DETECTED = "No text detected on label."


class LabelScanRequest(ProviderChoice):
    """Request body for a label scan."""
    image: str = Field(default="", description="data:image/...;base64,... URL")


@router.post("/scan")
async def scan_label(
    body: LabelScanRequest,
    service: ProxyService = Depends(get_proxy_service),
) -> JSONResponse:
    engine = service.engine_for(body.provider)
    result = await engine.run(label_scan_request(body.image, body.model))

    content = None
    if isinstance(result, ProxySuccess):
        text = result.suggestion.strip() if result.extracted else ""
        content = {"success": True, "fullText": text or NO_TEXT_DETECTED}
    return render_result(result, content)
