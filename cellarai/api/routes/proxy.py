"""
Cellar AI — Generative Proxy Route
===================================
Raw proxy endpoint used by the front-end's prompt and chat call sites.

Endpoints:
    POST   /api/{provider}            — Forward a prompt/messages/contents payload
    POST   /api/{provider}?raw=true   — Same, returning the upstream body verbatim
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from cellarai.api.deps import get_proxy_service
from cellarai.api.responses import render_result
from cellarai.core.exceptions import InvalidArgumentError
from cellarai.core.logging import get_logger
from cellarai.proxy.normalizer import build_request
from cellarai.services.proxy_service import ProxyService

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError:
        raise InvalidArgumentError("Request body must be valid JSON.") from None


@router.post("/{provider}")
async def proxy(
    provider: str,
    request: Request,
    raw: bool = False,
    service: ProxyService = Depends(get_proxy_service),
) -> JSONResponse:
    """
    Forward a prompt to the provider with model fallback.

    The API key is checked before the body is normalized, so a missing key
    is reported even for malformed requests.
    """
    engine = service.engine_for(provider)
    pairing_request = build_request(await _read_json(request))

    logger.info(
        "proxy.request",
        provider=engine.adapter.name.value,
        explicit_model=pairing_request.explicit_model,
        messages=len(pairing_request.messages),
    )
    result = await engine.run(pairing_request)
    return render_result(result, raw=raw)
