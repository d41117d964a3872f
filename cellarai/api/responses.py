"""
Cellar AI — Response Rendering
===============================
Maps ``ProxyResult`` values onto HTTP responses.

Success responses carry ``x-model-used`` and, after a fallback,
``x-model-fallback``.  Failures mirror the terminal upstream status.
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from cellarai.proxy.models import ProxyFailure, ProxyResult, ProxySuccess

MODEL_USED_HEADER = "x-model-used"
MODEL_FALLBACK_HEADER = "x-model-fallback"


def model_headers(result: ProxySuccess) -> dict[str, str]:
    headers = {MODEL_USED_HEADER: result.model_used}
    if result.fallback_from:
        headers[MODEL_FALLBACK_HEADER] = result.fallback_from
    return headers


def failure_response(result: ProxyFailure) -> JSONResponse:
    return JSONResponse(status_code=result.http_status, content=result.to_payload())


def render_result(
    result: ProxyResult, content: dict[str, Any] | None = None, *, raw: bool = False
) -> JSONResponse:
    """
    Render a proxy result.

    ``content`` overrides the default ``{"suggestion": ...}`` success body;
    ``raw`` returns the upstream success body verbatim instead.
    """
    if isinstance(result, ProxyFailure):
        return failure_response(result)

    if raw:
        body = result.body
    elif content is not None:
        body = content
    else:
        body = {"suggestion": result.suggestion}
    return JSONResponse(status_code=200, content=body, headers=model_headers(result))
