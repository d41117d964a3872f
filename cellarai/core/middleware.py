"""
Cellar AI — Correlation ID Middleware
======================================
Tags every HTTP request with a correlation ID.

A caller-supplied ``X-Correlation-ID`` is reused when it is a short token
of safe characters; anything else is replaced with a fresh UUID v4, since
the ID is forwarded to the upstream provider as a request header.  The ID
is echoed on the response, error responses included.

The request method and path are bound into the structlog context for the
duration of the request.
"""

from __future__ import annotations

import re
import uuid
from contextvars import ContextVar

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cellarai.core.config import get_settings

correlation_id_ctx: ContextVar[str | None] = ContextVar(
    "correlation_id", default=None
)

_CORRELATION_ID_RE = re.compile(r"[A-Za-z0-9._-]{1,128}")


def resolve_correlation_id(incoming: str | None) -> str:
    """Reuse ``incoming`` if it is a safe token, otherwise mint a UUID v4."""
    if incoming and _CORRELATION_ID_RE.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        header_name = get_settings().correlation_id_header
        cid = resolve_correlation_id(request.headers.get(header_name))

        token = correlation_id_ctx.set(cid)
        try:
            with structlog.contextvars.bound_contextvars(
                method=request.method, path=request.url.path
            ):
                response = await call_next(request)
            response.headers[header_name] = cid
            return response
        finally:
            correlation_id_ctx.reset(token)
