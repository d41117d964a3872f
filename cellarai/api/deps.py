"""
Cellar AI — API Dependencies
=============================
Shared FastAPI dependency injectors for the API layer.
"""

from __future__ import annotations

import httpx
from fastapi import Depends, Request

from cellarai.services.proxy_service import ProxyService


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Return the application's shared upstream HTTP client.

    Created in the lifespan handler; tests override this dependency with a
    client on ``httpx.MockTransport``.
    """
    return request.app.state.http_client


def get_proxy_service(
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ProxyService:
    return ProxyService(client)
