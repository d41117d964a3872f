"""
Cellar AI — API Routes Package
===============================
Aggregates the proxy, pairing and label route modules.
"""

from cellarai.api.routes.label import router as label_router
from cellarai.api.routes.pairing import router as pairing_router
from cellarai.api.routes.proxy import router as proxy_router

__all__ = [
    "label_router",
    "pairing_router",
    "proxy_router",
]
