"""
Cellar AI — FastAPI Application
================================
Application factory with lifecycle management, middleware pipeline and
error rendering.

Usage:
    uvicorn cellarai.main:app --host 0.0.0.0 --port 5001
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cellarai.api.health import router as health_router
from cellarai.api.routes import label_router, pairing_router, proxy_router
from cellarai.core.config import get_settings
from cellarai.core.exceptions import CellarAIError
from cellarai.core.logging import configure_logging, get_logger
from cellarai.core.middleware import CorrelationMiddleware

logger = get_logger("cellarai.main")


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifecycle.

    Startup: configure logging, open the shared upstream HTTP client.
    Shutdown: close the client.
    """
    configure_logging()
    settings = get_settings()
    logger.info("app.starting", environment=settings.environment.value)

    application.state.http_client = httpx.AsyncClient(
        timeout=settings.upstream_timeout_seconds
    )
    logger.info("app.started")
    yield

    logger.info("app.stopping")
    await application.state.http_client.aclose()
    logger.info("app.stopped")


# ── Error rendering ─────────────────────────────────────────────────────────


async def _cellar_error_handler(request: Request, exc: CellarAIError) -> JSONResponse:
    logger.warning(
        "request.rejected",
        path=request.url.path,
        error_code=exc.error_code,
        status=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    headers = getattr(exc, "headers", None)
    message = exc.detail
    if exc.status_code == 405:
        allowed = sorted(
            method.strip()
            for method in (headers or {}).get("Allow", "").split(",")
            if method.strip()
        )
        message = "Method Not Allowed."
        if allowed:
            message += f" Use {' or '.join(allowed)}."
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=headers,
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400, content={"error": f"Invalid request: {details}"}
    )


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    application = FastAPI(
        title="Cellar AI",
        description="Generative-language proxy for the wine cellar app",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────
    application.add_middleware(CorrelationMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "GET"],
        allow_headers=["*"],
        expose_headers=[
            "x-model-used",
            "x-model-fallback",
            settings.correlation_id_header,
        ],
    )

    # ── Error handlers ───────────────────────────────────────────────
    application.add_exception_handler(CellarAIError, _cellar_error_handler)
    application.add_exception_handler(StarletteHTTPException, _http_error_handler)
    application.add_exception_handler(
        RequestValidationError, _validation_error_handler
    )

    # ── Routers ──────────────────────────────────────────────────────
    application.include_router(health_router)
    application.include_router(pairing_router)
    application.include_router(label_router)
    application.include_router(proxy_router)

    return application


# Module-level instance for ``uvicorn cellarai.main:app``
app = create_app()
