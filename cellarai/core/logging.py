"""
Cellar AI — Structured Logging
===============================
JSON-structured logging for the proxy.

Every entry carries the app name, the request correlation ID and whatever
the fallback engine has bound (``provider``, ``model``).  Provider API keys
are masked before rendering.

Usage:
    from cellarai.core.logging import get_logger
    logger = get_logger(__name__)
    logger.info("proxy.attempt.done", status=200, duration_ms=412.5)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

from cellarai.core.config import get_settings

REDACTED = "***"


def _add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application-level context to every log entry."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment.value)
    return event_dict


def _add_correlation_id(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Inject correlation_id from context variable if not already present.

    The correlation ID is set by the CorrelationMiddleware on each request.
    """
    from cellarai.core.middleware import correlation_id_ctx

    cid = correlation_id_ctx.get(None)
    if cid is not None:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def _redact_api_keys(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Mask provider API keys in string values.

    Gemini authenticates with a ``key`` query parameter, so upstream URLs
    and httpx error messages can carry the key verbatim.
    """
    settings = get_settings()
    secrets = [
        key.get_secret_value()
        for key in (settings.gemini_api_key, settings.openai_api_key)
        if key is not None and key.get_secret_value()
    ]
    if not secrets:
        return event_dict
    for name, value in event_dict.items():
        if isinstance(value, str):
            for secret in secrets:
                value = value.replace(secret, REDACTED)
            event_dict[name] = value
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog + stdlib logging.

    Must be called once at application startup (before any log emission).
    """
    settings = get_settings()

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_context,
        _add_correlation_id,
        _redact_api_keys,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)

    # Quiet noisy libraries; the API key travels in Gemini query strings
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger bound to the given module name."""
    return structlog.get_logger(name)
