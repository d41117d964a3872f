"""
Cellar AI — Tracing Tests
==========================
Correlation ID capture, header injection and span timing.
"""

from __future__ import annotations

import time
from unittest.mock import patch

from cellarai.core.tracing import Span, TracingContext, create_span


def test_tracing_context_from_context_var():
    """TracingContext.current() reads from the correlation_id_ctx."""
    with patch("cellarai.core.tracing.correlation_id_ctx") as mock_ctx:
        mock_ctx.get.return_value = "test-correlation-123"
        ctx = TracingContext.current()

    assert ctx.correlation_id == "test-correlation-123"


def test_inject_headers_with_correlation_id():
    headers = TracingContext(correlation_id="abc").inject_headers({"Content-Type": "application/json"})
    assert headers == {"Content-Type": "application/json", "X-Correlation-ID": "abc"}


def test_inject_headers_without_correlation_id():
    assert TracingContext().inject_headers({}) == {}


def test_span_open_has_no_duration():
    assert Span(name="gemini.generate").duration_ms is None


def test_create_span_closes_and_keeps_metadata():
    with create_span("gemini.generate", model="gemini-2.5-flash") as span:
        time.sleep(0.001)

    assert span.duration_ms is not None
    assert span.duration_ms >= 0
    assert span.metadata == {"model": "gemini-2.5-flash"}


def test_create_span_closes_on_error():
    try:
        with create_span("openai.generate") as span:
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert span.end_time is not None
