"""
Cellar AI — Request Tracing
============================
Correlation ID propagation and span timing for upstream calls.

Builds on ``CorrelationMiddleware`` and the ``correlation_id_ctx`` context
variable.  Each upstream generative-language call runs inside a span so
its latency lands in the structured logs next to the model it tried.

Usage:
    from cellarai.core.tracing import TracingContext, create_span

    ctx = TracingContext.current()
    with create_span("gemini.generate", model="gemini-2.5-flash") as span:
        headers = ctx.inject_headers({})
        # pass headers to outgoing HTTP call
    print(span.duration_ms)
"""

from __future__ import annotations

import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator

from cellarai.core.middleware import correlation_id_ctx


@dataclass
class Span:
    """A single timed span."""

    name: str
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    start_time: float = field(default_factory=time.monotonic)
    end_time: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float | None:
        """Duration in milliseconds, or None if still open."""
        if self.end_time is None:
            return None
        return round((self.end_time - self.start_time) * 1000, 2)

    def close(self) -> None:
        if self.end_time is None:
            self.end_time = time.monotonic()


@dataclass(frozen=True)
class TracingContext:
    """Correlation ID of the current request, as seen by outgoing calls."""

    correlation_id: str | None = None

    @classmethod
    def current(cls) -> TracingContext:
        """Create a TracingContext from the current request context."""
        return cls(correlation_id=correlation_id_ctx.get(None))

    def inject_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Add ``X-Correlation-ID`` to an outgoing request's headers."""
        if self.correlation_id:
            headers["X-Correlation-ID"] = self.correlation_id
        return headers


@contextmanager
def create_span(name: str, **metadata: Any) -> Generator[Span, None, None]:
    """
    Context manager that creates and auto-closes a timed span.

    Usage:
        with create_span("openai.generate", model="gpt-4o-mini") as span:
            ...
        print(span.duration_ms)
    """
    span = Span(name=name, metadata=metadata)
    try:
        yield span
    finally:
        span.close()
