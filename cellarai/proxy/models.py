"""
Cellar AI — Proxy Domain Objects
=================================
Per-request value objects shared by the normalizer, the provider adapters
and the fallback engine.  Nothing here outlives a single request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union


# ── Enums ───────────────────────────────────────────────────────────────


class ErrorKind(StrEnum):
    """Classification of a failed proxy request."""

    EXHAUSTED_NOT_FOUND = "exhausted_not_found"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"


class FallbackState(StrEnum):
    """States of the candidate fallback protocol."""

    PENDING = "pending"
    TRYING = "trying"
    SUCCEEDED = "succeeded"
    EXHAUSTED_NOT_FOUND = "exhausted_not_found"
    FAILED_OTHER_STATUS = "failed_other_status"


# ── Request side ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InlineData:
    """A base64-encoded binary part (label photos)."""

    mime_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class ChatMessage:
    """One normalized conversation turn."""

    role: str
    content: str
    attachments: tuple[InlineData, ...] = ()


@dataclass(frozen=True)
class PairingRequest:
    """
    Canonical form of an inbound proxy request.

    ``passthrough`` holds the caller's opaque fields (generation config,
    safety settings, temperature, ...) forwarded verbatim upstream.
    """

    messages: tuple[ChatMessage, ...]
    explicit_model: str | None = None
    passthrough: dict[str, Any] = field(default_factory=dict)


# ── Upstream side ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class UpstreamAttempt:
    """Outcome of one upstream call for one candidate model."""

    model_tried: str
    http_status: int
    parsed_body: Any
    raw_body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.http_status < 300

    @property
    def not_found(self) -> bool:
        return self.http_status == 404


# ── Results ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProxySuccess:
    """The upstream produced a success status for ``model_used``."""

    suggestion: str
    model_used: str
    fallback_from: str | None = None
    attempted_models: tuple[str, ...] = ()
    body: Any = None
    extracted: bool = True


@dataclass(frozen=True)
class ProxyFailure:
    """Terminal failure of a proxy request."""

    error_kind: ErrorKind
    message: str
    http_status: int
    attempted_models: tuple[str, ...] = ()
    available_models: tuple[str, ...] | None = None
    raw_error: Any = None

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON error body returned to the caller."""
        payload: dict[str, Any] = {"error": self.message}
        if self.attempted_models:
            payload["attemptedModels"] = list(self.attempted_models)
        if self.error_kind is ErrorKind.EXHAUSTED_NOT_FOUND:
            payload["availableModels"] = (
                list(self.available_models)
                if self.available_models is not None
                else None
            )
        if self.raw_error is not None:
            payload["rawError"] = self.raw_error
        return payload


ProxyResult = Union[ProxySuccess, ProxyFailure]
