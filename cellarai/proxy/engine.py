"""
Cellar AI — Fallback Engine
============================
Sequential model-fallback protocol shared by every provider.

State machine:
    PENDING → TRYING(i) → SUCCEEDED | EXHAUSTED_NOT_FOUND | FAILED_OTHER_STATUS

- 2xx for candidate ``i``                 → SUCCEEDED
- 404 and candidate ``i + 1`` exists      → TRYING(i + 1)
- 404 for the last candidate              → EXHAUSTED_NOT_FOUND, enriched with
                                            the upstream model list (best effort)
- any other status, timeout or transport  → FAILED_OTHER_STATUS, not retried

Only "not found" is candidate-specific; auth, quota, payload and server
errors would fail the same way for every model.

Usage:
    async with httpx.AsyncClient() as client:
        engine = FallbackEngine(GeminiAdapter(config), client)
        result = await engine.run(build_request({"prompt": "Pair a Rioja"}))
"""

from __future__ import annotations

import httpx
import structlog

from cellarai.core.logging import get_logger
from cellarai.core.tracing import TracingContext, create_span
from cellarai.proxy.models import (
    ErrorKind,
    FallbackState,
    PairingRequest,
    ProxyFailure,
    ProxyResult,
    ProxySuccess,
    UpstreamAttempt,
)
from cellarai.proxy.providers import ProviderAdapter
from cellarai.proxy.responses import (
    NO_SUGGESTION,
    extract_error_message,
    extract_suggestion,
    parse_body,
)

logger = get_logger(__name__)

# Errors that end a request without an upstream status.
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class FallbackEngine:
    """
    Runs one ``PairingRequest`` against an ordered list of candidate models.

    One engine per inbound request; ``state`` tracks that request only.
    The adapter carries immutable configuration and the HTTP client is
    shared for connection pooling.
    """

    def __init__(self, adapter: ProviderAdapter, client: httpx.AsyncClient) -> None:
        self._adapter = adapter
        self._client = client
        self._resolver = adapter.resolver()
        self.state = FallbackState.PENDING

    @property
    def adapter(self) -> ProviderAdapter:
        return self._adapter

    def candidates(self, request: PairingRequest) -> tuple[str, ...]:
        return self._resolver.candidates(request.explicit_model)

    async def run(self, request: PairingRequest) -> ProxyResult:
        """Execute the fallback protocol and return the terminal result."""
        candidates = self.candidates(request)
        with structlog.contextvars.bound_contextvars(
            provider=self._adapter.name.value
        ):
            return await self._run(request, candidates)

    async def _run(
        self, request: PairingRequest, candidates: tuple[str, ...]
    ) -> ProxyResult:
        attempted: list[str] = []
        self.state = FallbackState.TRYING

        for index, model in enumerate(candidates):
            attempted.append(model)
            try:
                with structlog.contextvars.bound_contextvars(model=model):
                    attempt = await self._attempt(request, model)
            except TRANSPORT_ERRORS as exc:
                return self._finish(
                    FallbackState.FAILED_OTHER_STATUS,
                    self._transport_failure(exc, attempted),
                )

            if attempt.ok:
                return self._finish(
                    FallbackState.SUCCEEDED,
                    self._success(attempt, candidates[0], attempted),
                )

            if attempt.not_found and index + 1 < len(candidates):
                logger.warning(
                    "proxy.fallback", model=model, next_model=candidates[index + 1]
                )
                continue

            if attempt.not_found:
                available = await self.list_available_models()
                return self._finish(
                    FallbackState.EXHAUSTED_NOT_FOUND,
                    self._exhausted(attempt, attempted, available),
                )

            return self._finish(
                FallbackState.FAILED_OTHER_STATUS,
                self._upstream_failure(attempt, attempted),
            )

        # candidates() is never empty, so the loop always returns.
        raise AssertionError("candidate list exhausted without a terminal state")

    async def list_available_models(self) -> tuple[str, ...] | None:
        """
        Query the provider's model list.

        Best effort: any failure is logged and reported as ``None``.
        """
        try:
            response = await self._client.get(
                self._adapter.list_models_url(),
                params=self._adapter.request_params(),
                headers=TracingContext.current().inject_headers(
                    self._adapter.request_headers()
                ),
                timeout=self._adapter.config.timeout_seconds,
            )
        except TRANSPORT_ERRORS as exc:
            logger.error(
                "proxy.models.list_failed",
                provider=self._adapter.name.value,
                error=str(exc) or type(exc).__name__,
            )
            return None

        if not response.is_success:
            logger.warning(
                "proxy.models.list_failed",
                provider=self._adapter.name.value,
                status=response.status_code,
            )
            return None
        return self._adapter.parse_model_list(parse_body(response.text))

    # ── Internals ───────────────────────────────────────────────────────

    async def _attempt(self, request: PairingRequest, model: str) -> UpstreamAttempt:
        adapter = self._adapter
        headers = TracingContext.current().inject_headers(adapter.request_headers())

        logger.debug("proxy.attempt.start", messages=len(request.messages))
        with create_span(f"{adapter.name.value}.generate", model=model) as span:
            response = await self._client.post(
                adapter.generate_url(model),
                params=adapter.request_params(),
                headers=headers,
                json=adapter.build_payload(request, model),
                timeout=adapter.config.timeout_seconds,
            )
            raw_text = response.text

        logger.info(
            "proxy.attempt.done",
            status=response.status_code,
            duration_ms=span.duration_ms,
        )
        return UpstreamAttempt(
            model_tried=model,
            http_status=response.status_code,
            parsed_body=parse_body(raw_text),
            raw_body=raw_text,
        )

    def _finish(self, state: FallbackState, result: ProxyResult) -> ProxyResult:
        self.state = state
        if isinstance(result, ProxySuccess):
            logger.info(
                "proxy.succeeded",
                model_used=result.model_used,
                fallback_from=result.fallback_from,
            )
        else:
            logger.warning(
                "proxy.failed",
                state=state.value,
                error_kind=result.error_kind.value,
                status=result.http_status,
                attempted_models=list(result.attempted_models),
            )
        return result

    def _success(
        self, attempt: UpstreamAttempt, first: str, attempted: list[str]
    ) -> ProxySuccess:
        text = extract_suggestion(attempt.parsed_body, self._adapter.text_path)
        return ProxySuccess(
            suggestion=text if text is not None else NO_SUGGESTION,
            model_used=attempt.model_tried,
            fallback_from=first if attempt.model_tried != first else None,
            attempted_models=tuple(attempted),
            body=attempt.parsed_body if attempt.parsed_body is not None else {},
            extracted=text is not None,
        )

    def _exhausted(
        self,
        attempt: UpstreamAttempt,
        attempted: list[str],
        available: tuple[str, ...] | None,
    ) -> ProxyFailure:
        config = self._adapter.config
        names = ", ".join(f'"{name}"' for name in attempted)
        noun = "Model" if len(attempted) == 1 else "Model(s)"
        verb = "is" if len(attempted) == 1 else "are"
        return ProxyFailure(
            error_kind=ErrorKind.EXHAUSTED_NOT_FOUND,
            message=(
                f"{noun} {names} {verb} not available for API version "
                f'"{config.api_version}" at {config.root_url}.'
            ),
            http_status=404,
            attempted_models=tuple(attempted),
            available_models=available,
            raw_error=attempt.parsed_body or attempt.raw_body or None,
        )

    def _upstream_failure(
        self, attempt: UpstreamAttempt, attempted: list[str]
    ) -> ProxyFailure:
        return ProxyFailure(
            error_kind=ErrorKind.UPSTREAM_ERROR,
            message=extract_error_message(
                attempt.parsed_body,
                attempt.raw_body,
                attempt.http_status,
                self._adapter.label,
            ),
            http_status=attempt.http_status,
            attempted_models=tuple(attempted),
            raw_error=attempt.parsed_body or attempt.raw_body or None,
        )

    def _transport_failure(
        self, exc: Exception, attempted: list[str]
    ) -> ProxyFailure:
        detail = str(exc) or type(exc).__name__
        return ProxyFailure(
            error_kind=ErrorKind.TRANSPORT_ERROR,
            message=f"Proxy Error: {detail}",
            http_status=500,
            attempted_models=tuple(attempted),
        )
