"""
Cellar AI — Test Fixtures
==========================
Shared pytest fixtures.

The upstream provider is replaced by ``StubUpstream`` on an
``httpx.MockTransport``: tests script a response per model and then
inspect which models were called, in which order.
"""

from __future__ import annotations

import json
import os
import re
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from cellarai.core.config import Provider, ProviderConfig

_GEMINI_MODEL_RE = re.compile(r"/models/([^/:]+):generateContent$")

NOT_FOUND = (404, {"error": {"code": 404, "message": "model not found", "status": "NOT_FOUND"}})


def gemini_body(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def openai_body(text: str) -> dict[str, Any]:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": text}}]}


class StubUpstream:
    """
    Scriptable generative-language API.

    ``responses`` maps model id → ``(status, body)`` or an exception to
    raise.  Unscripted models answer 404.  ``models_response`` answers the
    list-models endpoint.
    """

    def __init__(self) -> None:
        self.responses: dict[str, Any] = {}
        self.models_response: Any = (
            200,
            {"models": [{"name": "models/gemini-2.5-flash"}, {"name": "models/gemini-2.5-pro"}]},
        )
        self.requests: list[httpx.Request] = []
        self.models_called: list[str] = []
        self.list_calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            self.list_calls += 1
            return self._respond(self.models_response)

        model = self._model_of(request)
        self.models_called.append(model)
        return self._respond(self.responses.get(model, NOT_FOUND))

    @property
    def generate_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def payload(self, index: int = 0) -> dict[str, Any]:
        return json.loads(self.generate_requests[index].content)

    @staticmethod
    def _model_of(request: httpx.Request) -> str:
        match = _GEMINI_MODEL_RE.search(request.url.path)
        if match:
            return match.group(1)
        return json.loads(request.content)["model"]

    @staticmethod
    def _respond(scripted: Any) -> httpx.Response:
        if isinstance(scripted, Exception):
            raise scripted
        status, body = scripted
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body or "")


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    """Fresh Settings per test, isolated from the developer's environment."""
    from cellarai.core.config import get_settings

    for key in list(os.environ):
        if key.upper().startswith("CELLAR_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(monkeypatch):
    """Settings with both providers configured."""
    monkeypatch.setenv("CELLAR_GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("CELLAR_OPENAI_API_KEY", "test-openai-key")
    monkeypatch.setenv("CELLAR_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CELLAR_LOG_FORMAT", "console")
    from cellarai.core.config import get_settings
    return get_settings()


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
async def http_client(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
        yield client


@pytest.fixture
def gemini_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.GEMINI,
        api_key="test-gemini-key",
        base_url="https://gemini.test/",
        api_version="v1beta",
        default_model="gemini-2.5-flash",
        timeout_seconds=5.0,
    )


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(
        provider=Provider.OPENAI,
        api_key="test-openai-key",
        base_url="https://openai.test",
        api_version="v1",
        default_model="gpt-4o-mini",
        chat_path="/v1/chat/completions",
        timeout_seconds=5.0,
    )


# ── HTTP client (with stubbed upstream) ─────────────────────────────────
@pytest.fixture
def test_app(settings, http_client):
    """FastAPI app whose upstream client talks to ``StubUpstream``."""
    from cellarai.api.deps import get_http_client
    from cellarai.main import create_app

    app = create_app()
    app.dependency_overrides[get_http_client] = lambda: http_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
