"""
Cellar AI — Proxy API Tests
============================
End-to-end behaviour of ``POST /api/{provider}`` against a stub upstream.

Validates:
- Suggestion body and model headers
- Status propagation and error body shape
- Local rejections (405, 400, 404, 500) happen before any upstream call
"""

from __future__ import annotations

import httpx
import pytest

from conftest import gemini_body, openai_body


# ── Success ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_prompt_returns_suggestion(client, upstream):
    upstream.responses["gemini-2.5-flash"] = (200, gemini_body("Beef Wellington"))

    resp = await client.post("/api/gemini", json={"prompt": "Pair a Bordeaux"})

    assert resp.status_code == 200
    assert resp.json() == {"suggestion": "Beef Wellington"}
    assert resp.headers["x-model-used"] == "gemini-2.5-flash"
    assert "x-model-fallback" not in resp.headers


@pytest.mark.asyncio
async def test_fallback_sets_headers(client, upstream):
    upstream.responses["gemini-2.5-flash"] = (200, gemini_body("Paella"))

    resp = await client.post(
        "/api/gemini", json={"model": "models/gemini-retired", "prompt": "Pair a Rioja"}
    )

    assert resp.status_code == 200
    assert resp.headers["x-model-used"] == "gemini-2.5-flash"
    assert resp.headers["x-model-fallback"] == "gemini-retired"
    assert upstream.models_called == ["gemini-retired", "gemini-2.5-flash"]


@pytest.mark.asyncio
async def test_raw_mode_returns_upstream_body(client, upstream):
    body = gemini_body("Tapas")
    upstream.responses["gemini-2.5-flash"] = (200, body)

    resp = await client.post("/api/gemini?raw=true", json={"prompt": "Pair a Cava"})

    assert resp.status_code == 200
    assert resp.json() == body


@pytest.mark.asyncio
async def test_openai_provider(client, upstream):
    upstream.responses["gpt-4o-mini"] = (200, openai_body("Sushi"))

    resp = await client.post(
        "/api/openai",
        json={"contents": [{"role": "user", "parts": [{"text": "Pair a Riesling"}]}]},
    )

    assert resp.status_code == 200
    assert resp.json() == {"suggestion": "Sushi"}
    assert upstream.payload(0)["messages"] == [{"role": "user", "content": "Pair a Riesling"}]


@pytest.mark.asyncio
async def test_missing_text_returns_placeholder(client, upstream):
    upstream.responses["gemini-2.5-flash"] = (200, {"candidates": []})

    resp = await client.post("/api/gemini", json={"prompt": "hi"})

    assert resp.status_code == 200
    assert resp.json() == {"suggestion": "No suggestion received."}


# ── Upstream failures ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_upstream_status_is_propagated(client, upstream):
    upstream.responses["gemini-2.5-flash"] = (429, {"error": {"message": "Quota exceeded"}})

    resp = await client.post("/api/gemini", json={"prompt": "hi"})

    assert resp.status_code == 429
    data = resp.json()
    assert data["error"] == "Quota exceeded"
    assert data["attemptedModels"] == ["gemini-2.5-flash"]
    assert "availableModels" not in data


@pytest.mark.asyncio
async def test_exhausted_candidates_return_404_with_models(client, upstream):
    resp = await client.post("/api/gemini", json={"model": "gemini-x", "prompt": "hi"})

    assert resp.status_code == 404
    data = resp.json()
    assert data["attemptedModels"] == ["gemini-x", "gemini-2.5-flash"]
    assert data["availableModels"] == ["models/gemini-2.5-flash", "models/gemini-2.5-pro"]
    assert data["rawError"]["error"]["code"] == 404


@pytest.mark.asyncio
async def test_transport_error_returns_500(client, upstream):
    upstream.responses["gemini-2.5-flash"] = httpx.ConnectError("connection refused")

    resp = await client.post("/api/gemini", json={"prompt": "hi"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Proxy Error: connection refused"


@pytest.mark.asyncio
@pytest.mark.parametrize("model", ["gem\u0001ini", "../../v1/files/x", "gemini-x?alt=sse"])
async def test_unroutable_explicit_model_falls_back_to_default(client, upstream, model):
    upstream.responses["gemini-2.5-flash"] = (200, gemini_body("Oysters"))

    resp = await client.post("/api/gemini", json={"model": model, "prompt": "Pair a Muscadet"})

    assert resp.status_code == 200
    assert resp.json() == {"suggestion": "Oysters"}
    assert resp.headers["x-model-used"] == "gemini-2.5-flash"
    assert "x-model-fallback" not in resp.headers
    assert [r.url.path for r in upstream.requests] == [
        "/v1beta/models/gemini-2.5-flash:generateContent"
    ]


# ── Local rejections ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_is_method_not_allowed(client, upstream):
    resp = await client.get("/api/gemini")

    assert resp.status_code == 405
    assert resp.json() == {"error": "Method Not Allowed. Use POST."}
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_method_not_allowed_names_the_route_methods(client, upstream):
    resp = await client.post("/health")

    assert resp.status_code == 405
    assert resp.json() == {"error": "Method Not Allowed. Use GET."}
    assert "X-Correlation-ID" in resp.headers


@pytest.mark.asyncio
async def test_empty_contents_rejected_before_upstream(client, upstream):
    resp = await client.post("/api/gemini", json={"contents": [{"parts": [{"text": ""}]}]})

    assert resp.status_code == 400
    assert "prompt, messages" in resp.json()["error"]
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_invalid_json_rejected(client, upstream):
    resp = await client.post(
        "/api/gemini", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body must be valid JSON."}


@pytest.mark.asyncio
async def test_unknown_provider_returns_404(client, upstream):
    resp = await client.post("/api/mistral", json={"prompt": "hi"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Unknown provider 'mistral'."}
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_missing_api_key_returns_500(client, upstream, monkeypatch):
    from cellarai.core.config import get_settings

    monkeypatch.delenv("CELLAR_OPENAI_API_KEY")
    get_settings.cache_clear()

    resp = await client.post("/api/openai", json={"prompt": "hi"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing OpenAI API key in environment variables."}
    assert upstream.requests == []
