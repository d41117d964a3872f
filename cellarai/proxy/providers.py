"""
Cellar AI — Provider Adapters
==============================
Everything that differs between upstream provider families: URL templates,
authentication, payload shape, where the generated text lives and how the
model list is returned.  The fallback engine is provider-agnostic and
talks only to ``ProviderAdapter``.

Usage:
    adapter = get_adapter("gemini", ProviderConfig.from_settings("gemini"))
    adapter.generate_url("gemini-2.5-flash")
    # "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
"""

from __future__ import annotations

import abc
from typing import Any

from cellarai.core.config import Provider, ProviderConfig
from cellarai.core.exceptions import UnknownProviderError
from cellarai.proxy.models import ChatMessage, PairingRequest
from cellarai.proxy.resolver import ModelResolver, qualify


# ── Abstract Base ───────────────────────────────────────────────────────


class ProviderAdapter(abc.ABC):
    """
    Abstract upstream provider.

    Subclasses describe one provider family's HTTP contract; they never
    perform I/O themselves.
    """

    name: Provider
    label: str
    text_path: tuple[str | int, ...]
    reject_namespaced_models: bool = False

    def __init__(self, config: ProviderConfig) -> None:
        self.config = config

    def resolver(self) -> ModelResolver:
        """Model resolver seeded with this provider's default and stable models."""
        return ModelResolver(
            default_model=self.config.default_model,
            stable_model=self.config.stable_model,
            reject_namespaced=self.reject_namespaced_models,
        )

    def list_models_url(self) -> str:
        return f"{self.config.root_url}/{self.config.api_version}/models"

    def request_params(self) -> dict[str, str]:
        return {}

    def request_headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    @abc.abstractmethod
    def generate_url(self, model: str) -> str:
        """URL of the generation endpoint for ``model``."""
        ...

    @abc.abstractmethod
    def build_payload(self, request: PairingRequest, model: str) -> dict[str, Any]:
        """JSON body sent upstream for ``model``."""
        ...

    @abc.abstractmethod
    def parse_model_list(self, body: Any) -> tuple[str, ...] | None:
        """Extract model identifiers from a list-models response."""
        ...


# ── Gemini ──────────────────────────────────────────────────────────────


class GeminiAdapter(ProviderAdapter):
    """
    ``generateContent`` API.

    The model sits in the URL path and the key in the ``key`` query
    parameter.  Chat roles are mapped onto Gemini's ``user``/``model`` pair;
    system messages become ``systemInstruction``.
    """

    name = Provider.GEMINI
    label = "Gemini"
    text_path = ("candidates", 0, "content", "parts", 0, "text")

    _ROLE_MAP = {"assistant": "model", "model": "model"}

    def generate_url(self, model: str) -> str:
        return (
            f"{self.config.root_url}/{self.config.api_version}"
            f"/models/{model}:generateContent"
        )

    def request_params(self) -> dict[str, str]:
        return {"key": self.config.api_key or ""}

    @staticmethod
    def _parts(message: ChatMessage) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = [{"text": message.content}]
        for attachment in message.attachments:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": attachment.mime_type,
                        "data": attachment.data,
                    }
                }
            )
        return parts

    def build_payload(self, request: PairingRequest, model: str) -> dict[str, Any]:
        contents = []
        system_parts = []
        for message in request.messages:
            if message.role == "system":
                system_parts.extend(self._parts(message))
                continue
            contents.append(
                {
                    "role": self._ROLE_MAP.get(message.role, "user"),
                    "parts": self._parts(message),
                }
            )

        payload: dict[str, Any] = {**request.passthrough}
        if not contents:
            # generateContent needs at least one turn.
            contents.append({"role": "user", "parts": system_parts})
        elif system_parts and "systemInstruction" not in payload:
            payload["systemInstruction"] = {"parts": system_parts}
        payload["contents"] = contents
        payload["model"] = qualify(model)
        return payload

    def parse_model_list(self, body: Any) -> tuple[str, ...] | None:
        models = body.get("models") if isinstance(body, dict) else None
        if not isinstance(models, list):
            return None
        return tuple(
            item["name"]
            for item in models
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        )


# ── OpenAI-compatible chat completions ──────────────────────────────────


class OpenAIAdapter(ProviderAdapter):
    """
    Chat-completions API.

    The model travels in the JSON body and the key as a bearer token.
    Models addressed with a ``models/`` prefix were meant for Gemini and
    are ignored in favour of the configured default.
    """

    name = Provider.OPENAI
    label = "OpenAI"
    text_path = ("choices", 0, "message", "content")
    reject_namespaced_models = True

    def generate_url(self, model: str) -> str:
        path = self.config.chat_path or "/v1/chat/completions"
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.config.root_url}{path}"

    def request_headers(self) -> dict[str, str]:
        headers = super().request_headers()
        headers["Authorization"] = f"Bearer {self.config.api_key or ''}"
        return headers

    @staticmethod
    def _content(message: ChatMessage) -> str | list[dict[str, Any]]:
        if not message.attachments:
            return message.content
        return [
            {"type": "text", "text": message.content},
            *(
                {"type": "image_url", "image_url": {"url": attachment.data_url}}
                for attachment in message.attachments
            ),
        ]

    def build_payload(self, request: PairingRequest, model: str) -> dict[str, Any]:
        return {
            **request.passthrough,
            "model": model,
            "messages": [
                {"role": message.role, "content": self._content(message)}
                for message in request.messages
            ],
        }

    def parse_model_list(self, body: Any) -> tuple[str, ...] | None:
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            return None
        return tuple(
            item["id"]
            for item in data
            if isinstance(item, dict) and isinstance(item.get("id"), str)
        )


# ── Registry ────────────────────────────────────────────────────────────

ADAPTERS: dict[Provider, type[ProviderAdapter]] = {
    Provider.GEMINI: GeminiAdapter,
    Provider.OPENAI: OpenAIAdapter,
}


def parse_provider(name: str) -> Provider:
    """Convert a raw provider name, raising ``UnknownProviderError``."""
    try:
        return Provider(name.lower())
    except ValueError:
        raise UnknownProviderError(name) from None


def get_adapter(name: Provider | str, config: ProviderConfig) -> ProviderAdapter:
    """Instantiate the adapter registered for ``name``."""
    provider = parse_provider(str(name))
    return ADAPTERS[provider](config)
