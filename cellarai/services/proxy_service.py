"""
Cellar AI — Proxy Service
==========================
Wires configuration, provider adapters and the fallback engine together
for one inbound request.

Usage:
    service = ProxyService(http_client)
    result = await service.complete("gemini", pairing_request)
"""

from __future__ import annotations

import httpx

from cellarai.core.config import Provider, ProviderConfig, Settings, get_settings
from cellarai.core.exceptions import MissingConfigurationError
from cellarai.core.logging import get_logger
from cellarai.proxy.engine import FallbackEngine
from cellarai.proxy.models import PairingRequest, ProxyResult
from cellarai.proxy.providers import get_adapter, parse_provider

logger = get_logger(__name__)


class ProxyService:
    """Builds a fresh ``FallbackEngine`` per request from current settings."""

    def __init__(
        self, client: httpx.AsyncClient, settings: Settings | None = None
    ) -> None:
        self._client = client
        self._settings = settings

    def config_for(self, provider: str) -> ProviderConfig:
        """
        Resolve the provider's configuration.

        Raises ``UnknownProviderError`` for unknown names and
        ``MissingConfigurationError`` when the API key is not set.
        """
        parsed = parse_provider(provider)
        config = ProviderConfig.from_settings(
            parsed, self._settings or get_settings()
        )
        if not config.api_key:
            logger.error("proxy.config.missing_key", provider=parsed.value)
            raise MissingConfigurationError(
                f"Missing {_LABELS[parsed]} API key in environment variables."
            )
        return config

    def engine_for(self, provider: str) -> FallbackEngine:
        config = self.config_for(provider)
        return FallbackEngine(get_adapter(config.provider, config), self._client)

    async def complete(self, provider: str, request: PairingRequest) -> ProxyResult:
        """Run ``request`` through the named provider's fallback protocol."""
        return await self.engine_for(provider).run(request)


_LABELS = {Provider.GEMINI: "Gemini", Provider.OPENAI: "OpenAI"}
