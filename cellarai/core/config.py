"""
Cellar AI — Configuration Management
=====================================
Centralized, validated configuration with environment-based overrides.
All settings are loaded from environment variables with sensible defaults.

Usage:
    from cellarai.core.config import get_settings
    settings = get_settings()

    gemini = ProviderConfig.from_settings("gemini")
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Provider(StrEnum):
    """Upstream generative-language provider families."""
    GEMINI = "gemini"
    OPENAI = "openai"


# Last-resort model per provider when neither the caller nor the
# environment names a usable one.
STABLE_MODELS: dict[Provider, str] = {
    Provider.GEMINI: "gemini-2.5-flash",
    Provider.OPENAI: "gpt-4o-mini",
}


class Settings(BaseSettings):
    """
    Root configuration object.

    All values can be overridden via environment variables prefixed with ``CELLAR_``.
    Example: ``CELLAR_GEMINI_API_KEY=AIza...``
    """

    model_config = SettingsConfigDict(
        env_prefix="CELLAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────────
    app_name: str = "cellar-ai"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # ── Logging & Observability ──────────────────────────────────────────
    log_level: str = Field(
        default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = "json"  # "json" or "console"

    # ── Correlation ──────────────────────────────────────────────────────
    correlation_id_header: str = "X-Correlation-ID"

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = Field(default=5001, ge=1, le=65535)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"])

    # ── Upstream calls ───────────────────────────────────────────────────
    upstream_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        le=120,
        description="Per-call timeout for generative-language requests.",
    )

    # ── Gemini ───────────────────────────────────────────────────────────
    gemini_api_key: SecretStr | None = None
    gemini_model: str | None = None
    gemini_api_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_api_version: str = "v1beta"

    # ── OpenAI-compatible chat completions ───────────────────────────────
    openai_api_key: SecretStr | None = None
    openai_model: str | None = None
    openai_api_base_url: str = "https://api.openai.com"
    openai_api_version: str = "v1"
    openai_chat_path: str = "/v1/chat/completions"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the singleton Settings instance.

    Cached so environment is read exactly once per process lifetime.
    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    return Settings()


@dataclass(frozen=True)
class ProviderConfig:
    """
    Immutable per-provider configuration handed to adapters and the engine.

    Built from ``Settings`` in the service, or directly in tests so several
    configurations can coexist in one process.
    """

    provider: Provider
    api_key: str | None
    base_url: str
    api_version: str
    default_model: str | None = None
    chat_path: str | None = None
    timeout_seconds: float = 20.0

    @property
    def stable_model(self) -> str:
        return STABLE_MODELS[self.provider]

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/")

    @classmethod
    def from_settings(
        cls, provider: Provider | str, settings: Settings | None = None
    ) -> "ProviderConfig":
        """Project the flat ``Settings`` onto one provider."""
        settings = settings or get_settings()
        provider = Provider(provider)

        if provider is Provider.GEMINI:
            key = settings.gemini_api_key
            return cls(
                provider=provider,
                api_key=key.get_secret_value() if key else None,
                base_url=settings.gemini_api_base_url,
                api_version=settings.gemini_api_version,
                default_model=settings.gemini_model,
                timeout_seconds=settings.upstream_timeout_seconds,
            )

        key = settings.openai_api_key
        return cls(
            provider=provider,
            api_key=key.get_secret_value() if key else None,
            base_url=settings.openai_api_base_url,
            api_version=settings.openai_api_version,
            default_model=settings.openai_model,
            chat_path=settings.openai_chat_path,
            timeout_seconds=settings.upstream_timeout_seconds,
        )
