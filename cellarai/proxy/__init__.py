# Cellar AI — Generative-language proxy
from cellarai.proxy.engine import FallbackEngine
from cellarai.proxy.models import (
    ChatMessage,
    ErrorKind,
    FallbackState,
    InlineData,
    PairingRequest,
    ProxyFailure,
    ProxyResult,
    ProxySuccess,
    UpstreamAttempt,
)
from cellarai.proxy.normalizer import build_request, normalize_messages
from cellarai.proxy.providers import (
    GeminiAdapter,
    OpenAIAdapter,
    ProviderAdapter,
    get_adapter,
)
from cellarai.proxy.resolver import ModelResolver, qualify, strip_namespace
from cellarai.proxy.responses import (
    NO_SUGGESTION,
    extract_error_message,
    extract_suggestion,
)

__all__ = [
    "ChatMessage",
    "ErrorKind",
    "FallbackEngine",
    "FallbackState",
    "GeminiAdapter",
    "InlineData",
    "ModelResolver",
    "NO_SUGGESTION",
    "OpenAIAdapter",
    "PairingRequest",
    "ProviderAdapter",
    "ProxyFailure",
    "ProxyResult",
    "ProxySuccess",
    "UpstreamAttempt",
    "build_request",
    "extract_error_message",
    "extract_suggestion",
    "get_adapter",
    "normalize_messages",
    "qualify",
    "strip_namespace",
]
