"""
Cellar AI — Exception Taxonomy
===============================
Local errors raised before any upstream call is made.

Upstream outcomes (model not found, other upstream statuses, transport
failures) are not raised; the fallback engine reports them as a
``ProxyFailure`` with an ``ErrorKind``.  The exceptions below are rendered
by the FastAPI exception handler as ``{"error": <message>}`` with
``status_code``.

Usage:
    from cellarai.core.exceptions import InvalidArgumentError

    raise InvalidArgumentError("Missing prompt")
"""

from __future__ import annotations

from enum import StrEnum


class ErrorSeverity(StrEnum):
    """Error severity levels for exception classification."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CellarAIError(Exception):
    """
    Base exception for all Cellar AI errors.

    Carries:
    - severity: Classification for logging
    - error_code: Unique identifier for programmatic handling
    - status_code: HTTP status the API responds with
    """

    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_code: str = "CELLAR_AI_ERROR"
    status_code: int = 500

    def __init__(self, message: str, *, correlation_id: str | None = None) -> None:
        self.message = message
        self.correlation_id = correlation_id
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [
            f"{self.__class__.__name__}(",
            f"error_code={self.error_code!r}, ",
            f"severity={self.severity.value!r}",
        ]
        if self.correlation_id:
            parts.append(f", correlation_id={self.correlation_id!r}")
        parts.append(")")
        return "".join(parts)


# ── Configuration Exceptions ──────────────────────────────────────────────


class ConfigurationError(CellarAIError):
    """Errors in configuration (missing settings, invalid values)."""

    severity = ErrorSeverity.HIGH
    error_code = "CONFIGURATION_ERROR"
    status_code = 500


class MissingConfigurationError(ConfigurationError):
    """Raised when a provider is called without its API key."""

    error_code = "MISSING_CONFIGURATION_ERROR"


# ── Request Exceptions ────────────────────────────────────────────────────


class InvalidArgumentError(CellarAIError):
    """Raised when a request carries no usable prompt, messages or image."""

    severity = ErrorSeverity.LOW
    error_code = "INVALID_ARGUMENT"
    status_code = 400


class UnknownProviderError(CellarAIError):
    """Raised when a request names a provider the service does not serve."""

    severity = ErrorSeverity.LOW
    error_code = "UNKNOWN_PROVIDER"
    status_code = 404

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unknown provider '{provider}'.")
