"""
Cellar AI — Model Resolver
===========================
Decides, in priority order, which upstream model identifiers to try.

Candidate order: explicit request model (if usable) → configured default →
hardcoded stable model, duplicates removed keeping first occurrence.

Usage:
    resolver = ModelResolver(default_model="gemini-2.5-pro",
                             stable_model="gemini-2.5-flash")
    resolver.candidates("models/gemini-x")
    # ("gemini-x", "gemini-2.5-pro", "gemini-2.5-flash")
"""

from __future__ import annotations

import re

MODEL_NAMESPACE = "models/"

# Model ids are interpolated into upstream URL paths.
_MODEL_ID_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


def strip_namespace(model: object) -> str | None:
    """
    Return ``model`` without its leading ``models/`` qualifier.

    Non-strings and blank strings yield ``None``.
    """
    if not isinstance(model, str):
        return None
    trimmed = model.strip()
    if trimmed.startswith(MODEL_NAMESPACE):
        trimmed = trimmed[len(MODEL_NAMESPACE):].strip()
    return trimmed or None


def qualify(model: str) -> str:
    """Re-add the ``models/`` qualifier used in upstream payloads."""
    return f"{MODEL_NAMESPACE}{model}"


class ModelResolver:
    """
    Ordered, duplicate-free candidate list builder.

    ``reject_namespaced`` is set for providers whose addressing scheme has no
    ``models/`` namespace: an explicit model still carrying it was meant for
    another provider and is ignored rather than stripped.
    """

    def __init__(
        self,
        default_model: str | None,
        stable_model: str,
        *,
        reject_namespaced: bool = False,
    ) -> None:
        self._stable_model = stable_model
        self._default_model = strip_namespace(default_model) or stable_model
        self._reject_namespaced = reject_namespaced

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def stable_model(self) -> str:
        return self._stable_model

    def usable_explicit(self, requested: object) -> str | None:
        """Return the explicit model if it passes validation, else ``None``."""
        if not isinstance(requested, str) or not requested.strip():
            return None
        if self._reject_namespaced and requested.strip().startswith(MODEL_NAMESPACE):
            return None

        model = strip_namespace(requested)
        # A colon marks a version/alias suffix ("...:latest") we cannot route;
        # slashes, query characters and whitespace would re-address the URL.
        if model is None or not _MODEL_ID_RE.fullmatch(model):
            return None
        return model

    def candidates(self, requested: object = None) -> tuple[str, ...]:
        """Build the candidate list; never empty."""
        ordered: list[str] = []
        for model in (
            self.usable_explicit(requested),
            self._default_model,
            self._stable_model,
        ):
            if model and model not in ordered:
                ordered.append(model)
        return tuple(ordered)
