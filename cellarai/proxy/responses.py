"""
Cellar AI — Response Normalizer
================================
Reshapes upstream bodies into one suggestion string or one error message.

None of these helpers raise: an unparsable or unexpected body always
degrades to raw text or a generated default.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

NO_SUGGESTION = "No suggestion received."


def parse_body(raw_text: str) -> Any:
    """Decode a JSON body, returning ``None`` when empty or not JSON."""
    if not raw_text:
        return None
    try:
        return json.loads(raw_text)
    except ValueError:
        return None


def dig(body: Any, path: Sequence[str | int]) -> Any:
    """Follow ``path`` through nested dicts/lists; ``None`` on any miss."""
    node = body
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
            node = node[step]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(step)
        if node is None:
            return None
    return node


def extract_suggestion(body: Any, path: Sequence[str | int]) -> str | None:
    """Return the generated text at ``path`` if it is a non-empty string."""
    text = dig(body, path)
    if isinstance(text, str) and text:
        return text
    return None


def extract_error_message(
    parsed: Any, raw_text: str, status: int, label: str
) -> str:
    """
    Pick the most specific error message an upstream body offers.

    Priority: ``error.message`` → ``error`` (when a string) → raw body →
    a default embedding the HTTP status.
    """
    error = parsed.get("error") if isinstance(parsed, dict) else None
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error
    if raw_text:
        return raw_text
    return f"{label} API Error (HTTP {status})."
