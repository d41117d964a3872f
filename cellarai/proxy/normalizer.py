"""
Cellar AI — Request Normalizer
===============================
Turns the heterogeneous payloads the front-end sends into one canonical
message sequence.

Accepted shapes, first usable one wins:
1. ``messages`` — chat-style ``[{role, content}]`` list.
2. ``prompt`` — a single string, wrapped as one ``user`` message.
3. ``contents`` — Gemini-style ``[{role, parts: [{text}]}]`` list.

Usage:
    request = build_request({"prompt": "  Pair a Barolo  ", "temperature": 0.4})
    request.messages   # (ChatMessage(role="user", content="Pair a Barolo"),)
    request.passthrough  # {"temperature": 0.4}
"""

from __future__ import annotations

from typing import Any, Mapping

from cellarai.core.exceptions import InvalidArgumentError
from cellarai.proxy.models import ChatMessage, PairingRequest

# Keys consumed by the resolver/normalizer; everything else is forwarded.
CONSUMED_FIELDS: frozenset[str] = frozenset(
    {"model", "prompt", "messages", "contents"}
)

DEFAULT_ROLE = "user"


def _role(entry: Mapping[str, Any]) -> str:
    role = entry.get("role")
    if isinstance(role, str) and role.strip():
        return role.strip()
    return DEFAULT_ROLE


def _from_messages(messages: Any) -> tuple[ChatMessage, ...]:
    if not isinstance(messages, list):
        return ()
    normalized = []
    for entry in messages:
        if not isinstance(entry, Mapping):
            continue
        content = entry.get("content")
        if isinstance(content, str) and content.strip():
            normalized.append(ChatMessage(role=_role(entry), content=content))
    return tuple(normalized)


def _from_prompt(prompt: Any) -> tuple[ChatMessage, ...]:
    if isinstance(prompt, str) and prompt.strip():
        return (ChatMessage(role=DEFAULT_ROLE, content=prompt.strip()),)
    return ()


def _from_contents(contents: Any) -> tuple[ChatMessage, ...]:
    if not isinstance(contents, list):
        return ()
    normalized = []
    for entry in contents:
        if not isinstance(entry, Mapping):
            continue
        parts = entry.get("parts")
        if not isinstance(parts, list):
            continue
        text = "\n".join(
            part["text"]
            if isinstance(part, Mapping) and isinstance(part.get("text"), str)
            else ""
            for part in parts
        ).strip()
        if text:
            normalized.append(ChatMessage(role=_role(entry), content=text))
    return tuple(normalized)


def normalize_messages(payload: Mapping[str, Any]) -> tuple[ChatMessage, ...]:
    """
    Produce the canonical message sequence for ``payload``.

    Raises ``InvalidArgumentError`` when no shape yields a non-empty message.
    """
    for messages in (
        _from_messages(payload.get("messages")),
        _from_prompt(payload.get("prompt")),
        _from_contents(payload.get("contents")),
    ):
        if messages:
            return messages

    raise InvalidArgumentError(
        "Request must include prompt, messages, or Gemini-style contents."
    )


def build_request(payload: Any) -> PairingRequest:
    """Normalize a decoded JSON body into a ``PairingRequest``."""
    if not isinstance(payload, Mapping):
        raise InvalidArgumentError("Request body must be a JSON object.")

    messages = normalize_messages(payload)
    requested = payload.get("model")

    return PairingRequest(
        messages=messages,
        explicit_model=requested if isinstance(requested, str) else None,
        passthrough={
            key: value
            for key, value in payload.items()
            if key not in CONSUMED_FIELDS
        },
    )
