"""
Cellar AI — Wine Prompts
=========================
Prompt builders for the front-end's food-pairing, reverse-pairing and
label-transcription features.  Each builder returns a ``PairingRequest``
ready for the fallback engine, or raises ``InvalidArgumentError`` before
anything is sent upstream.
"""

from __future__ import annotations

import base64
import binascii
from typing import Sequence

from cellarai.core.exceptions import InvalidArgumentError
from cellarai.models.wine import WineSummary
from cellarai.proxy.models import ChatMessage, InlineData, PairingRequest

DEFAULT_IMAGE_MIME = "image/jpeg"

LABEL_PROMPT = (
    "Transcribe all text printed on this wine label exactly as it appears, "
    "one line per line of text. Do not add commentary. "
    "If no text is visible, reply with an empty message."
)


def _field(value: object) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return "N/A"
    return str(value).strip()


def describe_wine(wine: WineSummary) -> str:
    return (
        f"Name: {_field(wine.name)}, Producer: {_field(wine.producer)}, "
        f"Region: {_field(wine.region)}, Color: {_field(wine.color)}, "
        f"Year: {_field(wine.year)}"
    )


def _single_prompt(prompt: str, model: str | None) -> PairingRequest:
    return PairingRequest(
        messages=(ChatMessage(role="user", content=prompt),),
        explicit_model=model,
    )


def food_pairing_request(wine: WineSummary, model: str | None = None) -> PairingRequest:
    """Ask for food pairings for one wine."""
    if not wine.has_identity():
        raise InvalidArgumentError(
            "Please select a wine with enough details for pairing."
        )
    prompt = (
        f"Given the wine: {describe_wine(wine)}, what are 3-5 great food "
        "pairing suggestions? Provide concise suggestions."
    )
    return _single_prompt(prompt, model)


def wine_for_food_request(
    food: str, wines: Sequence[WineSummary], model: str | None = None
) -> PairingRequest:
    """Ask which wines from the cellar best match a dish."""
    if not food or not food.strip():
        raise InvalidArgumentError(
            "Please enter a food item to find a wine pairing."
        )
    if not wines:
        raise InvalidArgumentError(
            "Your cellar is empty. Add some wines first to find a pairing."
        )

    food = food.strip()
    cellar = "\n".join(
        f"{index}. {describe_wine(wine)}" for index, wine in enumerate(wines, 1)
    )
    prompt = (
        f'I want to eat "{food}". From the following list of wines in my '
        "cellar, which one would be the BEST match? Also, list up to two "
        "other good alternatives if any. For each suggested wine, briefly "
        "explain your choice. If no wines are a good match, please state that. "
        "Focus only on the provided wine list.\n"
        f"My wines are:\n{cellar}"
    )
    return _single_prompt(prompt, model)


def split_image(image: str) -> InlineData:
    """
    Split a ``data:<mime>;base64,<payload>`` URL (or bare base64) into parts.

    Raises ``InvalidArgumentError`` if no decodable payload remains.
    """
    if not image or not image.strip():
        raise InvalidArgumentError("Image data is required.")

    mime_type = DEFAULT_IMAGE_MIME
    header, sep, payload = image.strip().partition(",")
    if not sep:
        payload = header
    elif header.startswith("data:"):
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared

    payload = payload.strip()
    if not payload:
        raise InvalidArgumentError(
            "Could not extract valid Base64 image data after splitting."
        )
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidArgumentError("Image data is not valid Base64.") from None

    return InlineData(mime_type=mime_type, data=payload)


def label_scan_request(image: str, model: str | None = None) -> PairingRequest:
    """Ask the model to transcribe a wine label photo."""
    attachment = split_image(image)
    return PairingRequest(
        messages=(
            ChatMessage(
                role="user", content=LABEL_PROMPT, attachments=(attachment,)
            ),
        ),
        explicit_model=model,
    )
