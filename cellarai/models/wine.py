"""
Cellar AI — Wine Models
=======================
Pydantic models for the wine details the front-end sends with pairing and
label requests.  Only the fields the prompts mention are modelled; the
cellar store owns the full record.

Usage:
    from cellarai.models.wine import WineSummary

    wine = WineSummary(name="Tignanello", producer="Antinori", year=2019)
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class WineSummary(BaseModel):
    """A wine as described to the generative model."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, description="Wine name or cuvée")
    producer: str | None = None
    region: str | None = None
    color: str | None = Field(default=None, description="red, white, rosé, ...")
    year: int | str | None = Field(default=None, description="Vintage")

    def has_identity(self) -> bool:
        """True when at least one of name, producer or region is filled in."""
        return any(
            value and value.strip()
            for value in (self.name, self.producer, self.region)
        )


class ProviderChoice(BaseModel):
    """Provider/model selection shared by the pairing and label endpoints."""

    provider: Literal["gemini", "openai"] = "gemini"
    model: str | None = Field(
        default=None,
        description="Explicit model; ignored when unusable for the provider.",
    )
