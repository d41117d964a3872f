"""
Cellar AI — Pydantic Models
===========================
Request schemas shared by the API and service layers.
"""

from cellarai.models.wine import ProviderChoice, WineSummary

__all__ = [
    "ProviderChoice",
    "WineSummary",
]
