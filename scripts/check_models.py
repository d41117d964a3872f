"""
Cellar AI — Model Availability Check
=====================================
Lists the models the configured API key can reach, and shows the candidate
order the proxy would try for an optional explicit model.

Run:
    python scripts/check_models.py gemini
    python scripts/check_models.py openai --model gpt-4.1-mini

Prerequisites:
    Set CELLAR_GEMINI_API_KEY / CELLAR_OPENAI_API_KEY in the environment or .env
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx  # noqa: E402

from cellarai.core.exceptions import CellarAIError  # noqa: E402
from cellarai.services.proxy_service import ProxyService  # noqa: E402


async def check(provider: str, model: str | None) -> int:
    async with httpx.AsyncClient() as client:
        try:
            engine = ProxyService(client).engine_for(provider)
        except CellarAIError as exc:
            print(f"[FAIL] {exc.message}")
            return 1

        config = engine.adapter.config
        print("=" * 60)
        print(f"Provider: {config.provider.value}")
        print(f"Endpoint: {config.root_url} ({config.api_version})")
        print("=" * 60)

        candidates = engine.adapter.resolver().candidates(model)
        print("\nCandidate order:")
        for index, name in enumerate(candidates, 1):
            print(f"  {index}. {name}")

        available = await engine.list_available_models()
        if available is None:
            print("\n[FAIL] Could not retrieve the model list.")
            return 1

        print(f"\n[OK] {len(available)} models available:")
        for name in available:
            print(f"  - {name}")

        reachable = {name.removeprefix("models/") for name in available}
        missing = [name for name in candidates if name not in reachable]
        if missing:
            print(f"\n[WARN] Not listed upstream: {', '.join(missing)}")
        return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("provider", choices=["gemini", "openai"])
    parser.add_argument("--model", default=None, help="Explicit model to resolve")
    args = parser.parse_args()
    sys.exit(asyncio.run(check(args.provider, args.model)))


if __name__ == "__main__":
    main()
