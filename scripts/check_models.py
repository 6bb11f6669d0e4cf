#!/usr/bin/env python3
"""Check which model names a provider's API key can actually use.

Sends a one-word prompt to each candidate model and prints which respond.

Usage:
    python scripts/check_models.py
    python scripts/check_models.py --provider gemini --models gemini-2.5-flash gemini-2.5-pro
    python scripts/check_models.py --provider anthropic
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure project root is on the path when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.llm import available_providers, get_provider
from src.llm.base import LLMProvider

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES: dict[str, list[str]] = {
    "gemini": ["gemini-2.5-flash", "gemini-2.5-pro", "gemini-2.0-flash", "gemini-flash-latest"],
    "anthropic": ["claude-sonnet-4-20250514", "claude-3-5-haiku-latest"],
    "openai": ["gpt-4o-mini", "gpt-4o"],
}


async def check_model(provider: LLMProvider, model: str) -> tuple[bool, str]:
    """Return (ok, detail) for one model."""
    try:
        reply = await provider.generate("Hi", model=model)
    except Exception as e:
        return False, str(e).splitlines()[0] if str(e) else type(e).__name__
    return True, reply.strip()[:40]


async def check_all(provider_id: str, models: list[str]) -> int:
    provider = get_provider(provider_id)
    working = 0
    for model in models:
        print(f"Trying {model}...")
        ok, detail = await check_model(provider, model)
        if ok:
            working += 1
            print(f"  OK    {model}: {detail!r}")
        else:
            print(f"  FAIL  {model}: {detail}")
    return working


def main() -> None:
    parser = argparse.ArgumentParser(description="Check which candidate model names respond")
    parser.add_argument(
        "--provider",
        default="gemini",
        choices=available_providers(),
        help="Provider to check (default: gemini)",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        help="Model names to try (default: a built-in list per provider)",
    )
    args = parser.parse_args()

    models = args.models or DEFAULT_CANDIDATES.get(args.provider, [])
    if not models:
        print(f"No candidate models for {args.provider}; pass --models", file=sys.stderr)
        sys.exit(1)

    working = asyncio.run(check_all(args.provider, models))
    print(f"\n{working}/{len(models)} models responded.")
    if working == 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
