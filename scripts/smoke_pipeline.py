#!/usr/bin/env python3
"""Run verification, generation and validation on one canned signal.

The signal page is served from memory (httpx.MockTransport) and links to the
real notice PDF and apply page, so PDF download and the model call are live.
Nothing is written to the database.

Usage:
    python scripts/smoke_pipeline.py
    python scripts/smoke_pipeline.py --provider anthropic --auto-publish
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx

# Ensure project root is on the path when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import Settings
from src.core.schemas import PostType, Signal
from src.llm import available_providers, get_provider
from src.pipeline.assembly import build_rate_limiter
from src.pipeline.generation import Generator
from src.pipeline.validation import validate
from src.pipeline.verification import Verifier
from src.web.session import HttpSession

SIGNAL_URL = "http://mock-aggregator.test/upsc-post"

SIGNAL_PAGE = """
<html><body>
  <h1>UPSC Civil Services 2026</h1>
  <a href="https://upsc.gov.in/sites/default/files/Notif-CSP-26-engl.pdf">Official Notification PDF</a>
  <a href="https://upsconline.nic.in/apply-online">Apply Online</a>
</body></html>
"""


def _route(real: httpx.AsyncBaseTransport) -> httpx.AsyncBaseTransport:
    """Serve the canned signal page, pass everything else through."""

    async def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == SIGNAL_URL:
            return httpx.Response(200, text=SIGNAL_PAGE)
        return await real.handle_async_request(request)

    return httpx.MockTransport(handler)


async def smoke(settings: Settings) -> None:
    signal = Signal(
        raw_title="UPSC Civil Services 2026 Apply Online",
        url=SIGNAL_URL,
        authority="UPSC",
        exam="Civil Services",
        year="2026",
        post_type=PostType.RECRUITMENT,
        source="smoke_script",
    )
    print(f"1. Signal: {signal.raw_title} (key {signal.idempotency_key})")

    async with HttpSession(settings.http, transport=_route(httpx.AsyncHTTPTransport())) as session:
        verifier = Verifier(
            session, settings.verification, settings.scores, settings.discovery.target_year,
        )
        verification = await verifier.verify(signal)

    print(
        f"2. Verification: verified={verification.verified} "
        f"score={verification.confidence_score:.2f} "
        f"pdf={verification.official_pdf_url} text={len(verification.extracted_text)} chars",
    )
    if not verification.verified:
        print("Verification failed, stopping.")
        return

    generator = Generator(
        get_provider(settings.generation.provider),
        build_rate_limiter(settings),
        settings.generation,
        settings.automation.agent_version,
    )
    draft = await generator.generate(verification, signal)
    print(f"3. Generation: {draft.title!r} -> {draft.slug}")

    draft = validate(draft, verification, settings)
    details = draft.automation_details
    print(
        f"4. Validation: status={draft.status.value} "
        f"automation={details.automation_status.value if details.automation_status else '-'} "
        f"confidence={details.confidence_score} completeness={details.completeness_score}",
    )
    for issue in details.issues:
        print(f"   issue: {issue}")
    print(json.dumps(draft.to_document(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke-test the per-signal pipeline")
    parser.add_argument("--config", help="Optional settings YAML (defaults are used otherwise)")
    parser.add_argument("--provider", choices=available_providers(), help="Override provider")
    parser.add_argument("--auto-publish", action="store_true", help="Enable auto-publish")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    settings = Settings.from_yaml(args.config) if args.config else Settings()
    if args.provider:
        settings.generation.provider = args.provider
    if args.auto_publish:
        settings.automation.auto_publish = True

    asyncio.run(smoke(settings))


if __name__ == "__main__":
    main()
