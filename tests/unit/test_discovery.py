"""Tests for Discovery against in-memory aggregator pages (httpx.MockTransport)."""

import httpx
import pytest

from src.core.config import DiscoveryConfig, HttpConfig
from src.core.db import init_db
from src.core.repository import ContentRepository
from src.core.schemas import AutomationDetails, AutomationStatus, PostDraft, PostType
from src.pipeline.discovery import Discovery
from src.web.session import HttpSession

AGGREGATOR = "https://agg.example.com/latest-jobs"
SECOND_AGGREGATOR = "https://other-agg.example.com/latest-jobs"

AGGREGATOR_PAGE = """
<html><body>
  <a href="/upsc-cs-2026">UPSC Civil Services 2026 Apply Online</a>
  <a href="/upsc-cs-2024">UPSC Civil Services 2024 Apply Online</a>
  <a href="https://youtube.com/watch">Watch notification on YouTube 2026</a>
  <a href="/sbi-po-2026-result">SBI PO 2026 Result</a>
  <a href="/about">About Us</a>
  <a href="/ssc-cgl-2026">SSC CGL 2026 Online Form</a>
  <a href="/ssc-cgl-2026">SSC CGL 2026 Online Form</a>
  <a href="/navy-2026">Indian Navy Agniveer 2026 Admit Card</a>
  <a href="#top">Apply online 2026</a>
</body></html>
"""


def _transport(pages: dict[str, tuple[int, str]]) -> httpx.MockTransport:
    """Serve (status, body) per exact URL; anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        status, body = pages.get(str(request.url), (404, ""))
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler)


def _config(**overrides: object) -> DiscoveryConfig:
    defaults: dict[str, object] = {"target_year": "2026", "aggregators": [AGGREGATOR]}
    defaults.update(overrides)
    return DiscoveryConfig(**defaults)  # type: ignore[arg-type]


@pytest.fixture()
def repo(tmp_path):  # type: ignore[no-untyped-def]
    return ContentRepository(init_db(tmp_path / "test.db"))


async def _collect(discovery: Discovery) -> list:  # type: ignore[type-arg]
    return [s async for s in discovery.discover()]


class TestDiscover:
    async def test_yields_relevant_target_year_signals(self, repo) -> None:  # type: ignore[no-untyped-def]
        transport = _transport({AGGREGATOR: (200, AGGREGATOR_PAGE)})
        async with HttpSession(HttpConfig(), transport=transport) as session:
            signals = await _collect(Discovery(session, repo, _config()))

        titles = [s.raw_title for s in signals]
        assert titles == [
            "UPSC Civil Services 2026 Apply Online",
            "SSC CGL 2026 Online Form",
            "Indian Navy Agniveer 2026 Admit Card",
        ]

    async def test_signal_fields_normalized(self, repo) -> None:  # type: ignore[no-untyped-def]
        transport = _transport({AGGREGATOR: (200, AGGREGATOR_PAGE)})
        async with HttpSession(HttpConfig(), transport=transport) as session:
            signals = await _collect(Discovery(session, repo, _config()))

        upsc = signals[0]
        assert upsc.url == "https://agg.example.com/upsc-cs-2026"
        assert upsc.authority == "UPSC"
        assert upsc.exam == "Civil Services"
        assert upsc.year == "2026"
        assert upsc.post_type == PostType.RECRUITMENT
        assert upsc.source == AGGREGATOR
        assert upsc.idempotency_key

        navy = signals[2]
        assert navy.authority == "Indian Navy"
        assert navy.post_type == PostType.ADMIT_CARD

    async def test_year_filter_excludes_2024_signal(self, repo) -> None:  # type: ignore[no-untyped-def]
        transport = _transport({AGGREGATOR: (200, AGGREGATOR_PAGE)})
        async with HttpSession(HttpConfig(), transport=transport) as session:
            signals = await _collect(Discovery(session, repo, _config()))
        assert all(s.year == "2026" for s in signals)
        assert not any("2024" in s.raw_title for s in signals)

    async def test_known_signals_skipped(self, repo) -> None:  # type: ignore[no-untyped-def]
        transport = _transport({AGGREGATOR: (200, AGGREGATOR_PAGE)})
        async with HttpSession(HttpConfig(), transport=transport) as session:
            discovery = Discovery(session, repo, _config())
            first = await _collect(discovery)
            repo.insert(PostDraft(
                title="Unrelated stored title",
                slug="stored",
                automation_details=AutomationDetails(
                    idempotency_key=first[0].idempotency_key,
                    automation_status=AutomationStatus.COMPLETED,
                ),
            ))
            repo.insert(PostDraft(title="SSC CGL 2026 Online Form - Details", slug="ssc"))
            second = await _collect(discovery)

        assert [s.raw_title for s in second] == ["Indian Navy Agniveer 2026 Admit Card"]

    async def test_robots_disallow_skips_aggregator(self, repo) -> None:  # type: ignore[no-untyped-def]
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            if request.url.path == "/robots.txt":
                return httpx.Response(200, text="User-agent: *\nDisallow: /\n")
            return httpx.Response(200, text=AGGREGATOR_PAGE)

        async with HttpSession(HttpConfig(), transport=httpx.MockTransport(handler)) as session:
            signals = await _collect(Discovery(session, repo, _config()))

        assert signals == []
        assert requested == ["https://agg.example.com/robots.txt"]

    async def test_failing_aggregator_does_not_stop_others(self, repo) -> None:  # type: ignore[no-untyped-def]
        transport = _transport({
            AGGREGATOR: (500, ""),
            SECOND_AGGREGATOR: (200, AGGREGATOR_PAGE),
        })
        config = _config(aggregators=[AGGREGATOR, SECOND_AGGREGATOR])
        async with HttpSession(HttpConfig(), transport=transport) as session:
            signals = await _collect(Discovery(session, repo, config))

        assert len(signals) == 3
        assert all(s.source == SECOND_AGGREGATOR for s in signals)

    async def test_same_notice_on_two_aggregators_yielded_once(self, repo) -> None:  # type: ignore[no-untyped-def]
        transport = _transport({
            AGGREGATOR: (200, AGGREGATOR_PAGE),
            SECOND_AGGREGATOR: (200, AGGREGATOR_PAGE),
        })
        config = _config(aggregators=[AGGREGATOR, SECOND_AGGREGATOR])
        async with HttpSession(HttpConfig(), transport=transport) as session:
            signals = await _collect(Discovery(session, repo, config))

        assert len(signals) == 3


class TestIsRelevant:
    @pytest.fixture()
    def discovery(self, repo):  # type: ignore[no-untyped-def]
        return Discovery(HttpSession(HttpConfig()), repo, _config())

    def test_noise_vetoes(self, discovery) -> None:  # type: ignore[no-untyped-def]
        assert discovery.is_relevant("Download App for notification") is False
        assert discovery.is_relevant("Sarkari Portal apply online") is False

    def test_apply_is_not_app_noise(self, discovery) -> None:  # type: ignore[no-untyped-def]
        assert discovery.is_relevant("SSC GD 2026 Apply Online") is True

    def test_requires_keyword(self, discovery) -> None:  # type: ignore[no-untyped-def]
        assert discovery.is_relevant("Contact Us") is False

    @pytest.mark.parametrize(
        "title",
        [
            "SSC CGL Results 2026 Notification",
            "Top Apps for SSC 2026 Apply Online",
            "Sarkari Portals 2026 Online Form",
        ],
    )
    def test_plural_noise_vetoes(self, discovery, title: str) -> None:  # type: ignore[no-untyped-def]
        assert discovery.is_relevant(title) is False
