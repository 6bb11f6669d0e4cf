"""Tests for signal verification: link picking, lexical checks and the wrong-year veto."""

import httpx
import pytest

from src.core.config import HttpConfig, ScoreWeights, VerificationConfig
from src.core.schemas import PostType, Signal
from src.pipeline.verification import (
    Verifier,
    find_wrong_year,
    has_date,
    mentions_signal,
    pick_apply_candidate,
    pick_pdf_candidate,
)
from src.web.links import Anchor
from src.web.session import HttpSession

SIGNAL_URL = "https://agg.example.com/upsc-cs-2026"
PDF_URL = "https://upsc.gov.in/notices/cse-2026.pdf"
APPLY_URL = "https://upsconline.nic.in/apply"

SIGNAL_PAGE = f"""
<html><body>
  <a href="https://agg.example.com/other">Download Notification (mirror)</a>
  <a href="{PDF_URL}">Download Notification</a>
  <a href="{APPLY_URL}">Apply Online</a>
</body></html>
"""


def _signal() -> Signal:
    return Signal(
        raw_title="UPSC Civil Services 2026 Apply Online",
        url=SIGNAL_URL,
        authority="UPSC",
        exam="Civil Services",
        year="2026",
        post_type=PostType.RECRUITMENT,
        source="https://agg.example.com",
    )


def _transport(pages: dict[str, tuple[int, bytes]]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = pages.get(str(request.url), (404, b""))
        return httpx.Response(status, content=body)

    return httpx.MockTransport(handler)


def _verifier(session: HttpSession, **config: object) -> Verifier:
    return Verifier(
        session,
        VerificationConfig(**config),  # type: ignore[arg-type]
        ScoreWeights(),
        "2026",
        pdf_extractor=lambda data: data.decode("utf-8"),
    )


async def _verify(pages: dict[str, tuple[int, bytes]], signal: Signal | None = None):  # type: ignore[no-untyped-def]
    async with HttpSession(HttpConfig(), transport=_transport(pages)) as session:
        return await _verifier(session).verify(signal or _signal())


# ---------------------------------------------------------------------------
# Lexical helpers
# ---------------------------------------------------------------------------


class TestHasDate:
    @pytest.mark.parametrize(
        "text",
        ["Last date 14/02/2026", "closes 1-3-26", "Published February 2026", "Cycle 2026"],
    )
    def test_matches(self, text: str) -> None:
        assert has_date(text) is True

    def test_no_date(self) -> None:
        assert has_date("Apply before the last date") is False


class TestMentionsSignal:
    def test_authority_case_insensitive(self) -> None:
        assert mentions_signal("notice issued by upsc", _signal()) is True

    def test_exam_name(self) -> None:
        assert mentions_signal("CIVIL SERVICES examination", _signal()) is True

    def test_neither(self) -> None:
        assert mentions_signal("Staff Selection Commission", _signal()) is False


class TestFindWrongYear:
    def test_target_present_never_vetoes(self) -> None:
        assert find_wrong_year("Notice 2025, exam 2026", "2026", 2020, 2029) is None

    def test_other_year_in_window(self) -> None:
        assert find_wrong_year("UPSC 14/02/2024", "2026", 2020, 2029) == "2024"

    def test_year_outside_window_ignored(self) -> None:
        assert find_wrong_year("Established 1926", "2026", 2020, 2029) is None


class TestLinkCandidates:
    def test_pdf_by_extension_or_text(self) -> None:
        links = [
            Anchor(href="https://upsc.gov.in/apply", text="Apply Online"),
            Anchor(href="https://upsc.gov.in/n.PDF", text="Notice"),
        ]
        assert pick_pdf_candidate(links) == links[1]
        assert pick_pdf_candidate([Anchor(href="https://ssc.nic.in/x", text="Download")]) is not None

    def test_apply_by_text(self) -> None:
        links = [
            Anchor(href="https://upsc.gov.in/n.pdf", text="Notification"),
            Anchor(href="https://upsc.gov.in", text="Official Website"),
        ]
        assert pick_apply_candidate(links) == links[1]

    def test_none(self) -> None:
        assert pick_pdf_candidate([]) is None
        assert pick_apply_candidate([Anchor(href="https://upsc.gov.in", text="Home")]) is None


# ---------------------------------------------------------------------------
# Verifier
# ---------------------------------------------------------------------------


class TestVerifier:
    async def test_pdf_and_apply_link_verified(self) -> None:
        result = await _verify({
            SIGNAL_URL: (200, SIGNAL_PAGE.encode()),
            PDF_URL: (200, b"UPSC Civil Services Examination 2026. Last date 14/02/2026"),
        })
        assert result.verified is True
        assert result.official_pdf_url == PDF_URL
        assert result.official_url == APPLY_URL
        assert result.confidence_score == pytest.approx(0.7)
        assert result.facts is not None
        assert result.facts.source_url == APPLY_URL
        assert result.facts.authority == "UPSC"
        assert "Last date" in result.extracted_text

    async def test_wrong_year_pdf_vetoes_despite_apply_link(self) -> None:
        result = await _verify({
            SIGNAL_URL: (200, SIGNAL_PAGE.encode()),
            PDF_URL: (200, b"UPSC notice dated 14/02/2024"),
        })
        assert result.verified is False
        assert result.official_url is None
        assert result.facts is None
        assert result.confidence_score == 0.0

    async def test_pdf_failing_lexical_check_adds_no_weight(self) -> None:
        result = await _verify({
            SIGNAL_URL: (200, SIGNAL_PAGE.encode()),
            PDF_URL: (200, b"Staff Selection Commission, no dates here"),
        })
        assert result.verified is True
        assert result.confidence_score == pytest.approx(0.2)

    async def test_pdf_download_failure_is_not_a_veto(self) -> None:
        result = await _verify({SIGNAL_URL: (200, SIGNAL_PAGE.encode())})
        assert result.verified is True
        assert result.official_pdf_url == PDF_URL
        assert result.extracted_text == ""
        assert result.confidence_score == pytest.approx(0.2)

    async def test_page_fetch_failure_unverified(self) -> None:
        result = await _verify({SIGNAL_URL: (500, b"")})
        assert result.verified is False
        assert result.confidence_score == 0.0
        assert result.facts is None

    async def test_no_official_links_unverified(self) -> None:
        page = b'<a href="https://agg.example.com/apply">Apply Online</a>'
        result = await _verify({SIGNAL_URL: (200, page)})
        assert result.verified is False
        assert result.official_url is None

    async def test_relative_links_resolved_against_page(self) -> None:
        signal = _signal().model_copy(update={"url": "https://ssc.gov.in/notices/cgl"})
        page = b'<a href="/apply">Apply Online</a>'
        result = await _verify({"https://ssc.gov.in/notices/cgl": (200, page)}, signal)
        assert result.verified is True
        assert result.official_url == "https://ssc.gov.in/apply"

    async def test_extracted_text_truncated(self) -> None:
        body = ("UPSC Civil Services 2026 " * 400).encode()
        async with HttpSession(
            HttpConfig(),
            transport=_transport({SIGNAL_URL: (200, SIGNAL_PAGE.encode()), PDF_URL: (200, body)}),
        ) as session:
            result = await _verifier(session, extracted_text_chars=100).verify(_signal())
        assert len(result.extracted_text) == 100
