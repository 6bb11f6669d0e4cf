"""Verification: look for authoritative evidence behind a discovered signal.

Confidence at this stage is additive and uncapped (validation clamps it).
"""

import logging
import re
from collections.abc import Callable

from src.core.config import ScoreWeights, VerificationConfig
from src.core.schemas import Signal, VerificationFacts, VerificationResult
from src.web.links import Anchor, extract_anchors, has_domain_suffix
from src.web.pdf import extract_text_from_pdf_bytes
from src.web.session import FetchError, HttpSession

logger = logging.getLogger(__name__)

PdfExtractor = Callable[[bytes], str]

# Checked in order; any hit counts as "the document carries a date".
DATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"),
    re.compile(r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{4}", re.IGNORECASE),
    re.compile(r"\d{4}"),
]

_PDF_TEXT_HINTS = ("notification", "download")
_APPLY_TEXT_HINTS = ("apply", "official", "website")


def has_date(text: str) -> bool:
    return any(pattern.search(text) for pattern in DATE_PATTERNS)


def mentions_signal(text: str, signal: Signal) -> bool:
    """True if the text names the signal's authority or exam (case-insensitive)."""
    lowered = text.lower()
    return signal.authority.lower() in lowered or signal.exam.lower() in lowered


def find_wrong_year(text: str, target_year: str, window_start: int, window_end: int) -> str | None:
    """Return a year from the window (other than the target) when the target is absent.

    A non-None result means the document is about a different cycle.
    """
    if target_year in text:
        return None
    for match in re.finditer(r"\b(\d{4})\b", text):
        year = match.group(1)
        if year != target_year and window_start <= int(year) <= window_end:
            return year
    return None


def pick_pdf_candidate(links: list[Anchor]) -> Anchor | None:
    for link in links:
        text = link.text.lower()
        if link.href.lower().endswith(".pdf") or any(h in text for h in _PDF_TEXT_HINTS):
            return link
    return None


def pick_apply_candidate(links: list[Anchor]) -> Anchor | None:
    for link in links:
        text = link.text.lower()
        if any(h in text for h in _APPLY_TEXT_HINTS):
            return link
    return None


class Verifier:
    """Fetches a signal's page and scores the official links found on it.

    Usage::

        verifier = Verifier(session, settings.verification, settings.scores, "2026")
        result = await verifier.verify(signal)
    """

    def __init__(
        self,
        session: HttpSession,
        config: VerificationConfig,
        weights: ScoreWeights,
        target_year: str,
        pdf_extractor: PdfExtractor = extract_text_from_pdf_bytes,
    ) -> None:
        self._session = session
        self._config = config
        self._weights = weights
        self._target_year = target_year
        self._pdf_extractor = pdf_extractor

    async def verify(self, signal: Signal) -> VerificationResult:
        logger.info("Verifying signal: %s", signal.raw_title)
        result = VerificationResult()

        try:
            html = await self._session.get_text(signal.url, timeout=self._config.page_timeout_s)
        except FetchError as e:
            logger.warning("Failed to fetch signal page %s: %s", signal.url, e.reason)
            return result

        official = [
            a for a in extract_anchors(html, signal.url)
            if has_domain_suffix(a.href, self._config.official_domains)
        ]
        pdf_link = pick_pdf_candidate(official)
        apply_link = pick_apply_candidate(official)

        if pdf_link is not None:
            result.official_pdf_url = pdf_link.href
            text = await self._download_pdf_text(pdf_link.href)
            if text:
                result.extracted_text = text[: self._config.extracted_text_chars]
                if mentions_signal(text, signal) and has_date(text):
                    wrong_year = find_wrong_year(
                        text,
                        self._target_year,
                        self._config.year_window_start,
                        self._config.year_window_end,
                    )
                    if wrong_year is not None:
                        logger.info(
                            "Vetoing %s: notice PDF references %s and not %s",
                            signal.raw_title, wrong_year, self._target_year,
                        )
                        result.verified = False
                        return result
                    result.confidence_score += self._weights.official_pdf_found
                    logger.info("PDF validated for %s", signal.exam)
                else:
                    logger.warning(
                        "PDF text failed lexical validation for %s", signal.exam,
                    )

        if apply_link is not None:
            result.official_url = apply_link.href
            result.confidence_score += self._weights.official_apply_link

        if result.official_url or result.official_pdf_url:
            result.verified = True
            result.facts = VerificationFacts(
                authority=signal.authority,
                exam=signal.exam,
                year=signal.year,
                source_url=result.official_url or result.official_pdf_url or signal.url,
            )

        logger.info(
            "Verification of '%s': verified=%s, confidence=%.2f",
            signal.raw_title, result.verified, result.confidence_score,
        )
        return result

    async def _download_pdf_text(self, url: str) -> str:
        """Download and extract a PDF. Failures are logged and yield ""."""
        try:
            data = await self._session.get_bytes(url, timeout=self._config.pdf_timeout_s)
        except FetchError as e:
            logger.warning("PDF download failed for %s: %s", url, e.reason)
            return ""
        return self._pdf_extractor(data)
