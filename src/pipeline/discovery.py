"""Discovery: scan aggregator pages and yield new, unverified signals.

Data flow per aggregator:
  1. robots.txt gate (blanket ``Disallow: /`` skips the site)
  2. Fetch page, extract anchors
  3. Noise / relevance keyword screen on anchor text
  4. Normalize title → Signal (year, authority, post type, exam, key)
  5. Filter chain (target year, in-run dedupe, repository lookups)
"""

import logging
from collections.abc import AsyncIterator

from src.core.config import DiscoveryConfig
from src.core.repository import ContentRepository
from src.core.schemas import Signal
from src.pipeline.classifier import (
    build_authority_rules,
    classify_post_type,
    contains_any,
    contains_word,
    extract_year,
    match_authority,
    normalize_exam,
)
from src.pipeline.matcher import (
    DeduplicationFilter,
    Filter,
    KnownSignalFilter,
    TargetYearFilter,
    TitleSeenFilter,
    run_filter_chain,
)
from src.web.links import Anchor, extract_anchors
from src.web.robots import is_allowed_by_robots
from src.web.session import FetchError, HttpSession

logger = logging.getLogger(__name__)


class Discovery:
    """Produces signals from the configured aggregator URLs.

    Usage::

        discovery = Discovery(session, repo, settings.discovery)
        async for signal in discovery.discover():
            ...
    """

    def __init__(
        self,
        session: HttpSession,
        repo: ContentRepository,
        config: DiscoveryConfig,
    ) -> None:
        self._session = session
        self._repo = repo
        self._config = config
        self._authority_rules = build_authority_rules(config.authorities)

    async def discover(self) -> AsyncIterator[Signal]:
        """Yield new signals, one aggregator at a time.

        The in-run dedupe filter is shared across aggregators, so the same
        notice listed on two sites is yielded once.
        """
        dedup_filter = DeduplicationFilter()
        for url in self._config.aggregators:
            candidates = await self.scan_aggregator(url)
            survivors = run_filter_chain(candidates, self._build_filters(dedup_filter))
            logger.info(
                "Aggregator %s: %d candidate links, %d new signals",
                url, len(candidates), len(survivors),
            )
            for signal in survivors:
                yield signal

    async def scan_aggregator(self, url: str) -> list[Signal]:
        """Fetch one aggregator and turn its relevant links into signals.

        Fetch failures are logged and produce an empty list.
        """
        allowed = await is_allowed_by_robots(
            self._session, url, timeout=self._config.robots_timeout_s,
        )
        if not allowed:
            logger.info("robots.txt disallows %s, skipping", url)
            return []

        try:
            html = await self._session.get_text(url, timeout=self._config.page_timeout_s)
        except FetchError as e:
            logger.warning("Failed to fetch aggregator %s: %s", url, e.reason)
            return []

        signals: list[Signal] = []
        seen_links: set[str] = set()
        for anchor in extract_anchors(html, url):
            if not anchor.text or anchor.href in seen_links:
                continue
            if not self.is_relevant(anchor.text):
                continue
            seen_links.add(anchor.href)
            signals.append(self.to_signal(anchor, url))
        return signals

    def is_relevant(self, title: str) -> bool:
        """Noise terms veto a title; otherwise one relevance keyword is required."""
        if contains_word(title, self._config.noise_terms):
            return False
        return contains_any(title, self._config.relevance_keywords)

    def to_signal(self, anchor: Anchor, source: str) -> Signal:
        title = anchor.text
        year = extract_year(title)
        authority = match_authority(title, self._authority_rules)
        return Signal(
            raw_title=title,
            url=anchor.href,
            authority=authority,
            exam=normalize_exam(title, authority, year),
            year=year,
            post_type=classify_post_type(title),
            source=source,
        )

    def _build_filters(self, dedup_filter: DeduplicationFilter) -> list[Filter]:
        filters: list[Filter] = [
            TargetYearFilter(self._config.target_year),
            dedup_filter,
            KnownSignalFilter(self._repo),
            TitleSeenFilter(self._repo),
        ]
        return filters
