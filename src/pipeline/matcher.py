"""Filter chain for discovered signals.

Filter order:
  1. TargetYearFilter    - drops signals whose year is not the target year
  2. DeduplicationFilter - in-memory within run, by idempotency key
  3. KnownSignalFilter   - repository lookup, key already completed
  4. TitleSeenFilter     - repository lookup, raw title substring of a stored title
"""

import logging
from collections.abc import Callable

from src.core.repository import ContentRepository
from src.core.schemas import Signal

logger = logging.getLogger(__name__)

# A filter is a callable that takes signals and returns a subset.
Filter = Callable[[list[Signal]], list[Signal]]


class TargetYearFilter:
    """Keep only signals whose extracted year equals the target year."""

    def __init__(self, target_year: str) -> None:
        self._target_year = target_year

    def __call__(self, signals: list[Signal]) -> list[Signal]:
        result = [s for s in signals if s.year == self._target_year]
        dropped = len(signals) - len(result)
        if dropped:
            logger.debug("TargetYearFilter: removed %d signals", dropped)
        return result


class DeduplicationFilter:
    """Remove duplicates by idempotency key within a single run.

    Stateful: tracks seen keys across calls within the same filter instance.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __call__(self, signals: list[Signal]) -> list[Signal]:
        result: list[Signal] = []
        for s in signals:
            if s.idempotency_key not in self._seen:
                self._seen.add(s.idempotency_key)
                result.append(s)
        deduped = len(signals) - len(result)
        if deduped:
            logger.debug("DeduplicationFilter: removed %d duplicates", deduped)
        return result


class KnownSignalFilter:
    """Remove signals whose key already produced a completed post."""

    def __init__(self, repo: ContentRepository) -> None:
        self._repo = repo

    def __call__(self, signals: list[Signal]) -> list[Signal]:
        result = [s for s in signals if not self._repo.exists_completed(s.idempotency_key)]
        known = len(signals) - len(result)
        if known:
            logger.debug("KnownSignalFilter: removed %d already-processed signals", known)
        return result


class TitleSeenFilter:
    """Remove signals whose raw title appears inside a stored post title."""

    def __init__(self, repo: ContentRepository) -> None:
        self._repo = repo

    def __call__(self, signals: list[Signal]) -> list[Signal]:
        result = [s for s in signals if not self._repo.title_matches(s.raw_title)]
        seen = len(signals) - len(result)
        if seen:
            logger.debug("TitleSeenFilter: removed %d signals with known titles", seen)
        return result


def run_filter_chain(signals: list[Signal], filters: list[Filter]) -> list[Signal]:
    """Apply filters in order, returning the surviving signals."""
    result = signals
    for f in filters:
        if not result:
            break
        result = f(result)
    return result
