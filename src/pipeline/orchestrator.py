"""Orchestrator: wires discovery, verification, generation, validation and persistence.

Data flow per signal (strictly sequential):
  1. Verify (unverified signals are skipped)
  2. Generate draft, attach idempotency key
  3. Validate (scores, status, automation status)
  4. Map category from the post type
  5. Save (dry run logs only; an existing slug is skipped)
"""

import json
import logging
from datetime import datetime

from src.core.config import Settings
from src.core.db import insert_agent_run
from src.core.repository import ContentRepository
from src.core.schemas import PostDraft, RunSummary, Signal, SignalOutcome
from src.pipeline.categories import CategoryCatalog
from src.pipeline.discovery import Discovery
from src.pipeline.generation import Generator
from src.pipeline.validation import validate
from src.pipeline.verification import Verifier

logger = logging.getLogger(__name__)


class DailyAgent:
    """One orchestrator instance per process. Overlapping runs are rejected.

    Usage::

        agent = DailyAgent(settings, repo, discovery, verifier, generator)
        summary = await agent.run()
    """

    def __init__(
        self,
        settings: Settings,
        repo: ContentRepository,
        discovery: Discovery,
        verifier: Verifier,
        generator: Generator,
    ) -> None:
        self._settings = settings
        self._repo = repo
        self._discovery = discovery
        self._verifier = verifier
        self._generator = generator
        self._running = False
        self._catalog = CategoryCatalog([])

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def dry_run(self) -> bool:
        return self._settings.automation.dry_run

    async def run(self) -> RunSummary | None:
        """Execute one full pass. Returns None if a run is already in progress."""
        if self._running:
            logger.info("Agent already running, skipping")
            return None
        self._running = True

        summary = RunSummary(started_at=datetime.now(), dry_run=self.dry_run)
        try:
            self._repo.ensure_connection()
            self._catalog = CategoryCatalog.load(self._repo)

            async for signal in self._discovery.discover():
                summary.discovered += 1
                try:
                    outcome = await self.process_signal(signal)
                except Exception:
                    logger.exception("Failed to process signal '%s'", signal.raw_title)
                    outcome = SignalOutcome(raw_title=signal.raw_title, action="error")
                self._count(summary, outcome)

            if summary.discovered == 0:
                logger.info("No new signals found")
        except Exception as e:
            logger.exception("Critical agent error, run aborted")
            summary.aborted = True
            summary.error = str(e)
        finally:
            self._running = False
            summary.finished_at = datetime.now()

        self._record(summary)
        logger.info(
            "Run finished: %d discovered, %d unverified, %d saved (%d published), "
            "%d duplicates, %d failed",
            summary.discovered, summary.unverified, summary.saved, summary.published,
            summary.duplicates, summary.failed,
        )
        return summary

    async def process_signal(self, signal: Signal) -> SignalOutcome:
        verification = await self._verifier.verify(signal)
        if not verification.verified:
            logger.info("Skipping '%s': not verified", signal.raw_title)
            return SignalOutcome(raw_title=signal.raw_title, action="unverified")

        draft = await self._generator.generate(verification, signal)
        draft = draft.model_copy(
            update={
                "automation_details": draft.automation_details.model_copy(
                    update={"idempotency_key": signal.idempotency_key},
                ),
            },
        )
        draft = validate(draft, verification, self._settings)
        draft = self.map_category(draft)

        action = self.save_post(draft)
        details = draft.automation_details
        return SignalOutcome(
            raw_title=signal.raw_title,
            action=action,
            slug=draft.slug,
            status=draft.status,
            automation_status=details.automation_status,
            confidence_score=details.confidence_score,
            completeness_score=details.completeness_score,
        )

    def map_category(self, draft: PostDraft) -> PostDraft:
        """Resolve the draft's category hint to a persisted category."""
        category = self._catalog.resolve(draft.category)
        if category is None:
            return draft.model_copy(update={"category_id": None})
        return draft.model_copy(update={"category_id": category.id, "category": category.slug})

    def save_post(self, draft: PostDraft) -> str:
        """Persist a draft. Returns the action taken: dry_run, duplicate or saved."""
        if self.dry_run:
            logger.info("[DRY RUN] Would save post: %s [%s]", draft.title, draft.status.value)
            return "dry_run"

        if self._repo.find_by_slug(draft.slug) is not None:
            logger.info("Duplicate slug %s, skipping save", draft.slug)
            return "duplicate"

        if not self._repo.insert(draft):
            logger.info("Duplicate slug %s rejected by the database, skipping save", draft.slug)
            return "duplicate"

        logger.info("Saved post: %s [%s]", draft.title, draft.status.value)
        return "saved"

    def _count(self, summary: RunSummary, outcome: SignalOutcome) -> None:
        summary.outcomes.append(outcome)
        if outcome.action == "unverified":
            summary.unverified += 1
        elif outcome.action == "saved":
            summary.saved += 1
        elif outcome.action == "duplicate":
            summary.duplicates += 1
        elif outcome.action == "error":
            summary.failed += 1

    def _record(self, summary: RunSummary) -> None:
        if summary.aborted or self.dry_run:
            return
        try:
            insert_agent_run(self._repo.conn, summary)
        except Exception:
            logger.warning("Could not record agent run", exc_info=True)


def export_run_json(summary: RunSummary) -> str:
    """Export a run's per-signal outcomes as a JSON string."""
    data = {
        "started_at": summary.started_at.isoformat(),
        "finished_at": summary.finished_at.isoformat() if summary.finished_at else None,
        "dry_run": summary.dry_run,
        "aborted": summary.aborted,
        "error": summary.error,
        "outcomes": [o.model_dump(mode="json") for o in summary.outcomes],
    }
    return json.dumps(data, indent=2)
