"""Title-only drafting: build a post from a bare title (and optional notice text).

Each attempt moves through a small state machine:

  ATTEMPTING ─┬─> SUCCEEDED
              ├─> RETRYABLE_FAILURE ──> ATTEMPTING (next attempt)
              └─> TERMINAL_FAILURE   (attempt budget spent)

The previous raw output and its rule violations are passed explicitly into the
next attempt's prompt so the model can correct itself.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.core.config import GenerationConfig
from src.core.repository import ContentRepository
from src.core.schemas import AutomationDetails, AutomationStatus, PostDraft, PostStatus
from src.core.slugs import slugify
from src.llm import LLMProvider, parse_json_object
from src.pipeline.categories import resolve_category_by_name
from src.pipeline.generation import (
    DRAFT_JSON_SCHEMA,
    META_DESCRIPTION_MAX,
    META_TITLE_MAX,
    parse_draft,
)
from src.pipeline.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

TITLE_MAX = 65
FORBIDDEN_PHRASES = ("official website", "government portal", "apply here officially")

SOURCE_TYPE_MANUAL = "manual_title"


class AttemptState(str, Enum):
    ATTEMPTING = "attempting"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"
    SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one model call."""

    attempt: int
    state: AttemptState
    raw_output: str | None = None
    errors: tuple[str, ...] = ()
    draft: PostDraft | None = None


@dataclass
class TitleDraftResult:
    """Final draft plus the attempt history that produced it."""

    draft: PostDraft
    state: AttemptState
    attempts: list[AttemptResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == AttemptState.SUCCEEDED


def check_title_draft(draft: PostDraft, payload: dict[str, object]) -> list[str]:
    """Rule violations for a parsed title-flow response (empty list means OK)."""
    errors: list[str] = []
    if not draft.title.strip():
        errors.append("Missing post title")
    elif len(draft.title) > TITLE_MAX:
        errors.append(f"Title exceeds {TITLE_MAX} characters")
    if draft.meta_title and len(draft.meta_title) > META_TITLE_MAX:
        errors.append(f"Meta title exceeds {META_TITLE_MAX} characters")
    if draft.meta_description and len(draft.meta_description) > META_DESCRIPTION_MAX:
        errors.append(f"Meta description exceeds {META_DESCRIPTION_MAX} characters")

    serialized = json.dumps(payload, default=str).lower()
    for phrase in FORBIDDEN_PHRASES:
        if phrase in serialized:
            errors.append(f'Forbidden phrase used: "{phrase}"')
    return errors


def build_title_prompt(
    title: str,
    source_text: str | None = None,
    previous_output: str | None = None,
    previous_errors: tuple[str, ...] = (),
) -> str:
    """Prompt for one attempt. Retries embed the rejected output and its errors."""
    forbidden = ", ".join(f'"{p}"' for p in FORBIDDEN_PHRASES)
    prompt = (
        "Convert the recruitment notice below into structured JSON for a jobs portal.\n\n"
        "RULES:\n"
        "1. Extract factual data only. If something is not stated, use null. Do not hallucinate.\n"
        "2. Rewrite descriptions in original, neutral, informational language.\n"
        f"3. title at most {TITLE_MAX} characters, metaTitle at most {META_TITLE_MAX}, "
        f"metaDescription at most {META_DESCRIPTION_MAX}. Provide a url-friendly slug.\n"
        "4. Set category to a category name such as Latest Jobs, Result, Admit Card, "
        "Syllabus or Answer Key.\n"
        f"5. Never use these phrases: {forbidden}.\n\n"
        f"OUTPUT SCHEMA (strict JSON only):\n{DRAFT_JSON_SCHEMA}\n\n"
        f"NOTICE TITLE: {title}\n"
    )
    if source_text:
        prompt += f"\nNOTICE TEXT:\n{source_text}\n"
    if previous_output is not None:
        problems = "\n".join(f"- {e}" for e in previous_errors)
        prompt += (
            "\nYour previous answer was rejected.\n"
            f"PREVIOUS ANSWER:\n{previous_output}\n"
            f"PROBLEMS TO FIX:\n{problems}\n"
            "Return a corrected JSON object.\n"
        )
    return prompt


class TitleDraftAgent:
    """Drafts a post from a title with a bounded, self-correcting retry loop.

    Shares the process-wide rate limiter with the daily pipeline.
    """

    def __init__(
        self,
        provider: LLMProvider,
        limiter: SlidingWindowRateLimiter,
        config: GenerationConfig,
        agent_version: str,
    ) -> None:
        self._provider = provider
        self._limiter = limiter
        self._config = config
        self._agent_version = agent_version

    @property
    def model_name(self) -> str:
        return self._config.model or self._provider.default_model

    async def create(self, title: str, source_text: str | None = None) -> TitleDraftResult:
        if not title.strip():
            msg = "title must not be empty"
            raise ValueError(msg)

        max_attempts = self._config.max_title_attempts
        history: list[AttemptResult] = []
        previous_output: str | None = None
        previous_errors: tuple[str, ...] = ()

        for attempt in range(1, max_attempts + 1):
            result = await self.attempt(
                title, source_text, attempt, max_attempts, previous_output, previous_errors,
            )
            history.append(result)
            if result.state == AttemptState.SUCCEEDED and result.draft is not None:
                logger.info("Title draft for '%s' succeeded on attempt %d", title, attempt)
                return TitleDraftResult(result.draft, AttemptState.SUCCEEDED, history)
            logger.warning(
                "Title draft attempt %d/%d for '%s' rejected: %s",
                attempt, max_attempts, title, "; ".join(result.errors),
            )
            if result.state == AttemptState.TERMINAL_FAILURE:
                break
            previous_output = result.raw_output
            previous_errors = result.errors

        last_errors = history[-1].errors if history else ()
        return TitleDraftResult(self.stub_draft(title, last_errors), AttemptState.TERMINAL_FAILURE, history)

    async def attempt(
        self,
        title: str,
        source_text: str | None,
        attempt: int,
        max_attempts: int,
        previous_output: str | None = None,
        previous_errors: tuple[str, ...] = (),
    ) -> AttemptResult:
        """Run one ATTEMPTING step and classify its outcome."""
        failed = (
            AttemptState.TERMINAL_FAILURE if attempt >= max_attempts
            else AttemptState.RETRYABLE_FAILURE
        )
        prompt = build_title_prompt(title, source_text, previous_output, previous_errors)

        await self._limiter.acquire()
        try:
            raw = await self._provider.generate(
                prompt,
                model=self._config.model,
                temperature=self._config.temperature,
            )
        except Exception as e:
            logger.warning("Model call failed on attempt %d", attempt, exc_info=True)
            return AttemptResult(attempt, failed, errors=(f"Model call failed: {e}",))

        try:
            payload = parse_json_object(raw)
            draft = parse_draft(raw)
        except ValueError as e:
            return AttemptResult(attempt, failed, raw_output=raw, errors=(str(e),))

        errors = check_title_draft(draft, payload)
        if errors:
            return AttemptResult(attempt, failed, raw_output=raw, errors=tuple(errors))

        return AttemptResult(
            attempt,
            AttemptState.SUCCEEDED,
            raw_output=raw,
            draft=self._finalize(draft, title),
        )

    def stub_draft(self, title: str, errors: tuple[str, ...]) -> PostDraft:
        """Best-effort draft returned when every attempt was rejected."""
        details = self._details(AutomationStatus.FAILED)
        details.issues = list(errors) or ["Title draft generation failed"]
        details.ai_model_used = self.model_name
        return PostDraft(
            title=title[:TITLE_MAX],
            slug=slugify(title),
            status=PostStatus.DRAFT,
            automation_details=details,
        )

    def _finalize(self, draft: PostDraft, title: str) -> PostDraft:
        details = self._details(AutomationStatus.COMPLETED)
        details.ai_model_used = self.model_name
        return draft.model_copy(
            update={
                "slug": slugify(draft.slug) or slugify(draft.title) or slugify(title),
                "status": PostStatus.DRAFT,
                "automation_details": details,
            },
        )

    def _details(self, status: AutomationStatus) -> AutomationDetails:
        return AutomationDetails(
            source_type=SOURCE_TYPE_MANUAL,
            content_generated_at=datetime.now(),
            automation_version=self._agent_version,
            automation_status=status,
        )


def persist_title_draft(repo: ContentRepository, draft: PostDraft) -> PostDraft | None:
    """Save a title-flow draft under a free slug and a resolved category.

    Returns the stored draft, or None if the insert lost a slug race.
    """
    category = resolve_category_by_name(repo, draft.category)
    stored = draft.model_copy(
        update={
            "slug": repo.unique_slug(draft.slug or "post"),
            "category_id": category.id if category else None,
            "category": category.slug if category else draft.category,
            "status": PostStatus.DRAFT,
        },
    )
    if not repo.insert(stored):
        logger.warning("Slug %s was taken concurrently, draft not saved", stored.slug)
        return None
    logger.info("Saved title draft '%s' as %s", stored.title, stored.slug)
    return stored
