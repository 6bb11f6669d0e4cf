"""Generation: turn a verified signal into a structured post draft.

Model calls pass through the shared rate limiter. Any model or parse failure
degrades to a minimal fallback draft; this module never raises to its caller.
"""

import json
import logging
from datetime import datetime

from pydantic import ValidationError

from src.core.config import GenerationConfig
from src.core.schemas import (
    AutomationDetails,
    AutomationStatus,
    PostDraft,
    PostStatus,
    PostType,
    Signal,
    VerificationResult,
)
from src.core.slugs import slugify
from src.llm import LLMProvider, parse_json_object
from src.pipeline.categories import CATEGORY_SLUG_BY_POST_TYPE
from src.pipeline.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

META_TITLE_MAX = 65
META_DESCRIPTION_MAX = 150

SOURCE_TYPE_AGGREGATOR = "aggregator"

DRAFT_JSON_SCHEMA = """{
  "title": "Normalized Title",
  "slug": "url-friendly-slug-with-year",
  "shortDescription": "2-3 line summary.",
  "fullDescription": "Detailed info in HTML (p, ul, li tags only).",
  "category": null,
  "organization": "Organization Name",
  "postDate": "YYYY-MM-DD",
  "lastDate": "YYYY-MM-DD",
  "qualification": "Brief eligibility",
  "ageLimit": "Age range details",
  "fees": "Application fee details",
  "totalPosts": 0,
  "educationalQualification": "Detailed educational qualification",
  "categoryWiseVacancy": [{"category": "Gen/OBC/SC/ST", "totalPosts": 0}],
  "postWiseVacancy": [{"postName": "Post Name", "totalPosts": 0}],
  "importantDates": [{"label": "Application Begin", "date": "YYYY-MM-DD"}],
  "notificationPdf": "URL from input",
  "primaryActionLink": "URL from input",
  "availabilityNote": "e.g. Admit card expected in April",
  "physicalStandardTest": {
    "male": [{"category": "General", "height": "170 cm", "chest": "80-85 cm"}],
    "female": [{"category": "General", "height": "157 cm", "minWeight": "45 kg"}]
  },
  "physicalEfficiencyTest": [{"category": "Running", "distance": "5 km", "time": "24 mins"}],
  "metaTitle": "SEO title (max 65 chars)",
  "metaDescription": "SEO description (max 150 chars)"
}"""

_SYSTEM_PROMPT = (
    "You write recruitment-notice posts for a government jobs portal. "
    "Official government sources are the only source of truth. "
    "Return ONLY a JSON object (no markdown, no explanation)."
)

_RULES = (
    "RULES:\n"
    "1. No hallucinations: if a detail (fee, age limit, dates, vacancies) is not "
    "in the input, use null. Never invent values.\n"
    "2. Prefer the extracted official text over the source signal.\n"
    "3. Rewrite descriptions in your own professional words.\n"
    f"4. SEO limits (mandatory): metaTitle at most {META_TITLE_MAX} characters, "
    f"metaDescription at most {META_DESCRIPTION_MAX} characters.\n"
    "5. Put availability notes (e.g. 'Admit card expected in April') in "
    "availabilityNote, physical standards (height, chest, weight) in "
    "physicalStandardTest and physical efficiency events in physicalEfficiencyTest.\n"
    "6. Leave category as null.\n"
)

# Only recruitment notices carry eligibility and fee details.
_RECRUITMENT_ONLY_FIELDS = ("qualification", "age_limit", "fees")


def build_prompt(
    signal: Signal,
    verification: VerificationResult,
    snippet_chars: int = 10_000,
) -> str:
    """Assemble the generation prompt from the signal and its verification evidence."""
    facts = verification.facts.model_dump() if verification.facts else {}
    snippet = verification.extracted_text[:snippet_chars] or "Not available"
    input_section = (
        "INPUT DATA\n"
        f"Source signal: {signal.model_dump_json()}\n"
        f"Verified facts: {json.dumps(facts)}\n"
        f"Official PDF URL: {verification.official_pdf_url or 'none'}\n"
        f"Official website: {verification.official_url or 'none'}\n"
        f"Extracted official text (snippet):\n{snippet}\n"
    )
    return (
        "Generate a JSON object for a job post based STRICTLY on the input data.\n\n"
        f"{_RULES}\n"
        f"REQUIRED JSON STRUCTURE:\n{DRAFT_JSON_SCHEMA}\n\n"
        f"{input_section}"
    )


def parse_draft(raw_text: str) -> PostDraft:
    """Parse a (possibly fenced) model response into a PostDraft.

    Raises ValueError on malformed JSON or a payload that does not fit the schema.
    """
    data = parse_json_object(raw_text)
    data.pop("automationDetails", None)
    data.pop("status", None)
    try:
        return PostDraft.model_validate(data)
    except ValidationError as e:
        msg = f"Model response does not match the post schema: {e}"
        raise ValueError(msg) from e


def apply_post_type_rules(draft: PostDraft, post_type: PostType) -> PostDraft:
    """Sanitize the slug, set the category hint and null recruitment-only fields."""
    updates: dict[str, object] = {
        "slug": slugify(draft.slug) or slugify(draft.title),
        "category": CATEGORY_SLUG_BY_POST_TYPE[post_type],
        "status": PostStatus.DRAFT,
    }
    if post_type != PostType.RECRUITMENT:
        for field in _RECRUITMENT_ONLY_FIELDS:
            updates[field] = None
    return draft.model_copy(update=updates)


class Generator:
    """Drafts posts through a generative model.

    Usage::

        generator = Generator(provider, limiter, settings.generation, "1.0.0")
        draft = await generator.generate(verification, signal)
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

    async def generate(self, verification: VerificationResult, signal: Signal) -> PostDraft:
        await self._limiter.acquire()
        logger.info("Generating content for '%s' with %s", signal.raw_title, self.model_name)
        verified_at = datetime.now()

        try:
            prompt = build_prompt(signal, verification, self._config.snippet_chars)
            raw = await self._provider.generate(
                prompt,
                model=self._config.model,
                system=_SYSTEM_PROMPT,
                temperature=self._config.temperature,
            )
            draft = parse_draft(raw)
        except Exception as e:
            logger.warning(
                "Generation failed for '%s', using fallback draft",
                signal.raw_title,
                exc_info=True,
            )
            return self.fallback_draft(signal, verification, e, verified_at)

        draft = apply_post_type_rules(draft, signal.post_type)
        if not draft.slug:
            draft = draft.model_copy(update={"slug": slugify(signal.raw_title)})
        if not draft.title:
            draft = draft.model_copy(update={"title": signal.raw_title})
        details = self._provenance(signal, verification, verified_at)
        details.ai_model_used = self.model_name
        return draft.model_copy(update={"automation_details": details})

    def fallback_draft(
        self,
        signal: Signal,
        verification: VerificationResult,
        error: Exception,
        verified_at: datetime | None = None,
    ) -> PostDraft:
        """Minimal draft used when the model call or its parsing fails."""
        details = self._provenance(signal, verification, verified_at or datetime.now())
        details.issues = [f"Generation failed: {error}"]
        details.automation_status = AutomationStatus.FAILED
        return PostDraft(
            title=signal.raw_title,
            slug=slugify(signal.raw_title),
            category=CATEGORY_SLUG_BY_POST_TYPE[signal.post_type],
            status=PostStatus.DRAFT,
            automation_details=details,
        )

    def _provenance(
        self,
        signal: Signal,
        verification: VerificationResult,
        verified_at: datetime,
    ) -> AutomationDetails:
        return AutomationDetails(
            discovered_via=signal.source,
            source_type=SOURCE_TYPE_AGGREGATOR,
            verified_from=verification.official_url or "aggregator_signal",
            official_pdf_url=verification.official_pdf_url,
            verification_timestamp=verified_at,
            content_generated_at=datetime.now(),
            automation_version=self._agent_version,
        )
