"""Rule-based scoring for post drafts.

Completeness range: 0-100 (clamped). 15 points per critical field present,
2.5 per secondary field present.
Confidence range: 0-1 (clamped). Verification evidence plus content bonuses.
"""

from typing import Any

from src.core.config import ScoreWeights
from src.core.schemas import PhysicalStandardTest, PostDraft

CRITICAL_FIELDS = (
    "title",
    "short_description",
    "category",
    "post_date",
    "last_date",
    "primary_action_link",
)
SECONDARY_FIELDS = (
    "fees",
    "age_limit",
    "educational_qualification",
    "total_posts",
    "availability_note",
    "physical_standard_test",
    "physical_efficiency_test",
)

CRITICAL_FIELD_POINTS = 15.0
SECONDARY_FIELD_POINTS = 2.5


def is_present(value: Any) -> bool:
    """Whether a draft field counts as filled in.

    None, blank strings, empty collections, zero and an empty physical
    standards table all count as missing.
    """
    if isinstance(value, PhysicalStandardTest):
        return value.has_rows
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def completeness_score(draft: PostDraft) -> float:
    score = 0.0
    for field in CRITICAL_FIELDS:
        if is_present(getattr(draft, field)):
            score += CRITICAL_FIELD_POINTS
    for field in SECONDARY_FIELDS:
        if is_present(getattr(draft, field)):
            score += SECONDARY_FIELD_POINTS

    # Clamp to 0-100
    return max(0.0, min(100.0, score))


def confidence_score(draft: PostDraft, base: float, weights: ScoreWeights) -> float:
    """Add content bonuses to the verification score and clamp to 0-1."""
    score = base
    if draft.important_dates:
        score += weights.critical_dates_confirmed
    if is_present(draft.total_posts):
        score += weights.vacancy_confirmed
    return round(max(0.0, min(1.0, score)), 4)
