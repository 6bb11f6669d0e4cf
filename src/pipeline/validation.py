"""Validation: sanity checks, scoring and the publish decision.

A draft is never dropped here; invalid data is downgraded to a failed draft.
"""

import logging
from datetime import date

from src.core.config import Settings
from src.core.schemas import (
    AutomationStatus,
    PostDraft,
    PostStatus,
    ValidationReport,
    VerificationResult,
)
from src.pipeline.generation import META_DESCRIPTION_MAX, META_TITLE_MAX
from src.pipeline.scorer import completeness_score, confidence_score

logger = logging.getLogger(__name__)


def check_draft(
    draft: PostDraft,
    verification: VerificationResult,
    settings: Settings,
    today: date | None = None,
) -> ValidationReport:
    """Run the sanity checks and compute both scores."""
    today = today or date.today()
    report = ValidationReport()

    if draft.last_date is not None and draft.last_date < today:
        report.issues.append("Last date is in the past")

    if draft.total_posts is not None and draft.total_posts < 0:
        report.issues.append("Negative vacancy count")
        report.is_valid = False

    if draft.meta_title and len(draft.meta_title) > META_TITLE_MAX:
        report.issues.append(f"Meta title exceeds {META_TITLE_MAX} characters")
    if draft.meta_description and len(draft.meta_description) > META_DESCRIPTION_MAX:
        report.issues.append(f"Meta description exceeds {META_DESCRIPTION_MAX} characters")

    report.completeness_score = completeness_score(draft)
    report.confidence_score = confidence_score(
        draft, verification.confidence_score, settings.scores,
    )
    return report


def decide_status(report: ValidationReport, settings: Settings) -> PostStatus:
    """Published only when auto-publish is on, both thresholds are met and the draft is valid."""
    thresholds = settings.thresholds
    if (
        settings.automation.auto_publish
        and report.confidence_score >= thresholds.publish_confidence
        and report.completeness_score >= thresholds.publish_completeness
        and report.is_valid
    ):
        return PostStatus.PUBLISHED
    return PostStatus.DRAFT


def validate(
    draft: PostDraft,
    verification: VerificationResult,
    settings: Settings,
    today: date | None = None,
) -> PostDraft:
    """Return a copy of ``draft`` with status and scoring provenance finalized."""
    report = check_draft(draft, verification, settings, today)
    status = decide_status(report, settings)
    # A draft that already failed upstream (e.g. the generation fallback) stays failed.
    failed_upstream = draft.automation_details.automation_status == AutomationStatus.FAILED
    if report.is_valid and not failed_upstream:
        automation_status = AutomationStatus.COMPLETED
    else:
        automation_status = AutomationStatus.FAILED

    details = draft.automation_details.model_copy(
        update={
            "confidence_score": report.confidence_score,
            "completeness_score": report.completeness_score,
            "automation_status": automation_status,
            "issues": [*draft.automation_details.issues, *report.issues],
        },
    )
    logger.info(
        "Validated '%s': confidence=%.2f completeness=%.1f valid=%s -> %s",
        draft.title, report.confidence_score, report.completeness_score,
        report.is_valid, status.value,
    )
    return draft.model_copy(update={"status": status, "automation_details": details})
