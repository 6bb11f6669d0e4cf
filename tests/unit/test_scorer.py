"""Tests for rule-based completeness and confidence scoring."""

from datetime import date

import pytest

from src.core.config import ScoreWeights
from src.core.schemas import (
    ImportantDate,
    PhysicalEfficiencyRow,
    PhysicalStandardRow,
    PhysicalStandardTest,
    PostDraft,
)
from src.pipeline.scorer import completeness_score, confidence_score, is_present


def _critical_only(**overrides: object) -> PostDraft:
    fields: dict[str, object] = {
        "title": "UPSC Civil Services 2026",
        "slug": "upsc-cs-2026",
        "short_description": "UPSC CSE 2026 notification released.",
        "category": "latest-jobs",
        "post_date": date(2026, 1, 14),
        "last_date": date(2026, 2, 3),
        "primary_action_link": "https://upsconline.nic.in",
    }
    fields.update(overrides)
    return PostDraft(**fields)  # type: ignore[arg-type]


def _complete() -> PostDraft:
    return _critical_only(
        fees="Rs. 100",
        age_limit="21-32",
        educational_qualification="Graduate",
        total_posts=979,
        availability_note="Admit card in May",
        physical_standard_test=PhysicalStandardTest(
            male=[PhysicalStandardRow(category="General", height="170 cm")],
        ),
        physical_efficiency_test=[PhysicalEfficiencyRow(category="Running", distance="5 km")],
    )


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


class TestIsPresent:
    @pytest.mark.parametrize("value", [None, "", "   ", [], 0, PhysicalStandardTest()])
    def test_missing(self, value: object) -> None:
        assert is_present(value) is False

    @pytest.mark.parametrize("value", ["x", 5, [1], date(2026, 1, 1)])
    def test_present(self, value: object) -> None:
        assert is_present(value) is True


# ---------------------------------------------------------------------------
# Completeness
# ---------------------------------------------------------------------------


class TestCompletenessScore:
    def test_all_critical_no_secondary_is_90(self) -> None:
        assert completeness_score(_critical_only()) == 90.0

    def test_everything_clamps_to_100(self) -> None:
        assert completeness_score(_complete()) == 100.0

    def test_secondary_points(self) -> None:
        draft = _critical_only(fees="Rs. 100", age_limit="21-32")
        assert completeness_score(draft) == 95.0

    def test_empty_draft(self) -> None:
        assert completeness_score(PostDraft()) == 0.0

    def test_empty_physical_table_not_counted(self) -> None:
        draft = PostDraft(title="x", physical_standard_test=PhysicalStandardTest())
        assert completeness_score(draft) == 15.0


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------


class TestConfidenceScore:
    def test_base_only(self) -> None:
        assert confidence_score(_critical_only(), 0.7, ScoreWeights()) == 0.7

    def test_bonuses(self) -> None:
        draft = _critical_only(
            total_posts=979,
            important_dates=[ImportantDate(label="Last Date", date=date(2026, 2, 3))],
        )
        assert confidence_score(draft, 0.5, ScoreWeights()) == pytest.approx(0.8)

    def test_clamped_to_one(self) -> None:
        draft = _critical_only(
            total_posts=979,
            important_dates=[ImportantDate(label="Last Date")],
        )
        assert confidence_score(draft, 0.9, ScoreWeights()) == 1.0

    def test_no_float_noise(self) -> None:
        draft = _critical_only(total_posts=10)
        assert confidence_score(draft, 0.2, ScoreWeights()) == 0.3
