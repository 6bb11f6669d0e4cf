"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from src.core.config import (
    AutomationConfig,
    DiscoveryConfig,
    GenerationConfig,
    ScheduleConfig,
    ScoreWeights,
    Settings,
    ThresholdsConfig,
    VerificationConfig,
)


class TestAutomationConfig:
    def test_defaults(self) -> None:
        a = AutomationConfig()
        assert a.auto_publish is False
        assert a.dry_run is False
        assert a.agent_version == "1.0.0"


class TestThresholdsConfig:
    def test_defaults(self) -> None:
        t = ThresholdsConfig()
        assert t.publish_confidence == 0.95
        assert t.publish_completeness == 95.0

    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ThresholdsConfig(publish_confidence=1.5)

    def test_completeness_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ThresholdsConfig(publish_completeness=101)


class TestScoreWeights:
    def test_defaults(self) -> None:
        w = ScoreWeights()
        assert w.official_pdf_found == 0.5
        assert w.official_apply_link == 0.2
        assert w.critical_dates_confirmed == 0.2
        assert w.vacancy_confirmed == 0.1


class TestScheduleConfig:
    def test_defaults(self) -> None:
        s = ScheduleConfig()
        assert (s.hour, s.minute) == (2, 0)

    def test_hour_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            ScheduleConfig(hour=24)

    def test_minute_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            ScheduleConfig(minute=60)


class TestDiscoveryConfig:
    def test_defaults(self) -> None:
        d = DiscoveryConfig()
        assert d.target_year == "2026"
        assert d.aggregators == ["https://www.sarkariresult.com"]
        assert d.authorities[0] == "UPSC"
        assert "youtube" in d.noise_terms

    def test_integer_year_accepted(self) -> None:
        assert DiscoveryConfig(target_year=2027).target_year == "2027"

    def test_bad_year_rejected(self) -> None:
        with pytest.raises(ValidationError, match="4-digit"):
            DiscoveryConfig(target_year="26")

    def test_empty_aggregators_rejected(self) -> None:
        with pytest.raises(ValidationError, match="aggregator"):
            DiscoveryConfig(aggregators=["  "])


class TestVerificationConfig:
    def test_defaults(self) -> None:
        v = VerificationConfig()
        assert ".gov.in" in v.official_domains
        assert v.extracted_text_chars == 3000
        assert (v.year_window_start, v.year_window_end) == (2020, 2029)

    def test_window_order(self) -> None:
        with pytest.raises(ValidationError, match="year_window_start"):
            VerificationConfig(year_window_start=2030, year_window_end=2020)


class TestGenerationConfig:
    def test_defaults(self) -> None:
        g = GenerationConfig()
        assert g.provider == "gemini"
        assert g.max_calls_per_window == 5
        assert g.window_seconds == 60.0
        assert g.snippet_chars == 10_000
        assert g.max_title_attempts == 3


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.database.path == "data/notices.db"
        assert s.automation.auto_publish is False

    def test_from_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "settings.yaml"
        config.write_text(dedent("""\
            database:
              path: /tmp/x.db
            automation:
              auto_publish: true
            discovery:
              target_year: 2026
              aggregators:
                - https://agg.example.com
            generation:
              provider: anthropic
        """))
        s = Settings.from_yaml(config)
        assert s.database.path == "/tmp/x.db"
        assert s.automation.auto_publish is True
        assert s.discovery.target_year == "2026"
        assert s.discovery.aggregators == ["https://agg.example.com"]
        assert s.generation.provider == "anthropic"
        assert s.thresholds.publish_confidence == 0.95

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "settings.yaml"
        config.write_text("")
        assert Settings.from_yaml(config) == Settings()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_example_config_loads(self) -> None:
        example = Path(__file__).parent.parent.parent / "config" / "settings.example.yaml"
        s = Settings.from_yaml(example)
        assert s.discovery.target_year == "2026"
        assert s.generation.provider == "gemini"
