"""Configuration models and YAML loader for the notice drafting agent."""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

_YEAR_RE = re.compile(r"^\d{4}$")


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/notices.db"


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by discovery and verification."""

    user_agent: str = DEFAULT_USER_AGENT
    max_redirects: int = Field(default=10, ge=0)


class AutomationConfig(BaseModel):
    """Global switches gating publication and persistence."""

    auto_publish: bool = False
    dry_run: bool = False
    agent_version: str = "1.0.0"


class ThresholdsConfig(BaseModel):
    """Minimum scores a draft needs before it may be auto-published."""

    publish_confidence: float = Field(default=0.95, ge=0.0, le=1.0)
    publish_completeness: float = Field(default=95.0, ge=0.0, le=100.0)


class ScoreWeights(BaseModel):
    """Additive confidence weights per piece of evidence."""

    official_pdf_found: float = Field(default=0.5, ge=0.0, le=1.0)
    official_apply_link: float = Field(default=0.2, ge=0.0, le=1.0)
    critical_dates_confirmed: float = Field(default=0.2, ge=0.0, le=1.0)
    vacancy_confirmed: float = Field(default=0.1, ge=0.0, le=1.0)


class ScheduleConfig(BaseModel):
    """Daily trigger time for the agent run."""

    hour: int = Field(default=2, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)
    timezone: str | None = None


class DiscoveryConfig(BaseModel):
    """Aggregators to scan and the heuristics used to read their links."""

    target_year: str = "2026"
    aggregators: list[str] = Field(default_factory=lambda: ["https://www.sarkariresult.com"])
    authorities: list[str] = Field(
        default_factory=lambda: [
            "UPSC", "SSC", "IBPS", "SBI", "RBI", "UPPSC", "BPSC", "RPSC", "MPPSC",
            "Indian Navy", "Indian Army", "Indian Air Force",
        ],
    )
    relevance_keywords: list[str] = Field(
        default_factory=lambda: ["apply", "online", "form", "notification", "result", "admit card"],
    )
    noise_terms: list[str] = Field(default_factory=lambda: ["result", "app", "youtube", "portal"])
    robots_timeout_s: float = Field(default=5.0, gt=0)
    page_timeout_s: float = Field(default=15.0, gt=0)

    @field_validator("target_year", mode="before")
    @classmethod
    def target_year_four_digits(cls, v: Any) -> str:
        v = str(v).strip()
        if not _YEAR_RE.match(v):
            msg = f"target_year must be a 4-digit year, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("aggregators")
    @classmethod
    def at_least_one_aggregator(cls, v: list[str]) -> list[str]:
        cleaned = [url.strip() for url in v if url.strip()]
        if not cleaned:
            msg = "at least one aggregator URL must be configured"
            raise ValueError(msg)
        return cleaned


class VerificationConfig(BaseModel):
    """Official-source detection and PDF handling."""

    official_domains: list[str] = Field(
        default_factory=lambda: [".gov.in", ".nic.in", ".org.in", ".edu.in", ".res.in"],
    )
    page_timeout_s: float = Field(default=20.0, gt=0)
    pdf_timeout_s: float = Field(default=20.0, gt=0)
    extracted_text_chars: int = Field(default=3000, ge=0)
    year_window_start: int = 2020
    year_window_end: int = 2029

    @model_validator(mode="after")
    def window_ordered(self) -> "VerificationConfig":
        if self.year_window_start > self.year_window_end:
            msg = "year_window_start must not be after year_window_end"
            raise ValueError(msg)
        return self


class GenerationConfig(BaseModel):
    """Generative model selection and call budget."""

    provider: str = "gemini"
    model: str | None = None
    temperature: float | None = Field(default=0.2, ge=0.0, le=2.0)
    max_calls_per_window: int = Field(default=5, ge=1)
    window_seconds: float = Field(default=60.0, gt=0)
    snippet_chars: int = Field(default=10_000, ge=0)
    max_title_attempts: int = Field(default=3, ge=1, le=10)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    automation: AutomationConfig = Field(default_factory=AutomationConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    scores: ScoreWeights = Field(default_factory=ScoreWeights)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
