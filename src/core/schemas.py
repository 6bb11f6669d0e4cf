"""Core data models for the notice drafting pipeline."""

import hashlib
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class PostType(str, Enum):
    """Kind of notice a signal announces."""

    RECRUITMENT = "Recruitment"
    RESULT = "Result"
    ADMIT_CARD = "Admit Card"
    SYLLABUS = "Syllabus"
    ANSWER_KEY = "Answer Key"


class PostStatus(str, Enum):
    """Publication status of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


class AutomationStatus(str, Enum):
    """Outcome of the automated pipeline for one post (distinct from PostStatus)."""

    COMPLETED = "completed"
    FAILED = "failed"


def compute_idempotency_key(
    authority: str,
    exam: str,
    year: str | None,
    post_type: PostType | str,
) -> str:
    """Deterministic fingerprint of a signal's identity.

    MD5 hex digest of ``authority|exam|year|postType``.
    """
    kind = post_type.value if isinstance(post_type, PostType) else str(post_type)
    data = f"{authority}|{exam}|{year or ''}|{kind}"
    return hashlib.md5(data.encode("utf-8"), usedforsecurity=False).hexdigest()


class Signal(BaseModel):
    """A candidate notice discovered on an aggregator page.

    Frozen. The idempotency key is derived from the normalized fields when
    not supplied.
    """

    model_config = ConfigDict(frozen=True)

    raw_title: str
    url: str
    authority: str = "Unknown"
    exam: str
    year: str | None = None
    post_type: PostType = PostType.RECRUITMENT
    source: str
    idempotency_key: str = ""

    @model_validator(mode="before")
    @classmethod
    def fill_idempotency_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("idempotency_key"):
            data = dict(data)
            data["idempotency_key"] = compute_idempotency_key(
                data.get("authority", "Unknown"),
                data.get("exam", ""),
                data.get("year"),
                data.get("post_type", PostType.RECRUITMENT),
            )
        return data


class VerificationFacts(BaseModel):
    """Facts known for sure once a signal is verified."""

    authority: str
    exam: str
    year: str | None = None
    source_url: str


class VerificationResult(BaseModel):
    """Evidence gathered from official sources for one signal."""

    verified: bool = False
    official_url: str | None = None
    official_pdf_url: str | None = None
    extracted_text: str = ""
    confidence_score: float = 0.0
    facts: VerificationFacts | None = None


# ---------------------------------------------------------------------------
# Post draft (camelCase on the wire, matching the generation schema)
# ---------------------------------------------------------------------------


# ImportantDate has a field named ``date``; annotate through an alias.
_Date = date


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _lenient_date(value: Any) -> date | None:
    """Coerce model output to a date, dropping anything unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _lenient_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        text = value.replace(",", "").strip()
        try:
            return int(float(text))
        except ValueError:
            return None
    return None


class VacancyByCategory(_CamelModel):
    category: str | None = None
    total_posts: int | None = None

    @field_validator("total_posts", mode="before")
    @classmethod
    def _posts(cls, v: Any) -> int | None:
        return _lenient_int(v)


class VacancyByPost(_CamelModel):
    post_name: str | None = None
    total_posts: int | None = None

    @field_validator("total_posts", mode="before")
    @classmethod
    def _posts(cls, v: Any) -> int | None:
        return _lenient_int(v)


class ImportantDate(_CamelModel):
    label: str = ""
    date: _Date | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v: Any) -> _Date | None:
        return _lenient_date(v)


class PhysicalStandardRow(_CamelModel):
    category: str | None = None
    height: str | None = None
    chest: str | None = None
    min_weight: str | None = Field(
        default=None,
        validation_alias=AliasChoices("minWeight", "weight", "min_weight"),
        serialization_alias="minWeight",
    )


class PhysicalStandardTest(_CamelModel):
    male: list[PhysicalStandardRow] = Field(default_factory=list)
    female: list[PhysicalStandardRow] = Field(default_factory=list)

    @field_validator("male", "female", mode="before")
    @classmethod
    def _rows(cls, v: Any) -> Any:
        return v if v is not None else []

    @property
    def has_rows(self) -> bool:
        return bool(self.male or self.female)


class PhysicalEfficiencyRow(_CamelModel):
    category: str | None = Field(
        default=None,
        validation_alias=AliasChoices("category", "activity"),
        serialization_alias="category",
    )
    distance: str | None = None
    time: str | None = None


class AutomationDetails(_CamelModel):
    """Provenance and scoring attached to an automatically drafted post."""

    discovered_via: str | None = None
    source_type: str | None = None
    verified_from: str | None = None
    official_pdf_url: str | None = None
    verification_timestamp: datetime | None = None
    content_generated_at: datetime | None = None
    automation_version: str | None = None
    ai_model_used: str | None = None
    confidence_score: float | None = None
    completeness_score: float | None = None
    automation_status: AutomationStatus | None = None
    issues: list[str] = Field(default_factory=list)
    idempotency_key: str | None = None


class PostDraft(_CamelModel):
    """Candidate content record produced by generation and finalized by validation."""

    title: str = ""
    slug: str = ""
    short_description: str | None = None
    full_description: str | None = None
    category: str | None = None
    category_id: int | None = None
    organization: str | None = None
    post_date: date | None = None
    last_date: date | None = None
    qualification: str | None = None
    age_limit: str | None = None
    fees: str | None = None
    total_posts: int | None = None
    educational_qualification: str | None = None
    category_wise_vacancy: list[VacancyByCategory] = Field(default_factory=list)
    post_wise_vacancy: list[VacancyByPost] = Field(default_factory=list)
    important_dates: list[ImportantDate] = Field(default_factory=list)
    notification_pdf: str | None = None
    primary_action_link: str | None = Field(
        default=None,
        validation_alias=AliasChoices("primaryActionLink", "applyLink", "primary_action_link"),
        serialization_alias="primaryActionLink",
    )
    availability_note: str | None = None
    physical_standard_test: PhysicalStandardTest | None = None
    physical_efficiency_test: list[PhysicalEfficiencyRow] = Field(default_factory=list)
    meta_title: str | None = None
    meta_description: str | None = None
    status: PostStatus = PostStatus.DRAFT
    automation_details: AutomationDetails = Field(default_factory=AutomationDetails)

    @field_validator("title", "slug", mode="before")
    @classmethod
    def _required_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(
        "short_description", "full_description", "category", "organization",
        "qualification", "age_limit", "fees", "educational_qualification",
        "notification_pdf", "primary_action_link", "availability_note",
        "meta_title", "meta_description",
        mode="before",
    )
    @classmethod
    def _optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("post_date", "last_date", mode="before")
    @classmethod
    def _dates(cls, v: Any) -> date | None:
        return _lenient_date(v)

    @field_validator("total_posts", mode="before")
    @classmethod
    def _total_posts(cls, v: Any) -> int | None:
        return _lenient_int(v)

    @field_validator(
        "category_wise_vacancy", "post_wise_vacancy", "important_dates",
        "physical_efficiency_test",
        mode="before",
    )
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return v if v is not None else []

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in {"draft", "published"}:
            return v.strip().lower()
        return v if isinstance(v, PostStatus) else PostStatus.DRAFT

    @field_validator("automation_details", mode="before")
    @classmethod
    def _details(cls, v: Any) -> Any:
        return v if v is not None else {}

    def to_document(self) -> dict[str, Any]:
        """JSON-ready dict in the persisted (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True)


class ValidationReport(BaseModel):
    """Transient result of validating one draft."""

    is_valid: bool = True
    issues: list[str] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    completeness_score: float = Field(default=0.0, ge=0.0, le=100.0)


class Category(BaseModel):
    """A persisted category from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str
    display_order: int = 0


class SignalOutcome(BaseModel):
    """What happened to one signal during a run."""

    raw_title: str
    action: str
    slug: str | None = None
    status: PostStatus | None = None
    automation_status: AutomationStatus | None = None
    confidence_score: float | None = None
    completeness_score: float | None = None


class RunSummary(BaseModel):
    """Summary of a single agent run."""

    started_at: datetime
    finished_at: datetime | None = None
    dry_run: bool = False
    discovered: int = 0
    unverified: int = 0
    saved: int = 0
    duplicates: int = 0
    failed: int = 0
    aborted: bool = False
    error: str | None = None
    outcomes: list[SignalOutcome] = Field(default_factory=list)

    @property
    def published(self) -> int:
        return sum(
            1 for o in self.outcomes
            if o.action == "saved" and o.status == PostStatus.PUBLISHED
        )
