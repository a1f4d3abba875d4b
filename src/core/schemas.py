"""Core data models for the painter matching service."""

import re
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Facet = Literal[
    "next_question",
    "classification",
    "missing_details",
    "price_factors",
    "completion_check",
]

ALL_FACETS: tuple[str, ...] = (
    "next_question",
    "classification",
    "missing_details",
    "price_factors",
    "completion_check",
)

DEFAULT_FACETS: tuple[str, ...] = ("next_question", "classification")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Painter(BaseModel):
    """A service-provider row from the painters table.

    Frozen: painters are read-only query results, scored via ScoredPainter.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    owner_name: str = ""
    profile_url: str = ""
    whatsapp_number: str = ""
    postcode: str | None = None
    suburb: str | None = None
    area: str | None = None
    region: str | None = None
    star_rating: float | None = None
    jobs_won: int | None = None
    number_of_reviews: int | None = None
    engagement_rate: float | None = None
    rejection_rate: float | None = None


class WeightVector(BaseModel):
    """Normalized preference weights (sum to 1.0)."""

    model_config = ConfigDict(frozen=True)

    quality: float = Field(ge=0.0)
    reliability: float = Field(ge=0.0)
    value: float = Field(ge=0.0)


class ScoredPainter(BaseModel):
    """Wrapper that pairs a frozen Painter with its composite score."""

    model_config = ConfigDict(frozen=True)

    painter: Painter
    score: float
    weights: WeightVector


class LocationFilters(BaseModel):
    """Location constraints for ranking; each present field is ANDed."""

    postcode: str | None = None
    suburb: str | None = None
    area: str | None = None
    region: str | None = None

    @field_validator("postcode", "suburb", "area", "region", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def active(self) -> dict[str, str]:
        """Return only the filters that were supplied."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


class HistoricalJob(BaseModel):
    """A past job used as statistical material for description analysis."""

    model_config = ConfigDict(frozen=True)

    id: str
    category: str | None = None
    subtype: str | None = None
    size: str | None = None
    total_price: float | None = None
    job_description: str = ""
    job_description_cleaned: str | None = None

    @property
    def text(self) -> str:
        """Cleaned description when available, otherwise the raw one."""
        return self.job_description_cleaned or self.job_description or ""


class JobBrowseFilters(BaseModel):
    """Filters and paging for browsing the jobs table."""

    category: str | None = None
    subtype: str | None = None
    size: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    q: str | None = None
    limit: int = Field(default=10, ge=1, le=50)
    offset: int = Field(default=0, ge=0)


class SignalSet(BaseModel):
    """Cues extracted from one free-text job description."""

    model_config = ConfigDict(frozen=True)

    has_room_count: bool = False
    room_count: int | None = None
    has_property_type: bool = False
    property_type: str | None = None
    full_scope: bool = False
    interior: bool = False
    exterior: bool = False
    room_mentions: list[str] = Field(default_factory=list)
    has_measurement: bool = False


class PatternSummary(BaseModel):
    """Frequency tables and price statistics over a historical sample."""

    sample_count: int = 0
    categories: dict[str, int] = Field(default_factory=dict)
    subtypes: dict[str, int] = Field(default_factory=dict)
    sizes: dict[str, int] = Field(default_factory=dict)
    details: dict[str, int] = Field(default_factory=dict)
    priced_count: int = 0
    price_min: float | None = None
    price_max: float | None = None
    price_average: float | None = None

    def frequency(self, detail: str) -> float:
        """Share of the sample (0-1) whose description mentions a detail."""
        if not self.sample_count:
            return 0.0
        return self.details.get(detail, 0) / self.sample_count

    def size_share(self, size: str) -> float:
        if not self.sample_count:
            return 0.0
        return self.sizes.get(size, 0) / self.sample_count


class NextQuestion(BaseModel):
    """The single most useful clarifying question to ask next."""

    field: str
    question: str
    options: list[str] = Field(default_factory=list)


class Classification(BaseModel):
    category: str | None = None
    category_confidence: int = 0
    subtype: str | None = None
    size: str | None = None
    size_source: Literal["description", "sample"] | None = None


class MissingDetail(BaseModel):
    detail: str
    frequency: int
    priority: Literal["critical", "important", "useful"]


class PriceFactors(BaseModel):
    range: str
    min: int
    max: int
    average: int
    priced_samples: int
    factors: list[str] = Field(default_factory=list)


class CompletionCheck(BaseModel):
    ready: bool
    missing_required: list[str] = Field(default_factory=list)
    missing_nice_to_have: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Facets requested from a description analysis, plus sample metadata.

    Only requested facets are emitted by to_dict(); price_factors is dropped
    even when requested if the sample held no priced jobs.
    """

    facets: list[str]
    confidence: Literal["high", "medium", "low"]
    sample_count: int
    signals: SignalSet
    next_question: NextQuestion | None = None
    classification: Classification | None = None
    missing_details: list[MissingDetail] | None = None
    price_factors: PriceFactors | None = None
    completion_check: CompletionCheck | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "confidence": self.confidence,
            "sample_count": self.sample_count,
            "signals": self.signals.model_dump(),
        }
        for facet in self.facets:
            value = getattr(self, facet)
            if facet == "price_factors" and value is None:
                continue
            if isinstance(value, list):
                data[facet] = [v.model_dump() for v in value]
            elif value is not None:
                data[facet] = value.model_dump()
            else:
                data[facet] = None
        return data


class PriceEstimate(BaseModel):
    """Rough keyword-based price estimate for a painting job."""

    description: str
    postcode: str | None = None
    min_price: int
    max_price: int
    days: int
    notes: list[str] = Field(default_factory=list)


class PaintCalculation(BaseModel):
    """Paint quantities for a single rectangular room."""

    length: float
    width: float
    height: float
    wall_area: float
    ceiling_area: float
    coats: int
    wall_litres: int
    ceiling_litres: int
    total_litres: int


class JobRequest(BaseModel):
    """A customer's request for painting quotes, recorded locally."""

    customer_name: str = Field(min_length=1)
    customer_email: str
    customer_mobile: str = Field(min_length=6)
    dealname: str = Field(min_length=3)
    job_description: str = Field(min_length=5)
    postcode: str | None = None
    area: str | None = None
    region: str | None = None
    budget: str | None = None
    timing: str | None = None
    site_visit_availability: str | None = None
    job_size: str | None = None
    subtype: str | None = None
    preferred_number_of_quotes: int = Field(default=3, ge=1, le=3)
    notes: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("customer_email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            msg = f"invalid email address: '{v}'"
            raise ValueError(msg)
        return v


class PhotoDescription(BaseModel):
    """Text description of a customer's job photo."""

    source: str
    provider: str
    question: str
    description: str
