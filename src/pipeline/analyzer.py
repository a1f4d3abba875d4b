"""Description analysis: signals + historical sample -> requested facets.

Facets are independent; any subset may be requested. Internal computation
never raises. Only bad input (InputError) and record store failures
(StoreUnavailable) escape.
"""

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from typing import Any

from src.core.config import AnalysisConfig
from src.core.errors import InputError
from src.core.schemas import (
    ALL_FACETS,
    DEFAULT_FACETS,
    AnalysisResult,
    Classification,
    CompletionCheck,
    MissingDetail,
    PatternSummary,
    PriceFactors,
    SignalSet,
)
from src.pipeline.patterns import (
    DETAIL_KEYWORDS,
    clamp_sample_size,
    fetch_sample,
    summarize,
)
from src.pipeline.questions import QuestionContext, next_question
from src.pipeline.signals import SignalExtractor

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("category", "size")
NICE_TO_HAVE_FIELDS = ("property_type", "surfaces", "timing")

MISSING_DETAIL_THRESHOLD = 0.5

# known_details keys that count as supplying a detail keyword.
_DETAIL_ALIASES: dict[str, tuple[str, ...]] = {
    "ceilings": ("ceilings", "surfaces"),
    "trims": ("trims", "surfaces"),
    "doors": ("doors", "surfaces"),
    "walls": ("walls", "surfaces"),
    "storeys": ("storeys",),
    "measurements": ("measurements", "dimensions"),
    "property_type": ("property_type",),
}

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "category": ("category",),
    "size": ("size", "job_size"),
    "property_type": ("property_type",),
    "surfaces": ("surfaces",),
    "timing": ("timing",),
}


def _has(known: Mapping[str, Any], *keys: str) -> bool:
    return any(known.get(k) not in (None, "", [], {}) for k in keys)


def confidence_label(sample_count: int) -> str:
    if sample_count >= 5:
        return "high"
    if sample_count >= 3:
        return "medium"
    return "low"


def _resolve_facets(facets: Iterable[str] | str | None) -> list[str]:
    if facets is None:
        return list(DEFAULT_FACETS)
    if isinstance(facets, str):
        facets = [facets]
    resolved: list[str] = []
    for facet in facets:
        if facet not in ALL_FACETS:
            msg = f"Unknown facet '{facet}'. Expected any of {list(ALL_FACETS)}"
            raise InputError(msg)
        if facet not in resolved:
            resolved.append(facet)
    return resolved or list(DEFAULT_FACETS)


# ---------------------------------------------------------------------------
# Facets
# ---------------------------------------------------------------------------


def _size_from_signals(signals: SignalSet) -> str | None:
    """Infer job size from the room count, or distinct room mentions."""
    rooms = signals.room_count
    if rooms is None and signals.room_mentions:
        rooms = len(set(signals.room_mentions))
    if rooms == 1:
        return "small"
    if rooms is not None and 2 <= rooms <= 4:
        return "medium"
    return None


def classify(signals: SignalSet, summary: PatternSummary) -> Classification:
    """Majority category/subtype from the sample; size from the text if possible."""
    category = next(iter(summary.categories), None)
    confidence = 0
    if category is not None and summary.sample_count:
        confidence = round(summary.categories[category] / summary.sample_count * 100)

    size = _size_from_signals(signals)
    source = "description" if size else None
    if size is None:
        size = next(iter(summary.sizes), None)
        source = "sample" if size else None

    return Classification(
        category=category,
        category_confidence=confidence,
        subtype=next(iter(summary.subtypes), None),
        size=size,
        size_source=source,
    )


def missing_details(summary: PatternSummary, known: Mapping[str, Any]) -> list[MissingDetail]:
    """Details most similar jobs mention that the customer hasn't supplied."""
    missing: list[tuple[float, MissingDetail]] = []
    for detail in DETAIL_KEYWORDS:
        share = summary.frequency(detail)
        if share <= MISSING_DETAIL_THRESHOLD or _has(known, *_DETAIL_ALIASES[detail]):
            continue
        if share > 0.8:
            priority = "critical"
        elif share > 0.6:
            priority = "important"
        else:
            priority = "useful"
        missing.append(
            (share, MissingDetail(detail=detail, frequency=round(share * 100), priority=priority))
        )
    missing.sort(key=lambda pair: pair[0], reverse=True)
    return [m for _, m in missing]


def price_factors(summary: PatternSummary, signals: SignalSet) -> PriceFactors | None:
    """Price range of priced sample jobs plus what tends to move it. None if unpriced."""
    if not summary.priced_count or summary.price_min is None or summary.price_max is None:
        return None

    low = int(round(summary.price_min))
    high = int(round(summary.price_max))
    factors: list[str] = []

    large = summary.size_share("large")
    if large > 0.3 and large > summary.size_share("small"):
        factors.append("Large jobs dominate similar requests; whole-house work sits at the top of the range")
    if summary.frequency("ceilings") > 0.4:
        factors.append("Including ceilings adds 20-30%")
    if summary.frequency("trims") > 0.4:
        factors.append("Trims, skirting and doors add detailed brushwork time")
    if summary.frequency("storeys") > 0.3:
        factors.append("Double storey access (ladders, scaffolding) raises the price")
    if signals.exterior:
        factors.append("Exterior surfaces need extra preparation and weather allowance")

    return PriceFactors(
        range=f"${low} - ${high}",
        min=low,
        max=high,
        average=int(round(summary.price_average or 0.0)),
        priced_samples=summary.priced_count,
        factors=factors,
    )


def completion_check(
    known: Mapping[str, Any],
    classification: Classification,
    signals: SignalSet,
) -> CompletionCheck:
    """Ready once every required field is known or derived."""
    derived = {
        "category": classification.category,
        "size": classification.size,
        "property_type": signals.property_type,
    }
    missing_required = [
        f for f in REQUIRED_FIELDS
        if not _has(known, *_FIELD_ALIASES[f]) and not derived.get(f)
    ]
    missing_nice = [
        f for f in NICE_TO_HAVE_FIELDS
        if not _has(known, *_FIELD_ALIASES[f]) and not derived.get(f)
    ]
    return CompletionCheck(
        ready=not missing_required,
        missing_required=missing_required,
        missing_nice_to_have=missing_nice,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def analyze_description(
    conn: sqlite3.Connection,
    description: str,
    known_details: Mapping[str, Any] | None = None,
    facets: Iterable[str] | str | None = None,
    sample_size: Any = None,
    config: AnalysisConfig | None = None,
    extractor: SignalExtractor | None = None,
) -> AnalysisResult:
    """Analyze a customer's job description against similar historical jobs.

    Args:
        conn: Record store connection.
        description: Customer's free-text description.
        known_details: Details already gathered (category, size, timing, ...).
        facets: Subset of ALL_FACETS; defaults to next_question + classification.
        sample_size: Historical sample bound, clamped to the configured range.
        config: Analysis bounds.
        extractor: Signal extractor; the painting vocabulary by default.

    Raises:
        InputError: Description too short, unknown facet, or bad known_details.
        StoreUnavailable: The record store could not be read.
    """
    config = config or AnalysisConfig()
    extractor = extractor or SignalExtractor()

    if not isinstance(description, str) or len(description.strip()) < config.min_description_length:
        msg = f"description must be at least {config.min_description_length} characters"
        raise InputError(msg)
    if known_details is None:
        known_details = {}
    if not isinstance(known_details, Mapping):
        msg = "known_details must be an object"
        raise InputError(msg)
    requested = _resolve_facets(facets)
    size = clamp_sample_size(sample_size, config)

    signals = extractor.extract(description)
    known_category = known_details.get("category")
    jobs = fetch_sample(
        conn,
        description,
        str(known_category) if known_category else None,
        size,
        config,
    )
    summary = summarize(jobs, extractor)
    classification = classify(signals, summary)

    result = AnalysisResult(
        facets=requested,
        confidence=confidence_label(summary.sample_count),
        sample_count=summary.sample_count,
        signals=signals,
    )
    if "next_question" in requested:
        result.next_question = next_question(QuestionContext(signals, summary, known_details))
    if "classification" in requested:
        result.classification = classification
    if "missing_details" in requested:
        result.missing_details = missing_details(summary, known_details)
    if "price_factors" in requested:
        result.price_factors = price_factors(summary, signals)
    if "completion_check" in requested:
        result.completion_check = completion_check(known_details, classification, signals)

    logger.info(
        "Analyzed description: %d samples (%s confidence), facets=%s",
        summary.sample_count, result.confidence, requested,
    )
    return result
