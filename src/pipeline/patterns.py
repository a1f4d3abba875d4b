"""Historical sampling and frequency aggregation for description analysis.

Data flow:
  1. Search terms from the description (<= 5 content words, len > 3)
  2. Similar-jobs query, biased toward a known category
  3. Random top-up when fewer than `fallback_threshold` jobs come back
  4. Frequency tables + price statistics -> PatternSummary
"""

import logging
import re
import sqlite3
import statistics
from collections import Counter
from typing import Any

from src.core.config import AnalysisConfig
from src.core.db import query_random_jobs, query_similar_jobs
from src.core.schemas import HistoricalJob, PatternSummary
from src.pipeline.signals import SignalExtractor

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    "about", "also", "been", "could", "done", "from", "have", "help", "just", "like",
    "looking", "need", "needs", "paint", "painted", "painter", "painters", "painting",
    "please", "quote", "quotes", "some", "that", "them", "then", "there", "these",
    "they", "this", "want", "wanting", "well", "were", "what", "when", "will", "with",
    "would", "your",
})

_WORD_RE = re.compile(r"[a-z]+")

# Detail keywords counted once per sampled job. "measurements" and
# "property_type" come from the signal extractor.
DETAIL_PATTERNS: dict[str, re.Pattern[str]] = {
    "ceilings": re.compile(r"\bceilings?\b", re.IGNORECASE),
    "trims": re.compile(r"\b(?:trims?|skirtings?|architraves?)\b", re.IGNORECASE),
    "doors": re.compile(r"\bdoors?\b", re.IGNORECASE),
    "walls": re.compile(r"\bwalls?\b", re.IGNORECASE),
    "storeys": re.compile(
        r"\b(?:single|double|two|one|multi|split|\d)[\s-]*(?:storey|story|level)s?\b"
        r"|\bstoreys?\b|\bstories\b",
        re.IGNORECASE,
    ),
}

DETAIL_KEYWORDS: tuple[str, ...] = (*DETAIL_PATTERNS, "measurements", "property_type")


def search_terms(description: str, max_terms: int = 5) -> list[str]:
    """Pick up to max_terms distinct content words, in order of appearance."""
    terms: list[str] = []
    for word in _WORD_RE.findall(description.lower()):
        if len(word) <= 3 or word in STOP_WORDS or word in terms:
            continue
        terms.append(word)
        if len(terms) >= max_terms:
            break
    return terms


def clamp_sample_size(value: Any, config: AnalysisConfig) -> int:
    """Clamp a requested sample size into the configured bounds."""
    if value is None or isinstance(value, bool):
        return config.default_sample_size
    try:
        size = int(value)
    except (TypeError, ValueError):
        return config.default_sample_size
    return max(config.min_sample_size, min(size, config.max_sample_size))


def fetch_sample(
    conn: sqlite3.Connection,
    description: str,
    known_category: str | None,
    sample_size: int,
    config: AnalysisConfig,
) -> list[HistoricalJob]:
    """Fetch the historical sample, topping up with random jobs if too sparse."""
    terms = search_terms(description, config.max_search_terms)
    jobs = query_similar_jobs(conn, terms, known_category, sample_size)
    logger.debug("Similar jobs for %s (bias=%s): %d", terms, known_category, len(jobs))

    if len(jobs) < config.fallback_threshold:
        logger.info(
            "Only %d similar jobs found; supplementing with a random sample", len(jobs),
        )
        seen = {j.id for j in jobs}
        for job in query_random_jobs(conn, sample_size):
            if len(jobs) >= sample_size:
                break
            if job.id not in seen:
                seen.add(job.id)
                jobs.append(job)
    return jobs


def summarize(
    jobs: list[HistoricalJob],
    extractor: SignalExtractor | None = None,
) -> PatternSummary:
    """Aggregate category/subtype/size/detail counts and price statistics."""
    extractor = extractor or SignalExtractor()
    categories: Counter[str] = Counter()
    subtypes: Counter[str] = Counter()
    sizes: Counter[str] = Counter()
    details: Counter[str] = Counter()

    for job in jobs:
        if job.category:
            categories[job.category] += 1
        if job.subtype:
            subtypes[job.subtype] += 1
        if job.size:
            sizes[job.size.lower()] += 1

        text = job.text
        for name, pattern in DETAIL_PATTERNS.items():
            if pattern.search(text):
                details[name] += 1
        signals = extractor.extract(text)
        if signals.has_measurement:
            details["measurements"] += 1
        if signals.has_property_type:
            details["property_type"] += 1

    prices = [j.total_price for j in jobs if j.total_price is not None and j.total_price > 0]
    summary = PatternSummary(
        sample_count=len(jobs),
        categories=dict(categories.most_common()),
        subtypes=dict(subtypes.most_common()),
        sizes=dict(sizes.most_common()),
        details=dict(details.most_common()),
        priced_count=len(prices),
        price_min=min(prices) if prices else None,
        price_max=max(prices) if prices else None,
        price_average=statistics.mean(prices) if prices else None,
    )
    logger.debug("Pattern summary: %s", summary.model_dump())
    return summary
