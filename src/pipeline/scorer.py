"""Composite scoring for painter candidates.

score = quality * w_quality + reliability * w_reliability + value * w_value

Sub-scores:
  quality     -- star rating as stored (0 when absent; not rescaled)
  reliability -- 1 - rejection rate (stored as a percentage), or 0 when the
                 rate is zero/absent
  value       -- 1 when the painter has any reviews, else 0.5
"""

import logging
from typing import NamedTuple

from src.core.schemas import Painter, ScoredPainter, WeightVector

logger = logging.getLogger(__name__)


class SubScores(NamedTuple):
    quality: float
    reliability: float
    value: float


def rejection_fraction(rate: float | None) -> float:
    """Rejection rate percentage (0-100) as a 0-1 fraction, clamped."""
    if not rate:
        return 0.0
    return min(max(rate / 100.0, 0.0), 1.0)


def sub_scores(painter: Painter) -> SubScores:
    """Derive the three normalized sub-scores for one painter."""
    quality = float(painter.star_rating or 0.0)

    # No rejection data earns no reliability credit.
    rejection = rejection_fraction(painter.rejection_rate)
    reliability = 1.0 - rejection if rejection else 0.0

    value = 1.0 if (painter.number_of_reviews or 0) > 0 else 0.5
    return SubScores(quality=quality, reliability=reliability, value=value)


def composite_score(scores: SubScores, weights: WeightVector) -> float:
    return (
        scores.quality * weights.quality
        + scores.reliability * weights.reliability
        + scores.value * weights.value
    )


def score_painter(painter: Painter, weights: WeightVector) -> ScoredPainter:
    """Score a single painter under normalized weights."""
    score = composite_score(sub_scores(painter), weights)
    return ScoredPainter(painter=painter, score=score, weights=weights)


def score_painters(painters: list[Painter], weights: WeightVector) -> list[ScoredPainter]:
    """Score a batch, sorted by score desc then review count desc.

    Remaining ties keep store order (record_id), so output is deterministic.
    """
    scored = [score_painter(p, weights) for p in painters]
    scored.sort(key=lambda s: (-s.score, -(s.painter.number_of_reviews or 0)))
    return scored
