"""Ranker: location filter -> bulk fetch -> score -> sort -> truncate."""

import logging
import sqlite3
from collections.abc import Mapping
from typing import Any

from src.core.config import RankingConfig
from src.core.db import query_painters
from src.core.schemas import LocationFilters, ScoredPainter
from src.pipeline.scorer import score_painters
from src.pipeline.weights import normalize_weights

logger = logging.getLogger(__name__)


def clamp_limit(limit: Any, config: RankingConfig) -> int:
    """Clamp a requested result count into [1, max_limit]; bad input -> default."""
    if limit is None or isinstance(limit, bool):
        return config.default_limit
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return config.default_limit
    return max(1, min(value, config.max_limit))


def rank_painters(
    conn: sqlite3.Connection,
    filters: LocationFilters | Mapping[str, Any] | None = None,
    limit: Any = None,
    weights: Mapping[str, Any] | None = None,
    config: RankingConfig | None = None,
) -> list[ScoredPainter]:
    """Return the top painters for a location, best first.

    An empty list means "no matches" and is not an error. Record store
    failures propagate as StoreUnavailable.
    """
    config = config or RankingConfig()
    if not isinstance(filters, LocationFilters):
        filters = LocationFilters.model_validate(dict(filters or {}))

    normalized = normalize_weights(weights, config.default_weights)
    if not filters.active() and config.warn_unfiltered:
        logger.warning("Ranking request has no location filter; scanning all painters")

    painters = query_painters(conn, filters)
    scored = score_painters(painters, normalized)
    top = scored[: clamp_limit(limit, config)]

    logger.info(
        "Ranked %d painters for %s, returning %d",
        len(painters), filters.active() or "all locations", len(top),
    )
    return top
