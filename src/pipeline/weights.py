"""Preference weight normalization for painter ranking."""

import logging
import math
from collections.abc import Mapping
from typing import Any

from src.core.config import WeightsConfig
from src.core.schemas import WeightVector

logger = logging.getLogger(__name__)

WEIGHT_KEYS = ("quality", "reliability", "value")


def _coerce_weight(raw: Any, default: float) -> float:
    """Return raw as a non-negative float, or default when it isn't numeric."""
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return max(0.0, value)


def normalize_weights(
    weights: Mapping[str, Any] | None = None,
    base: WeightsConfig | None = None,
) -> WeightVector:
    """Merge caller weights over the base vector and scale them to sum to 1.

    Missing or non-numeric entries take their base value; negatives are
    clamped to 0. If every merged weight is zero, the base vector itself is
    normalized instead. Never raises.
    """
    base = base or WeightsConfig()
    supplied = weights or {}
    if not isinstance(supplied, Mapping):
        logger.debug("Ignoring non-mapping weights: %r", supplied)
        supplied = {}

    merged = {k: _coerce_weight(supplied.get(k), getattr(base, k)) for k in WEIGHT_KEYS}
    total = sum(merged.values())
    if total <= 0:
        logger.debug("All weights zero; falling back to base vector")
        merged = {k: getattr(base, k) for k in WEIGHT_KEYS}
        total = sum(merged.values()) or 1.0

    return WeightVector(**{k: v / total for k, v in merged.items()})
