"""Quick painting estimates that need no historical data.

estimate_price: keyword heuristic over the description.
calculate_room_paint: litres of paint for a rectangular room.
"""

import logging
import math
import re

from src.core.errors import InputError
from src.core.schemas import PaintCalculation, PriceEstimate

logger = logging.getLogger(__name__)

BASE_PRICE = 500
PRICE_SPREAD = 0.2

DOOR_WINDOW_AREA_M2 = 4.0
COVERAGE_M2_PER_LITRE = 10.0
COATS = 2

ESTIMATE_NOTES = (
    "Surface preparation needed",
    "Paint quality selected",
    "Accessibility and room layout",
    "Current condition of surfaces",
)

# (pattern, price added, days set, days added), applied in order.
_PRICE_RULES: tuple[tuple[re.Pattern[str], int, int | None, int], ...] = (
    (re.compile(r"rooms?\b"), 300, 1, 0),
    (re.compile(r"\b(?:2|two)\b"), 300, 2, 0),
    (re.compile(r"\b(?:3|three)\b"), 600, 3, 0),
    (re.compile(r"\b(?:house|home)\b"), 2000, 5, 0),
    (re.compile(r"\b(?:exterior|outside)\b"), 1500, None, 2),
    (re.compile(r"\bceilings?\b"), 200, None, 0),
    (re.compile(r"\b(?:apartment|unit)s?\b"), 1000, 3, 0),
)


def estimate_price(description: str, postcode: str | None = None) -> PriceEstimate:
    """Rough price band and duration from description keywords."""
    if not description or len(description.strip()) < 5:
        msg = "description must be at least 5 characters"
        raise InputError(msg)

    text = description.lower()
    price = BASE_PRICE
    days = 1
    for pattern, added, set_days, add_days in _PRICE_RULES:
        if not pattern.search(text):
            continue
        price += added
        if set_days is not None:
            days = set_days
        days += add_days

    estimate = PriceEstimate(
        description=description,
        postcode=postcode,
        min_price=round(price * (1 - PRICE_SPREAD)),
        max_price=round(price * (1 + PRICE_SPREAD)),
        days=days,
        notes=list(ESTIMATE_NOTES),
    )
    logger.debug("Estimate for %r: %s", description[:60], estimate.model_dump())
    return estimate


def calculate_room_paint(length: float, width: float, height: float) -> PaintCalculation:
    """Paint needed for walls and ceiling of one room, two coats.

    Wall area is the perimeter times height less a standard door and window.
    """
    dims = {"length": length, "width": width, "height": height}
    for name, value in dims.items():
        try:
            dims[name] = float(value)
        except (TypeError, ValueError):
            msg = f"{name} must be a number, got {value!r}"
            raise InputError(msg) from None
        if not math.isfinite(dims[name]) or dims[name] <= 0:
            msg = f"{name} must be a positive number of metres"
            raise InputError(msg)

    length, width, height = dims["length"], dims["width"], dims["height"]
    wall_area = max(0.0, 2 * (length + width) * height - DOOR_WINDOW_AREA_M2)
    ceiling_area = length * width

    wall_litres = wall_area * COATS / COVERAGE_M2_PER_LITRE
    ceiling_litres = ceiling_area * COATS / COVERAGE_M2_PER_LITRE

    return PaintCalculation(
        length=length,
        width=width,
        height=height,
        wall_area=round(wall_area, 1),
        ceiling_area=round(ceiling_area, 1),
        coats=COATS,
        wall_litres=math.ceil(wall_litres),
        ceiling_litres=math.ceil(ceiling_litres),
        total_litres=math.ceil(wall_litres + ceiling_litres),
    )
