"""Next-question rule table.

Rules are evaluated in priority order and the first whose predicate holds
wins, so at most one question is asked per call. Each predicate sees the
input signals, the sample's pattern summary, and what the customer has
already told us.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from src.core.schemas import NextQuestion, PatternSummary, SignalSet

logger = logging.getLogger(__name__)

SURFACE_THRESHOLD = 0.7
STOREY_THRESHOLD = 0.5
MEASUREMENT_THRESHOLD = 0.5


@dataclass(frozen=True)
class QuestionContext:
    signals: SignalSet
    summary: PatternSummary
    known: Mapping[str, Any]

    def knows(self, *keys: str) -> bool:
        """True if any of the keys is present with a non-empty value."""
        return any(self.known.get(k) not in (None, "", [], {}) for k in keys)


@dataclass(frozen=True)
class QuestionRule:
    field: str
    question: str
    options: tuple[str, ...]
    applies: Callable[[QuestionContext], bool]


def _scope_unknown(ctx: QuestionContext) -> bool:
    s = ctx.signals
    described = s.has_room_count or s.full_scope or s.has_measurement or bool(s.room_mentions)
    return not described and not ctx.knows("size", "job_size", "rooms")


def _location_unknown(ctx: QuestionContext) -> bool:
    return (
        not ctx.signals.interior
        and not ctx.signals.exterior
        and not ctx.knows("interior_exterior", "location_type")
    )


def _surfaces_common(ctx: QuestionContext) -> bool:
    if ctx.knows("surfaces", "ceilings", "trims", "doors"):
        return False
    share = max(ctx.summary.frequency(d) for d in ("ceilings", "trims", "doors"))
    return share > SURFACE_THRESHOLD


def _storeys_common(ctx: QuestionContext) -> bool:
    return (
        not ctx.knows("storeys")
        and ctx.summary.frequency("storeys") > STOREY_THRESHOLD
    )


def _property_type_unknown(ctx: QuestionContext) -> bool:
    return not ctx.signals.has_property_type and not ctx.knows("property_type")


def _measurements_common(ctx: QuestionContext) -> bool:
    return (
        not ctx.signals.has_measurement
        and not ctx.knows("measurements", "dimensions")
        and ctx.summary.frequency("measurements") > MEASUREMENT_THRESHOLD
    )


def _timing_unknown(ctx: QuestionContext) -> bool:
    return not ctx.knows("timing")


RULES: tuple[QuestionRule, ...] = (
    QuestionRule(
        field="size",
        question="How many rooms, or roughly how much area, needs painting?",
        options=("1 room", "2-4 rooms", "Whole house", "Small touch-ups"),
        applies=_scope_unknown,
    ),
    QuestionRule(
        field="interior_exterior",
        question="Is the painting inside, outside, or both?",
        options=("Interior", "Exterior", "Both"),
        applies=_location_unknown,
    ),
    QuestionRule(
        field="surfaces",
        question="Which surfaces need painting: walls only, or ceilings, trims and doors too?",
        options=("Walls only", "Walls and ceilings", "Walls, ceilings and trims", "Everything"),
        applies=_surfaces_common,
    ),
    QuestionRule(
        field="storeys",
        question="Is the property single or double storey?",
        options=("Single storey", "Double storey", "Three or more"),
        applies=_storeys_common,
    ),
    QuestionRule(
        field="property_type",
        question="What type of property is it?",
        options=("House", "Apartment", "Unit", "Townhouse"),
        applies=_property_type_unknown,
    ),
    QuestionRule(
        field="measurements",
        question="Do you know the approximate dimensions (room sizes, fence length)?",
        options=("Yes, I'll add them", "Not sure"),
        applies=_measurements_common,
    ),
    QuestionRule(
        field="timing",
        question="When would you like the work done?",
        options=("As soon as possible", "Within a month", "In 1-3 months", "Just planning"),
        applies=_timing_unknown,
    ),
)


def next_question(
    ctx: QuestionContext,
    rules: tuple[QuestionRule, ...] = RULES,
) -> NextQuestion | None:
    """Return the first applicable question, or None when nothing is missing."""
    for rule in rules:
        if rule.applies(ctx):
            logger.debug("Next question rule matched: %s", rule.field)
            return NextQuestion(
                field=rule.field, question=rule.question, options=list(rule.options),
            )
    return None
