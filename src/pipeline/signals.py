"""Signal extraction: categorical cues from a free-text job description.

Every test is independent and absence is simply False/empty. The vocabulary
lives in SignalVocabulary so another trade can swap it without touching the
aggregation or question logic.
"""

import logging
import re
from dataclasses import dataclass, field

from src.core.schemas import SignalSet

logger = logging.getLogger(__name__)

NUMBER_WORDS: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}


def _alternation(words: tuple[str, ...]) -> str:
    return "|".join(re.escape(w) for w in words)


@dataclass(frozen=True)
class SignalVocabulary:
    """Keyword tables driving SignalExtractor."""

    property_types: tuple[str, ...] = ("house", "apartment", "unit", "townhouse", "villa")
    scope_words: tuple[str, ...] = ("full", "entire", "whole", "complete")
    interior_words: tuple[str, ...] = (
        "interior", "inside", "internal", "indoor", "room", "rooms", "ceiling", "ceilings",
        "wall", "walls",
    )
    exterior_words: tuple[str, ...] = (
        "exterior", "outside", "external", "outdoor", "fence", "fences", "deck", "eaves",
        "facade", "roof", "weatherboard", "weatherboards", "gutter", "gutters",
    )
    room_names: tuple[str, ...] = (
        "bedroom", "bathroom", "kitchen", "living", "lounge", "hallway", "laundry",
    )
    room_count_nouns: tuple[str, ...] = ("bed", "beds", "bedroom", "bedrooms", "room", "rooms")
    length_units: tuple[str, ...] = (
        "m2", "m²", "sqm", "square metres", "square meters", "metres", "meters", "metre",
        "meter", "mm", "cm", "ft", "feet", "foot", "m",
    )
    number_words: dict[str, int] = field(default_factory=lambda: dict(NUMBER_WORDS))


class SignalExtractor:
    """Pattern tests over a description, yielding a SignalSet."""

    def __init__(self, vocabulary: SignalVocabulary | None = None) -> None:
        vocab = vocabulary or SignalVocabulary()
        self._vocab = vocab
        numbers = _alternation(tuple(vocab.number_words))
        self._room_count = re.compile(
            rf"\b(\d+|{numbers})\s*-?\s*(?:{_alternation(vocab.room_count_nouns)})\b",
            re.IGNORECASE,
        )
        self._property_type = re.compile(
            rf"\b({_alternation(vocab.property_types)})s?\b", re.IGNORECASE
        )
        self._scope = re.compile(rf"\b(?:{_alternation(vocab.scope_words)})\b", re.IGNORECASE)
        self._interior = re.compile(
            rf"\b(?:{_alternation(vocab.interior_words)})\b", re.IGNORECASE
        )
        self._exterior = re.compile(
            rf"\b(?:{_alternation(vocab.exterior_words)})\b", re.IGNORECASE
        )
        self._room_names = re.compile(
            rf"\b({_alternation(vocab.room_names)})(?:s|\s*room)?\b", re.IGNORECASE
        )
        self._measurement = re.compile(
            rf"\b\d+(?:\.\d+)?\s*(?:{_alternation(vocab.length_units)})(?![a-z])",
            re.IGNORECASE,
        )

    def extract(self, description: str) -> SignalSet:
        text = description or ""

        room_count: int | None = None
        count_match = self._room_count.search(text)
        if count_match:
            room_count = self._parse_number(count_match.group(1))

        type_match = self._property_type.search(text)
        mentions = [m.group(1).lower() for m in self._room_names.finditer(text)]

        signals = SignalSet(
            has_room_count=count_match is not None,
            room_count=room_count,
            has_property_type=type_match is not None,
            property_type=type_match.group(1).lower() if type_match else None,
            full_scope=bool(self._scope.search(text)),
            interior=bool(self._interior.search(text)) or bool(mentions),
            exterior=bool(self._exterior.search(text)),
            room_mentions=mentions,
            has_measurement=bool(self._measurement.search(text)),
        )
        logger.debug("Signals for %r: %s", text[:60], signals.model_dump())
        return signals

    def _parse_number(self, token: str) -> int | None:
        token = token.lower()
        if token.isdigit():
            return int(token)
        return self._vocab.number_words.get(token)


_DEFAULT_EXTRACTOR = SignalExtractor()


def extract_signals(description: str) -> SignalSet:
    """Extract signals with the default painting vocabulary."""
    return _DEFAULT_EXTRACTOR.extract(description)
