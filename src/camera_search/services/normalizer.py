"""Map raw classifier labels onto catalog search terms."""

import math
import re
from collections.abc import Iterable, Mapping

from camera_search.domain.session import ClassificationCandidate, DetectedCategory
from camera_search.services.label_map import LABEL_MAP

_WHITESPACE = re.compile(r"\s+")
_WORD_SPLIT = re.compile(r"[\s_]+")


def normalize(raw_label: str, table: Mapping[str, str] = LABEL_MAP) -> str | None:
    """Return the search term for a raw label, or None if nothing matches.

    Whole comma-separated tokens are tried first ("backpack, knapsack"),
    then the individual words of the label.
    """
    for token in raw_label.split(","):
        key = _WHITESPACE.sub("_", token.strip().lower())
        if key and key in table:
            return table[key]

    words = _WORD_SPLIT.split(raw_label.lower().replace(",", " "))
    for word in words:
        if word and word in table:
            return table[word]
    return None


def display_label(raw_label: str) -> str:
    """Return the first synonym of a compound label."""
    return raw_label.split(",")[0].strip()


def confidence_percent(confidence: float) -> int:
    """Convert a [0, 1] confidence into a clamped integer percentage.

    Halves round up, so 0.025 becomes 3.
    """
    return max(0, min(100, math.floor(confidence * 100 + 0.5)))


def detect_categories(
    candidates: Iterable[ClassificationCandidate],
    table: Mapping[str, str] = LABEL_MAP,
) -> list[DetectedCategory]:
    """Normalize candidates, keeping the first occurrence of each term.

    Candidates are expected in descending confidence order; the returned
    list preserves that order.
    """
    detected: list[DetectedCategory] = []
    seen: set[str] = set()
    for candidate in candidates:
        term = normalize(candidate.raw_label, table)
        if term is None or term in seen:
            continue
        seen.add(term)
        detected.append(
            DetectedCategory(
                display_label=display_label(candidate.raw_label),
                search_term=term,
                confidence_percent=confidence_percent(candidate.confidence),
            )
        )
    return detected
