"""Fuzzy lookup of product images by product name.

Catalog names and order line names rarely agree exactly: order lines carry the
size (``"Home Jersey - XL"``) and catalog entries sometimes use short forms
(``"H Jersey"``). Names are normalized by stripping size tokens, and each
catalog entry is indexed under a handful of spelling variations.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

_SIZES = r"(?:XS|S|M|L|XL|2XL|3XL|4XL|5XL)"
_WORDY_SIZES = r"(?:Small|Medium|Large|Extra Large)"

# (pattern, count) pairs applied in order; count=0 replaces every match.
SIZE_PATTERNS: Final[tuple[tuple[re.Pattern[str], int], ...]] = (
    (re.compile(rf" - {_SIZES}$", re.IGNORECASE), 1),
    (re.compile(r" - \d+-\d+$"), 1),
    (re.compile(r" - (?:XXXL|XXL)$", re.IGNORECASE), 1),
    (re.compile(rf" - {_WORDY_SIZES}$", re.IGNORECASE), 1),
    (re.compile(r" - \d{4}-\d{2,4}$"), 1),
    (re.compile(rf"^{_SIZES} - ", re.IGNORECASE), 1),
    (re.compile(rf"^{_WORDY_SIZES} - ", re.IGNORECASE), 1),
    (re.compile(rf" - {_SIZES}(?= - |$)", re.IGNORECASE), 0),
    (re.compile(rf" - {_WORDY_SIZES}(?= - |$)", re.IGNORECASE), 0),
)

_TRAILING_DASH = re.compile(r"\s*-\s*$")
_WHITESPACE = re.compile(r"\s+")

GENERIC_WORDS: Final[tuple[str, ...]] = ("jersey", "shirt", "kit", "uniform")
ABBREVIATIONS: Final[tuple[tuple[str, str], ...]] = (
    ("home", "h"),
    ("away", "a"),
    ("third", "3rd"),
    ("player", "player version"),
    ("fan", "fan version"),
)


def remove_size(product_name: str | None) -> str:
    if not product_name:
        return ""
    clean = product_name.strip()
    for pattern, count in SIZE_PATTERNS:
        clean = pattern.sub("", clean, count=count)
    clean = _TRAILING_DASH.sub("", clean)
    return _WHITESPACE.sub(" ", clean).strip()


def product_variations(product_name: str) -> list[str]:
    """Alternative spellings a catalog entry should also be found under."""

    clean = remove_size(product_name)
    if not clean:
        return []
    variations: list[str] = []
    for word in GENERIC_WORDS:
        variation = re.sub(rf"\b{word}\b", "", clean, flags=re.IGNORECASE).strip()
        if variation and variation != clean:
            variations.append(variation)
    lowered = clean.lower()
    for full, short in ABBREVIATIONS:
        if full in lowered:
            variations.append(re.sub(full, short, clean, flags=re.IGNORECASE))
    return variations


def edit_distance(left: str, right: str) -> int:
    """Levenshtein distance with unit costs."""

    if len(left) < len(right):
        left, right = right, left
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(left: str, right: str) -> float:
    """Edit-distance similarity in ``[0, 1]`` relative to the longer string."""

    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    longer = max(len(left), len(right))
    return (longer - edit_distance(left, right)) / longer


def build_image_index(catalog: Mapping[str, str]) -> dict[str, str]:
    """Index every catalog image under its name, stripped name and variations."""

    index: dict[str, str] = {}
    for raw_name, raw_image in catalog.items():
        name = (raw_name or "").strip()
        image = (raw_image or "").strip()
        if not name or not image:
            continue
        index[remove_size(name)] = image
        index[name] = image
        for variation in product_variations(name):
            index[variation] = image
    index.pop("", None)
    return index


class FuzzyProductMatcher:
    """Resolve product names against a name -> image catalog.

    Lookup order: the raw name, the size-stripped name, an exact match on the
    normalized (stripped, lowercased) form, then any key whose normalized form
    contains or is contained by the query, choosing the most similar one.
    Ties keep the first candidate in catalog order.
    """

    def __init__(self, catalog: Mapping[str, str]) -> None:
        self._images = build_image_index(catalog)
        self._normalized = [
            (normalized, key)
            for key in self._images
            if (normalized := remove_size(key).lower())
        ]

    def __len__(self) -> int:
        return len(self._images)

    def image_for(self, product_name: str) -> str | None:
        if not product_name:
            return None
        clean = remove_size(product_name)
        image = self._images.get(product_name) or self._images.get(clean)
        if image:
            return image
        key = self._best_key(clean.lower())
        return self._images[key] if key is not None else None

    def _best_key(self, query: str) -> str | None:
        if not query or not self._normalized:
            return None
        for normalized, key in self._normalized:
            if normalized == query:
                return key

        best: str | None = None
        best_score = -1.0
        for normalized, key in self._normalized:
            if query not in normalized and normalized not in query:
                continue
            score = similarity(query, normalized)
            if score > best_score:
                best, best_score = key, score
        if best is not None:
            log.debug("Fuzzy match %r -> %r (%.2f)", query, best, best_score)
        return best
