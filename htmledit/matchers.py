"""Search strategies for locating an edit's target span.

Each tier returns a ``Match`` (offset/length in the document) or None. Tiers
go from most literal to most flexible and are tried in ``MATCH_TIERS`` order.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from htmledit.approx import best_match, similarity
from htmledit.position import NOT_FOUND, collapse_whitespace, map_position
from htmledit.types import MatchTier

# Never allow a fuzzy match with zero tolerated edits
MIN_ERROR_BUDGET = 1
SIMILARITY_EPSILON = 1e-9


@dataclass
class Match:
    """A located span of the document."""

    offset: int
    length: int
    similarity: float = 1.0
    occurrences: int = 1

    @property
    def end(self) -> int:
        return self.offset + self.length


def try_exact(document: str, search: str, expected_count: int = 1) -> Match | None:
    """Literal substring match.

    With ``expected_count == 1`` the first occurrence wins even if there are
    more. With a higher count, every occurrence is counted and the match only
    succeeds if the count is exactly right (the caller then replaces all).
    """
    if not search:
        return None

    offset = document.find(search)
    if offset == -1:
        return None

    if expected_count > 1:
        occurrences = document.count(search)
        if occurrences != expected_count:
            return None
        return Match(offset=offset, length=len(search), occurrences=occurrences)

    return Match(offset=offset, length=len(search))


def try_whitespace(document: str, search: str) -> Match | None:
    """Match with every whitespace run collapsed to one space on both sides."""
    normalized_search = collapse_whitespace(search.strip())
    if not normalized_search:
        return None

    normalized_document = collapse_whitespace(document)
    normalized_offset = normalized_document.find(normalized_search)
    if normalized_offset == -1:
        return None

    start = map_position(document, normalized_offset)
    end = map_position(document, normalized_offset + len(normalized_search))
    if start == NOT_FOUND or end == NOT_FOUND:
        return None

    return Match(offset=start, length=end - start)


def build_token_pattern(search: str) -> re.Pattern[str] | None:
    """Regex requiring each whitespace-delimited token, in order."""
    tokens = search.split()
    if not tokens:
        return None
    return re.compile(r"\s+".join(re.escape(token) for token in tokens))


def try_token(document: str, search: str) -> Match | None:
    """Match the same token sequence separated by any whitespace."""
    pattern = build_token_pattern(search)
    if pattern is None:
        return None

    found = pattern.search(document)
    if found is None:
        return None

    return Match(offset=found.start(), length=found.end() - found.start())


def error_budget(search_length: int, threshold: float) -> int:
    """Maximum edit distance tolerated for a given similarity threshold."""
    budget = math.floor(search_length * (1 - threshold) + SIMILARITY_EPSILON)
    return max(MIN_ERROR_BUDGET, budget)


def try_fuzzy(document: str, search: str, threshold: float = 0.85) -> Match | None:
    """Approximate match within the edit budget implied by ``threshold``.

    The candidate with the fewest errors wins (first occurrence on ties) and
    must also reach ``threshold`` similarity; the one-error floor would
    otherwise let very short searches through at low similarity.
    """
    if not search:
        return None

    found = best_match(document, search, error_budget(len(search), threshold))
    if found is None:
        return None

    score = similarity(found.errors, found.length, len(search))
    if score + SIMILARITY_EPSILON < threshold:
        return None

    return Match(offset=found.start, length=found.length, similarity=score)


MatchFunction = Callable[[str, str], "Match | None"]


def fuzzy_tier(threshold: float) -> MatchFunction:
    """Bind a fuzzy threshold into a tier function."""

    def _match(document: str, search: str) -> Match | None:
        return try_fuzzy(document, search, threshold)

    return _match


def build_tiers(
    fuzzy_threshold: float = 0.85,
    autocorrect_threshold: float | None = None,
) -> list[tuple[MatchTier, MatchFunction]]:
    """Ordered fallback tiers for single-occurrence operations.

    Exact is handled separately because it is the only tier that also
    serves multi-occurrence operations.
    """
    tiers: list[tuple[MatchTier, MatchFunction]] = [
        ("whitespace", try_whitespace),
        ("token", try_token),
        ("fuzzy", fuzzy_tier(fuzzy_threshold)),
    ]
    if autocorrect_threshold is not None and autocorrect_threshold < fuzzy_threshold:
        tiers.append(("fuzzy", fuzzy_tier(autocorrect_threshold)))
    return tiers


# Strategy pipeline with default thresholds: most literal to most flexible
MATCH_TIERS = build_tiers()


__all__ = [
    "Match",
    "MatchFunction",
    "MATCH_TIERS",
    "MIN_ERROR_BUDGET",
    "build_tiers",
    "build_token_pattern",
    "error_budget",
    "fuzzy_tier",
    "try_exact",
    "try_fuzzy",
    "try_token",
    "try_whitespace",
]
