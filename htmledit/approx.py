"""Bounded approximate substring search.

Bit-vector edit distance scan (Myers 1999, in Hyyro's formulation). Python
integers are arbitrary width, so a pattern of any length fits in a single
"word" and no block decomposition is needed.

A forward scan reports every text position where some substring ending there
is within ``max_errors`` edits of the pattern. The start of a chosen match is
then recovered by scanning the reversed window with the reversed pattern,
anchored at the match end.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ApproxMatch:
    """A window of the text within the error budget of the pattern."""

    start: int
    end: int
    errors: int

    @property
    def length(self) -> int:
        return self.end - self.start


def _char_masks(pattern: str) -> dict[str, int]:
    masks: dict[str, int] = {}
    for i, char in enumerate(pattern):
        masks[char] = masks.get(char, 0) | (1 << i)
    return masks


def _scan(text: str, pattern: str, anchored: bool) -> Iterator[tuple[int, int]]:
    """Yield ``(end, distance)`` for every prefix end of ``text``.

    With ``anchored`` false the match may start anywhere (substring search);
    with ``anchored`` true it must start at offset 0 (plain edit distance).
    """
    m = len(pattern)
    mask = (1 << m) - 1
    high = 1 << (m - 1)
    masks = _char_masks(pattern)

    pv = mask
    mv = 0
    score = m
    for j, char in enumerate(text):
        eq = masks.get(char, 0)
        xv = eq | mv
        xh = ((((eq & pv) + pv) & mask) ^ pv) | eq
        ph = (mv | ~(xh | pv)) & mask
        mh = pv & xh

        if ph & high:
            score += 1
        elif mh & high:
            score -= 1

        ph = (ph << 1) & mask
        mh = (mh << 1) & mask
        if anchored:
            ph |= 1
        pv = (mh | ~(xv | ph)) & mask
        mv = ph & xv
        yield j + 1, score


def find_match_ends(text: str, pattern: str, max_errors: int) -> Iterator[tuple[int, int]]:
    """Yield ``(end, errors)`` for every end position within ``max_errors``."""
    if not pattern:
        return
    for end, errors in _scan(text, pattern, anchored=False):
        if errors <= max_errors:
            yield end, errors


def find_match_start(text: str, pattern: str, end: int, errors: int) -> int:
    """Recover the start of a match ending at ``end`` with ``errors`` edits.

    Among starts that reach the minimum distance, the earliest one whose
    character equals the pattern's first character wins. Without such a
    start the shortest span wins, so an unmatched neighbouring character
    (typically markup) is never consumed as a substitution.
    """
    window_start = max(0, end - len(pattern) - errors)
    reversed_window = text[window_start:end][::-1]
    reversed_pattern = pattern[::-1]

    best_errors = len(pattern)
    lengths: list[int] = [0]
    for length, distance in _scan(reversed_window, reversed_pattern, anchored=True):
        if distance < best_errors:
            best_errors = distance
            lengths = [length]
        elif distance == best_errors:
            lengths.append(length)

    anchored_lengths = [n for n in lengths if n and text[end - n] == pattern[0]]
    if anchored_lengths:
        return end - max(anchored_lengths)
    return end - min(lengths)


def search(text: str, pattern: str, max_errors: int) -> list[ApproxMatch]:
    """Return every match of ``pattern`` in ``text`` within ``max_errors``."""
    return [
        ApproxMatch(start=find_match_start(text, pattern, end, errors), end=end, errors=errors)
        for end, errors in find_match_ends(text, pattern, max_errors)
    ]


def best_match(text: str, pattern: str, max_errors: int) -> ApproxMatch | None:
    """Return the match with the fewest errors, first occurrence on ties."""
    best_end = -1
    best_errors = max_errors + 1
    for end, errors in find_match_ends(text, pattern, max_errors):
        if errors < best_errors:
            best_end, best_errors = end, errors
            if errors == 0:
                break
    if best_end < 0:
        return None
    start = find_match_start(text, pattern, best_end, best_errors)
    return ApproxMatch(start=start, end=best_end, errors=best_errors)


def similarity(errors: int, match_length: int, pattern_length: int) -> float:
    """Normalized similarity: ``1 - errors / max(match_length, pattern_length)``."""
    longest = max(match_length, pattern_length)
    if longest == 0:
        return 1.0
    return max(0.0, 1.0 - errors / longest)


__all__ = [
    "ApproxMatch",
    "best_match",
    "find_match_ends",
    "find_match_start",
    "search",
    "similarity",
]
