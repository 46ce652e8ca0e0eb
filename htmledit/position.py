"""Whitespace normalization and offset mapping back to the original text."""

from __future__ import annotations

import re

WHITESPACE_RUN = re.compile(r"\s+")

# Returned by map_position when the offset is past the end of the text
NOT_FOUND = -1


def collapse_whitespace(text: str) -> str:
    """Collapse every maximal whitespace run to a single space."""
    return WHITESPACE_RUN.sub(" ", text)


def map_position(original: str, normalized_offset: int) -> int:
    """Map an offset in ``collapse_whitespace(original)`` back to ``original``.

    Each whitespace run counts as one normalized character, every other
    character counts as one. The returned offset is the first original index
    at which the running normalized count reaches ``normalized_offset``,
    skipping the tail of a whitespace run (those indices have no normalized
    counterpart of their own).

    Returns:
        Offset into ``original``, or ``NOT_FOUND`` if out of range.
    """
    if normalized_offset < 0:
        return NOT_FOUND

    count = 0
    in_whitespace = False
    for i, char in enumerate(original):
        run_tail = in_whitespace and char.isspace()
        if count == normalized_offset and not run_tail:
            return i
        if char.isspace():
            if not in_whitespace:
                count += 1
                in_whitespace = True
        else:
            count += 1
            in_whitespace = False

    if count == normalized_offset:
        return len(original)
    return NOT_FOUND


__all__ = ["NOT_FOUND", "WHITESPACE_RUN", "collapse_whitespace", "map_position"]
