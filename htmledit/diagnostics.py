"""Best-effort diagnostics for edit operations that could not be applied.

Nothing here mutates the document. The result only tells the caller where
the closest plausible match is, so it can reissue a corrected operation.
"""

from __future__ import annotations

import math

from htmledit.approx import best_match, similarity
from htmledit.config import DEFAULT_CONFIG, DiagnosticsConfig
from htmledit.types import BestMatch


def _truncate(text: str, limit: int) -> str:
    return text[:limit]


def line_number(document: str, offset: int) -> int:
    """1-based line containing ``offset``."""
    return document.count("\n", 0, offset) + 1


def surrounding_lines(document: str, start: int, end: int, context_lines: int = 2) -> str:
    """Lines around ``[start, end)``, anchored to the enclosing lines."""
    line_start = document.rfind("\n", 0, start) + 1
    for _ in range(context_lines):
        if line_start == 0:
            break
        line_start = document.rfind("\n", 0, line_start - 1) + 1

    line_end = document.find("\n", end)
    for _ in range(context_lines):
        if line_end == -1:
            break
        line_end = document.find("\n", line_end + 1)
    if line_end == -1:
        line_end = len(document)

    return document[line_start:line_end]


def find_best_match_for_error(
    document: str,
    search: str,
    config: DiagnosticsConfig | None = None,
) -> BestMatch | None:
    """Locate the closest match for a failed search, or None if it is noise.

    Args:
        document: Current document buffer (not modified)
        search: The search text that no tier could match
        config: Diagnostic settings; defaults to the built-in config

    Returns:
        BestMatch with truncated text, surrounding lines, similarity and
        1-based line number, or None below the similarity floor.
    """
    cfg = config or DEFAULT_CONFIG.diagnostics
    if not search or not document:
        return None

    max_errors = max(1, math.floor(len(search) * cfg.budget))
    found = best_match(document, search, max_errors)
    if found is None:
        return None

    score = similarity(found.errors, found.length, len(search))
    if score < cfg.floor:
        return None

    return BestMatch(
        text=_truncate(document[found.start:found.end], cfg.text_limit),
        surrounding=_truncate(
            surrounding_lines(document, found.start, found.end, cfg.context_lines),
            cfg.context_limit,
        ),
        similarity=round(score, 2),
        line=line_number(document, found.start),
    )


__all__ = ["find_best_match_for_error", "line_number", "surrounding_lines"]
