"""Apply ordered search/replace edits to a document.

Each operation is matched against the buffer as left by the operations
before it. Tiers are tried from most literal to most flexible, the first hit
is spliced in, and a miss is recorded with a best-match diagnostic. A failed
operation never stops the rest of the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from htmledit.config import DEFAULT_CONFIG, EngineConfig
from htmledit.diagnostics import find_best_match_for_error
from htmledit.matchers import Match, MatchFunction, build_tiers, try_exact
from htmledit.types import (
    ApplyFailure,
    ApplyPartial,
    ApplyResult,
    ApplySuccess,
    BestMatch,
    EditOperation,
    FailedOperation,
    MatchTier,
)

logger = logging.getLogger(__name__)


@dataclass
class OperationAttempt:
    """Outcome of applying one operation to the running buffer."""

    success: bool
    document: str
    tier: MatchTier | None = None
    error: str | None = None
    best_match: BestMatch | None = None


def _coerce(operation: EditOperation | Mapping) -> EditOperation:
    if isinstance(operation, EditOperation):
        return operation
    return EditOperation.model_validate(operation)


def _splice(document: str, match: Match, replace: str) -> str:
    return document[: match.offset] + replace + document[match.end :]


def _failure_message(index: int, total: int, reason: str, best: BestMatch | None) -> str:
    message = f"Edit operation {index + 1} of {total} failed: {reason}"
    if best is not None:
        message += f" (best match {round(best.similarity * 100)}% similar at line {best.line})"
    return message


def apply_operation(
    document: str,
    operation: EditOperation,
    tiers: Iterable[tuple[MatchTier, MatchFunction]],
) -> OperationAttempt:
    """Try every tier for a single operation; first hit wins."""
    search = operation.search
    expected = operation.expected_replacements

    exact = try_exact(document, search, expected)
    if exact is not None:
        if expected > 1:
            result = document.replace(search, operation.replace)
        else:
            result = _splice(document, exact, operation.replace)
        return OperationAttempt(success=True, document=result, tier="exact")

    if expected == 1:
        for name, tier in tiers:
            match = tier(document, search)
            if match is not None:
                logger.debug(
                    "Edit matched tier=%s span=%d:%d similarity=%.3f",
                    name,
                    match.offset,
                    match.end,
                    match.similarity,
                )
                return OperationAttempt(
                    success=True,
                    document=_splice(document, match, operation.replace),
                    tier=name,
                )
        reason = "search text not found"
    else:
        found = document.count(search)
        reason = (
            f"expected {expected} occurrences of search text, found {found}"
            if found
            else "search text not found"
        )

    return OperationAttempt(success=False, document=document, error=reason)


def apply_edit_operations(
    document: str,
    operations: Iterable[EditOperation | Mapping],
    config: EngineConfig | None = None,
) -> ApplyResult:
    """Apply ``operations`` in order to ``document``.

    Args:
        document: Current document text
        operations: Ordered edit operations (models or plain dicts)
        config: Engine settings; defaults to the built-in config

    Returns:
        ApplySuccess, ApplyPartial or ApplyFailure
    """
    cfg = config or DEFAULT_CONFIG
    ops = [_coerce(op) for op in operations]
    tiers = build_tiers(cfg.fuzzy_threshold, cfg.autocorrect_threshold)
    total = len(ops)

    buffer = document
    match_tiers: list[MatchTier] = []
    failures: list[FailedOperation] = []

    for index, op in enumerate(ops):
        if not op.search:
            failures.append(FailedOperation(
                index=index,
                error=_failure_message(index, total, "search text is empty", None),
            ))
            continue

        attempt = apply_operation(buffer, op, tiers)
        if attempt.success:
            buffer = attempt.document
            match_tiers.append(attempt.tier)
            continue

        best = find_best_match_for_error(buffer, op.search, cfg.diagnostics)
        logger.debug("Edit operation %d failed: %s", index + 1, attempt.error)
        failures.append(FailedOperation(
            index=index,
            error=_failure_message(index, total, attempt.error, best),
            best_match=best,
        ))

    if not failures:
        return ApplySuccess(document=buffer, match_tiers=match_tiers)

    if not match_tiers:
        first = failures[0]
        return ApplyFailure(
            document=buffer,
            error=first.error,
            best_match=first.best_match,
            failed_operations=failures,
        )

    applied = len(match_tiers)
    summary = f"Applied {applied} of {total} edit operations; {len(failures)} failed: " + "; ".join(
        failure.error for failure in failures
    )
    return ApplyPartial(
        document=buffer,
        applied_count=applied,
        failed_count=len(failures),
        failed_operations=failures,
        error=summary,
        best_match=failures[0].best_match,
        match_tiers=match_tiers,
    )


__all__ = ["OperationAttempt", "apply_edit_operations", "apply_operation"]
