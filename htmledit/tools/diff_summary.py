"""Compact change descriptions using google-diff-match-patch."""

from __future__ import annotations

from dataclasses import dataclass

from diff_match_patch import diff_match_patch


@dataclass
class ChangeStats:
    inserted: int
    deleted: int


def describe_change(before: str, after: str) -> str:
    """Return a patch text describing ``before -> after`` (empty if equal)."""
    if before == after:
        return ""

    dmp = diff_match_patch()
    diffs = dmp.diff_main(before, after)
    dmp.diff_cleanupSemantic(diffs)
    patches = dmp.patch_make(before, diffs)
    return dmp.patch_toText(patches)


def change_stats(before: str, after: str) -> ChangeStats:
    """Count inserted and deleted characters between two versions."""
    dmp = diff_match_patch()
    inserted = deleted = 0
    for op, text in dmp.diff_main(before, after):
        if op == dmp.DIFF_INSERT:
            inserted += len(text)
        elif op == dmp.DIFF_DELETE:
            deleted += len(text)
    return ChangeStats(inserted=inserted, deleted=deleted)


__all__ = ["ChangeStats", "change_stats", "describe_change"]
