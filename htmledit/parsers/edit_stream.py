"""Incrementally extract tagged edit blocks from a streamed model response.

Expected shape::

    Explanation text...
    <editOperations>
      <edit><search>old</search><replace>new</replace></edit>
      <edit expected="3"><search>x</search><replace>y</replace></edit>
    </editOperations>
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from htmledit.types import EditOperation

TAG_OPEN = "<editOperations>"
TAG_CLOSE = "</editOperations>"

EDIT_PATTERN = re.compile(
    r"<edit(?P<attrs>\s[^>]*)?>(?P<body>.*?)</edit>",
    re.DOTALL,
)
SEARCH_PATTERN = re.compile(r"<search>(?P<text>.*?)</search>", re.DOTALL)
REPLACE_PATTERN = re.compile(r"<replace>(?P<text>.*?)</replace>", re.DOTALL)
EXPECTED_PATTERN = re.compile(r"""expected\s*=\s*["']?(?P<count>\d+)""")


@dataclass
class EditParseResult:
    """Snapshot of what has been parsed so far."""

    operations: list[EditOperation] = field(default_factory=list)
    explanation: str = ""
    is_complete: bool = False
    has_edit_tag: bool = False


def _parse_edit(attrs: str, body: str) -> EditOperation | None:
    search = SEARCH_PATTERN.search(body)
    replace = REPLACE_PATTERN.search(body)
    if search is None or replace is None:
        return None

    expected = 1
    count = EXPECTED_PATTERN.search(attrs)
    if count and int(count.group("count")) >= 1:
        expected = int(count.group("count"))

    return EditOperation(
        search=search.group("text"),
        replace=replace.group("text"),
        expected_replacements=expected,
    )


def parse_edit_blocks(content: str) -> list[EditOperation]:
    """Parse every complete ``<edit>`` block in ``content``."""
    operations: list[EditOperation] = []
    for match in EDIT_PATTERN.finditer(content or ""):
        operation = _parse_edit(match.group("attrs") or "", match.group("body"))
        if operation is not None:
            operations.append(operation)
    return operations


class EditStreamExtractor:
    """Buffer streamed chunks and re-parse edit blocks on every feed."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._buffer = ""
        self._inside_edits = False
        self._explanation = ""

    def feed(self, chunk: str) -> EditParseResult:
        """Append ``chunk`` and return everything parsed so far."""
        self._buffer += chunk

        if not self._inside_edits:
            open_index = self._buffer.find(TAG_OPEN)
            if open_index == -1:
                return EditParseResult(explanation=self._buffer)

            self._explanation = self._buffer[:open_index].strip()
            self._inside_edits = True
            self._buffer = self._buffer[open_index + len(TAG_OPEN):]

        close_index = self._buffer.find(TAG_CLOSE)
        is_complete = close_index != -1
        content = self._buffer[:close_index] if is_complete else self._buffer

        return EditParseResult(
            operations=parse_edit_blocks(content),
            explanation=self._explanation,
            is_complete=is_complete,
            has_edit_tag=True,
        )


__all__ = ["EditParseResult", "EditStreamExtractor", "parse_edit_blocks"]
