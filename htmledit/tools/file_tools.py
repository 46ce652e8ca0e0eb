"""Tool-calling surface over an in-memory set of project files.

An agent writes whole files, reads them back, or edits them with ordered
search/replace operations. Edit outcomes are turned into instructions the
agent can act on: retry only the failed operations, or rewrite the file.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Literal

from pydantic import BaseModel, Field

from htmledit.config import EngineConfig
from htmledit.engine import apply_edit_operations
from htmledit.logging import log_failure, log_success
from htmledit.tools.diff_summary import change_stats, describe_change
from htmledit.types import (
    ApplyFailure,
    ApplyPartial,
    BestMatch,
    EditOperation,
    FailedOperation,
    MatchTier,
)


class ReadFileResult(BaseModel):
    success: bool
    file: str
    content: str | None = None
    length: int = 0
    error: str | None = None


class WriteFilesResult(BaseModel):
    success: bool = True
    files: list[str] = Field(default_factory=list)


class EditFileResult(BaseModel):
    """Result of an ``edit_file`` tool call."""

    status: Literal["success", "partial", "failure"]
    file: str
    content: str | None = None
    match_tiers: list[MatchTier] = Field(default_factory=list)
    applied_count: int = 0
    failed_operations: list[FailedOperation] = Field(default_factory=list)
    best_match: BestMatch | None = None
    message: str = ""
    diff: str = ""
    chars_inserted: int = 0
    chars_deleted: int = 0


class FileWorkspace:
    """In-memory project files the agent edits through tool calls."""

    def __init__(
        self,
        files: Mapping[str, str] | None = None,
        config: EngineConfig | None = None,
        journal: bool = False,
    ):
        self.files: dict[str, str] = dict(files or {})
        self.config = config
        self.journal = journal

    def _available(self) -> str:
        return ", ".join(self.files) or "none"

    def write_files(self, files: Mapping[str, str]) -> WriteFilesResult:
        """Create or fully replace files. Unlisted files are kept."""
        self.files.update(files)
        return WriteFilesResult(files=list(files))

    def read_file(self, file: str) -> ReadFileResult:
        content = self.files.get(file)
        if content is None:
            return ReadFileResult(
                success=False,
                file=file,
                error=f'File "{file}" not found. Available files: {self._available()}.',
            )
        return ReadFileResult(success=True, file=file, content=content, length=len(content))

    def edit_file(
        self,
        file: str,
        operations: Iterable[EditOperation | Mapping],
    ) -> EditFileResult:
        """Apply search/replace operations to a stored file.

        Success and partial results are stored; a failure leaves the file
        untouched.
        """
        source = self.files.get(file)
        if source is None:
            return EditFileResult(
                status="failure",
                file=file,
                message=(
                    f'File "{file}" not found. Available files: {self._available()}. '
                    "Use write_files to create it."
                ),
            )

        ops = [
            op if isinstance(op, EditOperation) else EditOperation.model_validate(op)
            for op in operations
        ]
        result = apply_edit_operations(source, ops, self.config)

        if isinstance(result, ApplyFailure):
            if self.journal:
                log_failure(
                    file,
                    result.error,
                    operations=[op.model_dump() for op in ops],
                    original=source,
                    failed=[f.model_dump() for f in result.failed_operations],
                )
            return EditFileResult(
                status="failure",
                file=file,
                failed_operations=result.failed_operations,
                best_match=result.best_match,
                message=(
                    f'{result.error}. No changes were made to "{file}". '
                    "Use write_files to provide the complete replacement file instead."
                ),
            )

        self.files[file] = result.document
        diff = describe_change(source, result.document)
        stats = change_stats(source, result.document)

        if isinstance(result, ApplyPartial):
            if self.journal:
                log_failure(
                    file,
                    result.error,
                    operations=[op.model_dump() for op in ops],
                    original=source,
                    failed=[f.model_dump() for f in result.failed_operations],
                    extra={"status": "partial", "match_tiers": result.match_tiers},
                )
            return EditFileResult(
                status="partial",
                file=file,
                content=result.document,
                match_tiers=result.match_tiers,
                applied_count=result.applied_count,
                failed_operations=result.failed_operations,
                best_match=result.best_match,
                message=(
                    f"{result.error}. The applied changes were saved; "
                    "reissue only the failed operations, using the best match context."
                ),
                diff=diff,
                chars_inserted=stats.inserted,
                chars_deleted=stats.deleted,
            )

        if self.journal:
            log_success(
                file,
                operations=[op.model_dump() for op in ops],
                match_tiers=list(result.match_tiers),
            )
        return EditFileResult(
            status="success",
            file=file,
            content=result.document,
            match_tiers=result.match_tiers,
            applied_count=len(result.match_tiers),
            message=f'Applied {len(result.match_tiers)} edit operation(s) to "{file}".',
            diff=diff,
            chars_inserted=stats.inserted,
            chars_deleted=stats.deleted,
        )


__all__ = [
    "EditFileResult",
    "FileWorkspace",
    "ReadFileResult",
    "WriteFilesResult",
]
