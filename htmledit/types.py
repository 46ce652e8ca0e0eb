"""Core types for htmledit - Pydantic models for edit requests and results.

An agent describes document changes as (search, replace) pairs. The engine
answers with one of three result shapes so the tool layer can decide whether
to persist, retry the failed subset, or fall back to a full rewrite.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Matching strategies, in the order they are attempted
MatchTier = Literal["exact", "whitespace", "token", "fuzzy"]


class EditOperation(BaseModel):
    """A single search/replace edit requested by the agent.

    ``search`` may be empty here; the engine reports that as a failed
    operation instead of rejecting the whole request.
    """

    search: str
    replace: str
    expected_replacements: int = Field(1, ge=1, alias="expectedReplacements")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class BestMatch(BaseModel):
    """Closest plausible match for a failed operation (diagnostic only)."""

    text: str
    surrounding: str = ""
    similarity: float = Field(..., ge=0.0, le=1.0)
    line: int = Field(..., ge=1)


class FailedOperation(BaseModel):
    """An operation no tier could apply."""

    index: int
    error: str
    best_match: BestMatch | None = None


class ApplySuccess(BaseModel):
    """Every operation applied."""

    status: Literal["success"] = "success"
    document: str
    match_tiers: list[MatchTier] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


class ApplyPartial(BaseModel):
    """Some operations applied; the document reflects only those."""

    status: Literal["partial"] = "partial"
    document: str
    applied_count: int
    failed_count: int
    failed_operations: list[FailedOperation] = Field(default_factory=list)
    error: str = ""
    best_match: BestMatch | None = None
    match_tiers: list[MatchTier] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return False


class ApplyFailure(BaseModel):
    """No operation applied."""

    status: Literal["failure"] = "failure"
    document: str
    error: str
    best_match: BestMatch | None = None
    failed_operations: list[FailedOperation] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return False


ApplyResult = Annotated[
    Union[ApplySuccess, ApplyPartial, ApplyFailure],
    Field(discriminator="status"),
]


__all__ = [
    "MatchTier",
    "EditOperation",
    "BestMatch",
    "FailedOperation",
    "ApplySuccess",
    "ApplyPartial",
    "ApplyFailure",
    "ApplyResult",
]
