"""
Conflict decision — the prompt's answer for one conflicting file.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class DecisionKind(StrEnum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    SHOW_DIFF = "show_diff"
    MERGE = "merge"
    ABORT = "abort"


class ConflictDecision(BaseModel):
    """One decision, produced fresh for every conflicting operation.

    ``content`` carries the user-supplied result of a merge and is
    only meaningful for MERGE.
    """

    model_config = ConfigDict(frozen=True)

    kind: DecisionKind
    content: bytes | None = None

    @model_validator(mode="after")
    def _merge_needs_content(self) -> ConflictDecision:
        if self.kind == DecisionKind.MERGE and self.content is None:
            raise ValueError("A merge decision needs merged content")
        return self

    @classmethod
    def overwrite(cls) -> ConflictDecision:
        return cls(kind=DecisionKind.OVERWRITE)

    @classmethod
    def skip(cls) -> ConflictDecision:
        return cls(kind=DecisionKind.SKIP)

    @classmethod
    def show_diff(cls) -> ConflictDecision:
        return cls(kind=DecisionKind.SHOW_DIFF)

    @classmethod
    def merge(cls, content: bytes | str) -> ConflictDecision:
        if isinstance(content, str):
            content = content.encode("utf-8")
        return cls(kind=DecisionKind.MERGE, content=content)

    @classmethod
    def abort(cls) -> ConflictDecision:
        return cls(kind=DecisionKind.ABORT)
