"""
Receipt and RunSummary models — the outcome of a run.

Every ResolvedOperation that reaches the conflict resolver yields
exactly one OperationReceipt. A RunSummary aggregates the receipts of
a whole invocation tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel

ReceiptStatus = Literal[
    "created",
    "identical",
    "overwritten",
    "merged",
    "skipped",
    "conflict",
    "aborted",
]

_APPLIED = frozenset({"created", "identical", "overwritten", "merged"})


class OperationReceipt(BaseModel):
    """Result of resolving one operation against the destination store.

    Attributes:
        generator:   Generator that declared the action.
        action:      Action label.
        kind:        Action kind value.
        destination: Destination path as a string.
        status:      Terminal state of the operation.
        error:       Cause, when the store failed.
        diff_shown:  Number of times the diff was redisplayed.
        dry_run:     Whether the store was left untouched on purpose.
    """

    generator: str
    action: str
    kind: str
    destination: str
    status: ReceiptStatus
    error: str | None = None
    diff_shown: int = 0
    dry_run: bool = False

    @property
    def applied(self) -> bool:
        """Whether the operation reached the Applied state (incl. no-ops)."""
        return self.status in _APPLIED

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def aborted(self) -> bool:
        return self.status == "aborted"


@dataclass
class RunSummary:
    """Outcome of one Manifold.invoke call."""

    operation_id: str = ""
    generator: str = ""
    receipts: list[OperationReceipt] = field(default_factory=list)
    invocations: list[str] = field(default_factory=list)
    aborted: bool = False
    aborted_at: OperationReceipt | None = None
    error: str | None = None
    dry_run: bool = False

    @property
    def applied(self) -> list[OperationReceipt]:
        return [r for r in self.receipts if r.applied]

    @property
    def skipped(self) -> list[OperationReceipt]:
        return [r for r in self.receipts if r.skipped]

    @property
    def conflicts(self) -> list[OperationReceipt]:
        return [r for r in self.receipts if r.status == "conflict"]

    @property
    def written(self) -> list[OperationReceipt]:
        """Receipts whose operation changed the destination tree."""
        if self.dry_run:
            return []
        return [r for r in self.receipts if r.status in ("created", "overwritten", "merged")]

    @property
    def status(self) -> str:
        return "aborted" if self.aborted else "ok"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "generator": self.generator,
            "status": self.status,
            "dry_run": self.dry_run,
            "invocations": list(self.invocations),
            "applied": len(self.applied),
            "skipped": len(self.skipped),
            "conflicts": len(self.conflicts),
            "aborted_at": self.aborted_at.model_dump(mode="json") if self.aborted_at else None,
            "error": self.error,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }
