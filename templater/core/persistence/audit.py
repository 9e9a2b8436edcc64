"""
Audit ledger — append-only run log.

Every manifold run can write one entry to an NDJSON (newline-delimited
JSON) file: which generator ran, what it invoked, and how it ended.

The ledger is append-only: entries are never modified or deleted. It
lives outside the destination tree so that writing it never bypasses
conflict resolution.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from templater.core.models.receipt import RunSummary

logger = logging.getLogger(__name__)


class AuditEntry(BaseModel):
    """A single audit log entry."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    generator: str = ""
    destination_root: str = ""

    # What ran
    invocations: list[str] = Field(default_factory=list)
    dry_run: bool = False

    # Results
    status: str = ""               # ok, aborted
    operations_total: int = 0
    operations_applied: int = 0
    operations_skipped: int = 0
    operations_written: int = 0
    aborted_at: str | None = None
    error: str | None = None

    # Extensible context
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_summary(cls, summary: RunSummary, destination_root: Path | str = "") -> AuditEntry:
        return cls(
            operation_id=summary.operation_id,
            generator=summary.generator,
            destination_root=str(destination_root),
            invocations=list(summary.invocations),
            dry_run=summary.dry_run,
            status=summary.status,
            operations_total=len(summary.receipts),
            operations_applied=len(summary.applied),
            operations_skipped=len(summary.skipped),
            operations_written=len(summary.written),
            aborted_at=summary.aborted_at.destination if summary.aborted_at else None,
            error=summary.error,
        )


class AuditWriter:
    """Append-only audit ledger writer.

    Each call to write() appends a single JSON line to the ledger file.
    The file is created if it doesn't exist.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append an audit entry to the ledger.

        Args:
            entry: The entry to write.
        """
        data = entry.model_dump(mode="json")
        line = json.dumps(data, ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Audit entry written: %s/%s", entry.generator, entry.operation_id)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)

    def read_all(self) -> list[AuditEntry]:
        """Read all entries from the ledger.

        Returns:
            List of audit entries, oldest first.
        """
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(AuditEntry.model_validate(json.loads(line)))
                    except ValueError as e:
                        logger.warning("Skipping corrupt audit entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read audit ledger: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        """Read the most recent N entries."""
        return self.read_all()[-n:]
