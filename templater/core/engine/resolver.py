"""
Conflict resolver — reconcile a ResolvedOperation with the destination.

States per operation:
    Initial     → Applied     destination missing (write, no prompt)
    Initial     → Applied     destination byte-identical (no write)
    Initial     → Conflicted  destination differs
    Conflicted  → Conflicted  SHOW_DIFF (redisplay, ask again)
    Conflicted  → Applied     OVERWRITE / MERGE
    Conflicted  → Skipped     SKIP
    Conflicted  → Aborted     ABORT

Directory operations never conflict. Store failures raise
TemplaterError; the manifold treats them exactly like ABORT.
"""

from __future__ import annotations

import logging
from pathlib import Path

from templater.adapters.base import ConflictPrompt, Store
from templater.core.engine import diff
from templater.core.errors import TemplaterError
from templater.core.models.action import ResolvedOperation
from templater.core.models.decision import DecisionKind
from templater.core.models.receipt import OperationReceipt, ReceiptStatus

logger = logging.getLogger(__name__)


class ConflictResolver:
    """Apply operations to a store, prompting on conflicts.

    Args:
        store: Destination tree.
        prompt: Decision-maker for conflicting files.
        dry_run: Classify only; never write and never prompt.
    """

    def __init__(self, store: Store, prompt: ConflictPrompt, dry_run: bool = False):
        self.store = store
        self.prompt = prompt
        self.dry_run = dry_run

    def apply(self, operation: ResolvedOperation) -> OperationReceipt:
        """Drive one operation to a terminal state.

        Raises:
            TemplaterError: The store failed; nothing more should run.
        """
        try:
            if operation.kind.is_directory:
                return self._apply_directory(operation)
            return self._apply_file(operation)
        except OSError as e:
            raise TemplaterError(
                f"Cannot apply {operation.action} to {operation.destination}: {e}"
            ) from e

    # ── Directories ─────────────────────────────────────────────

    def _apply_directory(self, operation: ResolvedOperation) -> OperationReceipt:
        if self.store.is_dir(operation.destination):
            return self._receipt(operation, "identical")
        if not self.dry_run:
            self.store.mkdir(operation.destination)
        return self._receipt(operation, "created")

    # ── Files ───────────────────────────────────────────────────

    def _apply_file(self, operation: ResolvedOperation) -> OperationReceipt:
        path = operation.destination
        proposed = operation.content or b""

        if not self.store.exists(path):
            if not self.dry_run:
                self.store.write(path, proposed)
            return self._receipt(operation, "created")

        existing = self.store.read(path)
        if existing == proposed:
            return self._receipt(operation, "identical")

        if self.dry_run:
            return self._receipt(operation, "conflict")

        return self._resolve_conflict(operation, existing, proposed)

    def _resolve_conflict(
        self,
        operation: ResolvedOperation,
        existing: bytes,
        proposed: bytes,
    ) -> OperationReceipt:
        path = operation.destination
        old, new = diff.split_lines(existing), diff.split_lines(proposed)
        lines = diff.diff_lines(old, new)
        diff_text = diff.format_diff(lines)
        if diff.count_changes(lines) == (0, 0):
            diff_text += "\n(line endings or final newline differ)"
        shown = 0

        while True:
            decision = self.prompt.ask_conflict(
                path, diff_text, existing=existing, proposed=proposed,
            )
            logger.debug("Conflict decision for %s: %s", path, decision.kind)

            if decision.kind == DecisionKind.SHOW_DIFF:
                shown += 1
                self.prompt.show_diff(path, diff_text)
                continue

            if decision.kind == DecisionKind.OVERWRITE:
                self.store.write(path, proposed)
                return self._receipt(operation, "overwritten", diff_shown=shown)

            if decision.kind == DecisionKind.MERGE:
                self.store.write(path, decision.content)
                return self._receipt(operation, "merged", diff_shown=shown)

            if decision.kind == DecisionKind.SKIP:
                return self._receipt(operation, "skipped", diff_shown=shown)

            return self._receipt(operation, "aborted", diff_shown=shown)

    def _receipt(
        self,
        operation: ResolvedOperation,
        status: ReceiptStatus,
        diff_shown: int = 0,
    ) -> OperationReceipt:
        return OperationReceipt(
            generator=operation.generator,
            action=operation.action,
            kind=str(operation.kind),
            destination=str(Path(operation.destination)),
            status=status,
            diff_shown=diff_shown,
            dry_run=self.dry_run,
        )
