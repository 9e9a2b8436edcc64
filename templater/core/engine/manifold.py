"""
Manifold — the central invocation loop.

A Manifold owns a set of named generators and one destination tree.
``invoke`` binds arguments, walks the generator's actions in order,
runs dependency generators depth-first as they are reached, and pushes
every file effect through the ConflictResolver.

Flow:
    invoke → bind → resolve_actions → (dependency → recurse | operation → resolver) → summary

Known limitations: repeated dependency invocations are not
deduplicated and dependency cycles are not detected. ``max_invocations``
only bounds the total number of generator runs per invoke.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from templater.adapters.base import ConflictPrompt, Store
from templater.adapters.filesystem import FilesystemStore
from templater.core.engine.generator import Generator
from templater.core.engine.render import JinjaRenderer, Renderer
from templater.core.engine.resolver import ConflictResolver
from templater.core.errors import GeneratorError, TemplaterError
from templater.core.models.action import DependencyCall, ResolvedOperation
from templater.core.models.receipt import OperationReceipt, RunSummary
from templater.core.persistence.audit import AuditEntry, AuditWriter

logger = logging.getLogger(__name__)

DEFAULT_MAX_INVOCATIONS = 256

_MARKERS = {
    "created": "+",
    "identical": "=",
    "overwritten": "✓",
    "merged": "✓",
    "skipped": "⊘",
    "conflict": "!",
    "aborted": "✗",
}


@dataclass
class _RunState:
    """Bookkeeping shared by every level of one invocation tree."""

    summary: RunSummary
    empty_dirs: list[Path] = field(default_factory=list)


class Manifold:
    """Registry of named generators bound to one destination tree.

    Args:
        destination_root: Root of the tree every generator writes into.
        prompt: Decision-maker for conflicting files.
        store: Destination store (default: the local filesystem).
        renderer: Template renderer (default: Jinja2).
        dry_run: Classify operations without writing.
        audit_writer: Optional ledger receiving one entry per run.
        max_invocations: Upper bound on generator runs per invoke.
    """

    def __init__(
        self,
        destination_root: Path | str,
        prompt: ConflictPrompt,
        store: Store | None = None,
        renderer: Renderer | None = None,
        dry_run: bool = False,
        audit_writer: AuditWriter | None = None,
        max_invocations: int = DEFAULT_MAX_INVOCATIONS,
    ):
        self.destination_root = Path(destination_root)
        self.store = store or FilesystemStore()
        self.renderer = renderer or JinjaRenderer()
        self.resolver = ConflictResolver(self.store, prompt, dry_run=dry_run)
        self.dry_run = dry_run
        self.audit_writer = audit_writer
        self.max_invocations = max_invocations
        self._generators: dict[str, Generator] = {}

    # ── Registration ────────────────────────────────────────────

    def register(self, name: str, generator: Generator) -> None:
        """Register a generator under ``name``, replacing any previous one."""
        if name in self._generators:
            logger.warning("Replacing existing generator: %s", name)
        self._generators[name] = generator
        logger.debug("Registered generator: %s", name)

    def unregister(self, name: str) -> None:
        self._generators.pop(name, None)

    def get(self, name: str) -> Generator | None:
        return self._generators.get(name)

    def generators(self) -> dict[str, Generator]:
        """All registered generators, in registration order."""
        return dict(self._generators)

    def __contains__(self, name: object) -> bool:
        return name in self._generators

    # ── Invocation ──────────────────────────────────────────────

    def invoke(
        self,
        name: str,
        raw_args: Sequence[Any] = (),
        options: Mapping[str, Any] | None = None,
    ) -> RunSummary:
        """Run ``name`` and its dependencies against the destination tree.

        Returns:
            RunSummary. An abort decision or a store failure ends the run
            early and is reported on the summary, not raised.

        Raises:
            TemplaterError: Unknown generator name.
            ArgumentError: Arguments do not match the generator's specs.
            GeneratorError: Unresolved expression or unknown dependency.
        """
        generator = self._generators.get(name)
        if generator is None:
            known = ", ".join(sorted(self._generators)) or "none"
            raise TemplaterError(f"Unknown generator '{name}' (registered: {known})")

        state = _RunState(
            summary=RunSummary(
                operation_id=generate_operation_id(),
                generator=name,
                dry_run=self.dry_run,
            )
        )
        try:
            self._run(name, generator, raw_args, options, state)
        except GeneratorError as e:
            state.summary.error = str(e)
            raise
        finally:
            self._write_audit(state.summary)

        summary = state.summary
        logger.info(
            "%s: %d applied, %d skipped%s",
            name,
            len(summary.applied),
            len(summary.skipped),
            f", aborted at {summary.aborted_at.destination}" if summary.aborted_at else "",
        )
        return summary

    def _run(
        self,
        name: str,
        generator: Generator,
        values: Sequence[Any],
        options: Mapping[str, Any] | None,
        state: _RunState,
    ) -> bool:
        """Run one generator. Returns False once the run has aborted."""
        summary = state.summary
        if len(summary.invocations) >= self.max_invocations:
            raise GeneratorError(
                f"Exceeded {self.max_invocations} generator invocations "
                f"(dependency cycle through '{name}'?)"
            )

        bound = generator.build(values, options)
        summary.invocations.append(name)
        logger.info("▶ %s %s", name, " ".join(str(v) for v in values))

        items = generator.resolve_actions(bound, self.renderer, self.destination_root)
        while True:
            try:
                item = next(items)
            except StopIteration:
                return True
            except GeneratorError:
                raise
            except TemplaterError as e:
                logger.error("✗ %s: %s", name, e)
                summary.aborted = True
                summary.error = str(e)
                return False

            if isinstance(item, DependencyCall):
                target = self._generators.get(item.generator)
                if target is None:
                    raise GeneratorError(
                        f"Generator '{name}' depends on unknown generator '{item.generator}'"
                    )
                if not self._run(item.generator, target, item.arguments, item.options, state):
                    return False
                continue

            if not self._apply(item, state):
                return False

    def _apply(self, operation: ResolvedOperation, state: _RunState) -> bool:
        summary = state.summary
        self._check_empty_guard(operation, state)

        try:
            receipt = self.resolver.apply(operation)
        except TemplaterError as e:
            receipt = OperationReceipt(
                generator=operation.generator,
                action=operation.action,
                kind=str(operation.kind),
                destination=str(operation.destination),
                status="aborted",
                error=str(e),
                dry_run=self.dry_run,
            )
            summary.error = str(e)

        summary.receipts.append(receipt)
        logger.info("%s %s  %s", _MARKERS[receipt.status], receipt.status, receipt.destination)

        if receipt.aborted:
            summary.aborted = True
            summary.aborted_at = receipt
            if summary.error is None:
                summary.error = f"Aborted at {receipt.destination}"
            logger.error("✗ run aborted at %s: %s", receipt.destination, summary.error)
            return False

        if operation.empty and receipt.applied:
            state.empty_dirs.append(Path(operation.destination))
        return True

    def _check_empty_guard(self, operation: ResolvedOperation, state: _RunState) -> None:
        if operation.kind.is_directory:
            return
        destination = Path(operation.destination)
        for directory in state.empty_dirs:
            if directory in destination.parents:
                logger.warning(
                    "%s is generated inside %s, which was declared empty",
                    destination,
                    directory,
                )

    def _write_audit(self, summary: RunSummary) -> None:
        if self.audit_writer is None:
            return
        self.audit_writer.write(AuditEntry.from_summary(summary, self.destination_root))


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"run-{now}-{short}"
