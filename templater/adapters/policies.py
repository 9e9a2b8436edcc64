"""
Non-interactive conflict policies (``--force`` / ``--skip``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from templater.adapters.base import ConflictPrompt
from templater.core.models.decision import ConflictDecision, DecisionKind

logger = logging.getLogger(__name__)


class AlwaysPrompt(ConflictPrompt):
    """Answer every conflict with the same decision."""

    def __init__(self, kind: DecisionKind):
        if kind not in (DecisionKind.OVERWRITE, DecisionKind.SKIP, DecisionKind.ABORT):
            raise ValueError(f"AlwaysPrompt cannot answer with {kind}")
        self._decision = ConflictDecision(kind=kind)

    def ask_conflict(
        self,
        path: Path,
        diff_text: str,
        *,
        existing: bytes = b"",
        proposed: bytes = b"",
    ) -> ConflictDecision:
        logger.info("%s %s", self._decision.kind, path)
        return self._decision
