"""
Adapter base — the contracts between the engine and the outside world.

The engine never touches the disk or the terminal directly. It goes
through a Store (the destination tree) and a ConflictPrompt (whoever
decides what happens to a conflicting file).

To create a new store or prompt:
    1. Subclass Store / ConflictPrompt
    2. Implement the abstract methods
    3. Pass an instance to the Manifold (or ConflictResolver)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from templater.core.models.decision import ConflictDecision


class Store(ABC):
    """Abstract destination tree.

    All methods are synchronous and may raise OSError; the conflict
    resolver turns those into a run-ending TemplaterError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Store identifier (e.g., 'filesystem', 'memory')."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Whether a file or directory exists at ``path``."""

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Whether ``path`` is an existing directory."""

    @abstractmethod
    def read(self, path: Path) -> bytes:
        """Return the bytes of the file at ``path``."""

    @abstractmethod
    def write(self, path: Path, content: bytes) -> None:
        """Write ``content`` to ``path``, creating parent directories."""

    @abstractmethod
    def mkdir(self, path: Path) -> None:
        """Create a directory (and its parents) at ``path``."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ConflictPrompt(ABC):
    """Decision-maker for conflicting files.

    ``ask_conflict`` blocks until a decision is available. There is no
    timeout: the implementation is responsible for eventually answering.
    """

    @abstractmethod
    def ask_conflict(
        self,
        path: Path,
        diff_text: str,
        *,
        existing: bytes = b"",
        proposed: bytes = b"",
    ) -> ConflictDecision:
        """Return exactly one decision for the conflicting ``path``."""

    def show_diff(self, path: Path, diff_text: str) -> None:
        """Redisplay the diff after a SHOW_DIFF decision. Default: no-op."""
