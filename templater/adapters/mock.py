"""
Mock adapters — in-memory store and scripted prompt.

Used by the test suite (and by callers who want to preview a run) to
exercise the engine without touching the disk or the terminal.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePath

from templater.adapters.base import ConflictPrompt, Store
from templater.core.models.decision import ConflictDecision


class MemoryStore(Store):
    """In-memory destination tree.

    Records every write and mkdir so tests can assert on side effects.
    Failures can be injected per path.
    """

    def __init__(self, files: dict[str | PurePath, bytes | str] | None = None):
        self._files: dict[PurePath, bytes] = {}
        self._dirs: set[PurePath] = set()
        self._failures: dict[PurePath, OSError] = {}
        self.writes: list[tuple[PurePath, bytes]] = []
        self.mkdirs: list[PurePath] = []
        for path, content in (files or {}).items():
            self.seed(path, content)

    @property
    def name(self) -> str:
        return "memory"

    @property
    def files(self) -> dict[PurePath, bytes]:
        """Current file contents keyed by path."""
        return dict(self._files)

    def seed(self, path: str | PurePath, content: bytes | str) -> None:
        """Place a file without recording it as a write."""
        key = PurePath(path)
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[key] = content
        self._dirs.update(key.parents)

    def set_failure(self, path: str | PurePath, error: OSError | None = None) -> None:
        """Make every access to ``path`` raise ``error``."""
        self._failures[PurePath(path)] = error or PermissionError(f"Permission denied: '{path}'")

    def text(self, path: str | PurePath) -> str:
        return self._files[PurePath(path)].decode("utf-8")

    def exists(self, path: Path) -> bool:
        key = self._check(path)
        return key in self._files or key in self._dirs

    def is_dir(self, path: Path) -> bool:
        return self._check(path) in self._dirs

    def read(self, path: Path) -> bytes:
        key = self._check(path)
        if key in self._dirs:
            raise IsADirectoryError(f"Is a directory: '{path}'")
        try:
            return self._files[key]
        except KeyError:
            raise FileNotFoundError(f"No such file: '{path}'") from None

    def write(self, path: Path, content: bytes) -> None:
        key = self._check(path)
        if key in self._dirs:
            raise IsADirectoryError(f"Is a directory: '{path}'")
        self._files[key] = content
        self._dirs.update(key.parents)
        self.writes.append((key, content))

    def mkdir(self, path: Path) -> None:
        key = self._check(path)
        if key in self._files:
            raise FileExistsError(f"File exists: '{path}'")
        self._dirs.add(key)
        self._dirs.update(key.parents)
        self.mkdirs.append(key)

    def _check(self, path: Path) -> PurePath:
        key = PurePath(path)
        if key in self._failures:
            raise self._failures[key]
        return key


class ScriptedPrompt(ConflictPrompt):
    """Answers conflicts from a pre-recorded list of decisions.

    Every call is logged. Running out of decisions is a test bug and
    raises AssertionError.
    """

    def __init__(self, decisions: Iterable[ConflictDecision] = ()):
        self._decisions = list(decisions)
        self.asked: list[tuple[Path, str]] = []
        self.diffs_shown: list[Path] = []

    @property
    def call_count(self) -> int:
        return len(self.asked)

    def push(self, *decisions: ConflictDecision) -> None:
        self._decisions.extend(decisions)

    def ask_conflict(
        self,
        path: Path,
        diff_text: str,
        *,
        existing: bytes = b"",
        proposed: bytes = b"",
    ) -> ConflictDecision:
        self.asked.append((path, diff_text))
        if not self._decisions:
            raise AssertionError(f"ScriptedPrompt has no decision left for {path}")
        return self._decisions.pop(0)

    def show_diff(self, path: Path, diff_text: str) -> None:
        self.diffs_shown.append(path)
