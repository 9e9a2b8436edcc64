"""
Line diff — align existing and proposed content for conflict prompts.

Alignment uses difflib.SequenceMatcher (longest matching blocks), so
only changed regions are reported as added or removed.
"""

from __future__ import annotations

import difflib
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

DiffKind = Literal["unchanged", "added", "removed"]

_PREFIX = {"unchanged": " ", "added": "+", "removed": "-"}


@dataclass(frozen=True)
class DiffLine:
    kind: DiffKind
    text: str


def split_lines(content: bytes) -> list[str]:
    """Decode content for display; undecodable bytes are replaced."""
    return content.decode("utf-8", errors="replace").splitlines()


def diff_lines(old: Sequence[str], new: Sequence[str]) -> list[DiffLine]:
    """Align two line sequences.

    Returns:
        Every line of both inputs, tagged unchanged / added / removed,
        in reading order (removals before additions within a change).
    """
    matcher = difflib.SequenceMatcher(a=list(old), b=list(new), autojunk=False)
    result: list[DiffLine] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            result.extend(DiffLine("unchanged", line) for line in old[i1:i2])
            continue
        result.extend(DiffLine("removed", line) for line in old[i1:i2])
        result.extend(DiffLine("added", line) for line in new[j1:j2])
    return result


def format_diff(lines: Sequence[DiffLine]) -> str:
    """Render aligned lines with ``+`` / ``-`` / space prefixes."""
    return "\n".join(f"{_PREFIX[line.kind]} {line.text}" for line in lines)


def count_changes(lines: Sequence[DiffLine]) -> tuple[int, int]:
    """Return ``(added, removed)`` line counts."""
    added = sum(1 for line in lines if line.kind == "added")
    removed = sum(1 for line in lines if line.kind == "removed")
    return added, removed


def merge_buffer(old: Sequence[str], new: Sequence[str]) -> str:
    """Build an editable buffer with git-style markers around each change.

    Unchanged regions appear once; each changed region appears as::

        <<<<<<< existing
        ...old lines...
        =======
        ...new lines...
        >>>>>>> generated
    """
    matcher = difflib.SequenceMatcher(a=list(old), b=list(new), autojunk=False)
    out: list[str] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            out.extend(old[i1:i2])
            continue
        out.append("<<<<<<< existing")
        out.extend(old[i1:i2])
        out.append("=======")
        out.extend(new[j1:j2])
        out.append(">>>>>>> generated")
    return "\n".join(out) + "\n"
