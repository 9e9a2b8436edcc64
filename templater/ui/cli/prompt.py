"""
Interactive conflict prompt for the terminal.

    conflict  app/models/widget.py  (+3 -1)
    Overwrite app/models/widget.py? [Ynmdqh]

    Y  overwrite      n  skip         m  merge in $EDITOR
    d  show diff      q  abort run    h  help
"""

from __future__ import annotations

from pathlib import Path

import click

from templater.adapters.base import ConflictPrompt
from templater.core.engine import diff
from templater.core.models.decision import ConflictDecision

_HELP = """\
   Y - overwrite the existing file (default)
   n - skip, keep the existing file
   m - merge: edit existing and generated content in $EDITOR
   d - show the differences
   q - abort the whole run
   h - this help"""

_CHOICES = ["y", "n", "m", "d", "q", "h"]


def _style_diff(diff_text: str) -> str:
    styled = []
    for line in diff_text.splitlines():
        if line.startswith("+"):
            styled.append(click.style(line, fg="green"))
        elif line.startswith("-"):
            styled.append(click.style(line, fg="red"))
        else:
            styled.append(line)
    return "\n".join(styled)


class ClickConflictPrompt(ConflictPrompt):
    """Ask the user on the terminal via click."""

    def __init__(self, root: Path | None = None):
        self._root = root

    def _display(self, path: Path) -> str:
        if self._root is not None:
            try:
                return str(Path(path).relative_to(self._root))
            except ValueError:
                pass
        return str(path)

    def ask_conflict(
        self,
        path: Path,
        diff_text: str,
        *,
        existing: bytes = b"",
        proposed: bytes = b"",
    ) -> ConflictDecision:
        shown = self._display(path)
        old, new = diff.split_lines(existing), diff.split_lines(proposed)
        added, removed = diff.count_changes(diff.diff_lines(old, new))
        click.secho(f"   conflict  {shown}  (+{added} -{removed})", fg="red", bold=True)

        while True:
            answer = click.prompt(
                f"   Overwrite {shown}? [Ynmdqh]",
                default="y",
                show_default=False,
                show_choices=False,
                type=click.Choice(_CHOICES, case_sensitive=False),
            ).lower()

            if answer == "y":
                return ConflictDecision.overwrite()
            if answer == "n":
                return ConflictDecision.skip()
            if answer == "d":
                return ConflictDecision.show_diff()
            if answer == "q":
                return ConflictDecision.abort()
            if answer == "h":
                click.echo(_HELP)
                continue

            buffer = diff.merge_buffer(old, new)
            edited = click.edit(buffer, extension=Path(path).suffix or ".txt", require_save=True)
            if edited is None:
                click.secho("   merge cancelled (file not saved)", fg="yellow")
                continue
            return ConflictDecision.merge(edited)

    def show_diff(self, path: Path, diff_text: str) -> None:
        click.echo()
        click.secho(f"   --- {self._display(path)} (existing)", bold=True)
        click.secho(f"   +++ {self._display(path)} (generated)", bold=True)
        click.echo(_style_diff(diff_text))
        click.echo()
