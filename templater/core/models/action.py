"""
Action models — declared effects and their resolved form.

Actions are declared when a generator is defined and never change.
Resolving an Action against one invocation's BoundArguments produces
either a ResolvedOperation (a concrete file or directory effect) or a
DependencyCall (run another generator before continuing).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from templater.core.errors import GeneratorError
from templater.core.models.argument import BoundArguments

# A destination or argument expression: a str.format pattern over the
# bound arguments, or a callable receiving them.
Expression = Union[str, Callable[[BoundArguments], Any]]


class ActionKind(StrEnum):
    """Closed set of action kinds."""

    TEMPLATE = "template"
    FILE = "file"
    DIRECTORY = "directory"
    EMPTY_DIRECTORY = "empty_directory"
    DEPENDENCY = "dependency"

    @property
    def is_directory(self) -> bool:
        return self in (ActionKind.DIRECTORY, ActionKind.EMPTY_DIRECTORY)


class Action(BaseModel):
    """A deferred description of one effect.

    Attributes:
        kind:        Which effect this is.
        name:        Label used in logs and receipts.
        source:      Path relative to the generator's source root
                     (template / file).
        inline:      Inline template text (template only).
        destination: Destination-path expression.
        variables:   Template variable overrides.
        generator:   Target generator (dependency only).
        arguments:   Positional argument expressions for the dependency.
        options:     Named option expressions for the dependency.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ActionKind
    name: str = ""
    source: str | None = None
    inline: str | None = None
    destination: Expression | None = None
    variables: dict[str, Any] = Field(default_factory=dict)
    generator: str | None = None
    arguments: list[Expression] = Field(default_factory=list)
    options: dict[str, Expression] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_kind(self) -> Action:
        if self.kind == ActionKind.DEPENDENCY:
            if not self.generator:
                raise GeneratorError("Dependency action needs a target generator")
            return self

        if self.destination is None:
            raise GeneratorError(f"{self.kind} action needs a destination")

        if self.kind == ActionKind.TEMPLATE:
            if (self.source is None) == (self.inline is None):
                raise GeneratorError(
                    "Template action needs exactly one of 'source' or 'inline'"
                )
        elif self.kind == ActionKind.FILE and self.source is None:
            raise GeneratorError("File action needs a source")
        return self

    @property
    def label(self) -> str:
        """Name used for this action in receipts."""
        if self.name:
            return self.name
        if self.kind == ActionKind.DEPENDENCY:
            return f"dependency:{self.generator}"
        if self.source:
            return self.source
        if isinstance(self.destination, str):
            return self.destination
        return str(self.kind)

    # ── Constructors ────────────────────────────────────────────

    @classmethod
    def template(
        cls,
        source: str | None,
        destination: Expression,
        *,
        inline: str | None = None,
        variables: dict[str, Any] | None = None,
        name: str = "",
    ) -> Action:
        """Render ``source`` (or ``inline``) into ``destination``."""
        return cls(
            kind=ActionKind.TEMPLATE,
            source=source,
            inline=inline,
            destination=destination,
            variables=variables or {},
            name=name,
        )

    @classmethod
    def file(cls, source: str, destination: Expression, *, name: str = "") -> Action:
        """Copy ``source`` verbatim into ``destination``."""
        return cls(kind=ActionKind.FILE, source=source, destination=destination, name=name)

    @classmethod
    def directory(cls, destination: Expression, *, name: str = "") -> Action:
        return cls(kind=ActionKind.DIRECTORY, destination=destination, name=name)

    @classmethod
    def empty_directory(cls, destination: Expression, *, name: str = "") -> Action:
        return cls(kind=ActionKind.EMPTY_DIRECTORY, destination=destination, name=name)

    @classmethod
    def dependency(
        cls,
        generator: str,
        arguments: list[Expression] | None = None,
        options: dict[str, Expression] | None = None,
        *,
        name: str = "",
    ) -> Action:
        """Invoke ``generator`` with arguments derived from the parent's."""
        return cls(
            kind=ActionKind.DEPENDENCY,
            generator=generator,
            arguments=arguments or [],
            options=options or {},
            name=name,
        )


@dataclass(frozen=True)
class ResolvedOperation:
    """An Action bound to one invocation.

    ``content`` is None for directory kinds. ``empty`` marks a directory
    that is expected to receive no generated files.
    """

    kind: ActionKind
    action: str
    generator: str
    destination: Path
    source: Path | None = None
    content: bytes | None = None
    empty: bool = False


@dataclass(frozen=True)
class DependencyCall:
    """Request to run another generator before the next action."""

    generator: str
    action: str
    arguments: tuple[Any, ...] = ()
    options: dict[str, Any] | None = None
