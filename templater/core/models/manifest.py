"""
Manifest models — the templater.yml schema.

These are declarations only. The config loader turns them into
Generator definitions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from templater.core.models.action import ActionKind
from templater.core.models.argument import ArgumentSpec

_ACTION_KEYS = ("template", "inline", "file", "directory", "empty_directory", "dependency")


class ActionDecl(BaseModel):
    """One entry in a generator's ``actions`` list.

    Exactly one of the kind keys must be present:

        - template: model.py.j2          (source relative to source_root)
          destination: "app/{name}.py"
        - inline: "# {{ name }}"
          destination: "docs/{name}.md"
        - file: LICENSE
          destination: LICENSE
        - directory: "app/models"
        - empty_directory: "tmp/{name}"
        - dependency: test
          args: ["{name}"]
    """

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    template: str | None = None
    inline: str | None = None
    file: str | None = None
    directory: str | None = None
    empty_directory: str | None = None
    dependency: str | None = None

    destination: str | None = None
    variables: dict[str, Any] = Field(default_factory=dict)
    args: list[str] = Field(default_factory=list)
    options: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _one_kind(self) -> ActionDecl:
        present = [key for key in _ACTION_KEYS if getattr(self, key) is not None]
        if len(present) != 1:
            raise ValueError(
                f"action must declare exactly one of {', '.join(_ACTION_KEYS)} "
                f"(got {', '.join(present) or 'none'})"
            )
        return self

    @property
    def kind(self) -> ActionKind:
        for key in _ACTION_KEYS:
            if getattr(self, key) is not None:
                return ActionKind.TEMPLATE if key == "inline" else ActionKind(key)
        raise AssertionError("unreachable: validated above")


class GeneratorDecl(BaseModel):
    """A generator declared in templater.yml."""

    model_config = ConfigDict(extra="forbid")

    description: str = ""
    source_root: str | None = None
    arguments: list[ArgumentSpec] = Field(default_factory=list)
    options: list[ArgumentSpec] = Field(default_factory=list)
    helpers: dict[str, Any] = Field(default_factory=dict)
    actions: list[ActionDecl] = Field(default_factory=list)


class ManifestDecl(BaseModel):
    """Root of templater.yml."""

    version: int = 1
    destination: str | None = None
    audit_log: str | None = None
    generators: dict[str, GeneratorDecl] = Field(default_factory=dict)
