"""
Generator — a reusable definition of arguments and declared actions.

A Generator holds no per-invocation state. ``build`` binds raw values
into BoundArguments; ``resolve_actions`` lazily turns each declared
Action into a ResolvedOperation or a DependencyCall, in declaration
order.

Flow:
    raw values → build → BoundArguments → resolve_actions → operations
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

from templater.core.engine.arguments import bind, check_specs
from templater.core.engine.render import Renderer
from templater.core.errors import GeneratorError, TemplaterError
from templater.core.models.action import (
    Action,
    ActionKind,
    DependencyCall,
    Expression,
    ResolvedOperation,
)
from templater.core.models.argument import ArgumentSpec, BoundArguments

logger = logging.getLogger(__name__)

_SINGLE_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def evaluate(expression: Expression, bound: BoundArguments, context: str) -> Any:
    """Evaluate a destination or argument expression.

    A string is a ``str.format`` pattern over ``bound``; a callable
    receives ``bound``.

    Raises:
        GeneratorError: If the expression references an unbound name.
    """
    try:
        if callable(expression):
            return expression(bound)
        return expression.format_map(bound)
    except KeyError as e:
        raise GeneratorError(
            f"{context}: unresolved argument '{e.args[0]}' in {expression!r}"
        ) from e
    except (IndexError, ValueError) as e:
        raise GeneratorError(f"{context}: malformed expression {expression!r}: {e}") from e


def evaluate_argument(expression: Expression, bound: BoundArguments, context: str) -> Any:
    """Like ``evaluate``, but ``"{name}"`` on its own passes the raw value."""
    if isinstance(expression, str):
        match = _SINGLE_PLACEHOLDER.fullmatch(expression)
        if match:
            name = match.group(1)
            if name not in bound:
                raise GeneratorError(
                    f"{context}: unresolved argument '{name}' in {expression!r}"
                )
            return bound[name]
    return evaluate(expression, bound, context)


class Generator:
    """A named generator definition.

    Args:
        name: Registered name.
        description: One-line description for listings.
        arguments: Ordered positional argument specs.
        options: Named option specs.
        actions: Ordered declared actions.
        source_root: Directory that relative action sources resolve against.
        helpers: Extra values exposed to every template.
    """

    def __init__(
        self,
        name: str,
        *,
        description: str = "",
        arguments: Sequence[ArgumentSpec] = (),
        options: Sequence[ArgumentSpec] = (),
        actions: Sequence[Action] = (),
        source_root: Path | str | None = None,
        helpers: Mapping[str, Any] | None = None,
    ):
        check_specs(arguments, options)
        self.name = name
        self.description = description
        self.arguments: tuple[ArgumentSpec, ...] = tuple(arguments)
        self.options: tuple[ArgumentSpec, ...] = tuple(options)
        self.actions: tuple[Action, ...] = tuple(actions)
        self.source_root = Path(source_root) if source_root is not None else None
        self.helpers: dict[str, Any] = dict(helpers or {})

    def __repr__(self) -> str:
        return f"<Generator name={self.name!r} actions={len(self.actions)}>"

    @property
    def dependencies(self) -> list[str]:
        """Names of generators this one invokes, in declaration order."""
        return [a.generator for a in self.actions if a.kind == ActionKind.DEPENDENCY]

    @property
    def usage(self) -> str:
        """Usage line, e.g. ``model NAME [FIELDS...] [--parent=VALUE]``."""
        parts = [self.name]
        for spec in self.arguments:
            label = spec.name.upper()
            if spec.multiple:
                label = f"{label}..."
            parts.append(label if spec.required else f"[{label}]")
        for spec in self.options:
            option = f"--{spec.name}=VALUE"
            parts.append(option if spec.required else f"[{option}]")
        return " ".join(parts)

    def build(
        self,
        values: Sequence[Any] = (),
        options: Mapping[str, Any] | None = None,
    ) -> BoundArguments:
        """Bind raw values for one invocation."""
        return bind(self.arguments, values, options, self.options)

    def resolve_actions(
        self,
        bound: BoundArguments,
        renderer: Renderer,
        destination_root: Path,
    ) -> Iterator[ResolvedOperation | DependencyCall]:
        """Yield one item per declared action, lazily and in order.

        Each call returns a fresh iterator over the same sequence.

        Raises:
            GeneratorError: Unresolved destination or dependency expression,
                or a template that fails to render.
            TemplaterError: A source file cannot be read.
        """
        root = Path(destination_root)
        for action in self.actions:
            if action.kind == ActionKind.DEPENDENCY:
                yield self._resolve_dependency(action, bound)
                continue

            destination = self._destination(action, bound, root)

            if action.kind.is_directory:
                yield ResolvedOperation(
                    kind=action.kind,
                    action=action.label,
                    generator=self.name,
                    destination=destination,
                    empty=action.kind == ActionKind.EMPTY_DIRECTORY,
                )
            elif action.kind == ActionKind.FILE:
                source = self._source_path(action)
                yield ResolvedOperation(
                    kind=action.kind,
                    action=action.label,
                    generator=self.name,
                    destination=destination,
                    source=source,
                    content=_read_source(source),
                )
            elif action.kind == ActionKind.TEMPLATE:
                source = self._source_path(action) if action.source else None
                text = action.inline if source is None else _read_template(source)
                try:
                    rendered = renderer.render(text, self._bindings(action, bound, root))
                except GeneratorError as e:
                    raise GeneratorError(f"{self._context(action)}: {e}") from e
                yield ResolvedOperation(
                    kind=action.kind,
                    action=action.label,
                    generator=self.name,
                    destination=destination,
                    source=source,
                    content=rendered.encode("utf-8"),
                )
            else:
                raise GeneratorError(f"Unsupported action kind: {action.kind}")

    # ── Internals ───────────────────────────────────────────────

    def _context(self, action: Action) -> str:
        return f"Generator '{self.name}', action '{action.label}'"

    def _destination(self, action: Action, bound: BoundArguments, root: Path) -> Path:
        value = evaluate(action.destination, bound, self._context(action))
        path = Path(str(value))
        if not path.is_absolute():
            path = root / path

        # keep every effect inside the destination tree
        resolved_root = root.resolve()
        resolved = path.resolve()
        if resolved != resolved_root and resolved_root not in resolved.parents:
            raise GeneratorError(
                f"{self._context(action)}: destination {path} is outside {root}"
            )
        return path

    def _source_path(self, action: Action) -> Path:
        source = Path(action.source)
        if source.is_absolute():
            return source
        if self.source_root is None:
            raise GeneratorError(
                f"{self._context(action)}: relative source '{action.source}' "
                "but the generator has no source_root"
            )
        return (self.source_root / source).resolve()

    def _bindings(self, action: Action, bound: BoundArguments, root: Path) -> dict[str, Any]:
        return {
            **self.helpers,
            **bound,
            **action.variables,
            "generator_name": self.name,
            "destination_root": str(root),
        }

    def _resolve_dependency(self, action: Action, bound: BoundArguments) -> DependencyCall:
        context = self._context(action)
        arguments: list[Any] = []
        for expression in action.arguments:
            value = evaluate_argument(expression, bound, context)
            if isinstance(value, (list, tuple)):
                arguments.extend(value)
            else:
                arguments.append(value)

        options = {
            key: evaluate_argument(expression, bound, context)
            for key, expression in action.options.items()
        }
        return DependencyCall(
            generator=action.generator,
            action=action.label,
            arguments=tuple(arguments),
            options=options,
        )


def _read_source(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise TemplaterError(f"Cannot read source {path}: {e}") from e


def _read_template(path: Path) -> str:
    try:
        return _read_source(path).decode("utf-8")
    except UnicodeDecodeError as e:
        raise TemplaterError(f"Cannot decode template {path}: {e}") from e
