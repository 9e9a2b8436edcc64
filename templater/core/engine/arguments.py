"""
Argument binder — match raw values to a generator's argument specs.

Pure functions: no I/O, no logging side effects beyond debug output.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from templater.core.errors import (
    GeneratorError,
    MalformattedArgumentError,
    TooFewArgumentsError,
    TooManyArgumentsError,
)
from templater.core.models.argument import ArgumentSpec, BoundArguments

logger = logging.getLogger(__name__)


def check_specs(specs: Sequence[ArgumentSpec], options: Sequence[ArgumentSpec] = ()) -> None:
    """Validate the ordering invariants of a declared spec list.

    Required specs precede optional ones; at most one multiple spec and
    it must be last; names are unique across positionals and options.

    Raises:
        GeneratorError: If the declaration is inconsistent.
    """
    seen: set[str] = set()
    optional_seen = False

    for index, spec in enumerate(specs):
        if spec.name in seen:
            raise GeneratorError(f"Duplicate argument name '{spec.name}'")
        seen.add(spec.name)

        if spec.multiple:
            if index != len(specs) - 1:
                raise GeneratorError(
                    f"Multiple argument '{spec.name}' must be the last argument"
                )
            continue

        if spec.required and optional_seen:
            raise GeneratorError(
                f"Required argument '{spec.name}' follows an optional argument"
            )
        if not spec.required:
            optional_seen = True

    for spec in options:
        if spec.name in seen:
            raise GeneratorError(f"Duplicate argument name '{spec.name}'")
        if spec.multiple:
            raise GeneratorError(f"Option '{spec.name}' cannot be multiple")
        seen.add(spec.name)


def bind(
    specs: Sequence[ArgumentSpec],
    values: Sequence[Any],
    options: Mapping[str, Any] | None = None,
    option_specs: Sequence[ArgumentSpec] = (),
) -> BoundArguments:
    """Bind raw positional values (and named options) to specs.

    Args:
        specs: Ordered positional specs.
        values: Ordered raw positional values.
        options: Raw named option values.
        option_specs: Declared named options.

    Returns:
        BoundArguments with defaults filled in.

    Raises:
        TooFewArgumentsError: A required spec has no value.
        TooManyArgumentsError: Surplus values and no multiple spec.
        MalformattedArgumentError: A value fails validation, or an
            unknown option was given.
    """
    values = list(values)
    fixed = [s for s in specs if not s.multiple]
    multiple = next((s for s in specs if s.multiple), None)

    required = [s for s in fixed if s.required]
    if len(values) < len(required):
        missing = required[len(values)]
        raise TooFewArgumentsError(
            f"Missing required argument '{missing.name}' "
            f"(expected at least {len(required)}, got {len(values)})",
            spec=missing.name,
        )

    if multiple is None and len(values) > len(fixed):
        raise TooManyArgumentsError(
            f"Too many arguments (expected at most {len(fixed)}, got {len(values)})",
        )

    bound: dict[str, Any] = {}
    for spec, raw in zip(fixed, values):
        # None means "not supplied", e.g. an unset value passed down by a parent
        if raw is None:
            if spec.required:
                raise TooFewArgumentsError(
                    f"Missing required argument '{spec.name}'", spec=spec.name,
                )
            bound[spec.name] = spec.empty_value
        else:
            bound[spec.name] = spec.coerce(raw)
    for spec in fixed[len(values):]:
        bound[spec.name] = spec.empty_value

    if multiple is not None:
        extra = [raw for raw in values[len(fixed):] if raw is not None]
        if not extra and multiple.required:
            raise TooFewArgumentsError(
                f"Argument '{multiple.name}' needs at least one value",
                spec=multiple.name,
            )
        bound[multiple.name] = [multiple.coerce(raw) for raw in extra] or multiple.empty_value

    bound.update(_bind_options(option_specs, options or {}))

    logger.debug("Bound arguments: %s", bound)
    return BoundArguments(bound)


def _bind_options(
    option_specs: Sequence[ArgumentSpec],
    options: Mapping[str, Any],
) -> dict[str, Any]:
    by_name = {s.name: s for s in option_specs}

    unknown = sorted(set(options) - set(by_name))
    if unknown:
        raise MalformattedArgumentError(
            f"Unknown option '{unknown[0]}'"
            + (f" (valid: {', '.join(sorted(by_name))})" if by_name else ""),
            spec=unknown[0],
        )

    bound: dict[str, Any] = {}
    for spec in option_specs:
        if options.get(spec.name) is not None:
            bound[spec.name] = spec.coerce(options[spec.name])
        elif spec.required:
            raise TooFewArgumentsError(
                f"Missing required option '{spec.name}'",
                spec=spec.name,
            )
        else:
            bound[spec.name] = spec.empty_value
    return bound
