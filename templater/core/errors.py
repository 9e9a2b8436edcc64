"""
Error taxonomy for the templater core.

    TemplaterError                 store / I/O failures, unknown generator
    ├── GeneratorError             bad declaration, unresolved expression
    │   └── ArgumentError          binding failures (recoverable by the caller)
    │       ├── TooManyArgumentsError
    │       ├── TooFewArgumentsError
    │       └── MalformattedArgumentError
    └── ConfigError                templater.yml missing or invalid
"""

from __future__ import annotations


class TemplaterError(Exception):
    """Base class for every error raised by the templater core."""


class GeneratorError(TemplaterError):
    """A generator could not be resolved or run."""


class ArgumentError(GeneratorError):
    """Raised while binding raw values to a generator's argument specs.

    Attributes:
        spec: Name of the offending argument spec, when one applies.
    """

    def __init__(self, message: str, spec: str | None = None):
        super().__init__(message)
        self.spec = spec


class TooManyArgumentsError(ArgumentError):
    """More positional values than the generator declares."""


class TooFewArgumentsError(ArgumentError):
    """A required argument received no value."""


class MalformattedArgumentError(ArgumentError):
    """A value failed its spec's coercion or validation."""


class ConfigError(TemplaterError):
    """Raised when templater.yml is invalid or missing."""
