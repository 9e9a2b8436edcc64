"""
Argument models — the contract a generator declares for its inputs.

An ArgumentSpec describes one positional argument or named option.
BoundArguments is the read-only result of binding raw values against
a generator's specs; it is created once per invocation.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from templater.core.errors import MalformattedArgumentError

_TRUE = {"true", "yes", "y", "on", "1"}
_FALSE = {"false", "no", "n", "off", "0"}


class ArgumentSpec(BaseModel):
    """A declared generator argument.

    Attributes:
        name:        Unique name within the generator.
        required:    Whether a value must be supplied.
        multiple:    Collect every remaining positional value into a list.
        default:     Value bound when an optional spec receives nothing.
        type:        Coercion applied to raw string values.
        choices:     Allowed raw values (validated before coercion).
        pattern:     Regex the raw value must fully match.
        description: Usage text.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    required: bool = True
    multiple: bool = False
    default: Any = None
    type: Literal["string", "integer", "float", "boolean"] = "string"
    choices: list[str] | None = None
    pattern: str | None = None
    description: str = ""

    @field_validator("pattern")
    @classmethod
    def _compile_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid pattern /{value}/: {e}") from e
        return value

    @model_validator(mode="after")
    def _check_default(self) -> ArgumentSpec:
        try:
            self.empty_value
        except MalformattedArgumentError as e:
            raise ValueError(f"invalid default: {e}") from e
        return self

    @property
    def arity(self) -> Literal["required", "optional", "multiple"]:
        if self.multiple:
            return "multiple"
        return "required" if self.required else "optional"

    @property
    def empty_value(self) -> Any:
        """Value bound when nothing was supplied for an optional spec.

        Defaults go through the same coercion as supplied values.
        """
        if self.default is None:
            return [] if self.multiple else None
        if self.multiple:
            defaults = self.default if isinstance(self.default, (list, tuple)) else [self.default]
            return [self.coerce(value) for value in defaults]
        return self.coerce(self.default)

    def coerce(self, raw: Any) -> Any:
        """Validate and convert one raw value.

        Non-string values (passed between generators) are accepted as-is
        when they already have the right type.

        Raises:
            MalformattedArgumentError: If validation or coercion fails.
        """
        if not isinstance(raw, str):
            return self._coerce_native(raw)

        if self.choices is not None and raw not in self.choices:
            raise MalformattedArgumentError(
                f"Argument '{self.name}' must be one of "
                f"{', '.join(self.choices)} (got '{raw}')",
                spec=self.name,
            )
        if self.pattern is not None and not re.fullmatch(self.pattern, raw):
            raise MalformattedArgumentError(
                f"Argument '{self.name}' does not match /{self.pattern}/ (got '{raw}')",
                spec=self.name,
            )

        try:
            if self.type == "integer":
                return int(raw)
            if self.type == "float":
                return float(raw)
        except ValueError as e:
            raise MalformattedArgumentError(
                f"Argument '{self.name}' expects {self.type} (got '{raw}')",
                spec=self.name,
            ) from e

        if self.type == "boolean":
            lowered = raw.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise MalformattedArgumentError(
                f"Argument '{self.name}' expects boolean (got '{raw}')",
                spec=self.name,
            )
        return raw

    def _coerce_native(self, value: Any) -> Any:
        expected: tuple[type, ...] = {
            "string": (str,),
            "integer": (int,),
            "float": (int, float),
            "boolean": (bool,),
        }[self.type]
        # bool is an int subclass; keep integers honest
        if self.type in ("integer", "float") and isinstance(value, bool):
            expected = ()
        if expected and isinstance(value, expected):
            return value
        if self.type == "string" and isinstance(value, (int, float)):
            return str(value)
        raise MalformattedArgumentError(
            f"Argument '{self.name}' expects {self.type} (got {type(value).__name__})",
            spec=self.name,
        )


class BoundArguments(Mapping[str, Any]):
    """Immutable name → value mapping for a single generator invocation."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BoundArguments({dict(self._values)!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

