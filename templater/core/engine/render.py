"""
Template rendering.

The engine only depends on the Renderer contract: a pure function from
template text plus bindings to output text. JinjaRenderer is the
default implementation.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from templater.core.errors import GeneratorError


class Renderer(ABC):
    """Template renderer contract."""

    @abstractmethod
    def render(self, source: str, bindings: Mapping[str, Any]) -> str:
        """Render ``source`` with ``bindings``. Must not touch the filesystem."""


# ── String helpers exposed as filters ──────────────────────────


def camelize(value: str) -> str:
    """``blog_post`` → ``BlogPost``."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\-\s]+", str(value)) if part)


def underscore(value: str) -> str:
    """``BlogPost`` → ``blog_post``."""
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", str(value))
    text = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", text)
    return re.sub(r"[\-\s]+", "_", text).lower()


def dasherize(value: str) -> str:
    """``blog_post`` → ``blog-post``."""
    return underscore(value).replace("_", "-")


def pluralize(value: str) -> str:
    """Naive English plural: ``entry`` → ``entries``, ``box`` → ``boxes``."""
    text = str(value)
    if re.search(r"[^aeiou]y$", text):
        return text[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", text):
        return text + "es"
    return text + "s"


FILTERS = {
    "camelize": camelize,
    "underscore": underscore,
    "dasherize": dasherize,
    "pluralize": pluralize,
}


class JinjaRenderer(Renderer):
    """Jinja2 renderer with strict undefined handling.

    Undefined variables raise instead of rendering as empty strings, and
    trailing newlines are preserved so re-runs stay byte-identical.
    """

    def __init__(self, filters: Mapping[str, Any] | None = None):
        self._env = Environment(
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=False,
            lstrip_blocks=False,
        )
        self._env.filters.update(FILTERS)
        if filters:
            self._env.filters.update(filters)

    def render(self, source: str, bindings: Mapping[str, Any]) -> str:
        try:
            return self._env.from_string(source).render(**bindings)
        except TemplateError as e:
            raise GeneratorError(f"Template rendering failed: {e}") from e
