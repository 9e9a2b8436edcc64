"""
Tests for the Jinja2 renderer and its string filters.
"""

import pytest

from templater.core.engine.render import (
    JinjaRenderer,
    camelize,
    dasherize,
    pluralize,
    underscore,
)
from templater.core.errors import GeneratorError


class TestFilters:
    @pytest.mark.parametrize("raw,expected", [
        ("blog_post", "BlogPost"),
        ("blog-post", "BlogPost"),
        ("widget", "Widget"),
    ])
    def test_camelize(self, raw, expected):
        assert camelize(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("BlogPost", "blog_post"),
        ("HTTPServer", "http_server"),
        ("blog-post", "blog_post"),
    ])
    def test_underscore(self, raw, expected):
        assert underscore(raw) == expected

    def test_dasherize(self):
        assert dasherize("BlogPost") == "blog-post"

    @pytest.mark.parametrize("raw,expected", [
        ("post", "posts"),
        ("entry", "entries"),
        ("box", "boxes"),
        ("key", "keys"),
    ])
    def test_pluralize(self, raw, expected):
        assert pluralize(raw) == expected


class TestJinjaRenderer:
    def test_renders_with_filters(self):
        out = JinjaRenderer().render("{{ name | camelize | pluralize }}", {"name": "blog_post"})
        assert out == "BlogPosts"

    def test_keeps_trailing_newline(self):
        assert JinjaRenderer().render("x\n", {}) == "x\n"

    def test_no_html_escaping(self):
        assert JinjaRenderer().render("{{ v }}", {"v": "<a & b>"}) == "<a & b>"

    def test_undefined_variable_raises(self):
        with pytest.raises(GeneratorError, match="rendering failed"):
            JinjaRenderer().render("{{ nope }}", {})

    def test_syntax_error_raises(self):
        with pytest.raises(GeneratorError):
            JinjaRenderer().render("{% if %}", {})

    def test_extra_filters(self):
        renderer = JinjaRenderer(filters={"shout": lambda s: s.upper() + "!"})
        assert renderer.render("{{ 'hi' | shout }}", {}) == "HI!"
