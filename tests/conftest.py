"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from templater.adapters.mock import MemoryStore, ScriptedPrompt

DEST = Path("/project")


@pytest.fixture
def store() -> MemoryStore:
    """Return an empty in-memory destination tree."""
    return MemoryStore()


@pytest.fixture
def prompt() -> ScriptedPrompt:
    """Return a prompt with no scripted decisions."""
    return ScriptedPrompt()


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """Return a directory of generator sources."""
    root = tmp_path / "templates"
    root.mkdir()
    (root / "model.rb.erb").write_text(
        "class {{ name | camelize }} < ActiveRecord::Base\nend\n",
        encoding="utf-8",
    )
    (root / "raw.txt").write_text("left {{ untouched }}\n", encoding="utf-8")
    return root


@pytest.fixture
def manifest_project(tmp_path: Path) -> Path:
    """Create a templater.yml with two generators; return its path."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "model.py.j2").write_text(
        "class {{ name | camelize }}({{ parent }}):\n    pass\n",
        encoding="utf-8",
    )
    content = textwrap.dedent("""\
        generators:
          model:
            description: Create a model class
            source_root: templates
            arguments:
              - name: name
                pattern: "[a-z_]+"
                description: Model name
            options:
              - name: parent
                required: false
                default: Base
            actions:
              - template: model.py.j2
                destination: "app/models/{name}.py"
              - dependency: test
                args: ["{name}"]
          test:
            description: Create a test stub
            arguments:
              - name: name
            actions:
              - inline: "def test_{{ name }}():\\n    assert True\\n"
                destination: "tests/test_{name}.py"
    """)
    config = tmp_path / "templater.yml"
    config.write_text(content, encoding="utf-8")
    return config


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by CLI runs so they never outlive a test."""
    yield
    logger = logging.getLogger("templater")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
