"""
Configuration loader — reads templater.yml into Generator definitions.

This is the primary entry point for loading generators declared on
disk. It reads YAML, validates against the pydantic manifest schema,
and returns ready-to-register Generator objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError

from templater.core.engine.generator import Generator
from templater.core.errors import ConfigError, GeneratorError
from templater.core.models.action import Action, ActionKind
from templater.core.models.manifest import ActionDecl, GeneratorDecl, ManifestDecl

logger = logging.getLogger(__name__)

# Default config filename
MANIFEST_FILE = "templater.yml"


@dataclass
class Manifest:
    """A loaded templater.yml.

    Attributes:
        path:        The manifest file.
        destination: Default destination root, if the manifest sets one.
        audit_log:   Ledger path, if the manifest enables auditing.
        generators:  Generator definitions by name, in file order.
    """

    path: Path
    destination: Path | None = None
    audit_log: Path | None = None
    generators: dict[str, Generator] = field(default_factory=dict)

    @property
    def root(self) -> Path:
        return self.path.parent


def find_manifest(start_dir: Path | None = None) -> Path | None:
    """Search for templater.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to templater.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / MANIFEST_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_manifest(path: Path | None = None) -> Manifest:
    """Load and validate a manifest.

    Args:
        path: Explicit path to templater.yml. If None, searches upward.

    Returns:
        Manifest with Generator definitions.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_manifest()

    if path is None:
        raise ConfigError(f"No {MANIFEST_FILE} found. Create one, or specify --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        decl = ManifestDecl.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid manifest {path}: {e}") from e

    root = path.parent.resolve()
    manifest = Manifest(
        path=path.resolve(),
        destination=root / decl.destination if decl.destination else None,
        audit_log=root / decl.audit_log if decl.audit_log else None,
    )

    for name, gen_decl in decl.generators.items():
        try:
            manifest.generators[name] = build_generator(name, gen_decl, root)
        except GeneratorError as e:
            raise ConfigError(f"Invalid generator '{name}' in {path}: {e}") from e

    logger.info("Loaded %d generator(s) from %s", len(manifest.generators), path)
    return manifest


def build_generator(name: str, decl: GeneratorDecl, root: Path) -> Generator:
    """Turn a generator declaration into a Generator.

    Relative ``source_root`` values are resolved against ``root``.
    """
    source_root = root / decl.source_root if decl.source_root else root
    return Generator(
        name,
        description=decl.description,
        arguments=decl.arguments,
        options=decl.options,
        actions=[build_action(a) for a in decl.actions],
        source_root=source_root,
        helpers=decl.helpers,
    )


def build_action(decl: ActionDecl) -> Action:
    kind = decl.kind

    if kind == ActionKind.DEPENDENCY:
        return Action.dependency(decl.dependency, list(decl.args), dict(decl.options), name=decl.name)

    if kind.is_directory:
        target = decl.directory if kind == ActionKind.DIRECTORY else decl.empty_directory
        destination = decl.destination or target
        if kind == ActionKind.DIRECTORY:
            return Action.directory(destination, name=decl.name)
        return Action.empty_directory(destination, name=decl.name)

    if decl.destination is None:
        raise GeneratorError(f"{kind} action needs a destination")

    if kind == ActionKind.FILE:
        return Action.file(decl.file, decl.destination, name=decl.name)

    return Action.template(
        decl.template,
        decl.destination,
        inline=decl.inline,
        variables=decl.variables,
        name=decl.name,
    )
