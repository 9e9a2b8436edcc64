"""
Config check use case — validate templater.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from templater.core.config.loader import Manifest, find_manifest, load_manifest
from templater.core.errors import ConfigError
from templater.core.models.action import ActionKind


@dataclass
class ConfigCheckResult:
    """Result of manifest validation."""

    valid: bool = False
    manifest: Manifest | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "generators": sorted(self.manifest.generators) if self.manifest else [],
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate a manifest and report issues.

    Args:
        config_path: Optional explicit path to templater.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_manifest()
    if config_path is None:
        result.errors.append("No templater.yml found.")
        return result
    result.config_path = config_path

    try:
        manifest = load_manifest(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.manifest = manifest

    if not manifest.generators:
        result.warnings.append("No generators defined. There is nothing to run.")

    for name, generator in manifest.generators.items():
        # Dependencies must point at declared generators
        for target in generator.dependencies:
            if target not in manifest.generators:
                result.errors.append(
                    f"Generator '{name}' depends on unknown generator '{target}'"
                )

        # Sources must exist under the generator's source root
        for action in generator.actions:
            if action.kind not in (ActionKind.TEMPLATE, ActionKind.FILE) or not action.source:
                continue
            source = generator.source_root / action.source
            if not source.is_file():
                result.errors.append(
                    f"Generator '{name}': source file not found: {source}"
                )

        if not generator.actions:
            result.warnings.append(f"Generator '{name}' declares no actions.")

    result.valid = len(result.errors) == 0
    return result
