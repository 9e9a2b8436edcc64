"""
Filesystem store — the destination tree on local disk.

Paths are used as given; generators resolve them against the
destination root before they get here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from templater.adapters.base import Store

logger = logging.getLogger(__name__)


class FilesystemStore(Store):
    """Destination tree backed by ``pathlib``.

    Errors from the OS propagate as OSError (PermissionError,
    IsADirectoryError, ...).
    """

    @property
    def name(self) -> str:
        return "filesystem"

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def read(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write(self, path: Path, content: bytes) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.debug("Wrote %d bytes to %s", len(content), target)

    def mkdir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)
        logger.debug("Directory created: %s", path)
