"""Filesystem access for named files directly under one base directory."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileStore:
    """Reads, creates and removes regular files under ``base_directory``.

    Names are joined onto the base directory as-is; callers are responsible
    for rejecting names that would escape it. No in-process locking is
    applied, so concurrent workers race on the filesystem itself.
    """

    def __init__(self, base_directory: Path) -> None:
        self._base_directory = base_directory

    @property
    def base_directory(self) -> Path:
        return self._base_directory

    def path_for(self, name: str) -> Path:
        return self._base_directory / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def read(self, name: str) -> bytes:
        return self.path_for(name).read_bytes()

    def create(self, name: str, data: bytes) -> None:
        """Create ``name`` with ``data``; raises ``FileExistsError`` if it is already there."""
        path = self.path_for(name)
        file_obj = path.open("xb")
        try:
            with file_obj:
                file_obj.write(data)
        except OSError:
            logger.warning("Removing partially written file %s", path)
            path.unlink(missing_ok=True)
            raise

    def remove(self, name: str) -> None:
        self.path_for(name).unlink()
