"""Process-wide server state shared read-only by every connection worker."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class InvalidBaseDirectoryError(ValueError):
    """Raised at startup when the files directory cannot be served."""


@dataclass(frozen=True, slots=True)
class ServerState:
    base_directory: Path

    @classmethod
    def from_directory(cls, raw_directory: str | Path) -> "ServerState":
        """Resolve ``raw_directory`` to an absolute path and check that it is a directory."""
        try:
            base_directory = Path(raw_directory).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise InvalidBaseDirectoryError(f"Directory does not exist: {raw_directory}") from exc

        if not base_directory.is_dir():
            raise InvalidBaseDirectoryError(f"Not a directory: {raw_directory}")
        return cls(base_directory=base_directory)
