"""Error types shared across archdocs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ArchDocsError(Exception):
    """Base class for archdocs failures."""


class ConfigError(ArchDocsError):
    """The mapping configuration is missing, malformed or invalid."""

    def __init__(self, message: str, *, source: Path | str | None = None) -> None:
        self.source = source
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)


class NotFoundError(ArchDocsError, LookupError):
    """A requested uri or project has no documents in the index."""


class ContentUnavailableError(ArchDocsError, OSError):
    """An indexed file could not be read at request time."""

    def __init__(self, uri: str, file_path: str, reason: str) -> None:
        self.uri = uri
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Failed to read {file_path} for {uri}: {reason}")


@dataclass(frozen=True, slots=True)
class ScanWarning:
    """Non-fatal issue recorded while scanning a single file."""

    kind: str
    path: str
    detail: str = ""
