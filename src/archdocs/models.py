"""Core archdocs data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import PurePosixPath
from typing import Any, Dict

URI_SCHEME = "docs://"
NO_LANG = "none"

MIME_TYPES: Dict[str, str] = {
    ".md": "text/markdown",
    ".mdx": "text/markdown",
    ".txt": "text/plain",
    ".yaml": "application/yaml",
}
SUPPORTED_EXTENSIONS = frozenset(MIME_TYPES)


def mime_type_for(path: str | PurePosixPath) -> str | None:
    """Return the mime type for a supported extension, else None."""
    return MIME_TYPES.get(PurePosixPath(path).suffix.lower())


@dataclass(frozen=True, slots=True)
class ResourceInfo:
    """Metadata describing one classified document."""

    uri: str
    file_path: str
    area: str
    lang: str | None
    category: tuple[str, ...]
    project: str | None
    mime_type: str
    size: int
    description: str

    @property
    def lang_key(self) -> str:
        return self.lang if self.lang is not None else NO_LANG

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["category"] = list(self.category)
        return data


@dataclass(frozen=True, slots=True)
class ResourceContent:
    """Raw bytes of a document read at request time."""

    uri: str
    data: bytes
    mime_type: str

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")
