"""Utility helpers for working with the docs tree."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterator


def resolve_docs_root(root: Path | str) -> Path:
    """Resolve the docs root to an absolute directory path.

    Raises FileNotFoundError or NotADirectoryError when the root is unusable.
    """
    resolved = Path(root).expanduser().resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"Docs root does not exist: {resolved} (resolved from: {root})")
    if not resolved.is_dir():
        raise NotADirectoryError(f"Docs root is not a directory: {resolved} (resolved from: {root})")
    return resolved


def iter_doc_files(root: Path) -> Iterator[tuple[str, Path]]:
    """Yield (relative POSIX path, absolute path) for every non-directory entry under root.

    Entries are not stat-ed here; use :func:`file_size_within_root` per file.
    Ordering is lexicographic by relative path so scans are reproducible.
    """
    found = []
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            path = Path(dirpath, name)
            found.append((path.relative_to(root).as_posix(), path))
    found.sort(key=lambda item: item[0])
    yield from found


def _within_root(root: Path, relative_path: str) -> Path:
    canonical_root = root.resolve()
    canonical_path = (canonical_root / relative_path).resolve()
    if not canonical_path.is_relative_to(canonical_root):
        raise PermissionError(f"Path traversal detected: {relative_path} is outside {canonical_root}")
    return canonical_path


def file_size_within_root(root: Path, relative_path: str) -> int:
    """Size of a regular file below root.

    Raises PermissionError when the path resolves outside root and OSError
    when it cannot be stat-ed or is not a regular file.
    """
    canonical_path = _within_root(root, relative_path)
    info = os.stat(canonical_path)
    if not stat.S_ISREG(info.st_mode):
        raise OSError(f"Not a regular file: {relative_path}")
    return info.st_size


def read_within_root(root: Path, relative_path: str) -> bytes:
    """Read a file below root, refusing paths that resolve outside of it."""
    return _within_root(root, relative_path).read_bytes()
