"""Shared fixtures for archdocs tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest

from archdocs.rules import ClassificationRuleSet

BASIC_RULES = {
    "rules": [
        {
            "name": "c1",
            "pattern": r"architecture/(?P<project>[^/]+)/c1\.mdx",
            "area": "architecture",
            "category": "c1",
            "project": "{project}",
            "path": "{project}/c1.mdx",
        },
        {
            "name": "adr",
            "pattern": r"architecture/(?P<project>[^/]+)/adr/(?P<file>[^/]+)",
            "area": "architecture",
            "category": ["adr"],
            "project": "{project}",
            "path": "{project}/adr/{file}",
        },
        {
            "name": "agreements",
            "pattern": r"(?P<area>backend|frontend)/(?P<lang>[^/]+)/(?P<rest>.+)",
            "area": "{area}",
            "lang": "{lang}",
            "category": ["agreements"],
            "path": "{lang}/{rest}",
        },
        {
            "name": "fallback",
            "pattern": r"notes/(?P<rest>.+)",
            "area": "notes",
        },
    ]
}


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Create files under ``tmp_path / "docs"`` from a mapping of relpath -> content."""

    def _write(files: Dict[str, str]) -> Path:
        root = tmp_path / "docs"
        root.mkdir(exist_ok=True)
        for relpath, content in files.items():
            target = root / relpath
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def rule_set() -> ClassificationRuleSet:
    return ClassificationRuleSet.from_dict(BASIC_RULES)


@pytest.fixture
def sample_tree(write_tree: Callable[[Dict[str, str]], Path]) -> Path:
    return write_tree(
        {
            "architecture/proj-a/c1.mdx": "# Context",
            "architecture/proj-a/adr/010-bar.mdx": "bar",
            "architecture/proj-a/adr/001-foo.mdx": "foo",
            "architecture/proj-a/adr/002-baz.mdx": "baz",
            "architecture/proj-b/c1.mdx": "# Other context",
            "backend/php/api/user.md": "php agreement",
            "backend/go/api/orders.md": "go agreement",
            "frontend/ts/style.txt": "ts agreement",
            "notes/readme.md": "notes",
            "notes/diagram.png": "not text",
            "misc/unmatched.md": "nobody matches me",
        }
    )
