"""Text helpers for filters, ADR numbers and descriptions."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

_ADR_NUMBER = re.compile(r"^(?:adr[-_ ]?)?(\d+)", re.IGNORECASE)


def split_alternatives(value: str | None) -> frozenset[str] | None:
    """Parse a pipe-separated filter such as ``"php|go"``.

    Returns None when the filter imposes no constraint (absent or blank).
    """
    if value is None:
        return None
    options = frozenset(part.strip() for part in value.split("|") if part.strip())
    return options or None


def parse_adr_number(filename: str) -> int | None:
    """Extract the numeric id from names like ``001-foo.mdx`` or ``ADR-12.md``."""
    match = _ADR_NUMBER.match(filename)
    return int(match.group(1)) if match else None


def unique_in_order(values: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        if value and value not in seen:
            seen[value] = None
    return tuple(seen)


def describe(
    area: str, lang: str | None, category: Sequence[str], project: str | None
) -> str:
    """Build the default one-line summary of a document."""
    text = f"{', '.join(category)} document in {area}"
    if lang:
        text += f" ({lang})"
    if project:
        text += f" for {project}"
    return text
