"""Immutable document index snapshots and the store that publishes them."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Sequence

from archdocs.errors import ScanWarning
from archdocs.models import ResourceInfo
from archdocs.utils.text import parse_adr_number

if TYPE_CHECKING:
    from archdocs.index.indexer import Indexer
    from archdocs.index.search import QueryEngine

LOGGER = logging.getLogger(__name__)

ADR_CATEGORY = "adr"

Groups = Mapping[str, tuple[ResourceInfo, ...]]


@dataclass(slots=True)
class ScanStats:
    indexed: int = 0
    unmatched: int = 0
    unsupported: int = 0
    duplicates: int = 0
    failed: int = 0
    elapsed: float = 0.0
    warnings: list[ScanWarning] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return self.unmatched + self.unsupported + self.duplicates + self.failed

    def record(self, warning: ScanWarning) -> None:
        if warning.kind in ("unmatched", "empty-area"):
            self.unmatched += 1
        elif warning.kind == "unsupported":
            self.unsupported += 1
        elif warning.kind == "duplicate":
            self.duplicates += 1
        else:
            self.failed += 1
        self.warnings.append(warning)


def group_documents(
    documents: Iterable[ResourceInfo], key: Callable[[ResourceInfo], Iterable[str]]
) -> dict[str, tuple[ResourceInfo, ...]]:
    """Group documents under every key returned for them, keys sorted ascending.

    Input order is preserved inside each group.
    """
    groups: dict[str, list[ResourceInfo]] = defaultdict(list)
    for document in documents:
        for name in key(document):
            groups[name].append(document)
    return {name: tuple(groups[name]) for name in sorted(groups)}


def by_category(document: ResourceInfo) -> Sequence[str]:
    return document.category


def by_area(document: ResourceInfo) -> Sequence[str]:
    return (document.area,)


def by_lang(document: ResourceInfo) -> Sequence[str]:
    return (document.lang_key,)


def order_adrs(documents: Iterable[ResourceInfo]) -> tuple[ResourceInfo, ...]:
    """ADR records ordered by numeric id; unnumbered ones last, then by uri."""

    def sort_key(document: ResourceInfo) -> tuple[bool, int, str]:
        number = parse_adr_number(PurePosixPath(document.file_path).name)
        return (number is None, number or 0, document.uri)

    return tuple(sorted((doc for doc in documents if ADR_CATEGORY in doc.category), key=sort_key))


@dataclass(frozen=True, slots=True)
class DocumentIndex:
    """Read-only snapshot of every classified document under one docs root."""

    root: Path
    resources: Mapping[str, ResourceInfo]
    by_category: Groups
    by_area: Groups
    by_lang: Groups
    adr_documents: tuple[ResourceInfo, ...]
    stats: ScanStats = field(default_factory=ScanStats, compare=False)

    @classmethod
    def build(
        cls, root: Path, documents: Iterable[ResourceInfo], stats: ScanStats | None = None
    ) -> "DocumentIndex":
        """Assemble a snapshot; uris must be unique."""
        resources: dict[str, ResourceInfo] = {}
        for document in documents:
            if document.uri in resources:
                raise ValueError(f"Duplicate uri in index build: {document.uri}")
            resources[document.uri] = document
        ordered = [resources[uri] for uri in sorted(resources)]
        return cls(
            root=root,
            resources=MappingProxyType({doc.uri: doc for doc in ordered}),
            by_category=MappingProxyType(group_documents(ordered, by_category)),
            by_area=MappingProxyType(group_documents(ordered, by_area)),
            by_lang=MappingProxyType(group_documents(ordered, by_lang)),
            adr_documents=order_adrs(ordered),
            stats=stats if stats is not None else ScanStats(indexed=len(ordered)),
        )

    def __len__(self) -> int:
        return len(self.resources)

    def documents(self) -> tuple[ResourceInfo, ...]:
        return tuple(self.resources.values())

    def get(self, uri: str) -> ResourceInfo | None:
        return self.resources.get(uri)


class IndexStore:
    """Holds the active DocumentIndex behind a single swappable reference.

    Readers call :meth:`current` and keep the returned snapshot for the whole
    request. Rescans build a complete index before publishing it.
    """

    def __init__(self, indexer: "Indexer | None" = None, root: Path | None = None) -> None:
        self.indexer = indexer
        self.root = root
        self._current: DocumentIndex | None = None
        self._rescan_lock = threading.Lock()

    @classmethod
    def from_index(cls, index: DocumentIndex, indexer: "Indexer | None" = None) -> "IndexStore":
        store = cls(indexer, index.root)
        store.publish(index)
        return store

    @property
    def ready(self) -> bool:
        return self._current is not None

    def current(self) -> DocumentIndex:
        index = self._current
        if index is None:
            raise RuntimeError("No document index has been published yet")
        return index

    def publish(self, index: DocumentIndex) -> None:
        self._current = index
        LOGGER.info("Published index with %d documents from %s", len(index), index.root)

    def rescan(self) -> DocumentIndex:
        """Build a fresh index from the docs root and publish it."""
        if self.indexer is None or self.root is None:
            raise RuntimeError("IndexStore has no indexer/root configured for rescans")
        with self._rescan_lock:
            index = self.indexer.scan(self.root)
            self.publish(index)
        return index

    def engine(self) -> "QueryEngine":
        from archdocs.index.search import QueryEngine

        return QueryEngine(self.current())
