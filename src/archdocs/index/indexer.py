"""Docs tree scanning and classification."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path

from archdocs.errors import ScanWarning
from archdocs.index.storage import DocumentIndex, ScanStats
from archdocs.models import URI_SCHEME, ResourceInfo, mime_type_for
from archdocs.rules import Classification, ClassificationRuleSet
from archdocs.utils.files import file_size_within_root, iter_doc_files, resolve_docs_root

LOGGER = logging.getLogger(__name__)

_SLASHES = re.compile(r"/{2,}")


def build_uri(uri_area: str, path: str) -> str:
    """Join area and classified path into a ``docs://`` uri."""
    joined = _SLASHES.sub("/", f"{uri_area}/{path}".replace("\\", "/"))
    return URI_SCHEME + joined.strip("/")


class Indexer:
    """Walks a docs root and classifies files with a rule set."""

    def __init__(self, rule_set: ClassificationRuleSet) -> None:
        self.rule_set = rule_set

    def scan(self, root: Path | str) -> DocumentIndex:
        """Build a new DocumentIndex from every classifiable file under root.

        Only an inaccessible root is fatal; per-file problems are logged,
        counted in the returned index's stats and the file is left out.
        """
        started = time.perf_counter()
        docs_root = resolve_docs_root(root)
        stats = ScanStats()
        documents: dict[str, ResourceInfo] = {}

        for relpath, _ in iter_doc_files(docs_root):
            mime_type = mime_type_for(relpath)
            if mime_type is None:
                self._skip(stats, ScanWarning("unsupported", relpath))
                continue

            classification = self.rule_set.classify(relpath)
            if classification is None:
                self._skip(stats, ScanWarning("unmatched", relpath))
                continue
            if not classification.area:
                self._skip(
                    stats, ScanWarning("empty-area", relpath, f"rule '{classification.rule.name}' produced no area")
                )
                continue

            uri = build_uri(classification.uri_area, classification.path)
            if uri in documents:
                self._skip(
                    stats, ScanWarning("duplicate", relpath, f"{uri} already indexed from {documents[uri].file_path}")
                )
                continue

            try:
                size = file_size_within_root(docs_root, relpath)
            except OSError as exc:
                self._skip(stats, ScanWarning("failed", relpath, str(exc)))
                continue

            documents[uri] = self._build_record(uri, relpath, classification, mime_type, size)
            stats.indexed += 1

        stats.elapsed = time.perf_counter() - started
        LOGGER.info(
            "Indexed %d documents in %.3fs (unmatched: %d, unsupported: %d, duplicates: %d, failed: %d)",
            stats.indexed,
            stats.elapsed,
            stats.unmatched,
            stats.unsupported,
            stats.duplicates,
            stats.failed,
        )
        return DocumentIndex.build(docs_root, documents.values(), stats)

    @staticmethod
    def _build_record(
        uri: str, relpath: str, classification: Classification, mime_type: str, size: int
    ) -> ResourceInfo:
        return ResourceInfo(
            uri=uri,
            file_path=relpath,
            area=classification.area,
            lang=classification.lang,
            category=classification.category,
            project=classification.project,
            mime_type=mime_type,
            size=size,
            description=classification.description,
        )

    @staticmethod
    def _skip(stats: ScanStats, warning: ScanWarning) -> None:
        stats.record(warning)
        if warning.kind in ("duplicate", "failed", "empty-area"):
            LOGGER.warning("Skipping %s (%s): %s", warning.path, warning.kind, warning.detail)
        else:
            LOGGER.debug("Skipping %s (%s)", warning.path, warning.kind)


def scan_documents(root: Path | str, rule_set: ClassificationRuleSet) -> DocumentIndex:
    return Indexer(rule_set).scan(root)
