"""Read-only queries over a DocumentIndex snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from archdocs.errors import ContentUnavailableError, NotFoundError
from archdocs.index.storage import DocumentIndex, by_area, by_category, by_lang, group_documents
from archdocs.models import ResourceContent, ResourceInfo
from archdocs.utils.files import read_within_root
from archdocs.utils.text import split_alternatives

LOGGER = logging.getLogger(__name__)

AGREEMENTS_CATEGORY = "agreements"
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


@dataclass(slots=True)
class DocsPage:
    documents: List[ResourceInfo]
    total_count: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.limit)


@dataclass(slots=True)
class ProjectOverview:
    project: str
    total_documents: int
    total_size: int
    by_category: Dict[str, List[ResourceInfo]]
    by_area: Dict[str, List[ResourceInfo]]
    by_lang: Dict[str, List[ResourceInfo]]
    documents: List[ResourceInfo]


def normalize_page(page: int | None) -> int:
    return page if page is not None and page >= 1 else 1


def normalize_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(limit, MAX_PAGE_SIZE))


class QueryEngine:
    """High-level API to query one index snapshot."""

    def __init__(self, index: DocumentIndex) -> None:
        self.index = index

    def list_documents(
        self,
        *,
        area: str | None = None,
        lang: str | None = None,
        category: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> DocsPage:
        """Filter, sort by uri and paginate the indexed documents.

        Each filter is a pipe-separated list of accepted values; values within
        a filter are OR-ed and the filters themselves are AND-ed.
        """
        areas = split_alternatives(area)
        langs = split_alternatives(lang)
        categories = split_alternatives(category)

        matches = [
            doc
            for doc in self.index.resources.values()
            if (areas is None or doc.area in areas)
            and (langs is None or doc.lang_key in langs)
            and (categories is None or not categories.isdisjoint(doc.category))
        ]
        matches.sort(key=lambda doc: doc.uri)

        page = normalize_page(page)
        limit = normalize_limit(limit)
        start = (page - 1) * limit
        return DocsPage(documents=matches[start : start + limit], total_count=len(matches), page=page, limit=limit)

    def project_overview(self, project: str) -> ProjectOverview:
        documents = [doc for doc in self.index.resources.values() if doc.project == project]
        if not documents:
            raise NotFoundError(f"No documents found for project {project!r}")

        def as_lists(groups: Dict[str, tuple[ResourceInfo, ...]]) -> Dict[str, List[ResourceInfo]]:
            return {key: list(values) for key, values in groups.items()}

        return ProjectOverview(
            project=project,
            total_documents=len(documents),
            total_size=sum(doc.size for doc in documents),
            by_category=as_lists(group_documents(documents, by_category)),
            by_area=as_lists(group_documents(documents, by_area)),
            by_lang=as_lists(group_documents(documents, by_lang)),
            documents=documents,
        )

    def all_adr_documents(self) -> tuple[ResourceInfo, ...]:
        return self.index.adr_documents

    def agreements_by_lang(self, lang: str | None) -> tuple[ResourceInfo, ...]:
        lang = (lang or "").strip()
        if not lang:
            return ()
        return tuple(
            doc
            for doc in self.index.resources.values()
            if doc.lang == lang and AGREEMENTS_CATEGORY in doc.category
        )

    def resolve_content(self, uri: str) -> ResourceContent:
        """Read the current bytes of an indexed document.

        Raises:
            NotFoundError: if the uri is not in the index.
            ContentUnavailableError: if the file can no longer be read.
        """
        info = self.index.get(uri)
        if info is None:
            raise NotFoundError(f"Resource not found in scanned documents: {uri}")
        try:
            data = read_within_root(self.index.root, info.file_path)
        except OSError as exc:
            LOGGER.warning("Failed to read %s for %s: %s", info.file_path, uri, exc)
            raise ContentUnavailableError(uri, info.file_path, str(exc)) from exc
        return ResourceContent(uri=uri, data=data, mime_type=info.mime_type)
