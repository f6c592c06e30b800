"""FastAPI application exposing the documentation tools."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from archdocs.errors import ContentUnavailableError, NotFoundError
from archdocs.index.search import QueryEngine
from archdocs.index.storage import IndexStore
from archdocs.models import URI_SCHEME, ResourceInfo
from archdocs.web.deps import get_engine, get_store
from archdocs.web.resources import router as resources_router

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="archdocs", version="0.1.0")
app.state.store = None
app.include_router(resources_router)


class GetResourceContentArgs(BaseModel):
    path: str


class GetDocsListArgs(BaseModel):
    area: str | None = None
    lang: str | None = None
    category: str | None = None
    page: int | None = None
    limit: int | None = None


class GetProjectOverviewArgs(BaseModel):
    project: str


class GetAgreementsArgs(BaseModel):
    lang: str


def _documents(documents: Any) -> List[Dict[str, Any]]:
    return [doc.to_dict() for doc in documents]


def _groups(groups: Dict[str, List[ResourceInfo]]) -> Dict[str, List[Dict[str, Any]]]:
    return {key: _documents(values) for key, values in groups.items()}


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/tools/get_resource_content")
async def get_resource_content(
    payload: GetResourceContentArgs, engine: QueryEngine = Depends(get_engine)
) -> dict[str, Any]:
    path = payload.path.strip()
    if not path.startswith(URI_SCHEME):
        raise HTTPException(status_code=400, detail=f"Path must start with '{URI_SCHEME}': {path}")

    try:
        content = await asyncio.to_thread(engine.resolve_content, path)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ContentUnavailableError as exc:
        raise HTTPException(
            status_code=500,
            detail={"error": "file_read_error", "file_path": exc.file_path, "reason": exc.reason},
        ) from exc

    return {"uri": content.uri, "mime_type": content.mime_type, "content": content.text}


@app.post("/tools/get_docs_list")
async def get_docs_list(payload: GetDocsListArgs, engine: QueryEngine = Depends(get_engine)) -> dict[str, Any]:
    result = engine.list_documents(
        area=payload.area,
        lang=payload.lang,
        category=payload.category,
        page=payload.page,
        limit=payload.limit,
    )
    return {
        "documents": _documents(result.documents),
        "total_pages": result.total_pages,
        "current_page": result.page,
        "limit": result.limit,
        "total_documents": result.total_count,
    }


@app.post("/tools/get_all_adr_documents")
async def get_all_adr_documents(engine: QueryEngine = Depends(get_engine)) -> dict[str, Any]:
    documents = engine.all_adr_documents()
    return {"adr_documents": _documents(documents), "total_adr_documents": len(documents)}


@app.post("/tools/get_project_overview")
async def get_project_overview(
    payload: GetProjectOverviewArgs, engine: QueryEngine = Depends(get_engine)
) -> dict[str, Any]:
    try:
        overview = engine.project_overview(payload.project)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "project": overview.project,
        "total_documents": overview.total_documents,
        "total_size": overview.total_size,
        "documents_by_type": _groups(overview.by_category),
        "documents_by_area": _groups(overview.by_area),
        "documents_by_language": _groups(overview.by_lang),
        "all_documents": _documents(overview.documents),
    }


@app.post("/tools/get_agreements")
async def get_agreements(payload: GetAgreementsArgs, engine: QueryEngine = Depends(get_engine)) -> dict[str, Any]:
    documents = engine.agreements_by_lang(payload.lang)
    return {"lang": payload.lang, "agreements": _documents(documents), "total_agreements": len(documents)}


@app.post("/rescan")
async def rescan(store: IndexStore = Depends(get_store)) -> dict[str, Any]:
    try:
        index = await asyncio.to_thread(store.rescan)
    except (RuntimeError, OSError) as exc:
        LOGGER.exception("Rescan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    stats = index.stats
    return {
        "status": "ok",
        "indexed": stats.indexed,
        "unmatched": stats.unmatched,
        "unsupported": stats.unsupported,
        "duplicates": stats.duplicates,
        "failed": stats.failed,
    }
