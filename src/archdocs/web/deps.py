"""FastAPI dependencies resolving the published index for each request."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from archdocs.index.search import QueryEngine
from archdocs.index.storage import IndexStore


def get_store(request: Request) -> IndexStore:
    store = request.app.state.store
    if store is None or not store.ready:
        raise HTTPException(status_code=503, detail="Document index is not ready")
    return store


def get_engine(store: IndexStore = Depends(get_store)) -> QueryEngine:
    # One engine per request pins a single snapshot for the request's lifetime.
    return store.engine()
