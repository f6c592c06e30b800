"""Resource listing and raw reads for indexed documents."""

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from archdocs.errors import ContentUnavailableError, NotFoundError
from archdocs.index.search import QueryEngine
from archdocs.web.deps import get_engine

router = APIRouter(prefix="/resources")


@router.get("")
async def list_resources(engine: QueryEngine = Depends(get_engine)) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "resources": [
            {
                "uri": doc.uri,
                "name": PurePosixPath(doc.file_path).name,
                "description": doc.description,
                "mime_type": doc.mime_type,
                "size": doc.size,
            }
            for doc in engine.index.documents()
        ]
    }


@router.get("/read")
async def read_resource(uri: str, engine: QueryEngine = Depends(get_engine)) -> Response:
    try:
        content = await asyncio.to_thread(engine.resolve_content, uri)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ContentUnavailableError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return Response(content=content.data, media_type=content.mime_type)
