from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from pagedigest.agents.orchestrator import DISCOVERY_MODE, WebSearchPipeline
from pagedigest.api.deps import get_pipeline
from pagedigest.models.schemas import WebSearchRequest, WebSearchResponse

router = APIRouter(prefix="/api/websearch", tags=["websearch"])

ALLOWED_SOURCES = ("section", "title")


@router.post("", response_model=WebSearchResponse)
async def websearch(
    request: WebSearchRequest,
    pipeline: WebSearchPipeline = Depends(get_pipeline),
):
    """Discover URLs for a title (``type == "url"``) or summarize a URL list."""
    if request.source not in ALLOWED_SOURCES:
        raise HTTPException(status_code=400, detail="Source field is required")
    if not request.type:
        raise HTTPException(status_code=400, detail="Type field is required")

    mode = request.type.strip()
    if mode == DISCOVERY_MODE:
        title = (request.title or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title field is required")
        data = await pipeline.run(title, [("human", title)], mode=mode)
    else:
        if not request.urls:
            raise HTTPException(status_code=400, detail="URLS field is required")
        data = await pipeline.run(request.urls, mode=mode)

    return WebSearchResponse(data=data)
