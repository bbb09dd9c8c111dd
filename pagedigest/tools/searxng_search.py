from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass
class SearchResult:
    title: str
    url: str
    content: str
    score: float = 0.0
    img_src: str | None = None


async def search(
    query: str,
    *,
    base_url: str,
    language: str = "en",
    max_results: int = 10,
    http_client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Query a SearxNG instance's JSON API and normalize its results."""
    if not base_url:
        raise RuntimeError("SEARXNG_URL is not configured")

    params: dict[str, Any] = {
        "q": query,
        "format": "json",
        "language": language,
    }
    endpoint = base_url.rstrip("/") + "/search"

    if http_client is None:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(endpoint, params=params)
    else:
        response = await http_client.get(endpoint, params=params)
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("SearxNG response is not a JSON object")

    mapped: list[SearchResult] = []
    for item in payload.get("results", []) or []:
        if not isinstance(item, dict) or not item.get("url"):
            continue
        mapped.append(
            SearchResult(
                title=item.get("title", "") or "",
                url=item["url"],
                content=item.get("content", "") or "",
                score=float(item.get("score", 0.0) or 0.0),
                img_src=item.get("img_src") or None,
            )
        )
        if len(mapped) >= max_results:
            break
    return mapped
