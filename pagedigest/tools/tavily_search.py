from __future__ import annotations

from tavily import AsyncTavilyClient

from pagedigest.tools.searxng_search import SearchResult


async def search(
    query: str,
    *,
    api_key: str,
    max_results: int = 10,
    include_images: bool = False,
) -> list[SearchResult]:
    """Execute a Tavily web search and return results in the shared shape."""
    if not api_key:
        raise RuntimeError("TAVILY_API_KEY is not configured")

    client = AsyncTavilyClient(api_key=api_key)
    response = await client.search(
        query=query,
        search_depth="basic",
        max_results=max_results,
        include_images=include_images,
    )

    return [
        SearchResult(
            title=r.get("title", ""),
            url=r.get("url", ""),
            content=r.get("content", ""),
            score=r.get("score", 0.0),
        )
        for r in response.get("results", [])
        if r.get("url")
    ]
