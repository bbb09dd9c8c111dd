from __future__ import annotations

from dataclasses import dataclass

from pagedigest.config import Settings
from pagedigest.tools import searxng_search, tavily_search
from pagedigest.tools.searxng_search import SearchResult


@dataclass
class SearchResponse:
    results: list[SearchResult]
    provider: str


async def search(query: str, settings: Settings) -> SearchResponse:
    provider = settings.search_provider.lower().strip()

    if provider == "searxng":
        results = await searxng_search.search(
            query,
            base_url=settings.searxng_url,
            language=settings.search_language,
            max_results=settings.max_search_results,
        )
        return SearchResponse(results=results, provider="searxng")

    if provider == "tavily":
        results = await tavily_search.search(
            query,
            api_key=settings.tavily_api_key,
            max_results=settings.max_search_results,
        )
        return SearchResponse(results=results, provider="tavily")

    raise ValueError(f"Unsupported SEARCH_PROVIDER: {settings.search_provider}")
