from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from pagedigest.agents.retriever import CandidateRetriever
from pagedigest.config import Settings
from pagedigest.models.content import CandidateURL
from pagedigest.models.failures import Failure, FailureKind
from pagedigest.tools import search_provider, searxng_search
from pagedigest.tools.search_provider import SearchResponse
from pagedigest.tools.searxng_search import SearchResult


class _FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self):
        return self._payload


class _FakeClient:
    def __init__(self, payload):
        self.payload = payload
        self.requests: list[tuple[str, dict]] = []

    async def get(self, url: str, params: dict):
        self.requests.append((url, params))
        return _FakeResponse(self.payload)


@pytest.mark.asyncio
async def test_searxng_search_maps_results_and_skips_urlless_items():
    client = _FakeClient(
        {
            "results": [
                {"title": "A", "url": "https://a.com", "content": "alpha", "score": 1.5},
                {"title": "no url", "content": "skipped"},
                {"title": "B", "url": "https://b.com", "img_src": "https://b.com/i.png"},
            ]
        }
    )

    results = await searxng_search.search(
        "asyncio", base_url="http://searx:8080/", language="en", http_client=client
    )

    assert [r.url for r in results] == ["https://a.com", "https://b.com"]
    assert results[0].score == 1.5
    assert results[1].content == ""
    assert results[1].img_src == "https://b.com/i.png"
    url, params = client.requests[0]
    assert url == "http://searx:8080/search"
    assert params == {"q": "asyncio", "format": "json", "language": "en"}


@pytest.mark.asyncio
async def test_searxng_search_respects_max_results():
    client = _FakeClient({"results": [{"url": f"https://e.com/{i}"} for i in range(10)]})

    results = await searxng_search.search("q", base_url="http://searx", max_results=3, http_client=client)

    assert len(results) == 3


@pytest.mark.asyncio
async def test_searxng_search_requires_base_url_and_object_payload():
    with pytest.raises(RuntimeError):
        await searxng_search.search("q", base_url="")
    with pytest.raises(ValueError):
        await searxng_search.search("q", base_url="http://searx", http_client=_FakeClient(["not", "a", "dict"]))


@pytest.mark.asyncio
async def test_search_provider_dispatches_to_configured_backend():
    results = [SearchResult(title="A", url="https://a.com", content="")]
    with patch("pagedigest.tools.search_provider.tavily_search.search", AsyncMock(return_value=results)) as tavily:
        response = await search_provider.search("q", Settings(search_provider="tavily", tavily_api_key="k"))

    assert response.provider == "tavily"
    assert response.results == results
    assert tavily.await_args.kwargs["api_key"] == "k"


@pytest.mark.asyncio
async def test_search_provider_raises_when_provider_unsupported():
    with pytest.raises(ValueError):
        await search_provider.search("q", Settings(search_provider="bing"))


@pytest.mark.asyncio
async def test_retriever_maps_results_to_candidates():
    response = SearchResponse(
        results=[
            SearchResult(title="A", url="https://www.Example.com/a", content="snippet", img_src="https://i"),
            SearchResult(title="B", url="https://b.org/b", content=""),
        ],
        provider="searxng",
    )
    with patch("pagedigest.agents.retriever.search_provider.search", AsyncMock(return_value=response)):
        candidates = await CandidateRetriever(Settings()).retrieve("question", [("human", "question")])

    assert candidates == [
        CandidateURL(
            url="https://www.Example.com/a",
            title="A",
            source_domain="example.com",
            image_url="https://i",
            snippet="snippet",
        ),
        CandidateURL(url="https://b.org/b", title="B", source_domain="b.org"),
    ]


@pytest.mark.asyncio
async def test_retriever_turns_search_errors_into_retrieval_failure():
    failing = AsyncMock(side_effect=RuntimeError("searx unavailable"))
    with patch("pagedigest.agents.retriever.search_provider.search", failing):
        result = await CandidateRetriever(Settings()).retrieve("question")

    assert isinstance(result, Failure)
    assert result.kind is FailureKind.RETRIEVAL
    assert "searx unavailable" in result.message


@pytest.mark.asyncio
async def test_retriever_drops_non_http_results():
    response = SearchResponse(
        results=[
            SearchResult(title="js", url="javascript:void(0)", content=""),
            SearchResult(title="ok", url="https://ok.com", content=""),
        ],
        provider="searxng",
    )
    with patch("pagedigest.agents.retriever.search_provider.search", AsyncMock(return_value=response)):
        candidates = await CandidateRetriever(Settings()).retrieve("question")

    assert [c.url for c in candidates] == ["https://ok.com"]
