from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from loguru import logger

from pagedigest.agents.query_rephraser import QueryRephraser
from pagedigest.agents.retriever import CandidateRetriever
from pagedigest.agents.summarizer import Summarizer
from pagedigest.config import Settings
from pagedigest.llm_client import get_chat_backend, get_conversational_backend
from pagedigest.models.content import ContentKind, SummaryRecord
from pagedigest.models.failures import CacheError, Failure, FailureKind
from pagedigest.research_core.fetch.service import ContentFetcher
from pagedigest.services import logger as log_service
from pagedigest.services.alerts import alert_hook, build_alert_sink
from pagedigest.services.summary_cache import SummaryStore, build_summary_store
from pagedigest.tools.url_filter import MAX_CANDIDATE_URLS, filter_candidates
from pagedigest.tools.url_kind import classify

OnError = Callable[[Failure], Awaitable[None]]

DISCOVERY_MODE = "url"


class WebSearchPipeline:
    """Discover candidate URLs for a query, or summarize a given URL set.

    Summarization runs one task per URL (bounded by ``max_parallel_urls``):
    classify -> cache lookup -> fetch -> summarize -> cache store. A failing
    URL is reported through ``on_error`` and dropped; it never aborts the
    batch. Results come back in completion order.
    """

    def __init__(
        self,
        *,
        retriever: CandidateRetriever,
        fetcher: ContentFetcher,
        summarizer: Summarizer,
        store: SummaryStore,
        on_error: OnError,
        rephraser: QueryRephraser | None = None,
        max_candidate_urls: int = MAX_CANDIDATE_URLS,
        max_parallel_urls: int = 5,
        closers: Sequence[Callable[[], Awaitable[None]]] = (),
    ):
        self.retriever = retriever
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.store = store
        self.on_error = on_error
        self.rephraser = rephraser
        self.max_candidate_urls = min(max(int(max_candidate_urls), 0), MAX_CANDIDATE_URLS)
        self.max_parallel_urls = max(int(max_parallel_urls), 1)
        self._closers = list(closers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebSearchPipeline":
        chat_backend = get_chat_backend(settings)
        conversational_backend = get_conversational_backend(settings)
        store = build_summary_store(settings)
        return cls(
            retriever=CandidateRetriever(settings),
            fetcher=ContentFetcher.from_settings(settings),
            summarizer=Summarizer(chat_backend, conversational_backend),
            store=store,
            on_error=alert_hook(build_alert_sink(settings)),
            rephraser=QueryRephraser(chat_backend) if settings.rephrase_queries else None,
            max_candidate_urls=settings.max_candidate_urls,
            max_parallel_urls=settings.max_parallel_urls,
            closers=(store.close, chat_backend.close, conversational_backend.close),
        )

    async def close(self) -> None:
        for close in self._closers:
            try:
                await close()
            except Exception as e:
                logger.warning(f"Error while closing pipeline resource: {e}")

    async def run(
        self,
        message: Any,
        history: Sequence[tuple[str, str]] = (),
        mode: str = "summarize",
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Entry point. Always returns a result; unexpected errors become error entries."""
        try:
            if mode == DISCOVERY_MODE:
                return await self.discover(str(message), history)
            if isinstance(message, str):
                raise TypeError("summarization mode expects a list of URLs")
            return await self.summarize_urls(list(message))
        except Exception as e:
            failure = Failure(FailureKind.PIPELINE, f"{type(e).__name__}: {e}")
            await self._report(failure)
            if mode == DISCOVERY_MODE:
                return {"urls": [], "error": failure.message}
            return [{"error": failure.message}]

    async def discover(
        self,
        query: str,
        history: Sequence[tuple[str, str]] = (),
    ) -> dict[str, Any]:
        question: str | None = query
        if self.rephraser is not None:
            question = await self.rephraser.rephrase(query, history)
            if question is None:
                log_service.log_event("search_skipped", "query needs no web search", query=query)
                return {"urls": []}

        candidates = await self.retriever.retrieve(question, history)
        if isinstance(candidates, Failure):
            await self._report(candidates)
            return {"urls": []}

        urls = filter_candidates(candidates, limit=self.max_candidate_urls)
        log_service.log_event(
            "discovery_completed",
            f"{len(urls)} of {len(candidates)} candidates kept",
            query=question,
        )
        return {"urls": urls}

    async def summarize_urls(self, urls: Sequence[str]) -> list[dict[str, Any]]:
        unique = list(dict.fromkeys(u.strip() for u in urls if isinstance(u, str) and u.strip()))
        if not unique:
            return []

        semaphore = asyncio.Semaphore(self.max_parallel_urls)

        async def bounded(url: str) -> SummaryRecord | Failure | None:
            async with semaphore:
                return await self._process_url_safely(url)

        output: list[dict[str, Any]] = []
        for next_done in asyncio.as_completed([bounded(url) for url in unique]):
            outcome = await next_done
            if isinstance(outcome, SummaryRecord):
                output.append(outcome.to_response())

        log_service.log_event(
            "summarize_completed",
            f"{len(output)} of {len(unique)} urls summarized",
        )
        return output

    async def _process_url_safely(self, url: str) -> SummaryRecord | Failure | None:
        try:
            return await self._process_url(url)
        except Exception as e:
            failure = Failure(FailureKind.PIPELINE, f"{type(e).__name__}: {e}", url)
            await self._report(failure)
            return failure

    async def _process_url(self, url: str) -> SummaryRecord | Failure | None:
        kind = classify(url)
        if kind is ContentKind.SOCIAL_MEDIA:
            logger.info(f"Skipping social media url {url}")
            return None

        cached = await self._lookup(url)
        if cached is not None:
            logger.info(f"Summary cache hit for {url}")
            return cached

        content = await self.fetcher.fetch(url, kind)
        if isinstance(content, Failure):
            await self._report(content)
            return content

        record = await self.summarizer.summarize(url, kind, content)
        if isinstance(record, Failure):
            await self._report(record)
            return record

        try:
            await self.store.store(record)
        except CacheError as e:
            await self._report(Failure(FailureKind.CACHE, str(e), url))
        return record

    async def _lookup(self, url: str) -> SummaryRecord | None:
        try:
            return await self.store.lookup(url)
        except CacheError as e:
            await self._report(Failure(FailureKind.CACHE, str(e), url))
            return None

    async def _report(self, failure: Failure) -> None:
        try:
            await self.on_error(failure)
        except Exception as e:
            logger.error(f"on_error hook failed for {failure.kind.value}: {e}")
