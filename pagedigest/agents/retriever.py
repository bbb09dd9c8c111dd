from __future__ import annotations

from collections.abc import Sequence

from pagedigest.config import Settings
from pagedigest.models.content import CandidateURL
from pagedigest.models.failures import Failure, FailureKind
from pagedigest.services import logger as log_service
from pagedigest.tools import search_provider, web_utils


class CandidateRetriever:
    """Turn a standalone question into ranked candidate URLs via web search.

    Order is the search backend's own; no pagination or re-ranking.
    """

    name = "retriever"

    def __init__(self, settings: Settings):
        self.settings = settings

    async def retrieve(
        self,
        question: str,
        history: Sequence[tuple[str, str]] = (),
    ) -> list[CandidateURL] | Failure:
        try:
            response = await search_provider.search(question, self.settings)
        except Exception as e:
            return Failure(FailureKind.RETRIEVAL, f"search failed for {question!r}: {e}")

        candidates = [
            CandidateURL(
                url=r.url,
                title=r.title,
                source_domain=web_utils.extract_domain(r.url),
                image_url=r.img_src,
                snippet=r.content,
            )
            for r in response.results
            if r.url and web_utils.is_valid_url(r.url)
        ]
        log_service.log_event(
            "search_completed",
            f"{len(candidates)} candidates",
            provider=response.provider,
            query=question,
            history_turns=len(history),
        )
        return candidates
