from __future__ import annotations

import time
from enum import Enum
from typing import Any, Protocol

from pagedigest.llm_client import normalize_envelope
from pagedigest.models.content import ContentKind, PageContent, SummaryRecord
from pagedigest.models.failures import Failure, FailureKind
from pagedigest.services import logger as log_service
from pagedigest.services.prompt_store import render_prompt


class Backend(str, Enum):
    CHAT_COMPLETION = "chat_completion"
    CONVERSATIONAL = "conversational"


class CompletionBackend(Protocol):
    name: str
    model: str

    async def complete(self, prompt: str) -> dict[str, Any]: ...


def backend_for(kind: ContentKind) -> Backend:
    """Fixed routing: discussions go to the conversational backend, everything else to chat."""
    if kind is ContentKind.DISCUSSION_POST:
        return Backend.CONVERSATIONAL
    if kind in (ContentKind.GENERIC, ContentKind.SOCIAL_MEDIA):
        return Backend.CHAT_COMPLETION
    raise ValueError(f"Unhandled content kind: {kind!r}")


def prompt_key_for(kind: ContentKind) -> str:
    if kind is ContentKind.DISCUSSION_POST:
        return "summarizer.discussion"
    if kind in (ContentKind.GENERIC, ContentKind.SOCIAL_MEDIA):
        return "summarizer.generic"
    raise ValueError(f"Unhandled content kind: {kind!r}")


def build_prompt(kind: ContentKind, text: str) -> str:
    return render_prompt(prompt_key_for(kind), content=text)


class Summarizer:
    """Summarize cleaned page text with the backend matching its ContentKind."""

    name = "summarizer"

    def __init__(self, chat_backend: CompletionBackend, conversational_backend: CompletionBackend):
        self._backends = {
            Backend.CHAT_COMPLETION: chat_backend,
            Backend.CONVERSATIONAL: conversational_backend,
        }

    def backend(self, kind: ContentKind) -> CompletionBackend:
        return self._backends[backend_for(kind)]

    async def summarize(
        self,
        url: str,
        kind: ContentKind,
        content: PageContent,
    ) -> SummaryRecord | Failure:
        if content.is_empty:
            return Failure(FailureKind.SIGNAL_QUALITY, "refusing to summarize empty text", url)

        backend = self.backend(kind)
        prompt = build_prompt(kind, content.extracted_text)

        t0 = time.monotonic()
        try:
            envelope = await backend.complete(prompt)
            completion = normalize_envelope(envelope)
        except Exception as e:
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            log_service.log_llm_call(
                model=backend.model,
                caller=f"{self.name}.{backend.name}",
                duration_ms=elapsed_ms,
                status="error",
                error=str(e) or type(e).__name__,
            )
            return Failure(FailureKind.SUMMARIZE, f"{type(e).__name__}: {e}", url)
        elapsed_ms = int((time.monotonic() - t0) * 1000)

        log_service.log_llm_call(
            model=completion.model or backend.model,
            caller=f"{self.name}.{backend.name}",
            input_tokens=completion.input_tokens,
            output_tokens=completion.output_tokens,
            duration_ms=elapsed_ms,
        )

        if not completion.text:
            return Failure(FailureKind.SUMMARIZE, "provider returned an empty summary", url)

        return SummaryRecord(
            url=url,
            summary_text=completion.text,
            model_id=completion.model or backend.model,
            token_usage=completion.usage,
            word_count=content.word_count,
            summary_id=completion.completion_id,
            envelope=envelope,
        )
