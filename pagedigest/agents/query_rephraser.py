from __future__ import annotations

import re
from collections.abc import Sequence

from loguru import logger

from pagedigest.llm_client import ChatCompletionBackend, normalize_envelope
from pagedigest.services.prompt_store import render_prompt

NOT_NEEDED = "not_needed"

_QUESTION_RE = re.compile(r"<question>\s*(.*?)\s*</question>", re.DOTALL)


def parse_question(output: str) -> str:
    """Return the contents of the ``<question>`` block, or the whole output if absent."""
    match = _QUESTION_RE.search(output or "")
    text = match.group(1) if match else (output or "")
    return " ".join(text.split())


def format_history(history: Sequence[tuple[str, str]]) -> str:
    return "\n".join(f"{role}: {content}" for role, content in history)


class QueryRephraser:
    """Rewrite a follow-up message into a standalone web search query."""

    def __init__(self, backend: ChatCompletionBackend):
        self.backend = backend

    async def rephrase(self, query: str, history: Sequence[tuple[str, str]] = ()) -> str | None:
        """Return the search query, or None when the message needs no search."""
        prompt = render_prompt(
            "rephraser.prompt",
            chat_history=format_history(history),
            query=query,
        )
        try:
            envelope = await self.backend.complete(prompt, temperature=0)
            question = parse_question(normalize_envelope(envelope).text)
        except Exception as e:
            logger.warning(f"Query rephrasing failed, searching raw query: {e}")
            return query

        if question.lower() == NOT_NEEDED:
            return None
        return question or query
