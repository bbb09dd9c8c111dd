"""Chat-completion (OpenAI) and conversational (Anthropic) backends.

Both return the provider's raw response envelope as a plain dict; the two
shapes differ and are mapped onto one form by ``normalize_envelope``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pagedigest.config import Settings


@dataclass
class NormalizedCompletion:
    text: str
    model: str
    completion_id: str = ""
    usage: dict[str, Any] = field(default_factory=dict)

    @property
    def input_tokens(self) -> int:
        return int(self.usage.get("prompt_tokens") or self.usage.get("input_tokens") or 0)

    @property
    def output_tokens(self) -> int:
        return int(self.usage.get("completion_tokens") or self.usage.get("output_tokens") or 0)


def _to_dict(response: Any) -> dict[str, Any]:
    if isinstance(response, dict):
        return response
    dump = getattr(response, "model_dump", None)
    if callable(dump):
        return dump(mode="json")
    raise TypeError(f"Unsupported completion response type: {type(response).__name__}")


def normalize_envelope(envelope: dict[str, Any]) -> NormalizedCompletion:
    """Map a chat-completion or messages envelope onto NormalizedCompletion."""
    choices = envelope.get("choices")
    if isinstance(choices, list):
        if not choices:
            raise ValueError("Completion envelope has no choices")
        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise ValueError("Completion choice has no message object")
        text = message.get("content") or ""
    else:
        blocks = envelope.get("content")
        if not isinstance(blocks, list):
            raise ValueError("Unrecognized completion envelope")
        text = "\n".join(
            str(block.get("text", ""))
            for block in blocks
            if isinstance(block, dict) and block.get("type", "text") == "text"
        )

    usage = envelope.get("usage")
    return NormalizedCompletion(
        text=str(text).strip(),
        model=str(envelope.get("model") or ""),
        completion_id=str(envelope.get("id") or ""),
        usage=usage if isinstance(usage, dict) else {},
    )


class ChatCompletionBackend:
    """General-purpose backend: single user turn, fixed low temperature."""

    name = "chat_completion"

    def __init__(self, client: Any, *, model: str, temperature: float, max_tokens: int):
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, prompt: str, *, temperature: float | None = None) -> dict[str, Any]:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature if temperature is None else temperature,
            max_tokens=self.max_tokens,
        )
        return _to_dict(response)

    async def close(self) -> None:
        await self._client.close()


class ConversationalBackend:
    """Discussion backend: single user turn with an output token bound, no temperature knob."""

    name = "conversational"

    def __init__(self, client: Any, *, model: str, max_tokens: int):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    async def complete(self, prompt: str) -> dict[str, Any]:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return _to_dict(response)

    async def close(self) -> None:
        await self._client.close()


def get_chat_backend(settings: Settings) -> ChatCompletionBackend:
    from openai import AsyncOpenAI

    kwargs: dict[str, Any] = {"api_key": settings.openai_api_key}
    if settings.openai_base_url.strip():
        kwargs["base_url"] = settings.openai_base_url.strip()
    return ChatCompletionBackend(
        AsyncOpenAI(**kwargs),
        model=settings.chat_model,
        temperature=settings.chat_temperature,
        max_tokens=settings.summary_max_tokens,
    )


def get_conversational_backend(settings: Settings) -> ConversationalBackend:
    from anthropic import AsyncAnthropic

    return ConversationalBackend(
        AsyncAnthropic(api_key=settings.anthropic_api_key),
        model=settings.discussion_model,
        max_tokens=settings.summary_max_tokens,
    )
