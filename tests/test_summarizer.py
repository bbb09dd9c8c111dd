from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from pagedigest.agents.summarizer import Backend, Summarizer, backend_for, build_prompt
from pagedigest.llm_client import ChatCompletionBackend, ConversationalBackend, normalize_envelope
from pagedigest.models.content import ContentKind, PageContent, SummaryRecord
from pagedigest.models.failures import Failure, FailureKind


def chat_envelope(text: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "gpt-4o-mini-2024-07-18",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def message_envelope(text: str) -> dict:
    return {
        "id": "msg_1",
        "type": "message",
        "model": "claude-3-5-sonnet-20240620",
        "content": [{"type": "text", "text": text}],
        "usage": {"input_tokens": 10, "output_tokens": 5},
    }


class FakeBackend:
    def __init__(self, name: str, model: str, envelope: dict | Exception):
        self.name = name
        self.model = model
        self.envelope = envelope
        self.prompts: list[str] = []

    async def complete(self, prompt: str, **kwargs) -> dict:
        self.prompts.append(prompt)
        if isinstance(self.envelope, Exception):
            raise self.envelope
        return self.envelope


def _content(text: str = "Some article text about asyncio.") -> PageContent:
    return PageContent(raw_markup="<p>x</p>", extracted_text=text, word_count=len(text.split()))


def _summarizer(chat: dict | Exception | None = None, conversational: dict | Exception | None = None):
    chat_backend = FakeBackend("chat_completion", "gpt-4o-mini", chat or chat_envelope("chat summary"))
    conv_backend = FakeBackend(
        "conversational", "claude-3-5-sonnet-20240620", conversational or message_envelope("thread summary")
    )
    return Summarizer(chat_backend, conv_backend), chat_backend, conv_backend


@pytest.mark.parametrize(
    "kind,expected",
    [
        (ContentKind.DISCUSSION_POST, Backend.CONVERSATIONAL),
        (ContentKind.GENERIC, Backend.CHAT_COMPLETION),
        (ContentKind.SOCIAL_MEDIA, Backend.CHAT_COMPLETION),
    ],
)
def test_backend_routing_is_fixed_per_kind(kind, expected):
    assert backend_for(kind) is expected


def test_prompts_embed_text_and_differ_by_kind():
    generic = build_prompt(ContentKind.GENERIC, "BODY-TEXT")
    discussion = build_prompt(ContentKind.DISCUSSION_POST, "BODY-TEXT")

    assert "BODY-TEXT" in generic
    assert "BODY-TEXT" in discussion
    assert "usernames" in discussion
    assert "usernames" not in generic


@pytest.mark.asyncio
async def test_generic_content_goes_to_chat_backend():
    summarizer, chat, conv = _summarizer()

    record = await summarizer.summarize("https://example.com/a", ContentKind.GENERIC, _content())

    assert isinstance(record, SummaryRecord)
    assert record.summary_text == "chat summary"
    assert record.model_id == "gpt-4o-mini-2024-07-18"
    assert record.summary_id == "chatcmpl-1"
    assert record.token_usage["total_tokens"] == 15
    assert record.word_count == _content().word_count
    assert record.envelope == chat_envelope("chat summary")
    assert len(chat.prompts) == 1
    assert conv.prompts == []


@pytest.mark.asyncio
async def test_discussion_content_goes_to_conversational_backend():
    summarizer, chat, conv = _summarizer()

    record = await summarizer.summarize(
        "https://www.reddit.com/r/a/comments/1/", ContentKind.DISCUSSION_POST, _content()
    )

    assert isinstance(record, SummaryRecord)
    assert record.summary_text == "thread summary"
    assert record.model_id == "claude-3-5-sonnet-20240620"
    assert chat.prompts == []
    assert len(conv.prompts) == 1


@pytest.mark.asyncio
async def test_empty_content_is_rejected_without_backend_call():
    summarizer, chat, conv = _summarizer()

    result = await summarizer.summarize(
        "https://example.com/empty",
        ContentKind.GENERIC,
        PageContent(raw_markup="", extracted_text="   ", word_count=0),
    )

    assert isinstance(result, Failure)
    assert result.kind is FailureKind.SIGNAL_QUALITY
    assert chat.prompts == [] and conv.prompts == []


@pytest.mark.asyncio
async def test_backend_error_becomes_summarize_failure():
    summarizer, _, _ = _summarizer(chat=RuntimeError("rate limited"))

    result = await summarizer.summarize("https://example.com/a", ContentKind.GENERIC, _content())

    assert isinstance(result, Failure)
    assert result.kind is FailureKind.SUMMARIZE
    assert "rate limited" in result.message
    assert result.url == "https://example.com/a"


@pytest.mark.asyncio
async def test_empty_summary_text_is_a_failure():
    summarizer, _, _ = _summarizer(chat=chat_envelope("   "))

    result = await summarizer.summarize("https://example.com/a", ContentKind.GENERIC, _content())

    assert isinstance(result, Failure)
    assert result.kind is FailureKind.SUMMARIZE


def test_normalize_envelope_handles_both_shapes():
    chat = normalize_envelope(chat_envelope(" hello "))
    message = normalize_envelope(message_envelope("world"))

    assert (chat.text, chat.model, chat.completion_id) == ("hello", "gpt-4o-mini-2024-07-18", "chatcmpl-1")
    assert (chat.input_tokens, chat.output_tokens) == (10, 5)
    assert (message.text, message.model, message.completion_id) == ("world", "claude-3-5-sonnet-20240620", "msg_1")
    assert (message.input_tokens, message.output_tokens) == (10, 5)


@pytest.mark.parametrize("envelope", [{"choices": []}, {"unexpected": True}, {"content": "text"}])
def test_normalize_envelope_rejects_unknown_shapes(envelope):
    with pytest.raises(ValueError):
        normalize_envelope(envelope)


@pytest.mark.asyncio
async def test_chat_backend_sends_single_user_turn_with_temperature():
    create = AsyncMock(return_value=chat_envelope("ok"))
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    backend = ChatCompletionBackend(client, model="gpt-4o-mini", temperature=0.2, max_tokens=512)

    envelope = await backend.complete("PROMPT")
    await backend.complete("PROMPT", temperature=0)

    first, second = create.await_args_list
    assert envelope["choices"][0]["message"]["content"] == "ok"
    assert first.kwargs["messages"] == [{"role": "user", "content": "PROMPT"}]
    assert first.kwargs["temperature"] == 0.2
    assert first.kwargs["max_tokens"] == 512
    assert second.kwargs["temperature"] == 0


@pytest.mark.asyncio
async def test_conversational_backend_bounds_output_tokens():
    response = SimpleNamespace(model_dump=lambda mode: message_envelope("ok"))
    create = AsyncMock(return_value=response)
    client = SimpleNamespace(messages=SimpleNamespace(create=create))
    backend = ConversationalBackend(client, model="claude-3-5-sonnet-20240620", max_tokens=4096)

    envelope = await backend.complete("PROMPT")

    assert envelope["content"][0]["text"] == "ok"
    kwargs = create.await_args.kwargs
    assert kwargs["max_tokens"] == 4096
    assert kwargs["messages"] == [{"role": "user", "content": "PROMPT"}]
    assert "temperature" not in kwargs


@pytest.mark.parametrize(
    "envelope",
    [{"choices": ["oops"]}, {"choices": [None]}, {"choices": [{"message": "text"}]}],
)
def test_normalize_envelope_rejects_malformed_choices(envelope):
    with pytest.raises(ValueError, match="no message object"):
        normalize_envelope(envelope)
