from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ContentKind(str, Enum):
    GENERIC = "generic"
    DISCUSSION_POST = "discussion_post"
    SOCIAL_MEDIA = "social_media"


@dataclass(frozen=True, slots=True)
class CandidateURL:
    url: str
    title: str
    source_domain: str
    image_url: str | None = None
    snippet: str = ""


@dataclass(frozen=True, slots=True)
class PageContent:
    raw_markup: str
    extracted_text: str
    word_count: int

    @property
    def is_empty(self) -> bool:
        return not self.extracted_text.strip() or self.word_count <= 0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class SummaryRecord:
    """One summarized URL, as persisted in the summary cache."""

    url: str
    summary_text: str
    model_id: str
    token_usage: dict[str, Any]
    word_count: int
    summary_id: str = ""
    envelope: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def to_response(self) -> dict[str, Any]:
        return {
            "id": self.summary_id,
            "url": self.url,
            "summary": self.summary_text,
            "token": self.token_usage,
            "model": self.model_id,
            "word_count": self.word_count,
        }
