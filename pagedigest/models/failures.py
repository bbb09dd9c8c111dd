from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    RETRIEVAL = "retrieval"
    FETCH = "fetch"
    SIGNAL_QUALITY = "signal_quality"
    SUMMARIZE = "summarize"
    CACHE = "cache"
    PIPELINE = "pipeline"


ALERT_LABELS = {
    FailureKind.RETRIEVAL: "Search",
    FailureKind.FETCH: "Fetch page content",
    FailureKind.SIGNAL_QUALITY: "Low quality content",
    FailureKind.SUMMARIZE: "AI Summary",
    FailureKind.CACHE: "DB",
    FailureKind.PIPELINE: "websearch",
}


@dataclass(frozen=True, slots=True)
class Failure:
    """Typed error result returned in place of a successful value."""

    kind: FailureKind
    message: str
    url: str | None = None

    def alert_text(self) -> str:
        target = f"URL : {self.url}" if self.url else "URL : -"
        return f"*Error - {ALERT_LABELS[self.kind]}*\n{target}\n{self.message}"


class CacheError(RuntimeError):
    """Summary store unreachable or rejected an operation."""


class SignalQualityReject(ValueError):
    """Fetched content is too thin to be worth an LLM call."""
