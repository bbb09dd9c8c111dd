from __future__ import annotations

import asyncio
import time
from typing import Protocol

from pagedigest.config import Settings
from pagedigest.models.content import ContentKind, PageContent
from pagedigest.models.failures import Failure, FailureKind, SignalQualityReject
from pagedigest.services.logger import log_fetch
from pagedigest.tools import content_cleaner, discussion_extractor
from pagedigest.tools.browser_renderer import BrowserRenderer
from pagedigest.tools.proxy_renderer import ProxyRenderer


class Renderer(Protocol):
    name: str

    async def render(self, url: str) -> str: ...


def build_renderer(settings: Settings) -> Renderer:
    strategy = settings.fetch_strategy.lower().strip()
    if strategy == "browser":
        return BrowserRenderer(
            timeout_seconds=settings.render_timeout_seconds,
            user_agent=settings.browser_user_agent,
        )
    if strategy == "proxy":
        return ProxyRenderer(
            endpoint=settings.render_proxy_url,
            api_key=settings.render_proxy_api_key,
            timeout_seconds=settings.render_timeout_seconds,
        )
    raise ValueError(f"Unsupported FETCH_STRATEGY: {settings.fetch_strategy}")


def _describe(exc: BaseException) -> str:
    detail = str(exc).strip()
    return f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__


class ContentFetcher:
    """Render a URL and turn the markup into summarizable PageContent.

    Never raises: render errors come back as FETCH failures and thin or
    removed content as SIGNAL_QUALITY failures.
    """

    def __init__(self, renderer: Renderer, *, discussion_scrape_enabled: bool = True):
        self.renderer = renderer
        self.discussion_scrape_enabled = discussion_scrape_enabled

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentFetcher":
        return cls(
            build_renderer(settings),
            discussion_scrape_enabled=settings.discussion_scrape_enabled,
        )

    async def fetch(self, url: str, kind: ContentKind) -> PageContent | Failure:
        if kind is ContentKind.SOCIAL_MEDIA:
            return Failure(FailureKind.SIGNAL_QUALITY, "social media pages are not fetched", url)

        started = time.monotonic()
        try:
            markup = await self.renderer.render(url)
        except Exception as exc:
            message = _describe(exc)
            log_fetch(
                url,
                self.renderer.name,
                "failed",
                duration_ms=int((time.monotonic() - started) * 1000),
                error=message,
            )
            return Failure(FailureKind.FETCH, message, url)

        try:
            content = await asyncio.to_thread(self._extract, markup, kind)
        except SignalQualityReject as exc:
            log_fetch(url, self.renderer.name, "rejected", error=str(exc))
            return Failure(FailureKind.SIGNAL_QUALITY, str(exc), url)

        if content.is_empty:
            log_fetch(url, self.renderer.name, "rejected", error="no extractable text")
            return Failure(FailureKind.SIGNAL_QUALITY, "no extractable text", url)

        log_fetch(
            url,
            self.renderer.name,
            "ok",
            duration_ms=int((time.monotonic() - started) * 1000),
            word_count=content.word_count,
        )
        return content

    def _extract(self, markup: str, kind: ContentKind) -> PageContent:
        if kind is ContentKind.DISCUSSION_POST and self.discussion_scrape_enabled:
            thread = discussion_extractor.extract_thread(markup)
            return PageContent(
                raw_markup=markup,
                extracted_text=thread.as_text(),
                word_count=thread.word_count,
            )
        if kind in (ContentKind.GENERIC, ContentKind.DISCUSSION_POST):
            text = content_cleaner.clean_html(markup)
            return PageContent(
                raw_markup=markup,
                extracted_text=text,
                word_count=content_cleaner.count_words(text),
            )
        raise SignalQualityReject(f"no extraction strategy for {kind.value}")
