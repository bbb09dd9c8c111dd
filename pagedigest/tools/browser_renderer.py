from __future__ import annotations

import asyncio

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-gpu"]


class BrowserRenderer:
    """Headless Chromium session that returns fully rendered markup."""

    name = "browser"

    def __init__(self, *, timeout_seconds: float = 60.0, user_agent: str = ""):
        self.timeout_seconds = max(float(timeout_seconds), 1.0)
        self.user_agent = user_agent

    async def render(self, url: str) -> str:
        # Hard cap on the whole session, on top of playwright's per-call timeouts.
        return await asyncio.wait_for(self._render(url), timeout=self.timeout_seconds)

    async def _render(self, url: str) -> str:
        try:
            from playwright.async_api import async_playwright
        except ImportError as exc:  # pragma: no cover - depends on browser install
            raise RuntimeError("Playwright is not installed") from exc

        timeout_ms = int(self.timeout_seconds * 1000)
        async with async_playwright() as playwright:  # pragma: no cover - integration behavior
            browser = await playwright.chromium.launch(
                headless=True,
                args=LAUNCH_ARGS,
                timeout=timeout_ms,
            )
            try:
                context = await browser.new_context(user_agent=self.user_agent or None)
                page = await context.new_page()
                await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
                return await page.content()
            finally:
                await browser.close()
