from __future__ import annotations

import httpx


def _extract_markup(payload: dict) -> str:
    return str(payload.get("content") or payload.get("html") or "")


class ProxyRenderer:
    """Third-party "render and return markup" API keyed by an API credential."""

    name = "proxy"

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        timeout_seconds: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.endpoint = endpoint.strip()
        self.api_key = api_key.strip()
        self.timeout_seconds = max(float(timeout_seconds), 1.0)
        self._http_client = http_client

    async def render(self, url: str) -> str:
        if not self.api_key:
            raise RuntimeError("RENDER_PROXY_API_KEY is not configured")

        request_body = {
            "url": url,
            "outputFormat": ["json", "html"],
            "jsRendering": True,
        }

        async def _do_request(client: httpx.AsyncClient) -> dict:
            response = await client.post(
                self.endpoint,
                json=request_body,
                headers={
                    "x-api-key": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
            return payload if isinstance(payload, dict) else {}

        if self._http_client is None:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                data = await _do_request(client)
        else:
            data = await _do_request(self._http_client)

        markup = _extract_markup(data)
        if not markup.strip():
            raise RuntimeError("Render proxy response missing html content")
        return markup
