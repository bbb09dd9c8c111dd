"""Outbound alerting for absorbed pipeline failures.

Alerts are fire-and-forget: a delivery failure is logged and dropped.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx
from loguru import logger

from pagedigest.config import Settings
from pagedigest.models.failures import Failure

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class AlertSink(Protocol):
    async def send(self, text: str) -> bool: ...


class LogAlertSink:
    """Alert sink used when no Slack credentials are configured."""

    async def send(self, text: str) -> bool:
        logger.warning(f"ALERT: {text}")
        return True


class SlackAlertSink:
    def __init__(
        self,
        *,
        bot_token: str,
        channel: str,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.bot_token = bot_token
        self.channel = channel
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    async def _post(self, client: httpx.AsyncClient, text: str) -> dict:
        response = await client.post(
            SLACK_POST_MESSAGE_URL,
            json={"channel": self.channel, "text": text},
            headers={
                "Authorization": f"Bearer {self.bot_token}",
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()
        payload = response.json()
        return payload if isinstance(payload, dict) else {}

    async def send(self, text: str) -> bool:
        try:
            if self._http_client is None:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    payload = await self._post(client, text)
            else:
                payload = await self._post(self._http_client, text)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Slack alert delivery failed: {e}")
            return False

        if not payload.get("ok"):
            logger.error(f"Slack alert rejected: {payload.get('error', 'unknown error')}")
            return False
        logger.info(f"Slack alert sent to {self.channel}")
        return True


def build_alert_sink(settings: Settings) -> AlertSink:
    if settings.slack_bot_token and settings.slack_error_channel:
        return SlackAlertSink(
            bot_token=settings.slack_bot_token,
            channel=settings.slack_error_channel,
        )
    return LogAlertSink()


def alert_hook(sink: AlertSink) -> Callable[[Failure], Awaitable[None]]:
    """Adapt an AlertSink into the pipeline's ``on_error`` hook."""

    async def on_error(failure: Failure) -> None:
        await sink.send(failure.alert_text())

    return on_error
