"""Discord webhook delivery."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class WebhookNotifier(Protocol):
    """Anything able to POST a JSON payload to a preconfigured destination."""

    async def post(self, payload: dict[str, Any]) -> bool: ...


class DiscordWebhook:
    """Posts JSON messages to a Discord webhook URL."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def post(self, payload: dict[str, Any]) -> bool:
        """Return True when Discord accepted the message."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_seconds),
                transport=self._transport,
            ) as client:
                response = await client.post(self._url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Webhook delivery failed: %s", exc)
            return False

        if response.is_success:
            return True
        logger.warning("Webhook responded with status %d", response.status_code)
        return False
