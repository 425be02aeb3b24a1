"""Outbound email delivery through an HTTP email API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    """Anything able to attempt delivery of a plain-text email."""

    async def send(self, to: str, subject: str, text: str) -> bool: ...


@dataclass(frozen=True)
class EmailConfig:
    """Immutable configuration for the HTTP email sender."""

    api_url: str
    api_key: str
    sender: str
    timeout_seconds: float = 10.0


class HttpEmailSender:
    """Posts ``{from, to, subject, text}`` to a bearer-authenticated email API."""

    def __init__(
        self,
        config: EmailConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    async def send(self, to: str, subject: str, text: str) -> bool:
        """Return True when the provider accepted the message."""
        payload = {
            "from": self.config.sender,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            ) as client:
                response = await client.post(self.config.api_url, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Email delivery failed: %s", exc)
            return False

        if response.is_success:
            return True
        logger.warning("Email provider rejected message with status %d", response.status_code)
        return False
