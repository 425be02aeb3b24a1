"""Flight suggestions forwarded to Discord."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

import httpx

from flightdeck.core.errors import NotConfiguredError, UpstreamDeliveryError, ValidationError
from flightdeck.services.rate_limit import RateLimiter
from flightdeck.services.webhook import WebhookNotifier
from flightdeck.utils.time import Clock, parse_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"
RATE_LIMITED_MESSAGE = "Too many submissions. Please wait before trying again."

FIELD_LIMITS: dict[str, int] = {
    "flightDate": 40,
    "flightNumber": 30,
    "callsign": 30,
    "aircraft": 40,
    "departure": 60,
    "arrival": 60,
    "route": 200,
    "flightRadarLink": 300,
    "flightTime": 20,
    "flightLength": 20,
    "name": 60,
    "twitchHandle": 40,
    "timestamp": 40,
}
REQUIRED_FIELDS = (
    "flightNumber",
    "callsign",
    "aircraft",
    "departure",
    "arrival",
    "route",
    "flightTime",
    "flightLength",
    "name",
)


def clamp_string(value: object, max_length: int) -> str:
    """Trim ``value`` and cut it to ``max_length``; non-strings become empty."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]


def validate_flightradar_link(link: str) -> str | None:
    """Return an error message for an unacceptable FlightRadar24 link."""
    if not link:
        return None
    parsed = urlparse(link)
    if not parsed.scheme or not parsed.hostname:
        return "FlightRadar24 link is not a valid URL."
    if parsed.scheme != "https":
        return "FlightRadar24 link must start with https://"
    if "flightradar24.com" not in parsed.hostname.lower():
        return "Please use a FlightRadar24 link (flightradar24.com)."
    return None


def sanitize_suggestion(payload: dict[str, Any], *, now: datetime) -> dict[str, str]:
    """Clamp every known field and enforce the required ones."""
    suggestion = {field: clamp_string(payload.get(field), limit) for field, limit in FIELD_LIMITS.items()}
    if not suggestion["timestamp"]:
        suggestion["timestamp"] = to_iso(now)

    for field in REQUIRED_FIELDS:
        if not suggestion[field]:
            raise ValidationError(f"Missing required field: {field}")

    link_error = validate_flightradar_link(suggestion["flightRadarLink"])
    if link_error:
        raise ValidationError(link_error)
    return suggestion


def build_discord_message(suggestion: dict[str, str]) -> dict[str, Any]:
    """Render a suggestion as a Discord embed."""
    submitted = parse_iso(suggestion.get("timestamp"))
    submitted_text = (
        submitted.strftime("%d/%m/%Y, %H:%M:%S") + " UTC" if submitted else suggestion["timestamp"]
    )

    def field(name: str, value: str, inline: bool = True) -> dict[str, Any]:
        return {"name": name, "value": value, "inline": inline}

    return {
        "content": f"✈️ **New Flight Suggestion from {suggestion['name']}**",
        "embeds": [
            {
                "title": "✈️ Flight Suggestion Received",
                "description": (
                    f"{suggestion['flightNumber']} - "
                    f"{suggestion['departure']} to {suggestion['arrival']}"
                ),
                "color": 0xFF8C42,
                "fields": [
                    field("✈️ Flight Number", suggestion["flightNumber"]),
                    field("📡 Callsign", suggestion["callsign"]),
                    field("🛩️ Aircraft", suggestion["aircraft"]),
                    field("🛫 Departure", suggestion["departure"]),
                    field("🛬 Arrival", suggestion["arrival"]),
                    field("📍 Route", suggestion["route"], inline=False),
                    field(
                        "🔗 FlightRadar24 Link",
                        suggestion["flightRadarLink"] or "Not provided",
                        inline=False,
                    ),
                    field("⏱️ Flight Time", suggestion["flightTime"]),
                    field("📊 Flight Length", suggestion["flightLength"]),
                    field("📅 Date of Flight", suggestion["flightDate"] or "Not specified"),
                    field("👤 Suggested By", suggestion["name"]),
                    field("🎥 Twitch Handle", suggestion["twitchHandle"] or "Not provided"),
                    field("⏰ Submitted", submitted_text, inline=False),
                ],
                "footer": {"text": "From: flyingwithjoel.co.uk"},
            }
        ],
    }


@dataclass(frozen=True)
class TurnstileVerifier:
    """Cloudflare Turnstile server-side token check."""

    secret_key: str
    timeout_seconds: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    async def verify(self, token: object, remote_ip: str | None) -> str | None:
        """Return an error message, or None when the token is accepted."""
        if not isinstance(token, str) or not token:
            return "Missing Turnstile token."
        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self.transport,
            ) as client:
                response = await client.post(TURNSTILE_VERIFY_URL, data=form)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Turnstile verification request failed: %s", exc)
            return "Turnstile verification failed."
        if not response.is_success:
            return "Turnstile verification failed."
        try:
            accepted = bool(response.json().get("success"))
        except ValueError:
            accepted = False
        return None if accepted else "Turnstile verification rejected."


class SuggestionService:
    """Validates suggestions and forwards them to the suggestions webhook."""

    def __init__(
        self,
        webhook: WebhookNotifier | None,
        rate_limiter: RateLimiter,
        *,
        turnstile: TurnstileVerifier | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._webhook = webhook
        self._rate_limiter = rate_limiter
        self._turnstile = turnstile
        self._clock = clock or utcnow

    async def submit(self, payload: dict[str, Any], identity: str | None) -> None:
        if self._webhook is None:
            raise NotConfiguredError()

        if identity:
            await self._rate_limiter.enforce(identity, RATE_LIMITED_MESSAGE)

        if self._turnstile is not None:
            error = await self._turnstile.verify(payload.get("turnstileToken"), identity)
            if error:
                raise ValidationError(error)

        suggestion = sanitize_suggestion(payload, now=self._clock())
        if not await self._webhook.post(build_discord_message(suggestion)):
            raise UpstreamDeliveryError()
        logger.info("Forwarded flight suggestion %s", suggestion["flightNumber"])
