"""Twitch live status and follower lookups cached in the key-value store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from flightdeck.core.errors import StoreError
from flightdeck.services.store import KeyValueStore

logger = logging.getLogger(__name__)

TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"
TWITCH_HELIX_URL = "https://api.twitch.tv/helix"
TOKEN_CACHE_KEY = "twitch:app_token"
LIVE_CACHE_KEY_PREFIX = "twitch:live:"
USER_ID_CACHE_KEY_PREFIX = "twitch:user_id:"
FOLLOWERS_CACHE_KEY_PREFIX = "twitch:followers:"
TOKEN_EXPIRY_MARGIN_SECONDS = 60
USER_ID_CACHE_SECONDS = 24 * 60 * 60


class TwitchError(RuntimeError):
    """Raised when Twitch cannot be reached or answers unexpectedly."""


@dataclass(frozen=True)
class TwitchConfig:
    client_id: str | None
    client_secret: str | None
    channel_login: str
    live_cache_seconds: int = 60
    follower_cache_seconds: int = 300
    timeout_seconds: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.channel_login.strip())


def _json_object(response: httpx.Response, what: str) -> dict[str, Any]:
    if not response.is_success:
        raise TwitchError(f"{what} request failed with status {response.status_code}")
    try:
        payload = response.json()
    except ValueError as exc:
        raise TwitchError(f"{what} response was not valid JSON") from exc
    if not isinstance(payload, dict):
        raise TwitchError(f"{what} response was not a JSON object")
    return payload


class TwitchClient:
    """Answers channel questions with app-token auth and short caching."""

    def __init__(
        self,
        config: TwitchConfig,
        store: KeyValueStore | None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._store = store
        self._transport = transport

    @property
    def channel(self) -> str:
        return self.config.channel_login.strip().lower()

    async def _cache_get(self, key: str) -> str | None:
        if self._store is None:
            return None
        try:
            return await self._store.get(key)
        except StoreError as exc:
            logger.warning("Twitch cache read failed: %s", exc)
            return None

    async def _cache_put(self, key: str, value: str, ttl_seconds: int) -> None:
        if self._store is None:
            return
        try:
            await self._store.put(key, value, ttl_seconds)
        except StoreError as exc:
            logger.warning("Twitch cache write failed: %s", exc)

    def _require_config(self) -> None:
        if not self.config.configured:
            raise TwitchError("Missing TWITCH_CLIENT_ID/TWITCH_CLIENT_SECRET (or channel login).")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_seconds),
            transport=self._transport,
        )

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        cached = await self._cache_get(TOKEN_CACHE_KEY)
        if cached:
            return cached

        response = await client.post(
            TWITCH_TOKEN_URL,
            data={
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "grant_type": "client_credentials",
            },
        )
        payload = _json_object(response, "Token")
        token = payload.get("access_token")
        if not isinstance(token, str) or not token:
            raise TwitchError("Token response did not include an access token")
        try:
            expires_in = int(payload.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        ttl = expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        if ttl > 0:
            await self._cache_put(TOKEN_CACHE_KEY, token, ttl)
        return token

    async def _helix(
        self, client: httpx.AsyncClient, path: str, params: dict[str, str], what: str
    ) -> dict[str, Any]:
        token = await self._access_token(client)
        response = await client.get(
            f"{TWITCH_HELIX_URL}{path}",
            params=params,
            headers={
                "Client-ID": self.config.client_id or "",
                "Authorization": f"Bearer {token}",
            },
        )
        return _json_object(response, what)

    async def _user_id(self, client: httpx.AsyncClient) -> str:
        cache_key = f"{USER_ID_CACHE_KEY_PREFIX}{self.channel}"
        cached = await self._cache_get(cache_key)
        if cached:
            return cached

        payload = await self._helix(client, "/users", {"login": self.channel}, "Users")
        users = payload.get("data")
        first = users[0] if isinstance(users, list) and users else None
        user_id = first.get("id") if isinstance(first, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise TwitchError(f"Twitch user {self.channel} was not found")
        await self._cache_put(cache_key, user_id, USER_ID_CACHE_SECONDS)
        return user_id

    async def is_live(self) -> bool:
        """Return True while the configured channel is streaming.

        Raises:
            TwitchError: credentials are missing or Twitch failed.
        """
        self._require_config()

        cache_key = f"{LIVE_CACHE_KEY_PREFIX}{self.channel}"
        cached = await self._cache_get(cache_key)
        if cached in ("0", "1"):
            return cached == "1"

        try:
            async with self._client() as client:
                payload = await self._helix(
                    client, "/streams", {"user_login": self.channel}, "Streams"
                )
        except httpx.HTTPError as exc:
            raise TwitchError(f"Twitch request failed: {exc}") from exc

        data = payload.get("data")
        live = isinstance(data, list) and len(data) > 0
        await self._cache_put(cache_key, "1" if live else "0", self.config.live_cache_seconds)
        return live

    async def follower_count(self) -> int:
        """Return the channel's follower total.

        Raises:
            TwitchError: credentials are missing or Twitch failed.
        """
        self._require_config()

        cache_key = f"{FOLLOWERS_CACHE_KEY_PREFIX}{self.channel}"
        cached = await self._cache_get(cache_key)
        if cached is not None and cached.isdigit():
            return int(cached)

        try:
            async with self._client() as client:
                user_id = await self._user_id(client)
                payload = await self._helix(
                    client, "/channels/followers", {"broadcaster_id": user_id}, "Followers"
                )
        except httpx.HTTPError as exc:
            raise TwitchError(f"Twitch request failed: {exc}") from exc

        total = payload.get("total")
        if not isinstance(total, int) or isinstance(total, bool) or total < 0:
            raise TwitchError("Followers response did not include a total")
        await self._cache_put(cache_key, str(total), self.config.follower_cache_seconds)
        return total
