"""Key-value storage with optional per-key expiry.

The store is the only state shared between requests. Production deployments
point ``KV_URL`` at Redis; ``memory://`` keeps everything in-process and is
meant for local development and tests.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Protocol

import redis.asyncio as redis_asyncio
from redis.exceptions import RedisError

from flightdeck.core.errors import StoreError
from flightdeck.utils.time import Clock, utcnow

logger = logging.getLogger(__name__)

MEMORY_URL_SCHEME = "memory://"


class KeyValueStore(Protocol):
    """Minimal string-keyed storage contract."""

    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None: ...

    async def close(self) -> None: ...


class MemoryStore:
    """In-process store whose entries expire lazily against an injectable clock."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utcnow
        self._entries: dict[str, tuple[str, datetime | None]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._clock() + timedelta(seconds=max(1, int(ttl_seconds)))
        self._entries[key] = (value, expires_at)

    async def close(self) -> None:
        self._entries.clear()

    def keys(self, prefix: str = "") -> list[str]:
        """Return the live keys starting with ``prefix``."""
        now = self._clock()
        return [
            key
            for key, (_, expires_at) in self._entries.items()
            if key.startswith(prefix) and (expires_at is None or expires_at > now)
        ]


class RedisStore:
    """Store backed by a Redis server through the asyncio client."""

    def __init__(self, url: str, *, client: redis_asyncio.Redis | None = None) -> None:
        self._redis = client or redis_asyncio.from_url(url, decode_responses=True)

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except RedisError as exc:
            raise StoreError(f"Key-value get failed: {exc}") from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        try:
            if ttl_seconds is None:
                await self._redis.set(key, value)
            else:
                await self._redis.set(key, value, ex=max(1, int(ttl_seconds)))
        except RedisError as exc:
            raise StoreError(f"Key-value put failed: {exc}") from exc

    async def close(self) -> None:
        await self._redis.aclose()


def build_store(url: str | None, *, clock: Clock | None = None) -> KeyValueStore | None:
    """Return the store selected by ``url`` or None when storage is not configured."""
    if not url:
        return None
    if url.startswith(MEMORY_URL_SCHEME):
        logger.info("Using in-process key-value store")
        return MemoryStore(clock=clock)
    return RedisStore(url)


async def get_json(store: KeyValueStore, key: str) -> Any | None:
    """Load and decode a JSON value, treating corrupt payloads as missing."""
    raw = await store.get(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding corrupt JSON stored under %s", key)
        return None


async def put_json(
    store: KeyValueStore,
    key: str,
    value: Any,
    ttl_seconds: int | None = None,
) -> None:
    """Encode ``value`` as compact JSON and store it."""
    await store.put(key, json.dumps(value, separators=(",", ":")), ttl_seconds)
