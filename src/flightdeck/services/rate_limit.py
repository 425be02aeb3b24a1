"""Per-identity cooldown windows backed by the key-value store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flightdeck.core.errors import RateLimitedError, StoreError
from flightdeck.core.security import hash_value
from flightdeck.services.store import KeyValueStore
from flightdeck.utils.time import Clock, to_iso, utcnow

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 120
MIN_COOLDOWN_SECONDS = 5
MAX_COOLDOWN_SECONDS = 600


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a cooldown check."""

    allowed: bool
    retry_after_seconds: int = 0


class RateLimiter:
    """Mark-on-attempt limiter: an existing mark blocks, a missing one is written.

    When no store is configured, or the store fails, every check is allowed.
    """

    def __init__(
        self,
        store: KeyValueStore | None,
        *,
        namespace: str = "rl",
        cooldown_seconds: int = DEFAULT_COOLDOWN_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._namespace = namespace
        self.cooldown_seconds = max(
            MIN_COOLDOWN_SECONDS,
            min(MAX_COOLDOWN_SECONDS, int(cooldown_seconds)),
        )
        self._clock = clock or utcnow

    def _key(self, identity: str) -> str:
        return f"{self._namespace}:{hash_value(identity)}"

    async def check_and_mark(self, identity: str) -> RateLimitDecision:
        """Return whether ``identity`` may proceed, recording the attempt if so."""
        if self._store is None or not identity:
            return RateLimitDecision(allowed=True)

        key = self._key(identity)
        try:
            if await self._store.get(key):
                return RateLimitDecision(allowed=False, retry_after_seconds=self.cooldown_seconds)
            await self._store.put(key, to_iso(self._clock()), self.cooldown_seconds)
        except StoreError as exc:
            logger.warning("Rate limiter store unavailable, allowing request: %s", exc)
            return RateLimitDecision(allowed=True)
        return RateLimitDecision(allowed=True)

    async def enforce(self, identity: str, message: str | None = None) -> None:
        """Raise ``RateLimitedError`` when ``identity`` is inside its cooldown."""
        decision = await self.check_and_mark(identity)
        if not decision.allowed:
            raise RateLimitedError(decision.retry_after_seconds, message)
