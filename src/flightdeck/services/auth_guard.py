"""Operator credential checks with a failed-attempt lockout."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from flightdeck.core.errors import (
    NotConfiguredError,
    RateLimitedError,
    StoreError,
    UnauthorizedError,
)
from flightdeck.core.security import hash_value, safe_equal
from flightdeck.services.store import KeyValueStore, get_json, put_json
from flightdeck.utils.time import Clock, parse_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 600
DEFAULT_MAX_ATTEMPTS = 12
LOCKOUT_MESSAGE = "Too many failed attempts. Please wait before trying again."


@dataclass(frozen=True)
class AuthConfig:
    """Immutable configuration for the auth guard."""

    username: str | None
    password: str | None
    window_seconds: int = DEFAULT_WINDOW_SECONDS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class FailureStatus:
    """State of an identity's failure counter after recording an attempt."""

    blocked: bool
    attempts: int
    window_seconds: int
    retry_after_seconds: int = 0


class AuthGuard:
    """Validates Basic credentials and locks out identities that keep failing."""

    def __init__(
        self,
        config: AuthConfig,
        store: KeyValueStore | None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self._store = store
        self._clock = clock or utcnow

    def _key(self, identity: str) -> str:
        return f"authfail:{hash_value(identity)}"

    def credentials_match(self, credentials: tuple[str, str] | None) -> bool:
        """Return True if ``credentials`` equal the configured operator credentials."""
        if credentials is None:
            return False
        username, password = credentials
        user_ok = safe_equal(username, self.config.username or "")
        pass_ok = safe_equal(password, self.config.password or "")
        return user_ok and pass_ok

    async def _load_counter(self, identity: str) -> dict[str, Any] | None:
        if self._store is None:
            return None
        try:
            counter = await get_json(self._store, self._key(identity))
        except StoreError as exc:
            logger.warning("Auth failure counter unavailable: %s", exc)
            return None
        return counter if isinstance(counter, dict) else None

    def _remaining_window(self, counter: dict[str, Any]) -> int:
        updated_at = parse_iso(counter.get("updatedAtUtc"))
        if updated_at is None:
            return self.config.window_seconds
        elapsed = (self._clock() - updated_at).total_seconds()
        return max(1, int(self.config.window_seconds - elapsed))

    async def blocked_for(self, identity: str) -> int:
        """Return the seconds ``identity`` remains locked out, or 0 if it is not."""
        counter = await self._load_counter(identity)
        if not counter:
            return 0
        attempts = int(counter.get("attempts") or 0)
        if attempts < self.config.max_attempts:
            return 0
        return self._remaining_window(counter)

    async def record_failure(self, identity: str) -> FailureStatus:
        """Increment the failure counter for ``identity``."""
        counter = await self._load_counter(identity) or {}
        attempts = int(counter.get("attempts") or 0) + 1
        if self._store is not None:
            try:
                await put_json(
                    self._store,
                    self._key(identity),
                    {"attempts": attempts, "updatedAtUtc": to_iso(self._clock())},
                    self.config.window_seconds,
                )
            except StoreError as exc:
                logger.warning("Could not record auth failure: %s", exc)
        blocked = attempts >= self.config.max_attempts
        return FailureStatus(
            blocked=blocked,
            attempts=attempts,
            window_seconds=self.config.window_seconds,
            retry_after_seconds=self.config.window_seconds if blocked else 0,
        )

    async def authorize(
        self,
        identity: str,
        credentials: tuple[str, str] | None,
        *,
        realm: str = "Admin",
    ) -> None:
        """Raise unless ``credentials`` are valid and ``identity`` is not locked out.

        Raises:
            NotConfiguredError: operator credentials are not set.
            RateLimitedError: the identity is (or just became) locked out.
            UnauthorizedError: the credentials are missing or wrong.
        """
        if not self.config.configured:
            raise NotConfiguredError("Missing ADMIN_USERNAME/ADMIN_PASSWORD secrets.")

        remaining = await self.blocked_for(identity)
        if remaining:
            raise RateLimitedError(remaining, LOCKOUT_MESSAGE)

        if self.credentials_match(credentials):
            return

        failure = await self.record_failure(identity)
        if failure.blocked:
            logger.warning("Locking out identity after %d failed attempts", failure.attempts)
            raise RateLimitedError(failure.retry_after_seconds, LOCKOUT_MESSAGE)
        raise UnauthorizedError(realm=realm)
