"""Public site mode (live vs. maintenance)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from flightdeck.core.errors import NotConfiguredError, StoreError, ValidationError
from flightdeck.services.store import KeyValueStore, get_json, put_json
from flightdeck.utils.time import Clock, to_iso, utcnow

logger = logging.getLogger(__name__)

SITE_MODE_KEY = "site_mode_v1"
SITE_MODES = ("live", "maintenance")
DEFAULT_SITE_MODE = "live"


@dataclass(frozen=True)
class SiteMode:
    mode: str = DEFAULT_SITE_MODE
    updated_at_utc: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode, "updatedAtUtc": self.updated_at_utc}


def _normalize_mode(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    mode = value.strip().lower()
    return mode if mode in SITE_MODES else None


class SiteModeService:
    """Reads and writes the site mode record."""

    def __init__(self, store: KeyValueStore | None, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utcnow

    async def get(self) -> SiteMode:
        if self._store is None:
            return SiteMode()
        try:
            stored = await get_json(self._store, SITE_MODE_KEY)
        except StoreError as exc:
            logger.warning("Site mode unavailable, serving default: %s", exc)
            return SiteMode()
        if not isinstance(stored, dict):
            return SiteMode()
        updated = stored.get("updatedAtUtc")
        return SiteMode(
            mode=_normalize_mode(stored.get("mode")) or DEFAULT_SITE_MODE,
            updated_at_utc=updated.strip() or None if isinstance(updated, str) else None,
        )

    async def set(self, mode: object) -> SiteMode:
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")
        clean_mode = _normalize_mode(mode)
        if clean_mode is None:
            raise ValidationError('mode must be "live" or "maintenance".')

        site_mode = SiteMode(mode=clean_mode, updated_at_utc=to_iso(self._clock()))
        try:
            await put_json(self._store, SITE_MODE_KEY, site_mode.to_dict())
        except StoreError as exc:
            raise NotConfiguredError("Could not save site mode.") from exc
        logger.info("Site mode set to %s", clean_mode)
        return site_mode
