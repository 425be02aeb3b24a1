"""Public incident notice state and its change detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from flightdeck.core.errors import NotConfiguredError, StoreError, ValidationError
from flightdeck.services.store import KeyValueStore, get_json, put_json
from flightdeck.utils.time import Clock, to_iso, utcnow

logger = logging.getLogger(__name__)

INCIDENT_NOTICE_KEY = "incident_notice_v1"
TITLE_MAX_LENGTH = 80
MESSAGE_MAX_LENGTH = 220


@dataclass(frozen=True)
class IncidentNotice:
    """Banner shown on the public site while an incident is ongoing."""

    enabled: bool = False
    title: str | None = None
    message: str | None = None
    updated_at_utc: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "title": self.title,
            "message": self.message,
            "updatedAtUtc": self.updated_at_utc,
        }

    @classmethod
    def from_stored(cls, data: object) -> IncidentNotice:
        """Build a notice from stored JSON, falling back to the disabled default."""
        if not isinstance(data, dict):
            return cls()
        return cls(
            enabled=bool(data.get("enabled", False)),
            title=_clean_optional(data.get("title")),
            message=_clean_optional(data.get("message")),
            updated_at_utc=_clean_optional(data.get("updatedAtUtc")),
        )


class NoticeTransition(str, Enum):
    """How an update changed the publicly visible notice."""

    NOOP = "noop"
    ENABLED = "enabled"
    DISABLED = "disabled"
    UPDATED = "updated"


@dataclass(frozen=True)
class IncidentNoticeUpdate:
    """Result of persisting a notice."""

    notice: IncidentNotice
    previous: IncidentNotice
    transition: NoticeTransition


def _clean_optional(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def classify_transition(previous: IncidentNotice, current: IncidentNotice) -> NoticeTransition:
    """Classify the observable difference between two notices."""
    changed = (
        previous.enabled != current.enabled
        or previous.title != current.title
        or previous.message != current.message
    )
    if not changed:
        return NoticeTransition.NOOP
    if current.enabled and not previous.enabled:
        return NoticeTransition.ENABLED
    if previous.enabled and not current.enabled:
        return NoticeTransition.DISABLED
    return NoticeTransition.UPDATED


def validate_notice(enabled: bool, title: str | None, message: str | None) -> tuple[str, str]:
    """Return trimmed title and message or raise ``ValidationError``."""
    clean_title = (title or "").strip()
    clean_message = (message or "").strip()

    if len(clean_title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"title must be 0-{TITLE_MAX_LENGTH} characters.")
    if len(clean_message) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"message must be 0-{MESSAGE_MAX_LENGTH} characters.")
    if enabled and not clean_title:
        raise ValidationError("title is required when the notice is enabled.")
    if enabled and not clean_message:
        raise ValidationError("message is required when the notice is enabled.")
    return clean_title, clean_message


class IncidentNoticeService:
    """Reads and writes the single incident notice record."""

    def __init__(self, store: KeyValueStore | None, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utcnow

    async def get(self) -> IncidentNotice:
        """Return the current notice; never raises."""
        if self._store is None:
            return IncidentNotice()
        try:
            stored = await get_json(self._store, INCIDENT_NOTICE_KEY)
        except StoreError as exc:
            logger.warning("Incident notice unavailable, serving default: %s", exc)
            return IncidentNotice()
        return IncidentNotice.from_stored(stored)

    async def set(
        self,
        *,
        enabled: bool,
        title: str | None,
        message: str | None,
    ) -> IncidentNoticeUpdate:
        """Validate and persist a new notice, reporting how it changed."""
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")

        clean_title, clean_message = validate_notice(enabled, title, message)
        previous = await self.get()
        notice = IncidentNotice(
            enabled=enabled,
            title=clean_title or None,
            message=clean_message or None,
            updated_at_utc=to_iso(self._clock()),
        )
        transition = classify_transition(previous, notice)

        try:
            await put_json(self._store, INCIDENT_NOTICE_KEY, notice.to_dict())
        except StoreError as exc:
            raise NotConfiguredError("Could not save incident notice.") from exc

        logger.info("Incident notice saved (transition=%s)", transition.value)
        return IncidentNoticeUpdate(notice=notice, previous=previous, transition=transition)
