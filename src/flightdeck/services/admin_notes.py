"""Private operator notes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flightdeck.core.errors import NotConfiguredError, StoreError, ValidationError
from flightdeck.services.store import KeyValueStore, get_json, put_json
from flightdeck.utils.time import Clock, to_iso, utcnow

logger = logging.getLogger(__name__)

ADMIN_NOTES_KEY = "admin_notes_v1"
NOTES_MAX_LENGTH = 20_000


@dataclass(frozen=True)
class AdminNotes:
    notes: str = ""
    updated_at_utc: str | None = None


class AdminNotesService:
    def __init__(self, store: KeyValueStore | None, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utcnow

    def _require_store(self) -> KeyValueStore:
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")
        return self._store

    async def get(self) -> AdminNotes:
        store = self._require_store()
        try:
            stored = await get_json(store, ADMIN_NOTES_KEY)
        except StoreError as exc:
            raise NotConfiguredError("Could not load notes.") from exc
        if not isinstance(stored, dict):
            return AdminNotes()
        notes = stored.get("notes")
        updated = stored.get("updatedAtUtc")
        return AdminNotes(
            notes=notes if isinstance(notes, str) else "",
            updated_at_utc=updated.strip() or None if isinstance(updated, str) else None,
        )

    async def set(self, notes: object) -> AdminNotes:
        store = self._require_store()
        clean_notes = notes if isinstance(notes, str) else ""
        if len(clean_notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"notes must be 0-{NOTES_MAX_LENGTH} characters.")
        saved = AdminNotes(notes=clean_notes, updated_at_utc=to_iso(self._clock()))
        try:
            await put_json(
                store,
                ADMIN_NOTES_KEY,
                {"notes": saved.notes, "updatedAtUtc": saved.updated_at_utc},
            )
        except StoreError as exc:
            raise NotConfiguredError("Could not save notes.") from exc
        return saved
