"""Weekly stream schedule stored as a JSON array."""

from __future__ import annotations

import logging
import re
from typing import Any, cast

from flightdeck.core.errors import NotConfiguredError, StoreError, ValidationError
from flightdeck.services.store import KeyValueStore, get_json, put_json

logger = logging.getLogger(__name__)

SCHEDULE_KEY = "schedule_v1"
MIN_ITEMS = 1
MAX_ITEMS = 14
SCHEDULE_STATUSES = ("none", "scheduled", "completed", "cancelled", "delayed")
OPTIONAL_STRING_FIELDS = (
    "zuluTime",
    "originalZuluTime",
    "timeText",
    "streamTitle",
    "vodUrl",
    "gameLogo",
)
_DATE_KEY_PATTERN = re.compile(r"^\d{1,2}-\d{1,2}$")


def _problem(reason: str, *, index: int | None = None, field: str | None = None) -> dict[str, Any]:
    details: dict[str, Any] = {"ok": False, "reason": reason}
    if index is not None:
        details["index"] = index
    if field is not None:
        details["field"] = field
    return details


def find_schedule_problem(value: object) -> dict[str, Any] | None:
    """Return a description of the first problem in ``value`` or None if it is valid."""
    if not isinstance(value, list):
        return _problem("Body is not an array.")
    if not MIN_ITEMS <= len(value) <= MAX_ITEMS:
        return _problem(f"Array length must be between {MIN_ITEMS} and {MAX_ITEMS}.")

    for index, item in enumerate(value):
        if not isinstance(item, dict):
            return _problem("Item is not an object.", index=index)

        date_key = item.get("dateKey")
        if not isinstance(date_key, str) or not _DATE_KEY_PATTERN.match(date_key):
            return _problem(
                "dateKey must look like M-D (e.g. 1-24).", index=index, field="dateKey"
            )
        for field in ("dayName", "dateText"):
            if not isinstance(item.get(field), str):
                return _problem(f"{field} must be a string.", index=index, field=field)

        status = item.get("status")
        if not isinstance(status, str):
            return _problem("status must be a string.", index=index, field="status")
        if status.lower() not in SCHEDULE_STATUSES:
            return _problem(
                f"Unsupported status: {status.lower()}", index=index, field="status"
            )

        for field in OPTIONAL_STRING_FIELDS:
            optional = item.get(field)
            if optional is not None and not isinstance(optional, str):
                return _problem(f"{field} must be a string or null.", index=index, field=field)
    return None


class ScheduleService:
    """Reads and replaces the stored schedule."""

    def __init__(self, store: KeyValueStore | None) -> None:
        self._store = store

    async def get(self) -> list[Any]:
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")
        try:
            stored = await get_json(self._store, SCHEDULE_KEY)
        except StoreError as exc:
            logger.warning("Schedule unavailable, serving empty list: %s", exc)
            return []
        return stored if isinstance(stored, list) else []

    async def replace(self, items: object) -> list[Any]:
        if self._store is None:
            raise NotConfiguredError("Missing key-value store configuration.")
        problem = find_schedule_problem(items)
        if problem is not None:
            raise ValidationError(
                "Schedule must be a valid array of schedule items.",
                extra={"details": problem},
            )
        schedule = cast("list[Any]", items)
        try:
            await put_json(self._store, SCHEDULE_KEY, schedule)
        except StoreError as exc:
            raise NotConfiguredError("Could not save schedule.") from exc
        logger.info("Schedule replaced with %d items", len(schedule))
        return schedule
