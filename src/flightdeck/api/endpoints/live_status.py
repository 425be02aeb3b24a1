"""Twitch live status endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from flightdeck.api.dependencies import get_twitch_client
from flightdeck.services.twitch import TwitchClient, TwitchError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/live-status", tags=["twitch"])

TwitchClientDep = Annotated[TwitchClient, Depends(get_twitch_client)]


@router.get("")
async def get_live_status(client: TwitchClientDep) -> dict[str, object]:
    """Report whether the channel is live.

    Failures still answer 200 with ``ok: false`` so the page can show the
    status as unavailable.
    """
    try:
        live = await client.is_live()
    except TwitchError as exc:
        logger.warning("Live status unavailable: %s", exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "live": live}
