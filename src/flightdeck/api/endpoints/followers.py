"""Twitch follower count endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from flightdeck.api.dependencies import get_twitch_client
from flightdeck.services.twitch import TwitchClient, TwitchError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/followers", tags=["twitch"])

TwitchClientDep = Annotated[TwitchClient, Depends(get_twitch_client)]


@router.get("")
async def get_follower_count(client: TwitchClientDep) -> dict[str, object]:
    """Report the channel's follower total, or ``ok: false`` when unavailable."""
    try:
        count = await client.follower_count()
    except TwitchError as exc:
        logger.warning("Follower count unavailable: %s", exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "followerCount": count}
