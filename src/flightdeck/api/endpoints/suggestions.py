"""Flight suggestion endpoint."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from flightdeck.api.dependencies import ClientIdentityDep, get_suggestion_service
from flightdeck.services.suggestions import SuggestionService

router = APIRouter(prefix="/suggestions", tags=["suggestions"])

SuggestionServiceDep = Annotated[SuggestionService, Depends(get_suggestion_service)]


@router.post("")
async def submit_suggestion(
    payload: Annotated[dict[str, Any], Body()],
    service: SuggestionServiceDep,
    identity: ClientIdentityDep,
) -> dict[str, bool]:
    """Forward a viewer's flight suggestion to Discord."""
    await service.submit(payload, identity)
    return {"ok": True}
