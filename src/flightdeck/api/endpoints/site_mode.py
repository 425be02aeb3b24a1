"""Site mode endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from flightdeck.api.dependencies import get_site_mode_service, require_admin
from flightdeck.schemas.site_mode import SiteModeResponse, SiteModeSaved, SiteModeUpdate
from flightdeck.services.site_mode import SiteModeService

router = APIRouter(prefix="/site-mode", tags=["site-mode"])

SiteModeServiceDep = Annotated[SiteModeService, Depends(get_site_mode_service)]


@router.get("", response_model=SiteModeResponse)
async def get_site_mode(service: SiteModeServiceDep) -> SiteModeResponse:
    """Return whether the public site is live or in maintenance."""
    site_mode = await service.get()
    return SiteModeResponse.model_validate(site_mode.to_dict())


@router.put(
    "",
    response_model=SiteModeSaved,
    dependencies=[Depends(require_admin("Site Mode Admin"))],
)
async def update_site_mode(payload: SiteModeUpdate, service: SiteModeServiceDep) -> SiteModeSaved:
    site_mode = await service.set(payload.mode)
    return SiteModeSaved.model_validate({"ok": True, **site_mode.to_dict()})
