"""Stream schedule endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from flightdeck.api.dependencies import get_schedule_service, require_admin
from flightdeck.services.schedule import ScheduleService

router = APIRouter(prefix="/schedule", tags=["schedule"])

ScheduleServiceDep = Annotated[ScheduleService, Depends(get_schedule_service)]
require_schedule_admin = require_admin("Schedule Admin")


@router.get("")
async def get_schedule(service: ScheduleServiceDep) -> list[Any]:
    """Return the stored schedule, or an empty list."""
    return await service.get()


@router.put("", dependencies=[Depends(require_schedule_admin)])
async def replace_schedule(
    items: Annotated[Any, Body()],
    service: ScheduleServiceDep,
) -> dict[str, bool]:
    """Replace the whole schedule with 1-14 validated items."""
    await service.replace(items)
    return {"ok": True}


@router.get("/auth", dependencies=[Depends(require_schedule_admin)])
async def verify_schedule_auth() -> dict[str, bool]:
    """Let the admin UI check its credentials before editing."""
    return {"ok": True}
