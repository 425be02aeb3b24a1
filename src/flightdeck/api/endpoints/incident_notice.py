"""Incident notice endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends

from flightdeck.api.dependencies import (
    get_incident_notice_service,
    get_incident_notifier,
    require_admin,
)
from flightdeck.schemas.incident_notice import (
    IncidentNoticeResponse,
    IncidentNoticeSaved,
    IncidentNoticeUpdate,
)
from flightdeck.services.incident_notice import IncidentNoticeService, NoticeTransition
from flightdeck.services.notifications import IncidentNotifier

router = APIRouter(prefix="/incident-notice", tags=["incident-notice"])

NoticeServiceDep = Annotated[IncidentNoticeService, Depends(get_incident_notice_service)]
NotifierDep = Annotated[IncidentNotifier, Depends(get_incident_notifier)]


@router.get("", response_model=IncidentNoticeResponse)
async def get_incident_notice(service: NoticeServiceDep) -> IncidentNoticeResponse:
    """Return the current incident notice. Public and unauthenticated."""
    notice = await service.get()
    return IncidentNoticeResponse.model_validate(notice.to_dict())


@router.put(
    "",
    response_model=IncidentNoticeSaved,
    dependencies=[Depends(require_admin("Incident Notice Admin"))],
)
async def update_incident_notice(
    payload: IncidentNoticeUpdate,
    service: NoticeServiceDep,
    notifier: NotifierDep,
    background_tasks: BackgroundTasks,
) -> IncidentNoticeSaved:
    """Replace the incident notice and alert subscribers when it visibly changed.

    Alerts run after the response is sent and never affect its outcome.
    """
    update = await service.set(
        enabled=payload.enabled,
        title=payload.title,
        message=payload.message,
    )
    if update.transition is not NoticeTransition.NOOP:
        background_tasks.add_task(notifier.notify, update)
    return IncidentNoticeSaved.model_validate({"ok": True, **update.notice.to_dict()})
