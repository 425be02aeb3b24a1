"""Operator notes endpoints. Both reads and writes need credentials."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from flightdeck.api.dependencies import get_admin_notes_service, require_admin
from flightdeck.schemas.admin_notes import AdminNotesResponse, AdminNotesSaved, AdminNotesUpdate
from flightdeck.services.admin_notes import AdminNotesService

router = APIRouter(
    prefix="/admin-notes",
    tags=["admin"],
    dependencies=[Depends(require_admin("Admin Notes"))],
)

AdminNotesServiceDep = Annotated[AdminNotesService, Depends(get_admin_notes_service)]


@router.get("", response_model=AdminNotesResponse)
async def get_admin_notes(service: AdminNotesServiceDep) -> AdminNotesResponse:
    notes = await service.get()
    return AdminNotesResponse(ok=True, notes=notes.notes, updated_at_utc=notes.updated_at_utc)


@router.put("", response_model=AdminNotesSaved)
async def update_admin_notes(
    payload: AdminNotesUpdate,
    service: AdminNotesServiceDep,
) -> AdminNotesSaved:
    saved = await service.set(payload.notes)
    return AdminNotesSaved(ok=True, updated_at_utc=saved.updated_at_utc)
