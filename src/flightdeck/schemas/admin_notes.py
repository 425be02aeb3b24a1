"""Admin notes Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class AdminNotesUpdate(BaseModel):
    notes: str = Field(default="", description="Free-form operator notes")


class AdminNotesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    notes: str
    updated_at_utc: str | None = Field(default=None, alias="updatedAtUtc")


class AdminNotesSaved(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    updated_at_utc: str | None = Field(default=None, alias="updatedAtUtc")
