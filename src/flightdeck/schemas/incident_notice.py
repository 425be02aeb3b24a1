"""Incident notice Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class IncidentNoticeUpdate(BaseModel):
    """Schema for replacing the incident notice."""

    enabled: bool = Field(default=False, description="Show the banner on the public site")
    title: str | None = Field(default=None, description="Banner heading (max 80 characters)")
    message: str | None = Field(default=None, description="Banner text (max 220 characters)")


class IncidentNoticeResponse(BaseModel):
    """Schema for the public incident notice."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool
    title: str | None
    message: str | None
    updated_at_utc: str | None = Field(default=None, alias="updatedAtUtc")


class IncidentNoticeSaved(IncidentNoticeResponse):
    """Schema returned after a successful update."""

    ok: bool = True
