"""Site mode Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class SiteModeUpdate(BaseModel):
    mode: str = Field(..., description="'live' or 'maintenance'")


class SiteModeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mode: str
    updated_at_utc: str | None = Field(default=None, alias="updatedAtUtc")


class SiteModeSaved(SiteModeResponse):
    ok: bool = True
