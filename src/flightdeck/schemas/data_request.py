"""Data request Pydantic schemas."""

from pydantic import BaseModel, Field


class DataRequestCreate(BaseModel):
    """Schema for submitting an access or deletion request."""

    email: str = Field(..., description="Address the confirmation link is sent to")
    action: str = Field(..., description="Either 'access' or 'delete'")


class DataRequestAccepted(BaseModel):
    """Schema acknowledging a submission."""

    ok: bool = True
    message: str
