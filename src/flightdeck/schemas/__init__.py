"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin_notes import AdminNotesResponse, AdminNotesSaved, AdminNotesUpdate
from .data_request import DataRequestAccepted, DataRequestCreate
from .incident_notice import IncidentNoticeResponse, IncidentNoticeSaved, IncidentNoticeUpdate
from .site_mode import SiteModeResponse, SiteModeSaved, SiteModeUpdate

__all__ = [
    "AdminNotesResponse", "AdminNotesSaved", "AdminNotesUpdate",
    "DataRequestAccepted", "DataRequestCreate",
    "IncidentNoticeResponse", "IncidentNoticeSaved", "IncidentNoticeUpdate",
    "SiteModeResponse", "SiteModeSaved", "SiteModeUpdate",
]
