"""API endpoint modules."""

from .admin_notes import router as admin_notes_router
from .data_requests import router as data_requests_router
from .followers import router as followers_router
from .incident_notice import router as incident_notice_router
from .live_status import router as live_status_router
from .schedule import router as schedule_router
from .site_mode import router as site_mode_router
from .suggestions import router as suggestions_router

__all__ = [
    "admin_notes_router",
    "data_requests_router",
    "followers_router",
    "incident_notice_router",
    "live_status_router",
    "schedule_router",
    "site_mode_router",
    "suggestions_router",
]
