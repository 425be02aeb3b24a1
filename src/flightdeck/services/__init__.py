"""Business logic services for the site backend."""

from .admin_notes import AdminNotesService
from .auth_guard import AuthConfig, AuthGuard
from .data_requests import DataRequestService
from .incident_notice import IncidentNoticeService
from .notifications import IncidentNotifier
from .rate_limit import RateLimiter
from .schedule import ScheduleService
from .site_mode import SiteModeService
from .store import KeyValueStore, MemoryStore, RedisStore
from .suggestions import SuggestionService
from .twitch import TwitchClient

__all__ = [
    "AdminNotesService",
    "AuthConfig",
    "AuthGuard",
    "DataRequestService",
    "IncidentNoticeService",
    "IncidentNotifier",
    "KeyValueStore",
    "MemoryStore",
    "RateLimiter",
    "RedisStore",
    "ScheduleService",
    "SiteModeService",
    "SuggestionService",
    "TwitchClient",
]
