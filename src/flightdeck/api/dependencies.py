"""Shared API dependencies for storage, collaborators and operator auth.

Every provider here is a plain function so tests can swap it through
``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request

from flightdeck.core.security import client_identity, parse_basic_auth
from flightdeck.core.settings import Settings, settings
from flightdeck.services.admin_notes import AdminNotesService
from flightdeck.services.auth_guard import AuthConfig, AuthGuard
from flightdeck.services.data_requests import DataRequestService
from flightdeck.services.email import EmailConfig, EmailSender, HttpEmailSender
from flightdeck.services.incident_notice import IncidentNoticeService
from flightdeck.services.notifications import IncidentNotifier
from flightdeck.services.rate_limit import RateLimiter
from flightdeck.services.schedule import ScheduleService
from flightdeck.services.site_mode import SiteModeService
from flightdeck.services.store import KeyValueStore, build_store
from flightdeck.services.suggestions import SuggestionService, TurnstileVerifier
from flightdeck.services.twitch import TwitchClient, TwitchConfig
from flightdeck.services.webhook import DiscordWebhook, WebhookNotifier
from flightdeck.utils.time import Clock, utcnow


class _StoreSingleton:
    """Process-wide key-value store built lazily from settings."""

    _instance: KeyValueStore | None = None
    _built: bool = False

    @classmethod
    def get_instance(cls) -> KeyValueStore | None:
        if not cls._built:
            cls._instance = build_store(settings.kv_url)
            cls._built = True
        return cls._instance

    @classmethod
    async def close(cls) -> None:
        if cls._instance is not None:
            await cls._instance.close()
        cls._instance = None
        cls._built = False


def get_settings() -> Settings:
    return settings


def get_store() -> KeyValueStore | None:
    return _StoreSingleton.get_instance()


async def close_store() -> None:
    """Release the shared store connection."""
    await _StoreSingleton.close()


def get_clock() -> Clock:
    return utcnow


SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[KeyValueStore | None, Depends(get_store)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_client_identity(request: Request) -> str:
    return client_identity(request)


ClientIdentityDep = Annotated[str, Depends(get_client_identity)]


def get_email_sender(config: SettingsDep) -> EmailSender | None:
    """Return the outbound email sender, or None when it is not configured."""
    if not config.email_configured:
        return None
    return HttpEmailSender(
        EmailConfig(
            api_url=config.email_api_url,
            api_key=config.email_api_key or "",
            sender=config.email_from or "",
            timeout_seconds=config.email_timeout_seconds,
        )
    )


def get_incident_webhook(config: SettingsDep) -> WebhookNotifier | None:
    if not config.incident_webhook_url:
        return None
    return DiscordWebhook(
        config.incident_webhook_url,
        timeout_seconds=config.webhook_timeout_seconds,
    )


def get_suggestions_webhook(config: SettingsDep) -> WebhookNotifier | None:
    if not config.suggestions_webhook_url:
        return None
    return DiscordWebhook(
        config.suggestions_webhook_url,
        timeout_seconds=config.webhook_timeout_seconds,
    )


EmailSenderDep = Annotated[EmailSender | None, Depends(get_email_sender)]


def get_auth_guard(config: SettingsDep, store: StoreDep, clock: ClockDep) -> AuthGuard:
    return AuthGuard(
        AuthConfig(
            username=config.admin_username,
            password=config.admin_password,
            window_seconds=config.auth_failure_window_seconds,
            max_attempts=config.auth_max_attempts,
        ),
        store,
        clock=clock,
    )


AuthGuardDep = Annotated[AuthGuard, Depends(get_auth_guard)]


def require_admin(realm: str) -> Callable[..., Awaitable[None]]:
    """Build a dependency that enforces operator Basic credentials for ``realm``."""

    async def dependency(
        request: Request,
        guard: AuthGuardDep,
        identity: ClientIdentityDep,
    ) -> None:
        credentials = parse_basic_auth(request.headers.get("authorization"))
        await guard.authorize(identity, credentials, realm=realm)

    return dependency


def get_incident_notice_service(store: StoreDep, clock: ClockDep) -> IncidentNoticeService:
    return IncidentNoticeService(store, clock=clock)


def get_incident_notifier(
    config: SettingsDep,
    webhook: Annotated[WebhookNotifier | None, Depends(get_incident_webhook)],
    email_sender: EmailSenderDep,
) -> IncidentNotifier:
    return IncidentNotifier(
        webhook=webhook,
        email_sender=email_sender,
        alert_email=config.incident_alert_email,
        status_page_url=config.status_page_url,
    )


def get_data_request_service(
    config: SettingsDep,
    store: StoreDep,
    email_sender: EmailSenderDep,
    clock: ClockDep,
) -> DataRequestService:
    limiter = RateLimiter(
        store,
        namespace="rl:dsar",
        cooldown_seconds=config.data_request_cooldown_seconds,
        clock=clock,
    )
    return DataRequestService(
        store,
        email_sender,
        limiter,
        confirm_url=config.data_request_confirm_url,
        clock=clock,
    )


def get_site_mode_service(store: StoreDep, clock: ClockDep) -> SiteModeService:
    return SiteModeService(store, clock=clock)


def get_schedule_service(store: StoreDep) -> ScheduleService:
    return ScheduleService(store)


def get_admin_notes_service(store: StoreDep, clock: ClockDep) -> AdminNotesService:
    return AdminNotesService(store, clock=clock)


def get_suggestion_service(
    config: SettingsDep,
    store: StoreDep,
    webhook: Annotated[WebhookNotifier | None, Depends(get_suggestions_webhook)],
    clock: ClockDep,
) -> SuggestionService:
    limiter = RateLimiter(
        store,
        namespace="rl:suggest",
        cooldown_seconds=config.suggestion_cooldown_seconds,
        clock=clock,
    )
    turnstile = (
        TurnstileVerifier(config.turnstile_secret_key) if config.turnstile_secret_key else None
    )
    return SuggestionService(webhook, limiter, turnstile=turnstile, clock=clock)


def get_twitch_client(config: SettingsDep, store: StoreDep) -> TwitchClient:
    return TwitchClient(
        TwitchConfig(
            client_id=config.twitch_client_id,
            client_secret=config.twitch_client_secret,
            channel_login=config.twitch_channel_login,
            live_cache_seconds=config.live_status_cache_seconds,
            follower_cache_seconds=config.follower_cache_seconds,
        ),
        store,
    )
