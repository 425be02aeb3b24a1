# tests/conftest.py
from __future__ import annotations

import base64
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from flightdeck.api import dependencies as deps
from flightdeck.core.settings import Settings
from flightdeck.main import app as fastapi_app
from flightdeck.services.store import MemoryStore

ADMIN_USERNAME = "joel"
ADMIN_PASSWORD = "correct-horse-battery"
ALERT_EMAIL = "ops@example.com"


class FakeClock:
    """Controllable clock returning timezone-aware UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingEmailSender:
    """Email sender double that records every message."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent: list[dict[str, str]] = []

    async def send(self, to: str, subject: str, text: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "text": text})
        return self.succeed


class RecordingWebhook:
    """Webhook double that records every payload."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.payloads: list[dict[str, Any]] = []

    async def post(self, payload: dict[str, Any]) -> bool:
        self.payloads.append(payload)
        return self.succeed


def basic_auth(username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture()
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture()
def incident_webhook() -> RecordingWebhook:
    return RecordingWebhook()


@pytest.fixture()
def suggestions_webhook() -> RecordingWebhook:
    return RecordingWebhook()


@pytest.fixture()
def test_settings() -> Settings:
    """Settings with operator credentials and a small lockout threshold."""
    return Settings(
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        AUTH_MAX_ATTEMPTS=3,
        AUTH_FAILURE_WINDOW_SECONDS=60,
        DATA_REQUEST_COOLDOWN_SECONDS=120,
        SUGGESTION_COOLDOWN_SECONDS=30,
        INCIDENT_ALERT_EMAIL=ALERT_EMAIL,
        PUBLIC_API_URL="https://api.example.test",
        PUBLIC_SITE_URL="https://site.example.test",
        TURNSTILE_SECRET_KEY=None,
    )


@pytest.fixture()
def app(
    test_settings: Settings,
    store: MemoryStore,
    clock: FakeClock,
    email_sender: RecordingEmailSender,
    incident_webhook: RecordingWebhook,
    suggestions_webhook: RecordingWebhook,
) -> Iterator[FastAPI]:
    overrides = {
        deps.get_settings: lambda: test_settings,
        deps.get_store: lambda: store,
        deps.get_clock: lambda: clock,
        deps.get_email_sender: lambda: email_sender,
        deps.get_incident_webhook: lambda: incident_webhook,
        deps.get_suggestions_webhook: lambda: suggestions_webhook,
    }
    fastapi_app.dependency_overrides.update(overrides)
    try:
        yield fastapi_app
    finally:
        for dependency in overrides:
            fastapi_app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
