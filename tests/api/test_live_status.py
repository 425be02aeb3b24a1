"""Endpoint tests for the Twitch live status and follower count."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from flightdeck.api import dependencies as deps
from flightdeck.services.twitch import TwitchClient, TwitchConfig, TwitchError


@pytest.fixture()
def twitch(app, mocker) -> Iterator:
    fake = mocker.AsyncMock(spec=TwitchClient)
    app.dependency_overrides[deps.get_twitch_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(deps.get_twitch_client, None)


def test_reports_live_flag(client, twitch) -> None:
    twitch.is_live.return_value = True

    response = client.get("/api/live-status")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "live": True}


def test_upstream_error_is_reported_softly(client, twitch) -> None:
    twitch.is_live.side_effect = TwitchError("Streams request failed with status 503")

    response = client.get("/api/live-status")

    assert response.status_code == 200
    assert response.json() == {"ok": False, "error": "Streams request failed with status 503"}


def test_unconfigured_twitch_is_reported_softly(client) -> None:
    response = client.get("/api/live-status")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert "TWITCH_CLIENT_ID" in body["error"]


def test_reports_follower_count(client, twitch) -> None:
    twitch.follower_count.return_value = 1234

    response = client.get("/api/followers")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "followerCount": 1234}


def test_follower_failure_is_reported_softly(client, twitch) -> None:
    twitch.follower_count.side_effect = TwitchError("Followers response was not a JSON object")

    response = client.get("/api/followers")

    assert response.status_code == 200
    assert response.json() == {"ok": False, "error": "Followers response was not a JSON object"}


def test_malformed_twitch_answer_is_reported_softly(app, client, store) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "id.twitch.tv":
            return httpx.Response(200, json={"access_token": "app-token", "expires_in": 3600})
        return httpx.Response(200, json=[])

    config = TwitchConfig(client_id="cid", client_secret="secret", channel_login="flyingwithjoel")
    real = TwitchClient(config, store, transport=httpx.MockTransport(handler))
    app.dependency_overrides[deps.get_twitch_client] = lambda: real
    try:
        live = client.get("/api/live-status")
        followers = client.get("/api/followers")
    finally:
        app.dependency_overrides.pop(deps.get_twitch_client, None)

    assert live.status_code == followers.status_code == 200
    assert live.json()["ok"] is False
    assert followers.json()["ok"] is False
