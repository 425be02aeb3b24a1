"""Endpoint tests for flight suggestions."""

from fastapi import status

from flightdeck.api import dependencies as deps

SUGGESTION = {
    "flightNumber": "EK2",
    "callsign": "EMIRATES 2",
    "aircraft": "A380",
    "departure": "OMDB",
    "arrival": "EGLL",
    "route": "DESDI UL425 NADUM",
    "flightRadarLink": "https://www.flightradar24.com/data/flights/ek2",
    "flightTime": "7h 30m",
    "flightLength": "Long haul",
    "name": "Alex",
    "twitchHandle": "alexflies",
}


def test_suggestion_is_forwarded(client, suggestions_webhook) -> None:
    response = client.post("/api/suggestions", json=SUGGESTION)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"ok": True}
    embed = suggestions_webhook.payloads[0]["embeds"][0]
    assert embed["description"] == "EK2 - OMDB to EGLL"


def test_missing_field(client, suggestions_webhook) -> None:
    response = client.post("/api/suggestions", json={**SUGGESTION, "route": ""})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Missing required field: route"}
    assert suggestions_webhook.payloads == []


def test_non_flightradar_link(client) -> None:
    response = client.post(
        "/api/suggestions", json={**SUGGESTION, "flightRadarLink": "https://example.com/x"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_rate_limited_per_client(client, clock) -> None:
    assert client.post("/api/suggestions", json=SUGGESTION).status_code == 200

    blocked = client.post("/api/suggestions", json=SUGGESTION)
    assert blocked.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert blocked.headers["Retry-After"] == "30"

    clock.advance(31)
    assert client.post("/api/suggestions", json=SUGGESTION).status_code == 200


def test_webhook_failure_is_502(client, suggestions_webhook) -> None:
    suggestions_webhook.succeed = False
    response = client.post("/api/suggestions", json=SUGGESTION)
    assert response.status_code == status.HTTP_502_BAD_GATEWAY


def test_unconfigured_webhook_is_500(app, client) -> None:
    app.dependency_overrides[deps.get_suggestions_webhook] = lambda: None
    response = client.post("/api/suggestions", json=SUGGESTION)
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
