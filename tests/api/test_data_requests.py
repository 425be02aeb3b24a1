"""Endpoint tests for the data request flow."""

import asyncio
import json
from urllib.parse import parse_qs, urlparse

from fastapi import status

from flightdeck.api import dependencies as deps
from flightdeck.services.data_requests import DATA_REQUEST_KEY_PREFIX


def _confirm_path(email_sender) -> str:
    link = next(
        line for line in email_sender.sent[-1]["text"].splitlines() if "/confirm?token=" in line
    )
    parsed = urlparse(link)
    assert parsed.netloc == "api.example.test"
    return f"{parsed.path}?{parsed.query}"


def test_submit_then_confirm_access_request(client, store, email_sender) -> None:
    response = client.post(
        "/api/data-requests", json={"email": "user@example.com", "action": "access"}
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["ok"] is True
    assert "inbox" in body["message"]
    assert response.headers["Cache-Control"] == "no-store"

    path = _confirm_path(email_sender)
    page = client.get(path)

    assert page.status_code == status.HTTP_200_OK
    assert page.headers["content-type"].startswith("text/html")
    assert "Request confirmed" in page.text
    token = parse_qs(urlparse(path).query)["token"][0]
    record = json.loads(asyncio.run(store.get(f"{DATA_REQUEST_KEY_PREFIX}{token}")))
    assert record["confirmedAtUtc"] is not None
    assert record["processedAtUtc"] is not None
    assert "email" not in record


def test_revisiting_link_reports_already_processed(client, email_sender) -> None:
    client.post("/api/data-requests", json={"email": "user@example.com", "action": "delete"})
    path = _confirm_path(email_sender)

    first = client.get(path)
    sent = len(email_sender.sent)
    second = client.get(path)

    assert first.status_code == second.status_code == status.HTTP_200_OK
    assert "Already processed" in second.text
    assert len(email_sender.sent) == sent


def test_bogus_action_is_rejected(client, store) -> None:
    response = client.post(
        "/api/data-requests", json={"email": "user@example.com", "action": "bogus"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "action" in response.json()["error"]
    assert store.keys(DATA_REQUEST_KEY_PREFIX) == []


def test_missing_field_is_rejected(client) -> None:
    response = client.post("/api/data-requests", json={"action": "access"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"].startswith("email:")


def test_second_submission_is_rate_limited(client, clock) -> None:
    payload = {"email": "user@example.com", "action": "access"}
    assert client.post("/api/data-requests", json=payload).status_code == 200

    blocked = client.post("/api/data-requests", json=payload)
    assert blocked.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert blocked.headers["Retry-After"] == "120"
    assert blocked.json()["retryAfterSeconds"] == 120

    clock.advance(121)
    assert client.post("/api/data-requests", json=payload).status_code == 200


def test_confirmation_email_failure_is_reported(client, email_sender) -> None:
    email_sender.succeed = False

    response = client.post(
        "/api/data-requests", json={"email": "user@example.com", "action": "access"}
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert "confirmation email" in response.json()["error"]


def test_confirm_pages_for_bad_links(client) -> None:
    missing = client.get("/api/data-requests/confirm")
    unknown = client.get("/api/data-requests/confirm", params={"token": "nope"})

    assert missing.status_code == status.HTTP_400_BAD_REQUEST
    assert "Invalid request" in missing.text
    assert unknown.status_code == status.HTTP_404_NOT_FOUND
    assert "expired" in unknown.text


def test_confirm_page_when_result_email_fails(client, email_sender) -> None:
    client.post("/api/data-requests", json={"email": "user@example.com", "action": "access"})
    path = _confirm_path(email_sender)
    email_sender.succeed = False

    failed = client.get(path)
    assert failed.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR

    email_sender.succeed = True
    assert "Request confirmed" in client.get(path).text


def test_processed_link_page_without_email_configured(app, client, email_sender) -> None:
    client.post("/api/data-requests", json={"email": "user@example.com", "action": "access"})
    path = _confirm_path(email_sender)
    assert client.get(path).status_code == status.HTTP_200_OK

    app.dependency_overrides[deps.get_email_sender] = lambda: None
    revisit = client.get(path)

    assert revisit.status_code == status.HTTP_200_OK
    assert "Already processed" in revisit.text
