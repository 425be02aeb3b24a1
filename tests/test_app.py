"""Application-level behaviour: health, CORS and headers."""

from fastapi import status


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_api(client) -> None:
    body = client.get("/").json()
    assert body["docs"] == "/docs"


def test_preflight_from_allowed_origin_is_204(client) -> None:
    response = client.options(
        "/api/incident-notice",
        headers={
            "Origin": "https://flyingwithjoel.co.uk",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert response.headers["access-control-allow-origin"] == "https://flyingwithjoel.co.uk"
    allowed_headers = response.headers["access-control-allow-headers"].lower()
    assert "authorization" in allowed_headers
    assert response.content == b""


def test_preflight_from_unknown_origin_is_refused(client) -> None:
    response = client.options(
        "/api/incident-notice",
        headers={
            "Origin": "https://evil.example",
            "Access-Control-Request-Method": "PUT",
        },
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "access-control-allow-origin" not in response.headers


def test_simple_request_gets_cors_and_no_store(client) -> None:
    response = client.get("/api/site-mode", headers={"Origin": "https://www.flyingwithjoel.co.uk"})

    assert response.headers["access-control-allow-origin"] == "https://www.flyingwithjoel.co.uk"
    assert response.headers["cache-control"] == "no-store"
