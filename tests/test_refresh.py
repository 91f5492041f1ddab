import base64
from urllib.parse import parse_qs

import httpx

from spotify.client import TOKEN_URL


def test_refresh_returns_only_access_token(client, fake_spotify) -> None:
    fake_spotify.on("POST", TOKEN_URL, httpx.Response(200, json={
        "access_token": "C",
        "token_type": "Bearer",
        "expires_in": 3600,
        "scope": "user-read-private user-read-email",
    }))

    response = client.get("/refresh_token?refresh_token=R")

    assert response.status_code == 200
    assert response.content == b'{"access_token":"C"}'


def test_refresh_request_uses_basic_auth(client, fake_spotify) -> None:
    fake_spotify.on("POST", TOKEN_URL, httpx.Response(200, json={"access_token": "C"}))

    client.get("/refresh_token?refresh_token=R")

    request = fake_spotify.calls_to(TOKEN_URL)[0]
    expected = base64.b64encode(b"client-id:client-secret").decode()
    assert request.headers["authorization"] == f"Basic {expected}"
    assert parse_qs(request.content.decode()) == {
        "grant_type": ["refresh_token"],
        "refresh_token": ["R"],
    }


def test_refresh_rejected_by_spotify(client, fake_spotify) -> None:
    fake_spotify.on("POST", TOKEN_URL, httpx.Response(400, json={"error": "invalid_grant"}))

    response = client.get("/refresh_token?refresh_token=R")

    assert response.status_code == 400
    assert response.json() == {"error": "invalid_token"}


def test_refresh_spotify_unreachable(client, fake_spotify) -> None:
    fake_spotify.on("POST", TOKEN_URL, httpx.ConnectTimeout("timed out"))

    response = client.get("/refresh_token?refresh_token=R")

    assert response.status_code == 502
    assert response.json() == {"error": "upstream_unavailable"}


def test_refresh_without_token(client, fake_spotify) -> None:
    response = client.get("/refresh_token")

    assert response.status_code == 400
    assert response.json() == {"error": "invalid_request"}
    assert fake_spotify.requests == []
