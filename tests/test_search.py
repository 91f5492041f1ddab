import httpx

SEARCH_URL = "https://api.spotify.com/v1/search"

UPSTREAM_BODY = b'{"tracks": {"href": "https://api.spotify.com/v1/search?query=foo", "items": []}}'


def test_search_without_terms(client, fake_spotify) -> None:
    response = client.get("/search?type=track&access_token=T")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text
    assert fake_spotify.requests == []


def test_search_with_empty_terms(client, fake_spotify) -> None:
    response = client.get("/search?terms=&type=track&access_token=T")

    assert response.status_code == 404
    assert fake_spotify.requests == []


def test_search_forwards_query(client, fake_spotify) -> None:
    fake_spotify.on("GET", SEARCH_URL, httpx.Response(
        200, content=UPSTREAM_BODY, headers={"content-type": "application/json; charset=utf-8"}
    ))

    response = client.get("/search?terms=foo&type=track&access_token=T")

    request = fake_spotify.calls_to(SEARCH_URL)[0]
    assert request.url.host == "api.spotify.com"
    assert request.url.path == "/v1/search"
    assert dict(request.url.params) == {"q": "foo", "type": "track"}
    assert request.headers["authorization"] == "Bearer T"

    assert response.status_code == 200
    assert response.content == UPSTREAM_BODY
    assert response.headers["content-type"].startswith("application/json")


def test_search_propagates_upstream_status(client, fake_spotify) -> None:
    body = b'{"error": {"status": 401, "message": "Invalid access token"}}'
    fake_spotify.on("GET", SEARCH_URL, httpx.Response(
        401, content=body, headers={"content-type": "application/json"}
    ))

    response = client.get("/search?terms=foo&type=track&access_token=bad")

    assert response.status_code == 401
    assert response.content == body


def test_search_without_type(client, fake_spotify) -> None:
    fake_spotify.on("GET", SEARCH_URL, httpx.Response(200, content=UPSTREAM_BODY))

    client.get("/search?terms=foo&access_token=T")

    request = fake_spotify.calls_to(SEARCH_URL)[0]
    assert dict(request.url.params) == {"q": "foo"}


def test_search_spotify_unreachable(client, fake_spotify) -> None:
    fake_spotify.on("GET", SEARCH_URL, httpx.ConnectError("connection refused"))

    response = client.get("/search?terms=foo&type=track&access_token=T")

    assert response.status_code == 502
    assert response.json() == {"error": "upstream_unavailable"}
