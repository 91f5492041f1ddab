import httpx
import pytest
from fastapi.testclient import TestClient

from config import Config
from main import create_app

FRONTEND_URL = "https://frontend.example.com/callback"
CALLBACK_URL = "https://relay.example.com/callback"


class FakeSpotify:
    """Routes outbound requests to canned responses and records them."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], object] = {}

    def on(self, method: str, url: str, result) -> None:
        """Register a response, an exception to raise, or a callable(request)."""
        self.routes[(method, url)] = result

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if f"{r.url.scheme}://{r.url.host}{r.url.path}" == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, f"{request.url.scheme}://{request.url.host}{request.url.path}")
        result = self.routes.get(key)
        if result is None:
            return httpx.Response(404, json={"error": "not mocked"})
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(request)
        return result


@pytest.fixture
def config():
    return Config({
        "client_id": "client-id",
        "client_secret": "client-secret",
        "callback_url": CALLBACK_URL,
        "frontend_callback_url": FRONTEND_URL,
        "cookie_secure": False,
    })


@pytest.fixture
def fake_spotify():
    return FakeSpotify()


@pytest.fixture
def http_client(fake_spotify):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_spotify))


@pytest.fixture
def client(config, http_client):
    app = create_app(config, http_client=http_client)
    with TestClient(app) as test_client:
        yield test_client
