"""Async client for the Spotify accounts and Web API endpoints.

Each call is a single outbound request with the configured timeout and no
retries. Failures are raised as SpotifyError subclasses so that handlers
can short-circuit the authorization pipeline explicitly.
"""

import logging

import httpx

from config import Config

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"
API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyError(Exception):
    """Base error for failed calls to Spotify."""


class SpotifyAPIError(SpotifyError):
    """Spotify answered, but not with a usable success response."""

    def __init__(self, message: str, status_code: int = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SpotifyUnavailableError(SpotifyError):
    """The request never got an answer (connection error or timeout)."""


class SpotifyClient:
    """Spotify OAuth and Web API calls over a shared httpx.AsyncClient."""

    def __init__(self, config: Config, http_client: httpx.AsyncClient):
        self.config = config
        self.http = http_client

    @property
    def _basic_auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.config.client_id, self.config.client_secret)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self.http.request(method, url, timeout=self.config.http_timeout, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"[SPOTIFY] {method} {url} failed: {type(e).__name__}: {e}")
            raise SpotifyUnavailableError(str(e) or type(e).__name__) from e

    @staticmethod
    def _json_body(response: httpx.Response, what: str) -> dict:
        if response.status_code != 200:
            logger.warning(f"[SPOTIFY] {what} rejected with status {response.status_code}")
            raise SpotifyAPIError(
                f"{what} failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise SpotifyAPIError(f"{what} returned invalid JSON", response.status_code, response.text) from e
        if not isinstance(data, dict):
            raise SpotifyAPIError(f"{what} returned unexpected payload", response.status_code, response.text)
        return data

    async def _token_request(self, form: dict, what: str) -> dict:
        response = await self._send("POST", TOKEN_URL, data=form, auth=self._basic_auth)
        data = self._json_body(response, what)
        if not data.get("access_token"):
            raise SpotifyAPIError(f"{what} response has no access_token", response.status_code, response.text)
        return data

    async def exchange_code(self, code: str | None) -> dict:
        """Exchange an authorization code for an access/refresh token pair."""
        form = {
            "grant_type": "authorization_code",
            "code": code or "",
            "redirect_uri": self.config.callback_url,
        }
        return await self._token_request(form, "Token exchange")

    async def refresh_access_token(self, refresh_token: str) -> dict:
        """Mint a new access token from a refresh token."""
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        return await self._token_request(form, "Token refresh")

    async def get_current_user(self, access_token: str) -> dict:
        """Fetch the profile of the user owning the access token."""
        response = await self._send(
            "GET",
            f"{API_BASE_URL}/me",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return self._json_body(response, "Profile fetch")

    async def search(self, terms: str, search_type: str = None, access_token: str = None) -> httpx.Response:
        """Forward a search query and return the raw upstream response."""
        params = {"q": terms}
        if search_type:
            params["type"] = search_type
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return await self._send("GET", f"{API_BASE_URL}/search", params=params, headers=headers)
