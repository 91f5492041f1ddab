"""Spotify authorization code relay endpoints.

This module contains the four relay routes:
- /login: issue a state token and redirect to Spotify's authorize page
- /callback: verify state, exchange the code, fetch the profile, redirect to the frontend
- /refresh_token: mint a new access token from a refresh token
- /search: pass a search query through to the Web API
"""

import logging
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Cookie, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.responses import Response

from config import Config
from spotify.client import (
    AUTHORIZE_URL,
    SpotifyAPIError,
    SpotifyClient,
    SpotifyError,
    SpotifyUnavailableError,
)
from spotify.state import (
    STATE_COOKIE_NAME,
    clear_state_cookie,
    generate_state,
    set_state_cookie,
    state_matches,
)

logger = logging.getLogger(__name__)

# Router for relay endpoints
router = APIRouter(tags=["spotify"])


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_spotify_client(request: Request) -> SpotifyClient:
    return SpotifyClient(request.app.state.config, request.app.state.http_client)


def _encode(params: dict) -> str:
    return urlencode(params, quote_via=quote)


def _frontend_redirect(config: Config, params: dict) -> RedirectResponse:
    base = config.frontend_callback_url
    separator = "&" if "?" in base else "?"
    return RedirectResponse(url=f"{base}{separator}{_encode(params)}", status_code=302)


def build_authorize_url(config: Config, state: str) -> str:
    params = {
        "response_type": "code",
        "client_id": config.client_id,
        "scope": config.scope,
        "redirect_uri": config.callback_url,
        "state": state,
    }
    if config.show_dialog:
        params["show_dialog"] = "true"
    return f"{AUTHORIZE_URL}?{_encode(params)}"


# ============== Authorization Flow ==============

@router.get("/login")
async def login(config: Config = Depends(get_config)):
    """Start the authorization code flow."""
    state = generate_state()
    response = RedirectResponse(url=build_authorize_url(config, state), status_code=302)
    set_state_cookie(response, state, secure=config.cookie_secure)
    logger.info("[LOGIN] Redirecting to Spotify authorize page")
    return response


@router.get("/callback")
async def callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    stored_state: str | None = Cookie(None, alias=STATE_COOKIE_NAME),
    config: Config = Depends(get_config),
    spotify: SpotifyClient = Depends(get_spotify_client),
):
    """Handle Spotify's redirect after the user logged in."""
    if not state_matches(state, stored_state):
        logger.info("[CALLBACK] State mismatch, rejecting callback")
        return RedirectResponse(url="/#" + _encode({"error": "state_mismatch"}), status_code=302)

    if error:
        logger.info(f"[CALLBACK] Spotify returned error: {error}")
        response = _frontend_redirect(config, {"error": error})
        clear_state_cookie(response, secure=config.cookie_secure)
        return response

    try:
        tokens = await spotify.exchange_code(code)
    except SpotifyError as e:
        logger.warning(f"[CALLBACK] Token exchange failed: {e}")
        response = _frontend_redirect(config, {"error": "invalid_token"})
        clear_state_cookie(response, secure=config.cookie_secure)
        return response

    access_token = tokens["access_token"]
    refresh_token = tokens.get("refresh_token", "")

    # Profile failures do not abort the login; fields are passed through empty
    try:
        profile = await spotify.get_current_user(access_token)
    except SpotifyError as e:
        logger.warning(f"[CALLBACK] Profile fetch failed, continuing without profile: {e}")
        profile = {}

    logger.info("[CALLBACK] Login complete, redirecting to frontend")
    response = _frontend_redirect(config, {
        "display_name": profile.get("display_name") or "",
        "email": profile.get("email") or "",
        "access_token": access_token,
        "refresh_token": refresh_token or "",
    })
    clear_state_cookie(response, secure=config.cookie_secure)
    return response


# ============== Token Refresh ==============

@router.get("/refresh_token")
async def refresh(
    refresh_token: str | None = None,
    spotify: SpotifyClient = Depends(get_spotify_client),
):
    """Exchange a refresh token for a new access token."""
    if not refresh_token:
        return JSONResponse({"error": "invalid_request"}, status_code=400)

    try:
        tokens = await spotify.refresh_access_token(refresh_token)
    except SpotifyUnavailableError as e:
        logger.warning(f"[REFRESH] Spotify unavailable: {e}")
        return JSONResponse({"error": "upstream_unavailable"}, status_code=502)
    except SpotifyAPIError as e:
        logger.warning(f"[REFRESH] Refresh rejected: {e}")
        return JSONResponse({"error": "invalid_token"}, status_code=400)

    return JSONResponse({"access_token": tokens["access_token"]})


# ============== Search Proxy ==============

@router.get("/search")
async def search(
    terms: str | None = None,
    search_type: str | None = Query(None, alias="type"),
    access_token: str | None = None,
    spotify: SpotifyClient = Depends(get_spotify_client),
):
    """Relay a search query to Spotify and return its body verbatim."""
    if not terms:
        return PlainTextResponse("Missing search terms", status_code=404)

    try:
        upstream = await spotify.search(terms, search_type=search_type, access_token=access_token)
    except SpotifyUnavailableError as e:
        logger.warning(f"[SEARCH] Spotify unavailable: {e}")
        return JSONResponse({"error": "upstream_unavailable"}, status_code=502)

    if upstream.status_code != 200:
        logger.info(f"[SEARCH] Spotify answered with status {upstream.status_code}")

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
