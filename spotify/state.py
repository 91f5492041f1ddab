"""Anti-forgery state token for the authorization code flow.

The token lives only in the requesting browser's cookie; nothing is kept
server-side. It is compared once on callback and then cleared.
"""

import secrets
import string

from starlette.responses import Response

STATE_COOKIE_NAME = "spotify_auth_state"
STATE_LENGTH = 16

_ALPHABET = string.ascii_letters + string.digits


def generate_state(length: int = STATE_LENGTH) -> str:
    """Generate a random alphanumeric state token."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def set_state_cookie(response: Response, state: str, secure: bool) -> None:
    # Lax so the cookie survives the top-level redirect back from the provider
    response.set_cookie(
        STATE_COOKIE_NAME,
        state,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def clear_state_cookie(response: Response, secure: bool) -> None:
    response.delete_cookie(
        STATE_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def state_matches(state: str | None, stored_state: str | None) -> bool:
    """True when the callback state is present and equals the cookie value."""
    if not state or not stored_state:
        return False
    return secrets.compare_digest(state.encode(), stored_state.encode())
