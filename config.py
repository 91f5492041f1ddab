"""Config management for spotify-auth-relay.

Values are read once from the environment (optionally seeded from a .env
file) and wrapped in a read-only Config that handlers receive explicitly.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "user-read-private user-read-email"
DEFAULT_PORT = 8888
DEFAULT_HTTP_TIMEOUT = 10.0

REQUIRED_KEYS = ("client_id", "client_secret", "callback_url", "frontend_callback_url")


class Config:
    """Configuration container (read-only)."""

    def __init__(self, data: dict = None):
        self._data = dict(data or {})

    def __setattr__(self, name, value):
        if name != "_data" or "_data" in self.__dict__:
            raise AttributeError("Config is read-only")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return f"Config({self.as_dict(mask_secret=True)!r})"

    @property
    def client_id(self) -> str:
        return self._data.get("client_id", "")

    @property
    def client_secret(self) -> str:
        return self._data.get("client_secret", "")

    @property
    def callback_url(self) -> str:
        return self._data.get("callback_url", "")

    @property
    def frontend_callback_url(self) -> str:
        return self._data.get("frontend_callback_url", "")

    @property
    def host(self) -> str:
        return self._data.get("host", "0.0.0.0")

    @property
    def port(self) -> int:
        return self._data.get("port", DEFAULT_PORT)

    @property
    def scope(self) -> str:
        return self._data.get("scope", DEFAULT_SCOPE)

    @property
    def show_dialog(self) -> bool:
        return self._data.get("show_dialog", False)

    @property
    def http_timeout(self) -> float:
        return self._data.get("http_timeout", DEFAULT_HTTP_TIMEOUT)

    @property
    def cookie_secure(self) -> bool:
        secure = self._data.get("cookie_secure")
        if secure is None:
            return self.callback_url.startswith("https://")
        return secure

    @property
    def cors_origins(self) -> list[str]:
        return list(self._data.get("cors_origins", ["*"]))

    @property
    def log_format(self) -> str:
        return self._data.get("log_format", "plain")

    @property
    def log_level(self) -> str:
        return self._data.get("log_level", "INFO")

    def missing_keys(self) -> list[str]:
        """Required settings that are empty."""
        return [key for key in REQUIRED_KEYS if not self._data.get(key)]

    def is_valid(self) -> bool:
        """Check if config has required fields."""
        return not self.missing_keys()

    def replace(self, **changes) -> "Config":
        """Return a copy with the given values overridden."""
        data = dict(self._data)
        data.update({k: v for k, v in changes.items() if v is not None})
        return Config(data)

    def as_dict(self, mask_secret: bool = True) -> dict:
        secret = self.client_secret
        if mask_secret and secret:
            secret = secret[:4] + "*" * max(len(secret) - 4, 4)
        return {
            "client_id": self.client_id,
            "client_secret": secret,
            "callback_url": self.callback_url,
            "frontend_callback_url": self.frontend_callback_url,
            "host": self.host,
            "port": self.port,
            "scope": self.scope,
            "show_dialog": self.show_dialog,
            "http_timeout": self.http_timeout,
            "cookie_secure": self.cookie_secure,
            "cors_origins": self.cors_origins,
            "log_format": self.log_format,
            "log_level": self.log_level,
        }


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or value.strip().lower() in ("", "auto"):
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_number(name: str, value: Optional[str], cast, default):
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        logger.warning(f"[STARTUP] Invalid {name}={value!r}, using {default}")
        return default


def load_env_file(env_file: Optional[str] = None) -> None:
    """Load a .env file into the environment without overriding real variables."""
    path = Path(env_file) if env_file else Path(".env")
    if path.exists():
        load_dotenv(path)


def load_config(environ: dict = None) -> Config:
    """Build a Config from environment variables."""
    env = os.environ if environ is None else environ

    origins = [o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    data = {
        "client_id": env.get("SPOTIFY_CLIENT_ID", ""),
        "client_secret": env.get("SPOTIFY_CLIENT_SECRET", ""),
        "callback_url": env.get("SPOTIFY_CALLBACK_URL", ""),
        "frontend_callback_url": env.get("FRONTEND_CALLBACK_URL", ""),
        "host": env.get("HOST", "0.0.0.0"),
        "port": _parse_number("PORT", env.get("PORT"), int, DEFAULT_PORT),
        "scope": env.get("SPOTIFY_SCOPE") or DEFAULT_SCOPE,
        "show_dialog": bool(_parse_bool(env.get("SPOTIFY_SHOW_DIALOG"))),
        "http_timeout": _parse_number(
            "SPOTIFY_HTTP_TIMEOUT", env.get("SPOTIFY_HTTP_TIMEOUT"), float, DEFAULT_HTTP_TIMEOUT
        ),
        "cookie_secure": _parse_bool(env.get("STATE_COOKIE_SECURE")),
        "cors_origins": origins or ["*"],
        "log_format": env.get("LOG_FORMAT", "plain").lower(),
        "log_level": env.get("LOG_LEVEL", "INFO").upper(),
    }
    return Config(data)
