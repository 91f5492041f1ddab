"""Spotify Auth Relay - OAuth authorization code relay for a frontend app.

This server handles:
- The Spotify authorization code handshake (/login, /callback)
- Access token refresh (/refresh_token)
- A pass-through for the Web API search endpoint (/search)

Tokens are never stored here; they are handed to the frontend through
redirect query parameters.
"""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Config, load_config, load_env_file
from spotify.endpoints import router as spotify_router

VERSION = "1.0.0"
SERVICE_NAME = "spotify-auth-relay"

logger = logging.getLogger(__name__)


def create_app(config: Config = None, http_client: httpx.AsyncClient = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings to serve with. Loaded from the environment when omitted.
        http_client: Outbound client to use instead of one owned by the app
            lifespan (tests pass one backed by httpx.MockTransport).
    """
    if config is None:
        load_env_file()
        config = load_config()

    for key in config.missing_keys():
        logger.warning(f"[STARTUP] Missing setting: {key} (Spotify calls will fail)")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if http_client is not None:
            yield
            return
        app.state.http_client = httpx.AsyncClient(timeout=config.http_timeout)
        logger.info("[STARTUP] Outbound HTTP client ready")
        try:
            yield
        finally:
            await app.state.http_client.aclose()
            logger.info("[SHUTDOWN] Outbound HTTP client closed")

    app = FastAPI(
        title="Spotify Auth Relay",
        description="Spotify OAuth authorization code relay and search proxy",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.http_client = http_client

    # Add CORS middleware for browser-based frontends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(spotify_router)

    # ============== Server Info Endpoints ==============

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": SERVICE_NAME}

    @app.get("/")
    async def root():
        """Root endpoint with server info."""
        return {
            "name": SERVICE_NAME,
            "version": VERSION,
            "endpoints": {
                "login": "/login",
                "callback": "/callback",
                "refresh": "/refresh_token",
                "search": "/search",
            },
        }

    return app


app = create_app()


# ============== Main Entry Point ==============

if __name__ == "__main__":
    from cli import main
    main()
