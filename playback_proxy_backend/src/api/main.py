"""
FastAPI application entrypoint for the playback proxy backend.

The app is built by `create_app()` so configuration is loaded (and validated)
exactly once at startup:

    uvicorn src.api.main:create_app --factory

Routes:
- GET /                 health
- GET /api/auth         Spotify consent URL
- GET /callback         OAuth redirect target
- /api/...              player/search/playlist proxy (Authorization: Bearer <token>)

CORS allows FRONTEND_URL and the local React dev server; add more origins via
CORS_ALLOW_ORIGINS or ALLOWED_ORIGINS as comma-separated values.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.config import Settings, get_settings, load_settings
from src.api.errors import register_error_handlers
from src.api.routes_auth import router as auth_router
from src.api.routes_player import router as player_router
from src.api.schemas import HealthResponse
from src.api.spotify_client import create_http_client

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Auth", "description": "Spotify authorization-code flow."},
    {"name": "Player", "description": "Playback, search and playlist proxy (Bearer token)."},
    {"name": "Health", "description": "Service health and basic runtime info."},
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: configuration to use; read from the environment when omitted.
        transport: optional httpx transport for outbound calls (tests stub the network with it).

    Raises:
        RuntimeError: if required configuration is missing.
    """
    settings = settings or load_settings()
    logging.getLogger("src.api").setLevel(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.http_client = create_http_client(settings, transport)
        logger.info(
            "startup: redirect_uri=%s frontend_url=%s cors_origins=%s",
            settings.redirect_uri,
            settings.frontend_url,
            settings.cors_origins,
        )
        try:
            yield
        finally:
            await app.state.http_client.aclose()

    app = FastAPI(
        title="Spotify Playback Proxy API",
        description=(
            "Backend for a browser Spotify controller.\n\n"
            "Authentication: the frontend obtains tokens via /api/auth and /callback, then sends\n"
            "`Authorization: Bearer <access_token>` on every /api call. Tokens are never stored."
        ),
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # credentials=true requires explicit origins (not '*') in browsers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(player_router)

    @app.get(
        "/",
        response_model=HealthResponse,
        summary="Health check",
        description="Simple health check endpoint.",
        tags=["Health"],
    )
    def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
        """Return basic service health information."""
        return HealthResponse(status="Spotify API Backend Running", redirect_uri=settings.redirect_uri)

    return app
