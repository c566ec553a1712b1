"""
OAuth endpoints:
- GET /api/auth   returns the Spotify consent URL as JSON
- GET /callback   Spotify redirects here; exchanges the code and sends the browser to the frontend

The callback is reached by full-page navigation, so every outcome (including
failures) is a 302 redirect to FRONTEND_URL carrying either tokens or an
`error` query parameter.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse

from src.api.config import Settings, get_settings
from src.api.schemas import AuthUrlResponse
from src.api.spotify_client import UpstreamError, build_authorize_url, exchange_code, get_http_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _frontend_redirect(settings: Settings, params: Dict[str, str]) -> RedirectResponse:
    url = f"{settings.frontend_url}/?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get(
    "/api/auth",
    response_model=AuthUrlResponse,
    summary="Get authorization URL",
    description="Returns the Spotify authorization URL. The frontend navigates the browser to it.",
    operation_id="get_auth_url",
)
def get_auth_url(settings: Settings = Depends(get_settings)) -> AuthUrlResponse:
    """Build the consent screen URL from server configuration."""
    return AuthUrlResponse(auth_url=build_authorize_url(settings))


@router.get(
    "/callback",
    summary="OAuth callback",
    description="Exchanges the authorization code for tokens and redirects to the frontend.",
    operation_id="oauth_callback",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
)
async def callback(
    code: Optional[str] = Query(None, description="Authorization code from Spotify."),
    error: Optional[str] = Query(None, description="Error reported by Spotify (e.g. access_denied)."),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> RedirectResponse:
    """Finish the authorization-code flow."""
    if error:
        logger.info("oauth_callback_denied: error=%s", error)
        return _frontend_redirect(settings, {"error": error})

    if not code:
        logger.info("oauth_callback_no_code")
        return _frontend_redirect(settings, {"error": "no_code"})

    try:
        tokens = await exchange_code(client, settings, code)
    except UpstreamError as exc:
        logger.warning("oauth_token_exchange_failed: status=%s details=%s", exc.status_code, exc.details)
        return _frontend_redirect(settings, {"error": "auth_failed"})

    params = {"access_token": tokens.access_token}
    if tokens.refresh_token:
        params["refresh_token"] = tokens.refresh_token
    logger.info(
        "oauth_token_exchange_ok: refresh_token=%s expires_in=%s",
        bool(tokens.refresh_token),
        tokens.expires_in,
    )
    return _frontend_redirect(settings, params)
