"""
Outbound HTTP adapter for the Spotify accounts service and Web API.

A single httpx.AsyncClient is created per application (see main.create_app) and
shared by all requests. It never holds user credentials: the caller's bearer token
is attached per call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from fastapi import Request

from src.api.config import Settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """
    Raised when an upstream call fails.

    status_code is None for transport failures (connect errors, timeouts), where
    there is no upstream response to relay.
    """

    def __init__(self, status_code: Optional[int], details: Any) -> None:
        super().__init__(f"upstream error status={status_code}")
        self.status_code = status_code
        self.details = details


@dataclass(frozen=True)
class TokenResult:
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


# PUBLIC_INTERFACE
def create_http_client(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create the shared AsyncClient; `transport` lets tests stub the network."""
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout), transport=transport)


# PUBLIC_INTERFACE
def get_http_client(request: Request) -> httpx.AsyncClient:
    """FastAPI dependency returning the application's shared AsyncClient."""
    return request.app.state.http_client


def _error_body(response: httpx.Response) -> Any:
    """Return the upstream error payload, parsed as JSON when possible."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


# PUBLIC_INTERFACE
def build_authorize_url(settings: Settings) -> str:
    """Return the accounts-service URL that starts the authorization-code flow."""
    query = urlencode(
        {
            "response_type": "code",
            "client_id": settings.client_id,
            "scope": settings.scope,
            "redirect_uri": settings.redirect_uri,
            "show_dialog": "false",
        }
    )
    return f"{settings.accounts_url}/authorize?{query}"


# PUBLIC_INTERFACE
async def exchange_code(client: httpx.AsyncClient, settings: Settings, code: str) -> TokenResult:
    """
    Exchange an authorization code for tokens.

    Sends a form-encoded POST to the token endpoint using HTTP Basic
    client authentication.

    Raises:
        UpstreamError: on transport failure, non-2xx status, or a response without an access token.
    """
    url = f"{settings.accounts_url}/api/token"
    try:
        response = await client.post(
            url,
            data={
                "code": code,
                "redirect_uri": settings.redirect_uri,
                "grant_type": "authorization_code",
            },
            auth=httpx.BasicAuth(settings.client_id, settings.client_secret),
        )
    except httpx.HTTPError as exc:
        raise UpstreamError(None, f"{exc.__class__.__name__}: {exc}") from exc

    if not response.is_success:
        raise UpstreamError(response.status_code, _error_body(response))

    try:
        payload: Dict[str, Any] = response.json()
    except ValueError:
        raise UpstreamError(response.status_code, "Token response was not JSON.")

    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not access_token:
        raise UpstreamError(response.status_code, "Token response did not contain an access_token.")

    return TokenResult(
        access_token=access_token,
        refresh_token=payload.get("refresh_token") or None,
        expires_in=payload.get("expires_in"),
    )


# PUBLIC_INTERFACE
async def api_request(
    client: httpx.AsyncClient,
    settings: Settings,
    method: str,
    path: str,
    *,
    token: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
) -> httpx.Response:
    """
    Issue one Web API call on behalf of the caller.

    Returns the response for any 2xx status (including 204 No Content).

    Raises:
        UpstreamError: on transport failure or non-2xx status.
    """
    url = f"{settings.api_url}{path}"
    logger.debug("upstream_request: method=%s path=%s", method, path)
    try:
        response = await client.request(
            method,
            url,
            params=params,
            json=json,
            headers={"Authorization": f"Bearer {token}"},
        )
    except httpx.HTTPError as exc:
        raise UpstreamError(None, f"{exc.__class__.__name__}: {exc}") from exc

    if not response.is_success:
        raise UpstreamError(response.status_code, _error_body(response))
    return response
