"""
Forwarding helper shared by every resource proxy endpoint.

Each endpoint makes exactly one upstream call through `forward`, which maps the
outcome to a response:
- read endpoints relay the upstream JSON body and status code
- mutating endpoints answer { "success": true }
- failures become { "error": <operation message>, "details": <upstream body> }
  with the upstream status code, or 500 when there was no upstream response
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx
from fastapi import Response, status
from fastapi.responses import JSONResponse

from src.api.config import Settings
from src.api.errors import ApiError
from src.api.spotify_client import UpstreamError, api_request

logger = logging.getLogger(__name__)

SUCCESS = {"success": True}


def _relay(response: httpx.Response, empty: Optional[Dict[str, Any]]) -> Response:
    if response.status_code == status.HTTP_204_NO_CONTENT or not response.content:
        if empty is not None:
            return JSONResponse(status_code=status.HTTP_200_OK, content=empty)
        return Response(status_code=response.status_code)
    try:
        body = response.json()
    except ValueError:
        return Response(
            content=response.content,
            status_code=response.status_code,
            media_type=response.headers.get("content-type"),
        )
    return JSONResponse(status_code=response.status_code, content=body)


# PUBLIC_INTERFACE
async def forward(
    client: httpx.AsyncClient,
    settings: Settings,
    *,
    operation: str,
    method: str,
    path: str,
    token: str,
    error: str,
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Dict[str, Any]] = None,
    relay: bool = True,
    empty: Optional[Dict[str, Any]] = None,
    status_errors: Optional[Mapping[int, str]] = None,
) -> Response:
    """
    Make one upstream Web API call and map its outcome to a response.

    Args:
        operation: short name used in log lines.
        error: message returned to the caller when the upstream call fails.
        relay: relay the upstream body (True) or answer { "success": true } (False).
        empty: body to answer with (status 200) when the upstream has no content.
        status_errors: per-status overrides for `error`.

    Raises:
        ApiError: when the upstream call fails.
    """
    try:
        response = await api_request(client, settings, method, path, token=token, params=params, json=json)
    except UpstreamError as exc:
        status_code = exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        message = (status_errors or {}).get(status_code, error)
        if exc.status_code is None:
            logger.error("upstream_unreachable: operation=%s details=%s", operation, exc.details)
        else:
            logger.warning(
                "upstream_failed: operation=%s status=%s details=%s",
                operation,
                exc.status_code,
                exc.details,
            )
        raise ApiError(status_code, message, details=exc.details)

    if relay:
        return _relay(response, empty)
    return JSONResponse(status_code=status.HTTP_200_OK, content=SUCCESS)
