"""
Spotify Web API proxy endpoints (Authorization: Bearer <spotify access token>):
- GET  /api/playlists
- GET  /api/search?q=
- POST /api/play      { uri? }
- POST /api/pause
- POST /api/next
- POST /api/previous
- GET  /api/current
- POST /api/seek      { position_ms }
- POST /api/volume    { volume_percent }

Every endpoint is one upstream call through proxy.forward.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Query, Response, status

from src.api.auth import get_bearer_token
from src.api.config import Settings, get_settings
from src.api.errors import ApiError
from src.api.proxy import forward
from src.api.schemas import (
    ERROR_RESPONSES,
    PlaybackState,
    PlayRequest,
    SeekRequest,
    SuccessResponse,
    VolumeRequest,
)
from src.api.spotify_client import get_http_client

router = APIRouter(prefix="/api", tags=["Player"], responses=ERROR_RESPONSES)

_DEFAULT_SEARCH_TYPES = "track,artist,album,playlist"
_DEFAULT_SEARCH_LIMIT = 20
_PLAYLIST_LIMIT = 50
_NO_ACTIVE_DEVICE = "No active device found. Open Spotify on a device and try again."
_NOTHING_PLAYING = PlaybackState().model_dump()

Forwarder = Callable[..., Awaitable[Response]]


def _upstream(
    token: str = Depends(get_bearer_token),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> Forwarder:
    """Bind forward() to this request's token, settings and client."""
    return functools.partial(forward, client, settings, token=token)


def _required_number(value: Optional[float], name: str) -> int:
    """Truncate a numeric body field toward zero; missing -> 400."""
    if value is None:
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"{name} is required")
    return int(value)


# PUBLIC_INTERFACE
def play_payload(uri: Optional[str]) -> Dict[str, Any]:
    """
    Build the start/resume playback body.

    A track URI plays that single track; any other URI (album, playlist,
    artist) is played as a context; no URI resumes the current context.
    """
    if not uri:
        return {}
    if uri.startswith("spotify:track:"):
        return {"uris": [uri]}
    return {"context_uri": uri}


@router.get("/playlists", summary="Current user's playlists", operation_id="get_playlists")
async def get_playlists(upstream: Forwarder = Depends(_upstream)):
    """List the current user's playlists."""
    return await upstream(
        operation="playlists",
        method="GET",
        path="/me/playlists",
        params={"limit": _PLAYLIST_LIMIT},
        error="Failed to fetch playlists",
    )


@router.get("/search", summary="Search the catalog", operation_id="search")
async def search(
    q: Optional[str] = Query(None, description="Search query."),
    item_type: Optional[str] = Query(
        None,
        alias="type",
        description="Comma-separated item types (default track,artist,album,playlist).",
    ),
    limit: Optional[int] = Query(None, ge=1, le=50, description="Results per type (default 20)."),
    upstream: Forwarder = Depends(_upstream),
):
    """Search tracks, artists, albums and playlists."""
    if not q or not q.strip():
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Query parameter 'q' is required")
    params = {
        "q": q,
        "type": item_type or _DEFAULT_SEARCH_TYPES,
        "limit": limit or _DEFAULT_SEARCH_LIMIT,
    }
    return await upstream(operation="search", method="GET", path="/search", params=params, error="Search failed")


@router.post("/play", response_model=SuccessResponse, summary="Start or resume playback", operation_id="play")
async def play(body: Optional[PlayRequest] = None, upstream: Forwarder = Depends(_upstream)):
    """Play a track or context, or resume when no URI is given."""
    return await upstream(
        operation="play",
        method="PUT",
        path="/me/player/play",
        json=play_payload(body.uri if body else None),
        relay=False,
        error="Failed to start playback",
        status_errors={status.HTTP_404_NOT_FOUND: _NO_ACTIVE_DEVICE},
    )


@router.post("/pause", response_model=SuccessResponse, summary="Pause playback", operation_id="pause")
async def pause(upstream: Forwarder = Depends(_upstream)):
    """Pause playback on the active device."""
    return await upstream(
        operation="pause", method="PUT", path="/me/player/pause", relay=False, error="Failed to pause playback"
    )


@router.post("/next", response_model=SuccessResponse, summary="Skip to next track", operation_id="next_track")
async def next_track(upstream: Forwarder = Depends(_upstream)):
    """Skip to the next track."""
    return await upstream(
        operation="next", method="POST", path="/me/player/next", relay=False, error="Failed to skip to next track"
    )


@router.post(
    "/previous", response_model=SuccessResponse, summary="Skip to previous track", operation_id="previous_track"
)
async def previous_track(upstream: Forwarder = Depends(_upstream)):
    """Skip to the previous track."""
    return await upstream(
        operation="previous",
        method="POST",
        path="/me/player/previous",
        relay=False,
        error="Failed to skip to previous track",
    )


@router.get("/current", summary="Current playback state", operation_id="current_playback")
async def current_playback(upstream: Forwarder = Depends(_upstream)):
    """Playback state; nothing playing is reported as a stopped state, not an error."""
    return await upstream(
        operation="current",
        method="GET",
        path="/me/player",
        empty=_NOTHING_PLAYING,
        error="Failed to get current playback",
    )


@router.post("/seek", response_model=SuccessResponse, summary="Seek within the current track", operation_id="seek")
async def seek(body: Optional[SeekRequest] = None, upstream: Forwarder = Depends(_upstream)):
    """Seek to a position in the current track."""
    position_ms = _required_number(body.position_ms if body else None, "position_ms")
    return await upstream(
        operation="seek",
        method="PUT",
        path="/me/player/seek",
        params={"position_ms": position_ms},
        relay=False,
        error="Failed to seek",
    )


@router.post("/volume", response_model=SuccessResponse, summary="Set playback volume", operation_id="set_volume")
async def set_volume(body: Optional[VolumeRequest] = None, upstream: Forwarder = Depends(_upstream)):
    """Set the active device volume."""
    volume_percent = _required_number(body.volume_percent if body else None, "volume_percent")
    return await upstream(
        operation="volume",
        method="PUT",
        path="/me/player/volume",
        params={"volume_percent": volume_percent},
        relay=False,
        error="Failed to set volume",
    )
