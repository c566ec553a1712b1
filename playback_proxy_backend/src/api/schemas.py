"""
Pydantic models (request/response shapes) for API endpoints.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, StrictInt, confloat

# Integers pass through exactly; booleans and numeric strings are rejected.
Number = Union[StrictInt, confloat(strict=True, allow_inf_nan=False)]


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service status message.")
    redirect_uri: str = Field(..., description="Configured OAuth redirect URI.")


class AuthUrlResponse(BaseModel):
    auth_url: str = Field(..., description="Spotify consent screen URL to navigate to.")


class SuccessResponse(BaseModel):
    success: bool = Field(True, description="Always true; failures use ErrorResponse.")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable error message.")
    details: Optional[Any] = Field(None, description="Upstream error body, when there is one.")


class PlaybackState(BaseModel):
    """Shape returned by /api/current when nothing is playing."""

    is_playing: bool = Field(False, description="Whether playback is active.")
    item: Optional[Any] = Field(None, description="Currently playing item.")
    progress_ms: int = Field(0, description="Playback position in milliseconds.")


class PlayRequest(BaseModel):
    uri: Optional[str] = Field(
        None,
        description="Track, album or playlist URI. Omit to resume playback.",
        examples=["spotify:track:4uLU6hMCjMI75M1A2tKUQC"],
    )


class SeekRequest(BaseModel):
    position_ms: Optional[Number] = Field(None, description="Position in milliseconds (truncated to an integer).")


class VolumeRequest(BaseModel):
    volume_percent: Optional[Number] = Field(None, description="Volume 0-100 (truncated to an integer).")


# Used only for OpenAPI documentation of failure responses.
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid parameter"},
    401: {"model": ErrorResponse, "description": "No bearer token"},
    500: {"model": ErrorResponse, "description": "Upstream failure"},
}

