"""
Bearer token extraction for the resource proxy endpoints.

The frontend sends the Spotify access token it received from /callback as:
- Authorization: Bearer <token>

The token is not validated here; the Web API is the authority on whether it is
still good, and its 401 is relayed like any other upstream error.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.api.errors import ApiError

_bearer_scheme = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """
    FastAPI dependency that returns the caller's access token.

    Raises 401 { "error": "No token provided" } if the header is missing,
    does not use the literal "Bearer " prefix, or carries an empty token.
    """
    if credentials is None or credentials.scheme != "Bearer" or not credentials.credentials.strip():
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "No token provided")
    return credentials.credentials.strip()
