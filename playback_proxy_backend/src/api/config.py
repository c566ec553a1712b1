"""
Runtime configuration for the playback proxy backend.

Settings are read from environment variables exactly once, when the application
is constructed, and then passed to handlers through the `get_settings` dependency.

Required:
  - SPOTIFY_CLIENT_ID
  - SPOTIFY_CLIENT_SECRET

Optional:
  - REDIRECT_URI (default http://localhost:3000/callback)
  - FRONTEND_URL (default http://localhost:3000)
  - CORS_ALLOW_ORIGINS / ALLOWED_ORIGINS (comma-separated extra origins)
  - SPOTIFY_HTTP_TIMEOUT (seconds, default 10)
  - LOG_LEVEL (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from fastapi import Request

_DEFAULT_REDIRECT_URI = "http://localhost:3000/callback"
_DEFAULT_FRONTEND_URL = "http://localhost:3000"
_DEFAULT_TIMEOUT_SECONDS = 10.0
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

SPOTIFY_ACCOUNTS_URL = "https://accounts.spotify.com"
SPOTIFY_API_URL = "https://api.spotify.com/v1"

SCOPES = (
    "user-read-private",
    "user-read-email",
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "playlist-read-private",
    "playlist-read-collaborative",
    "streaming",
)


@dataclass(frozen=True)
class Settings:
    """Immutable server configuration."""

    client_id: str
    client_secret: str = field(repr=False)
    redirect_uri: str = _DEFAULT_REDIRECT_URI
    frontend_url: str = _DEFAULT_FRONTEND_URL
    extra_origins: Tuple[str, ...] = ()
    http_timeout: float = _DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    accounts_url: str = SPOTIFY_ACCOUNTS_URL
    api_url: str = SPOTIFY_API_URL
    scopes: Tuple[str, ...] = SCOPES

    @property
    def scope(self) -> str:
        return " ".join(self.scopes)

    @property
    def cors_origins(self) -> list:
        """Frontend origin, the local dev server, then any configured extras (deduplicated)."""
        origins = []
        for origin in (self.frontend_url, _DEFAULT_FRONTEND_URL, *self.extra_origins):
            origin = origin.rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins


def _timeout(raw: Optional[str]) -> float:
    try:
        value = float(raw) if raw else _DEFAULT_TIMEOUT_SECONDS
    except ValueError:
        return _DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else _DEFAULT_TIMEOUT_SECONDS


def _log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").strip().upper()
    return level if level in _LOG_LEVELS else "INFO"


# PUBLIC_INTERFACE
def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        RuntimeError: if the client id or client secret is missing.
    """
    env = os.environ if environ is None else environ

    client_id = (env.get("SPOTIFY_CLIENT_ID") or "").strip()
    client_secret = (env.get("SPOTIFY_CLIENT_SECRET") or "").strip()
    missing = [
        name
        for name, value in (("SPOTIFY_CLIENT_ID", client_id), ("SPOTIFY_CLIENT_SECRET", client_secret))
        if not value
    ]
    if missing:
        raise RuntimeError(f"{', '.join(missing)} env var(s) required.")

    extra_raw = env.get("CORS_ALLOW_ORIGINS") or env.get("ALLOWED_ORIGINS", "")
    extra_origins = tuple(o.strip() for o in extra_raw.split(",") if o.strip())

    return Settings(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=(env.get("REDIRECT_URI") or _DEFAULT_REDIRECT_URI).strip(),
        frontend_url=(env.get("FRONTEND_URL") or _DEFAULT_FRONTEND_URL).strip().rstrip("/"),
        extra_origins=extra_origins,
        http_timeout=_timeout(env.get("SPOTIFY_HTTP_TIMEOUT")),
        log_level=_log_level(env.get("LOG_LEVEL")),
    )


# PUBLIC_INTERFACE
def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the Settings built at startup."""
    return request.app.state.settings
