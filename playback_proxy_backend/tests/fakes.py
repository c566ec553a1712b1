"""
Test doubles: a fake Spotify (accounts service + Web API) served through
httpx.MockTransport, and a helper that builds an app wired to it.

FakeSpotify records every outbound request so tests can assert on how many
calls were made and what they carried.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

# Ensure `src.api` imports work when running these files directly.
BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import httpx
from fastapi.testclient import TestClient

from src.api.config import Settings
from src.api.main import create_app

FRONTEND_URL = "http://frontend.test"
REDIRECT_URI = "http://backend.test/callback"
AUTH_HEADERS = {"Authorization": "Bearer user-token"}


class FakeSpotify:
    """Callable handler for httpx.MockTransport with canned responses per (method, path)."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Any] = {}

    def respond(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        self._routes[(method, path)] = (status_code, json_body, text)

    def fail(self, method: str, path: str) -> None:
        """Make calls to (method, path) raise a connection error."""
        self._routes[(method, path)] = httpx.ConnectError

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(204)
        if route is httpx.ConnectError:
            raise httpx.ConnectError("connection refused", request=request)
        status_code, json_body, text = route
        if json_body is not None:
            return httpx.Response(status_code, json=json_body)
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no upstream request was made"
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content) if self.last.content else None


def make_settings() -> Settings:
    return Settings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri=REDIRECT_URI,
        frontend_url=FRONTEND_URL,
    )


class AppTestCase:
    """Mixin for unittest.TestCase: self.client talks to an app backed by self.spotify."""

    def setUp(self):
        self.spotify = FakeSpotify()
        app = create_app(make_settings(), transport=httpx.MockTransport(self.spotify))
        self.client = TestClient(app, follow_redirects=False)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)
