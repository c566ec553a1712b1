import base64
import os
import sys
import unittest
from urllib.parse import parse_qs, urlsplit

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
if THIS_DIR not in sys.path:
    sys.path.insert(0, THIS_DIR)

from fakes import FRONTEND_URL, REDIRECT_URI, AppTestCase


class HealthAndAuthUrlTests(AppTestCase, unittest.TestCase):
    def test_health(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "Spotify API Backend Running", "redirect_uri": REDIRECT_URI})

    def test_auth_url(self):
        response = self.client.get("/api/auth")
        self.assertEqual(response.status_code, 200)

        parts = urlsplit(response.json()["auth_url"])
        self.assertEqual(f"{parts.scheme}://{parts.netloc}{parts.path}", "https://accounts.spotify.com/authorize")
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        self.assertEqual(query["response_type"], "code")
        self.assertEqual(query["client_id"], "test-client-id")
        self.assertEqual(query["redirect_uri"], REDIRECT_URI)
        self.assertEqual(query["show_dialog"], "false")
        self.assertIn("user-read-playback-state", query["scope"].split(" "))
        self.assertEqual(self.spotify.requests, [])

    def test_cors_allows_frontend_origin(self):
        response = self.client.options(
            "/api/playlists",
            headers={
                "Origin": FRONTEND_URL,
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Authorization",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], FRONTEND_URL)


class CallbackTests(AppTestCase, unittest.TestCase):
    def redirect_query(self, response):
        self.assertEqual(response.status_code, 302)
        parts = urlsplit(response.headers["location"])
        self.assertEqual(f"{parts.scheme}://{parts.netloc}", FRONTEND_URL)
        self.assertEqual(parts.path, "/")
        return {k: v[0] for k, v in parse_qs(parts.query).items()}

    def test_error_redirects_without_exchange(self):
        response = self.client.get("/callback", params={"error": "access_denied"})
        self.assertEqual(response.headers["location"], f"{FRONTEND_URL}/?error=access_denied")
        self.assertEqual(self.spotify.requests, [])

    def test_error_takes_precedence_over_code(self):
        response = self.client.get("/callback", params={"code": "abc123", "error": "access_denied"})
        self.assertEqual(self.redirect_query(response), {"error": "access_denied"})
        self.assertEqual(self.spotify.requests, [])

    def test_missing_code(self):
        response = self.client.get("/callback")
        self.assertEqual(self.redirect_query(response), {"error": "no_code"})
        self.assertEqual(self.spotify.requests, [])

    def test_exchanges_code_for_tokens(self):
        self.spotify.respond(
            "POST",
            "/api/token",
            json_body={"access_token": "T", "refresh_token": "R", "expires_in": 3600, "token_type": "Bearer"},
        )

        response = self.client.get("/callback", params={"code": "abc123"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], f"{FRONTEND_URL}/?access_token=T&refresh_token=R")
        self.assertEqual(len(self.spotify.requests), 1)

        request = self.spotify.last
        self.assertEqual(str(request.url), "https://accounts.spotify.com/api/token")
        self.assertEqual(request.headers["content-type"], "application/x-www-form-urlencoded")
        expected = base64.b64encode(b"test-client-id:test-client-secret").decode()
        self.assertEqual(request.headers["authorization"], f"Basic {expected}")
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        self.assertEqual(form, {"code": "abc123", "redirect_uri": REDIRECT_URI, "grant_type": "authorization_code"})

    def test_refresh_token_only_when_present(self):
        self.spotify.respond("POST", "/api/token", json_body={"access_token": "T", "expires_in": 3600})
        response = self.client.get("/callback", params={"code": "abc123"})
        self.assertEqual(self.redirect_query(response), {"access_token": "T"})

    def test_upstream_rejection_is_auth_failed(self):
        self.spotify.respond("POST", "/api/token", status_code=400, json_body={"error": "invalid_grant"})
        response = self.client.get("/callback", params={"code": "abc123"})
        self.assertEqual(self.redirect_query(response), {"error": "auth_failed"})
        self.assertNotIn("invalid_grant", response.headers["location"])

    def test_transport_failure_is_auth_failed(self):
        self.spotify.fail("POST", "/api/token")
        response = self.client.get("/callback", params={"code": "abc123"})
        self.assertEqual(self.redirect_query(response), {"error": "auth_failed"})

    def test_response_without_access_token_is_auth_failed(self):
        self.spotify.respond("POST", "/api/token", json_body={"token_type": "Bearer"})
        response = self.client.get("/callback", params={"code": "abc123"})
        self.assertEqual(self.redirect_query(response), {"error": "auth_failed"})

    def test_failed_exchange_is_logged_without_secrets(self):
        self.spotify.respond("POST", "/api/token", status_code=400, json_body={"error": "invalid_grant"})
        with self.assertLogs("src.api", level="WARNING") as cm:
            response = self.client.get("/callback", params={"code": "abc123"})
        self.assertEqual(self.redirect_query(response), {"error": "auth_failed"})
        output = "\n".join(cm.output)
        self.assertIn("oauth_token_exchange_failed", output)
        self.assertIn("status=400", output)
        self.assertNotIn("test-client-secret", output)
        self.assertNotIn(base64.b64encode(b"test-client-id:test-client-secret").decode(), output)
        self.assertNotIn("test-client-secret", response.headers["location"])


if __name__ == "__main__":
    unittest.main()
