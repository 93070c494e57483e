"""
Tests for the default HTTP transport.
"""
import unittest
import sys
import os
import json
import time
from unittest.mock import MagicMock

import httplib2

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from exceptions import TransportError
from services.transport import HttpTransport, redact_url


def _http_returning(status, body):
    http = MagicMock()
    http.request.return_value = (httplib2.Response({"status": status}), body)
    return http


class TestHttpTransport(unittest.IsolatedAsyncioTestCase):
    """Test cases for HttpTransport."""

    async def test_decodes_json(self):
        http = _http_returning(200, json.dumps({"items": [1, 2]}).encode("utf-8"))
        transport = HttpTransport(http=http)

        payload = await transport("https://www.googleapis.com/youtube/v3/videos?id=a&key=secret")

        self.assertEqual(payload, {"items": [1, 2]})
        http.request.assert_called_once_with("https://www.googleapis.com/youtube/v3/videos?id=a&key=secret", "GET")

    async def test_error_status_body_is_returned(self):
        body = json.dumps({"error": {"code": 403, "message": "quotaExceeded"}}).encode("utf-8")
        transport = HttpTransport(http=_http_returning(403, body))

        payload = await transport("https://example.invalid/videos")
        self.assertEqual(payload["error"]["message"], "quotaExceeded")

    async def test_invalid_json(self):
        transport = HttpTransport(http=_http_returning(502, b"<html>Bad Gateway</html>"))
        with self.assertRaises(TransportError):
            await transport("https://example.invalid/videos")

    async def test_non_object_json(self):
        transport = HttpTransport(http=_http_returning(200, b"[1, 2, 3]"))
        with self.assertRaises(TransportError):
            await transport("https://example.invalid/videos")

    async def test_network_error(self):
        http = MagicMock()
        http.request.side_effect = httplib2.ServerNotFoundError("Unable to find the server")
        with self.assertRaises(TransportError):
            await HttpTransport(http=http)("https://example.invalid/videos")

    async def test_timeout(self):
        http = MagicMock()
        http.request.side_effect = lambda url, method: time.sleep(0.5)
        transport = HttpTransport(timeout_seconds=0.05, http=http)

        with self.assertRaises(TransportError) as ctx:
            await transport("https://example.invalid/videos")
        self.assertIn("timed out", str(ctx.exception))


class TestRedactUrl(unittest.TestCase):

    def test_key_hidden(self):
        self.assertEqual(redact_url("https://x/videos?id=a&key=SECRET&alt=json"),
                         "https://x/videos?id=a&key=***&alt=json")

    def test_url_without_key(self):
        self.assertEqual(redact_url("https://x/videos?id=a"), "https://x/videos?id=a")


if __name__ == '__main__':
    unittest.main()
