#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Default HTTP transport for Playlength.

The engine only needs an awaitable ``fetch(url) -> dict``. This module
provides one built on the Google API client's HTTP layer (httplib2), run in
the default executor so the event loop is never blocked.
"""

import asyncio
import functools
import json
import re
from typing import Any, Awaitable, Callable, Dict, Optional

import httplib2
from googleapiclient.http import build_http

from config import config
from exceptions import TransportError
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

# Anything the engine can call to fetch a JSON document
Transport = Callable[[str], Awaitable[Dict[str, Any]]]

_KEY_PARAM = re.compile(r"([?&]key=)[^&]+")


def redact_url(url: str) -> str:
    """Hide the API key of a request URL for logging."""
    return _KEY_PARAM.sub(r"\1***", url)


class HttpTransport:
    """Fetches a URL and decodes its JSON body.

    Non-2xx responses are still decoded and returned when the body is JSON,
    because the YouTube API reports application errors as
    ``{"error": {"message": ...}}`` bodies that the engine translates itself.
    """

    def __init__(self, timeout_seconds: float = config.API_TIMEOUT_SECONDS,
                 http: Optional[httplib2.Http] = None):
        self.timeout_seconds = timeout_seconds
        self._http = http

    @property
    def http(self) -> httplib2.Http:
        """Lazy-load the HTTP object."""
        if self._http is None:
            self._http = build_http()
        return self._http

    async def __call__(self, url: str) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        safe_url = redact_url(url)
        try:
            response, content = await asyncio.wait_for(
                loop.run_in_executor(None, functools.partial(self.http.request, url, "GET")),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Request timed out after {self.timeout_seconds}s: {safe_url}")
            raise TransportError(f"YouTube API request timed out after {self.timeout_seconds} seconds") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            logger.error(f"Network error for {safe_url}: {e}", error=str(e))
            raise TransportError(f"Could not reach the YouTube API: {e}") from e

        status = getattr(response, "status", None)
        try:
            payload = json.loads(content.decode(config.DEFAULT_ENCODING))
        except (UnicodeDecodeError, ValueError) as e:
            logger.error(f"Undecodable response (HTTP {status}) for {safe_url}")
            raise TransportError(f"Invalid response from the YouTube API (HTTP {status})") from e

        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected response shape from the YouTube API (HTTP {status})")

        logger.debug(f"HTTP {status} for {safe_url}", status=status)
        return payload
