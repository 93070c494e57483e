#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
YouTube Data API v3 Client for Playlength.

Builds playlist, playlist item and video requests with the Google API client,
sends them through an injectable transport, and caches every response for a
bounded time window. Pagination through playlist membership and batched
video detail lookups live here.
"""

from typing import Any, Dict, Hashable, List, Optional

from googleapiclient.discovery import Resource, build

from config import config
from exceptions import (AppBaseError, APIConfigurationError, DetailFetchError,
                        PlaylistFetchError, PlaylistNotFoundError, TransportError,
                        upstream_error_message)
from logging_config import StructuredLogger
from models import PlaylistMembers, VideoDetail
from services.transport import HttpTransport, Transport, redact_url
from utils import ResponseCache, performance_timer

logger = StructuredLogger(__name__)


class YouTubeAPIClient:
    """Client for the parts of the YouTube Data API v3 needed for duration analysis.

    Every request goes through ``self.cache``, keyed by endpoint and
    parameters, so identical requests within the TTL window reach the
    upstream API only once. Payloads are cached as received, including
    application-level error payloads.
    """

    # API quota costs for the endpoints used
    API_COST = {
        "videos.list": 1,
        "playlists.list": 1,
        "playlistItems.list": 1,
    }

    def __init__(self, api_key: Optional[str] = None,
                 transport: Optional[Transport] = None,
                 cache: Optional[ResponseCache] = None,
                 page_size: int = config.PLAYLIST_PAGE_SIZE,
                 max_pages: int = config.MAX_PLAYLIST_PAGES,
                 batch_size: int = config.DETAIL_BATCH_SIZE):
        """Initialize the YouTube API client.

        Args:
            api_key: YouTube Data API key. If None, uses config.API_KEY.
            transport: Awaitable ``fetch(url) -> dict``. Defaults to HttpTransport.
            cache: Response cache to use. A new one is created if omitted.
            page_size: Entries requested per playlist page (max 50).
            max_pages: Page cap per playlist; pagination stops silently there.
            batch_size: Video IDs per details request.

        Raises:
            APIConfigurationError: If the API key is missing or requests cannot be built.
        """
        logger.info("Initializing YouTube API Client...")
        self.api_key = api_key if api_key is not None else config.API_KEY
        if not self.api_key:
            logger.critical("YouTube API key is missing.", exc_info=False)
            raise APIConfigurationError("YouTube API Key is not configured.")

        try:
            # Static discovery document bundled with the client, no network access
            self.youtube: Resource = build("youtube", "v3", developerKey=self.api_key,
                                           cache_discovery=False, static_discovery=True)
        except Exception as e:
            logger.critical(f"Error building YouTube API resource: {e}", error=str(e))
            raise APIConfigurationError(f"Could not initialize YouTube API service: {e}") from e

        self.transport: Transport = transport or HttpTransport()
        self.cache = cache if cache is not None else ResponseCache()
        self.page_size = page_size
        self.max_pages = max_pages
        self.batch_size = batch_size

        # Statistics tracking (cache hits are not counted)
        self.api_calls_count = 0
        self.api_quota_used = 0
        logger.info("YouTube API Client initialized.")

    async def _get_json(self, cache_key: Hashable, request: Any, endpoint: str) -> Dict[str, Any]:
        """Send a built request through the cache and transport.

        Args:
            cache_key: Signature of the request (endpoint and parameters).
            request: Google API client request object; only its URI is used.
            endpoint: Endpoint name for quota accounting.

        Returns:
            dict: The decoded payload, possibly an error payload.

        Raises:
            TransportError: If the transport fails.
        """
        url = request.uri

        async def load() -> Dict[str, Any]:
            logger.debug(f"Calling {endpoint}: {redact_url(url)}")
            self.api_calls_count += 1
            self.api_quota_used += self.API_COST.get(endpoint, 1)
            try:
                return await self.transport(url)
            except AppBaseError:
                raise
            except Exception as e:
                logger.error(f"Transport failure calling {endpoint}: {e}", error=str(e))
                raise TransportError(f"YouTube API request failed: {e}") from e

        return await self.cache.get_or_fetch(cache_key, load)

    async def fetch_playlist_info(self, playlist_id: str) -> Dict[str, str]:
        """Gets the title and owner of a playlist.

        Returns:
            dict: ``{"title": ..., "channel_title": ...}``.

        Raises:
            PlaylistFetchError: If the payload carries an error.
            PlaylistNotFoundError: If the API returns no playlist record.
        """
        req = self.youtube.playlists().list(part="snippet", id=playlist_id)
        resp = await self._get_json(("playlists", playlist_id), req, "playlists.list")

        message = upstream_error_message(resp)
        if message is not None:
            logger.error(f"API error retrieving playlist {playlist_id}: {message}")
            raise PlaylistFetchError(message)

        items = resp.get("items") or []
        if not items:
            logger.warning(f"Playlist {playlist_id} not found (empty result set).")
            raise PlaylistNotFoundError(playlist_id)

        snippet = items[0].get("snippet", {}) or {}
        return {
            "title": snippet.get("title", ""),
            "channel_title": snippet.get("channelTitle", ""),
        }

    async def fetch_all_members(self, playlist_id: str) -> PlaylistMembers:
        """Retrieves every membership page of a playlist.

        Follows ``nextPageToken`` until a page has none, or until ``max_pages``
        pages were read, in which case the result is marked ``truncated``.
        Any error payload aborts the whole pagination; pages already read are
        discarded.

        Args:
            playlist_id: The YouTube Playlist ID.

        Returns:
            PlaylistMembers: All entries in membership order.

        Raises:
            PlaylistFetchError: If a page payload carries an error.
        """
        items: List[dict] = []
        page_token: Optional[str] = None
        page_count = 0
        truncated = False

        with performance_timer(f"fetch_all_members_{playlist_id}"):
            while True:
                params = {
                    "part": "snippet",
                    "playlistId": playlist_id,
                    "maxResults": self.page_size,
                }
                if page_token:
                    params["pageToken"] = page_token
                req = self.youtube.playlistItems().list(**params)

                resp = await self._get_json(("playlistItems", playlist_id, page_count), req,
                                            "playlistItems.list")
                message = upstream_error_message(resp)
                if message is not None:
                    logger.error(
                        f"API error on page {page_count + 1} of playlist {playlist_id}: {message}",
                        playlist_id=playlist_id, page=page_count + 1
                    )
                    raise PlaylistFetchError(message)

                items.extend(resp.get("items") or [])
                page_count += 1
                page_token = resp.get("nextPageToken")

                if not page_token:
                    break
                if page_count >= self.max_pages:
                    truncated = True
                    logger.warning(
                        f"Playlist {playlist_id} truncated at {page_count} pages ({len(items)} entries).",
                        playlist_id=playlist_id, page_count=page_count, entries=len(items)
                    )
                    break

        logger.debug(f"Fetched {len(items)} entries in {page_count} page(s) for playlist {playlist_id}")
        return PlaylistMembers(playlist_id=playlist_id, items=items,
                               page_count=page_count, truncated=truncated)

    async def fetch_details(self, video_ids: List[str]) -> List[VideoDetail]:
        """Fetches duration, title and thumbnail for videos in batches.

        IDs are split into consecutive chunks of ``batch_size``; each chunk is
        one cached request. The first error payload aborts the operation and
        nothing is returned. Videos the API does not return (private, deleted)
        are simply absent from the result.

        Args:
            video_ids: Video IDs, in the order they should be requested.

        Returns:
            list: VideoDetail objects in API response order.

        Raises:
            DetailFetchError: If a batch payload carries an error.
        """
        if not video_ids:
            return []

        details: List[VideoDetail] = []
        with performance_timer("fetch_details"):
            for i in range(0, len(video_ids), self.batch_size):
                batch_ids = video_ids[i:i + self.batch_size]
                ids_string = ",".join(batch_ids)
                logger.debug(f"Processing video details batch {i // self.batch_size + 1} "
                             f"({len(batch_ids)} IDs starting with {batch_ids[0]})")

                req = self.youtube.videos().list(part="contentDetails,snippet", id=ids_string)
                resp = await self._get_json(("videos", ids_string), req, "videos.list")

                message = upstream_error_message(resp)
                if message is not None:
                    logger.error(f"API error fetching video details batch starting with {batch_ids[0]}: {message}")
                    raise DetailFetchError(message)

                details.extend(VideoDetail.from_api_response(item) for item in resp.get("items") or [])

        logger.info(f"Retrieved details for {len(details)}/{len(video_ids)} video ID(s).",
                    found=len(details), requested=len(video_ids))
        return details

    async def get_api_stats(self) -> Dict[str, Any]:
        """Returns current API usage statistics and cache state."""
        return {
            "api_calls_count": self.api_calls_count,
            "api_quota_used_estimated": self.api_quota_used,
            "response_cache": await self.cache.get_stats(),
        }
