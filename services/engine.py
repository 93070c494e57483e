#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Playlist length engine for Playlength.

Orchestrates reference resolution, playlist pagination, range filtering and
batched video detail lookups to produce one normalized result per reference,
then combines them into run-wide totals.
"""

import time
import uuid
from typing import Any, Dict, Iterable, List, Optional

from cache_manager import cache_manager
from config import config
from durations import parse_duration
from exceptions import (AnalysisError, AppBaseError, InvalidInputError,
                        PlaylistNotFoundError, VideoNotFoundError)
from logging_config import StructuredLogger
from models import (KIND_PLAYLIST, KIND_VIDEO, SINGLE_VIDEO, AnalysisReport,
                    RangeSpec, Reference, RunTotals, SourceResult, VideoDetail,
                    member_video_ids)
from services.range_filter import apply_range
from services.resolver import ReferenceResolver
from services.youtube_api import YouTubeAPIClient
from utils import performance_timer

logger = StructuredLogger(__name__)


class PlaylistLengthEngine:
    """Computes playback durations for playlists and videos.

    References are processed strictly in the order given, one at a time. A
    run is all-or-nothing: the first failing reference aborts it, and the
    error is re-raised with that reference attached.
    """

    def __init__(self, api_client: YouTubeAPIClient, resolver: Optional[ReferenceResolver] = None):
        """Initialize the engine.

        Args:
            api_client: An instance of YouTubeAPIClient.
            resolver: Reference resolver; a new one is created if omitted.
        """
        if not isinstance(api_client, YouTubeAPIClient):
            raise TypeError("api_client must be an instance of YouTubeAPIClient")

        self.api_client = api_client
        self.resolver = resolver or ReferenceResolver()

        self._global_stats = {
            "runs_processed": 0,
            "runs_failed": 0,
            "references_processed": 0,
            "videos_analyzed_total": 0,
            "total_processing_time_ms": 0.0,
            "engine_start_time": time.monotonic(),
        }

        self._register_caches()
        logger.info("PlaylistLengthEngine initialized.")

    def _register_caches(self):
        """Register all caches with the cache manager."""
        cache_manager.register_response_cache("api_responses", self.api_client.cache)
        cache_manager.register_func_cache("reference_parser", self.resolver.classify)
        cache_manager.register_func_cache("parse_duration", parse_duration)

    async def analyze(self, references: Iterable[str], range_spec: Optional[RangeSpec] = None,
                      include_details: bool = False) -> AnalysisReport:
        """Analyze every reference and compute run totals.

        Args:
            references: Playlist/video URLs or IDs, processed in this order.
                        Blank entries are ignored.
            range_spec: Optional 1-indexed inclusive window, applied to playlists only.
            include_details: Whether to attach the per-video list to each result.

        Returns:
            AnalysisReport: Results in input order, totals and run statistics.

        Raises:
            InvalidInputError: If no reference is given or too many are given.
            AppBaseError: The first error raised while analyzing a reference,
                          with ``reference`` set. No partial results are returned.
        """
        refs = [r.strip() for r in references if r and r.strip()]
        if not refs:
            raise InvalidInputError("Please enter at least one YouTube video or playlist URL.")
        if len(refs) > config.MAX_REFERENCES_PER_RUN:
            raise InvalidInputError(
                f"Too many references ({len(refs)}); at most {config.MAX_REFERENCES_PER_RUN} per run."
            )

        run_id = str(uuid.uuid4())[:8]
        start_time_mono = time.monotonic()
        start_api_calls = self.api_client.api_calls_count
        self._global_stats["runs_processed"] += 1
        run_log = logger.bind(run_id=run_id)

        run_log.info(
            f"[RUN-{run_id}] Analyzing {len(refs)} reference(s)",
            reference_count=len(refs),
            range_start=range_spec.start if range_spec else None,
            range_end=range_spec.end if range_spec else None,
            include_details=include_details
        )

        results: List[SourceResult] = []
        try:
            for raw in refs:
                results.append(await self._analyze_reference(raw, range_spec, include_details, run_log))
        except AppBaseError as e:
            self._global_stats["runs_failed"] += 1
            run_log.error(f"[RUN-{run_id}] Run aborted: {e.message}",
                          error_code=e.error_code, reference=e.reference)
            raise

        totals = RunTotals.from_results(results)
        processing_time_ms = round((time.monotonic() - start_time_mono) * 1000, 2)

        self._global_stats["references_processed"] += len(results)
        self._global_stats["videos_analyzed_total"] += totals.video_count
        self._global_stats["total_processing_time_ms"] += processing_time_ms

        run_log.info(
            f"[RUN-{run_id}] Completed: {totals.video_count} video(s), {totals.formatted_duration} total",
            video_count=totals.video_count,
            duration_seconds=totals.duration_seconds, processing_time_ms=processing_time_ms
        )
        return AnalysisReport(
            results=results,
            totals=totals,
            run_id=run_id,
            api_calls=self.api_client.api_calls_count - start_api_calls,
            processing_time_ms=processing_time_ms,
        )

    async def _analyze_reference(self, raw: str, range_spec: Optional[RangeSpec],
                                 include_details: bool, run_log: StructuredLogger) -> SourceResult:
        """Resolve and analyze one reference, attaching it to any error raised."""
        reference: Optional[Reference] = None
        try:
            reference = self.resolver.resolve(raw)
            run_log.info(f"Identified {reference.kind} '{reference.identifier}'",
                         kind=reference.kind, identifier=reference.identifier)

            with performance_timer(f"analyze_{reference.kind}"):
                if reference.kind == KIND_PLAYLIST:
                    return await self._analyze_playlist(reference.identifier, range_spec, include_details)
                if reference.kind == KIND_VIDEO:
                    return await self._analyze_video(reference.identifier, include_details)
                return await self._analyze_bare(reference.identifier, range_spec, include_details, run_log)
        except AppBaseError as e:
            raise e.attach_reference(reference.identifier if reference else raw)
        except Exception as e:
            run_log.error(f"Unexpected {type(e).__name__} analyzing '{raw[:100]}': {e}", exc_info=True)
            error = AnalysisError(f"Unexpected error ({type(e).__name__}): {e}")
            raise error.attach_reference(reference.identifier if reference else raw) from e

    async def _analyze_bare(self, identifier: str, range_spec: Optional[RangeSpec],
                            include_details: bool, run_log: StructuredLogger) -> SourceResult:
        """Try a raw identifier as a playlist, then as a video.

        If neither exists, the playlist lookup's error is raised.
        """
        try:
            return await self._analyze_playlist(identifier, range_spec, include_details)
        except PlaylistNotFoundError as playlist_error:
            run_log.info(f"'{identifier}' is not a playlist, trying as video")
            try:
                return await self._analyze_video(identifier, include_details)
            except VideoNotFoundError:
                raise playlist_error

    async def _analyze_playlist(self, playlist_id: str, range_spec: Optional[RangeSpec],
                                include_details: bool) -> SourceResult:
        """Compute the duration of a playlist, or of a range of it."""
        info = await self.api_client.fetch_playlist_info(playlist_id)
        members = await self.api_client.fetch_all_members(playlist_id)

        selected, range_info = apply_range(members.items, range_spec)
        details = await self.api_client.fetch_details(member_video_ids(selected))

        video_count = len(selected)
        total_seconds = sum(d.duration_seconds for d in details)
        average = total_seconds / video_count if video_count > 0 else 0

        return SourceResult(
            id=playlist_id,
            kind=KIND_PLAYLIST,
            title=info["title"],
            channel_title=info["channel_title"],
            video_count=video_count,
            total_count=len(members.items),
            range_info=range_info,
            duration_seconds=total_seconds,
            average_duration_seconds=average,
            videos=self._entries(details) if include_details else None,
            truncated=members.truncated,
        )

    async def _analyze_video(self, video_id: str, include_details: bool) -> SourceResult:
        """Compute the duration of a single video."""
        details = await self.api_client.fetch_details([video_id])
        if not details:
            raise VideoNotFoundError(video_id)
        video = details[0]

        return SourceResult(
            id=video_id,
            kind=KIND_VIDEO,
            title=video.title,
            channel_title=video.channel_title,
            video_count=1,
            total_count=1,
            range_info=SINGLE_VIDEO,
            duration_seconds=video.duration_seconds,
            average_duration_seconds=video.duration_seconds,
            videos=self._entries([video]) if include_details else None,
        )

    @staticmethod
    def _entries(details: List[VideoDetail]):
        return tuple(d.to_entry() for d in details)

    async def get_global_stats(self) -> Dict[str, Any]:
        """Engine, API client and cache statistics for the /health endpoint."""
        stats = dict(self._global_stats)
        stats["uptime_seconds"] = round(time.monotonic() - stats.pop("engine_start_time"), 1)
        stats["api"] = await self.api_client.get_api_stats()
        stats["caches"] = await cache_manager.get_stats()
        return stats

    async def clear_caches(self) -> Dict[str, Any]:
        """Clear every registered cache."""
        return await cache_manager.clear_all_caches()

    async def clear_cache(self, name: str) -> Any:
        """Clear one registered cache by name.

        Raises:
            ValueError: If no cache is registered under that name.
        """
        return await cache_manager.clear_cache_by_name(name)
