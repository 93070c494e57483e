#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pydantic models and Dataclasses for Playlength API requests, responses,
and internal data structures.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from config import config
from durations import format_duration, parse_duration, speed_table
from exceptions import InvalidInputError


# Reference kinds
KIND_PLAYLIST = "playlist"
KIND_VIDEO = "video"
KIND_BARE = "bare"  # Raw identifier, tried as playlist first, then as video

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

FULL_PLAYLIST = "Full playlist"
SINGLE_VIDEO = "Single video"


# --- Internal data structures ---

@dataclass(frozen=True)
class Reference:
    """A classified user-supplied reference."""

    raw: str
    identifier: str
    kind: str


@dataclass(frozen=True)
class RangeSpec:
    """Optional 1-indexed, inclusive sub-range of a playlist.

    Raises:
        InvalidInputError: If a bound is present and lower than 1.
    """

    start: Optional[int] = None
    end: Optional[int] = None

    def __post_init__(self):
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise InvalidInputError(f"Range {name} must be 1 or greater, got {value}")

    @property
    def is_full(self) -> bool:
        return self.start is None and self.end is None


@dataclass
class PlaylistMembers:
    """Membership entries of a playlist, gathered across pages.

    ``truncated`` is set when pagination stopped at the page cap while the
    API still offered a continuation token.
    """

    playlist_id: str
    items: List[dict] = field(default_factory=list)
    page_count: int = 0
    truncated: bool = False

    @property
    def video_ids(self) -> List[str]:
        """Referenced video IDs in membership order (entries without one are skipped)."""
        return member_video_ids(self.items)


def member_video_ids(items: List[dict]) -> List[str]:
    """Extract ``snippet.resourceId.videoId`` from playlist item resources, in order."""
    ids = []
    for item in items:
        video_id = ((item.get("snippet") or {}).get("resourceId") or {}).get("videoId")
        if video_id:
            ids.append(video_id)
    return ids


@dataclass(frozen=True)
class VideoDetail:
    """Per-video metadata needed for duration analysis."""

    id: str
    title: str = ""
    channel_title: str = ""
    duration_seconds: int = 0
    thumbnail: str = ""

    @classmethod
    def from_api_response(cls, item: dict) -> "VideoDetail":
        """Create a VideoDetail from a YouTube API ``videos`` resource item."""
        snippet = item.get("snippet", {}) or {}
        thumbnails = snippet.get("thumbnails", {}) or {}
        return cls(
            id=item.get("id", ""),
            title=snippet.get("title", ""),
            channel_title=snippet.get("channelTitle", ""),
            duration_seconds=parse_duration((item.get("contentDetails", {}) or {}).get("duration", "")),
            thumbnail=(thumbnails.get("default") or {}).get("url", ""),
        )

    @property
    def url(self) -> str:
        return WATCH_URL_TEMPLATE.format(video_id=self.id)

    def to_entry(self) -> "VideoEntry":
        return VideoEntry(
            id=self.id,
            title=self.title,
            duration=format_duration(self.duration_seconds),
            duration_seconds=self.duration_seconds,
            thumbnail=self.thumbnail,
            url=self.url,
        )


@dataclass(frozen=True)
class VideoEntry:
    """Expanded per-video record returned when details are requested."""

    id: str
    title: str
    duration: str
    duration_seconds: int
    thumbnail: str
    url: str


@dataclass(frozen=True)
class SourceResult:
    """Normalized analysis result for one reference (playlist or single video)."""

    id: str
    kind: str
    title: str
    channel_title: str
    video_count: int
    total_count: int
    range_info: str
    duration_seconds: int
    average_duration_seconds: float
    videos: Optional[Tuple[VideoEntry, ...]] = None
    truncated: bool = False

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration_seconds)

    @property
    def formatted_average_duration(self) -> str:
        return format_duration(self.average_duration_seconds)

    def speed_durations(self, custom_speed: Optional[float] = None) -> Dict[str, str]:
        """Formatted total duration at the configured playback speeds."""
        return speed_table(self.duration_seconds, config.PLAYBACK_SPEEDS, custom_speed)


@dataclass(frozen=True)
class RunTotals:
    """Totals across all results of a run."""

    video_count: int = 0
    duration_seconds: int = 0

    @classmethod
    def from_results(cls, results: List[SourceResult]) -> "RunTotals":
        return cls(
            video_count=sum(r.video_count for r in results),
            duration_seconds=sum(r.duration_seconds for r in results),
        )

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration_seconds)

    def speed_durations(self, custom_speed: Optional[float] = None) -> Dict[str, str]:
        return speed_table(self.duration_seconds, config.PLAYBACK_SPEEDS, custom_speed)


@dataclass
class AnalysisReport:
    """Everything produced by one run of the engine."""

    results: List[SourceResult]
    totals: RunTotals
    run_id: str = ""
    api_calls: int = 0
    processing_time_ms: float = 0.0
    created_at: float = field(default_factory=time.time)


# --- API models ---

class AnalyzeRequest(BaseModel):
    """Request body of the /analyze endpoint.

    References can be given as a list or as newline-separated text (as pasted
    into a text area); both are merged in that order.
    """

    references: List[str] = Field(
        default_factory=list,
        description="YouTube playlist/video URLs or bare IDs, in processing order."
    )
    text: Optional[str] = Field(
        None,
        description="Newline-separated references, appended after `references`."
    )
    range_start: Optional[int] = Field(
        None, ge=1, description="First playlist position to analyze (1-indexed, inclusive)."
    )
    range_end: Optional[int] = Field(
        None, ge=1, description="Last playlist position to analyze (1-indexed, inclusive)."
    )
    include_details: bool = Field(
        False, description="Whether to include the per-video list in each result."
    )
    playback_speed: Optional[float] = Field(
        None, gt=0, description="Custom playback speed added to the speed tables (e.g. 2.25)."
    )

    @field_validator("references")
    @classmethod
    def strip_references(cls, v: List[str]) -> List[str]:
        """Drop blank entries and surrounding whitespace."""
        return [r.strip() for r in v if r and r.strip()]

    def range_spec(self) -> RangeSpec:
        return RangeSpec(start=self.range_start, end=self.range_end)


class VideoEntryModel(BaseModel):
    id: str
    title: str
    duration: str
    duration_seconds: int
    thumbnail: str
    url: str


class SourceResultModel(BaseModel):
    """Serialized SourceResult with display-ready durations."""

    id: str
    kind: str
    title: str
    channel_title: str
    video_count: int
    total_count: int
    range_info: str
    duration_seconds: int
    average_duration_seconds: float
    formatted_duration: str
    formatted_average_duration: str
    speed_durations: Dict[str, str]
    truncated: bool = False
    videos: Optional[List[VideoEntryModel]] = None

    @classmethod
    def from_result(cls, result: SourceResult, custom_speed: Optional[float] = None) -> "SourceResultModel":
        videos = None
        if result.videos is not None:
            videos = [VideoEntryModel(**vars(v)) for v in result.videos]
        return cls(
            id=result.id,
            kind=result.kind,
            title=result.title,
            channel_title=result.channel_title,
            video_count=result.video_count,
            total_count=result.total_count,
            range_info=result.range_info,
            duration_seconds=result.duration_seconds,
            average_duration_seconds=result.average_duration_seconds,
            formatted_duration=result.formatted_duration,
            formatted_average_duration=result.formatted_average_duration,
            speed_durations=result.speed_durations(custom_speed),
            truncated=result.truncated,
            videos=videos,
        )


class RunTotalsModel(BaseModel):
    video_count: int
    duration_seconds: int
    formatted_duration: str
    speed_durations: Dict[str, str]


class AnalyzeResponse(BaseModel):
    """Response body of the /analyze endpoint."""

    results: List[SourceResultModel]
    totals: RunTotalsModel
    run_id: str
    api_call_count: int = Field(0, description="Upstream requests actually sent (cache hits excluded).")
    processing_time_ms: Optional[float] = None

    @classmethod
    def from_report(cls, report: AnalysisReport, custom_speed: Optional[float] = None) -> "AnalyzeResponse":
        totals = report.totals
        return cls(
            results=[SourceResultModel.from_result(r, custom_speed) for r in report.results],
            totals=RunTotalsModel(
                video_count=totals.video_count,
                duration_seconds=totals.duration_seconds,
                formatted_duration=totals.formatted_duration,
                speed_durations=totals.speed_durations(custom_speed),
            ),
            run_id=report.run_id,
            api_call_count=report.api_calls,
            processing_time_ms=report.processing_time_ms,
        )


class ErrorResponse(BaseModel):
    """Model for error responses."""

    detail: str = Field(..., description="Detailed error message.")
    error_code: Optional[str] = Field(None, description="Optional internal error code.")
