#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Duration helpers for Playlength.

Conversion between ISO 8601 durations (as returned in ``contentDetails.duration``),
whole seconds and the ``HH:MM:SS`` display format, plus playback speed scaling.
"""

import functools
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

import isodate

from exceptions import InvalidInputError
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

# Reference point for durations with year/month components (isodate.Duration)
_EPOCH = datetime(1970, 1, 1)


@functools.lru_cache(maxsize=4096)
def parse_duration(encoded: str) -> int:
    """Convert an ISO 8601 duration string to whole seconds.

    Missing components count as zero and fractional seconds are truncated.
    Anything that is not a parseable duration (empty string, garbage, None,
    components too large to represent) yields 0 instead of raising.

    Args:
        encoded: Duration such as ``PT1H2M3S`` or ``P1DT2H``.

    Returns:
        int: Number of whole seconds, never negative.
    """
    if not encoded or not isinstance(encoded, str):
        return 0
    try:
        parsed = isodate.parse_duration(encoded.strip())
        if not isinstance(parsed, timedelta):
            parsed = parsed.totimedelta(start=_EPOCH)
    except (isodate.ISO8601Error, ValueError, TypeError, OverflowError):
        logger.debug(f"Unparseable duration '{encoded[:40]}' treated as 0s")
        return 0
    return max(0, int(parsed.total_seconds()))


def encode_duration(seconds: int) -> str:
    """Encode whole seconds as an ISO 8601 duration (``3661`` -> ``PT1H1M1S``)."""
    return isodate.duration_isoformat(timedelta(seconds=int(seconds)))


def format_duration(seconds: float) -> str:
    """Format seconds as zero-padded ``HH:MM:SS``.

    The input is rounded half-up to the nearest second. Hours are not wrapped
    at 24 and grow beyond two digits when needed. Callers pass non-negative values.
    """
    total = int(seconds + 0.5)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def scale_duration(seconds: float, speed: float) -> float:
    """Return the wall-clock time needed to watch ``seconds`` of video at ``speed``.

    Raises:
        InvalidInputError: If speed is not strictly positive.
    """
    if speed is None or speed <= 0:
        raise InvalidInputError(f"Playback speed must be greater than 0, got {speed}")
    return seconds / speed


def speed_label(speed: float) -> str:
    """Label used for a speed in tables, e.g. ``1.25x`` or ``2.00x``."""
    return f"{speed:.2f}x"


def speed_table(seconds: float, speeds: Iterable[float],
                custom_speed: Optional[float] = None) -> Dict[str, str]:
    """Build a label -> formatted duration mapping for several playback speeds.

    The custom speed is only added when it differs from normal speed (1.0).

    Args:
        seconds: Duration at normal speed.
        speeds: The standard speeds to report.
        custom_speed: Optional user-chosen speed.

    Returns:
        dict: Ordered mapping such as ``{"1.25x": "00:48:00", ...}``.
    """
    all_speeds = list(speeds)
    if custom_speed is not None and custom_speed != 1 and custom_speed not in all_speeds:
        all_speeds.append(custom_speed)
    return {speed_label(s): format_duration(scale_duration(seconds, s)) for s in all_speeds}
