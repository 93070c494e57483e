#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Reference resolution for Playlength.

Classifies user-supplied strings (URLs or raw IDs) as playlist, video or
bare identifier references without touching the network.
"""

import functools
import re
from typing import List, Optional, Tuple

from exceptions import InvalidReferenceError
from logging_config import StructuredLogger
from models import KIND_BARE, KIND_PLAYLIST, KIND_VIDEO, Reference

logger = StructuredLogger(__name__)

_ID = r"(?P<identifier>[a-zA-Z0-9_-]+)"


class ReferenceResolver:
    """Classifies references using ordered URL patterns.

    Playlist patterns are tried before video patterns, so a watch link that
    carries a ``list=`` parameter resolves to the playlist. Input matching no
    pattern but made only of identifier-safe characters becomes a bare
    reference, which the engine tries as a playlist first, then as a video.
    """

    # Order matters within each group
    PLAYLIST_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
        ("playlist_page", re.compile(r"youtube\.com/playlist\?(?:[^#]*&)?list=" + _ID)),
        ("short_link_list", re.compile(r"youtu\.be/[a-zA-Z0-9_-]+\?(?:[^#]*&)?list=" + _ID)),
        ("watch_list", re.compile(r"youtube\.com/watch\?(?:[^#]*&)?list=" + _ID)),
        ("list_param", re.compile(r"[?&]list=" + _ID)),
    )

    VIDEO_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
        ("watch", re.compile(r"youtube\.com/watch\?(?:[^#]*&)?v=" + _ID)),
        ("short_link", re.compile(r"youtu\.be/" + _ID)),
        ("embed", re.compile(r"youtube(?:-nocookie)?\.com/embed/" + _ID)),
        ("legacy_v", re.compile(r"youtube\.com/v/" + _ID)),
        ("shorts", re.compile(r"youtube\.com/shorts/" + _ID)),
    )

    BARE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

    def __init__(self, cache_size: int = 256):
        # Classification is pure, so memoizing per instance is safe
        self.classify = functools.lru_cache(maxsize=cache_size)(self._classify_impl)

    def _classify_impl(self, raw: str) -> Optional[Reference]:
        """Classify one stripped reference string, or return None if unrecognized."""
        for name, pattern in self.PLAYLIST_PATTERNS:
            match = pattern.search(raw)
            if match:
                logger.debug(f"Matched playlist pattern '{name}' for '{raw[:100]}'")
                return Reference(raw=raw, identifier=match.group("identifier"), kind=KIND_PLAYLIST)

        for name, pattern in self.VIDEO_PATTERNS:
            match = pattern.search(raw)
            if match:
                logger.debug(f"Matched video pattern '{name}' for '{raw[:100]}'")
                return Reference(raw=raw, identifier=match.group("identifier"), kind=KIND_VIDEO)

        if self.BARE_ID_PATTERN.match(raw):
            return Reference(raw=raw, identifier=raw, kind=KIND_BARE)

        return None

    def resolve(self, raw: str) -> Reference:
        """Classify a reference.

        Args:
            raw: URL or identifier as typed by the user.

        Returns:
            Reference: The classified reference.

        Raises:
            InvalidReferenceError: If the string is empty or matches no known shape.
        """
        cleaned = raw.strip() if isinstance(raw, str) else ""
        reference = self.classify(cleaned) if cleaned else None
        if reference is None:
            logger.warning(f"Unrecognized reference: '{str(raw)[:100]}'")
            raise InvalidReferenceError(str(raw))
        return reference


def split_references(text: str) -> List[str]:
    """Split multi-line input into non-empty, stripped references."""
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]
