#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Range filtering of playlist membership for Playlength.
"""

from typing import List, Optional, Sequence, Tuple, TypeVar

from models import FULL_PLAYLIST, RangeSpec

T = TypeVar("T")


def apply_range(items: Sequence[T], range_spec: Optional[RangeSpec]) -> Tuple[List[T], str]:
    """Select the 1-indexed, inclusive window of ``items`` described by ``range_spec``.

    Slicing is clamped, so bounds past the end never raise: a start beyond
    the collection simply selects nothing.

    Args:
        items: Playlist entries in membership order.
        range_spec: Optional bounds; None or no bounds means the whole list.

    Returns:
        tuple: (selected_items, description) where description is
               ``"Full playlist"`` or ``"Videos {first} to {last} of {total}"``.
    """
    total = len(items)
    if range_spec is None or range_spec.is_full:
        return list(items), FULL_PLAYLIST

    start = range_spec.start - 1 if range_spec.start is not None else 0
    end = range_spec.end if range_spec.end is not None else total
    description = f"Videos {start + 1} to {min(end, total)} of {total}"
    return list(items[start:end]), description
