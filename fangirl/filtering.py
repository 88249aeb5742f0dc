"""
Album filtering.

Narrows the ingested albums to playlist candidates. Pure functions: no API
calls, inputs are never mutated.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import AbstractSet, Iterable, List, Optional

from .models import Album, IngestResult, index_albums

logger = logging.getLogger(__name__)


class FilterMode(str, Enum):
    RECENT = "recent"  # released within the recency window
    UNLIKED = "unliked"  # released before the recency window


def cutoff(recency: timedelta, now: Optional[datetime] = None) -> datetime:
    """The release time at which an album stops counting as recent."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now - recency


def select_albums(
    albums: Iterable[Album],
    saved_album_ids: AbstractSet[str],
    recency: timedelta,
    now: Optional[datetime] = None,
    mode: FilterMode = FilterMode.RECENT,
) -> List[Album]:
    """
    Select unsaved albums by release age, deduplicated by ID.

    The first occurrence of an album ID decides; later occurrences are
    skipped. In RECENT mode an album is kept if its age is strictly less
    than ``recency``; in UNLIKED mode if it is at least ``recency``.

    Args:
        albums: Candidate albums, possibly with duplicates
        saved_album_ids: IDs of albums already in the user's library
        recency: Size of the recency window
        now: Reference time (defaults to the current UTC time, read once)
        mode: Which side of the window to keep

    Returns:
        Selected albums in first-occurrence order
    """
    if now is None:
        now = datetime.now(timezone.utc)

    seen = set()
    selected: List[Album] = []
    for album in albums:
        if album.id in seen:
            continue
        seen.add(album.id)

        if album.id in saved_album_ids:
            continue
        is_recent = now - album.release_date < recency
        if is_recent == (mode == FilterMode.RECENT):
            selected.append(album)

    return selected


def filter_result(
    result: IngestResult,
    recency: timedelta,
    now: Optional[datetime] = None,
    mode: FilterMode = FilterMode.RECENT,
) -> IngestResult:
    """Return a new IngestResult holding only the selected albums."""
    logger.info("Filtering albums")
    selected = select_albums(
        result.albums.values(), result.saved_album_ids, recency, now=now, mode=mode
    )
    logger.info(f"Filtered {len(result.albums):,} albums down to {len(selected):,}")
    return IngestResult(
        artists=result.artists,
        albums=index_albums(selected),
        saved_album_ids=result.saved_album_ids,
    )
