"""
Run workflow: ingest, filter, build.

Orchestrates one fangirl run against an authenticated spotipy handle. Errors
propagate to the caller; nothing here exits the process.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

import spotipy

from .client import SpotifyClient
from .config import Config
from .export import albums_frame, export_table
from .filtering import cutoff as compute_cutoff, filter_result
from .ingest import Ingester
from .models import Album
from .playlist import BuildResult, PlaylistBuilder
from .retry import Retrier

logger = logging.getLogger(__name__)


@contextmanager
def timed_step(step_name: str):
    """Context manager to time and log execution of a step."""
    start_time = time.time()
    logger.info(f"[START] {step_name}")
    try:
        yield
    finally:
        elapsed = time.time() - start_time
        logger.info(f"[END] {step_name} (took {elapsed:.2f}s)")


@dataclass(frozen=True)
class RunResult:
    albums: List[Album]
    cutoff: datetime
    build: Optional[BuildResult] = None


def run(
    config: Config,
    sp: spotipy.Spotify,
    now: Optional[datetime] = None,
    sleep: Callable[[float], None] = time.sleep,
    progress: bool = True,
) -> RunResult:
    """
    Run the full pipeline for ``config``.

    Args:
        config: Run configuration
        sp: Authenticated spotipy client
        now: Reference time for the recency window (defaults to now, UTC)
        sleep: Sleep function used for retries and page throttling
        progress: Show a progress bar while fetching albums

    Returns:
        The selected albums, the cutoff, and the playlist build outcome
        (None on a dry run)
    """
    client = SpotifyClient(sp, Retrier(config.max_retries, config.retry_delay, sleep=sleep))

    with timed_step("Ingest"):
        ingester = Ingester(
            client,
            blacklist=config.blacklist,
            market=config.market,
            page_delay=config.page_delay,
            sleep=sleep,
            progress=progress,
        )
        data = ingester.ingest()

    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = compute_cutoff(config.duration, now)

    with timed_step("Filter"):
        filtered = filter_result(data, config.duration, now=now, mode=config.mode)
    albums = filtered.album_list

    if config.export_path is not None:
        path = export_table(albums_frame(albums), str(config.export_path))
        logger.info(f"Exported {len(albums):,} albums to {path}")

    if config.dry_run:
        logger.info(f"Dry run: {len(albums):,} albums selected, no playlist created")
        return RunResult(albums=albums, cutoff=cutoff)

    with timed_step("Build playlist"):
        build = PlaylistBuilder(client).build(
            albums, config.playlist_name, cutoff, mode=config.mode
        )

    return RunResult(albums=albums, cutoff=cutoff, build=build)
