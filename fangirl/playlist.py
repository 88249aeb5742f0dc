"""
Playlist creation.

Creates the destination playlist and fills it with every track of the
selected albums. Tracks are added in batches of at most 100, the most the
Spotify API accepts per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence

from .client import SPOTIFY_API_MAX_TRACKS_PER_REQUEST, SpotifyClient
from .filtering import FilterMode
from .models import Album

logger = logging.getLogger(__name__)


def format_playlist_name(base_name: str, cutoff: datetime) -> str:
    """e.g. ``fangirl (September 17, 2026)``"""
    return f"{base_name} ({cutoff:%B} {cutoff.day}, {cutoff.year})"


def format_description(cutoff: datetime, mode: FilterMode = FilterMode.RECENT) -> str:
    when = "since" if mode == FilterMode.RECENT else "before"
    return (
        f"Albums released {when} {cutoff.isoformat(timespec='seconds')} by artists "
        f"you follow that are not in your library. Created by fangirl."
    )


@dataclass(frozen=True)
class BuildResult:
    playlist_id: str
    albums_imported: int
    tracks_added: int


class PlaylistBuilder:
    """Materializes a list of albums as a new private playlist."""

    def __init__(
        self,
        client: SpotifyClient,
        batch_size: int = SPOTIFY_API_MAX_TRACKS_PER_REQUEST,
    ):
        if not 0 < batch_size <= SPOTIFY_API_MAX_TRACKS_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {SPOTIFY_API_MAX_TRACKS_PER_REQUEST}"
            )
        self.client = client
        self.batch_size = batch_size

    def build(
        self,
        albums: Sequence[Album],
        base_name: str,
        cutoff: datetime,
        mode: FilterMode = FilterMode.RECENT,
    ) -> BuildResult:
        user_id = self.client.current_user_id()
        name = format_playlist_name(base_name, cutoff)
        playlist_id = self.client.create_playlist(
            user_id,
            name,
            description=format_description(cutoff, mode),
            public=False,
        )
        logger.info(f"Created playlist {name!r} ({playlist_id})")

        tracks_added = 0
        for i, album in enumerate(albums, start=1):
            tracks_added += self.add_album(playlist_id, album)
            logger.info(f"{i} of {len(albums)} albums imported")

        logger.info(f"✅ Added {tracks_added:,} tracks from {len(albums):,} albums to {name!r}")
        return BuildResult(
            playlist_id=playlist_id,
            albums_imported=len(albums),
            tracks_added=tracks_added,
        )

    def add_album(self, playlist_id: str, album: Album) -> int:
        """Add every track of ``album`` to the playlist; returns the track count."""
        logger.debug(f"Importing {album.name!r} by {album.artist_name!r}")
        batch: List[str] = []
        added = 0

        for page in self.client.iter_pages(self.client.album_tracks(album.id)):
            for item in page.items:
                if not item.get("id"):
                    continue
                batch.append(item["id"])
                if len(batch) >= self.batch_size:
                    self.client.add_tracks(playlist_id, batch)
                    added += len(batch)
                    batch = []

        if batch:
            self.client.add_tracks(playlist_id, batch)
            added += len(batch)

        return added
