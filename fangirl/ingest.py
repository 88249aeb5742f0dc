"""
Ingest: followed artists, their albums, and the user's saved albums.

Followed artists are cursor-paged and complete once the number received
reaches the reported total. Artist albums and saved albums are offset-paged
and complete when there is no next page.
"""

from __future__ import annotations

import logging
import time
from typing import AbstractSet, Callable, FrozenSet, List, Optional, Sequence

from tqdm import tqdm

from .client import ALBUM_INCLUDE_GROUPS, SpotifyClient
from .models import Album, Artist, IngestResult, index_albums

# Pause between album pages of the same artist to stay under the rate limit
DEFAULT_PAGE_DELAY = 1.0
DEFAULT_MARKET = "US"

logger = logging.getLogger(__name__)


def _percent(done: int, total: int) -> float:
    return 100.0 * done / total if total else 100.0


class Ingester:
    """Builds an IngestResult from the Spotify account behind ``client``."""

    def __init__(
        self,
        client: SpotifyClient,
        blacklist: AbstractSet[str] = frozenset(),
        market: str = DEFAULT_MARKET,
        page_delay: float = DEFAULT_PAGE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        progress: bool = False,
    ):
        self.client = client
        self.blacklist = frozenset(blacklist)
        self.market = market
        self.page_delay = page_delay
        self.sleep = sleep
        self.progress = progress

    def ingest(self) -> IngestResult:
        logger.info("Fetching all followed artists")
        artists = self.fetch_followed_artists()
        logger.info(f"Fetched {len(artists):,} followed artists")

        logger.info("Getting albums for artists")
        albums = self.fetch_albums_for_artists(artists)
        logger.info(f"Fetched {len(albums):,} albums for all artists")

        logger.info("Getting saved albums for user")
        saved_album_ids = self.fetch_saved_albums()
        logger.info(f"Got {len(saved_album_ids):,} saved albums")

        return IngestResult(
            artists=tuple(artists),
            albums=index_albums(albums),
            saved_album_ids=saved_album_ids,
        )

    def fetch_followed_artists(self) -> List[Artist]:
        """All followed artists not on the blacklist, in arrival order."""
        artists: List[Artist] = []
        after: Optional[str] = None
        fetched = 0

        while True:
            page = self.client.followed_artists(after=after)
            for item in page.items:
                fetched += 1
                artist = Artist.from_api(item)
                if artist.name in self.blacklist:
                    logger.info(f"  Skipping blacklisted artist: {artist.name!r}")
                    continue
                artists.append(artist)

            logger.debug(f"  Fetched {_percent(fetched, page.total):.1f}% of followed artists")
            if fetched >= page.total:
                break
            if not page.items or not page.after:
                logger.warning(
                    f"Followed artists ended early: got {fetched} of {page.total} reported"
                )
                break
            after = page.after

        return artists

    def fetch_albums_for_artists(self, artists: Sequence[Artist]) -> List[Album]:
        """Albums, singles and compilations of every artist, flattened."""
        albums: List[Album] = []
        iterator = tqdm(artists, desc="Artists", unit="artist", disable=not self.progress)

        for i, artist in enumerate(iterator):
            logger.debug(
                f"Getting albums for artist: {artist.name!r} "
                f"({_percent(i, len(artists)):.1f}% done)"
            )
            page = self.client.artist_albums(
                artist.id, market=self.market, include_groups=ALBUM_INCLUDE_GROUPS
            )
            while True:
                albums.extend(Album.from_api(item) for item in page.items)
                next_page = self.client.next_page(page)
                if next_page is None:
                    break
                page = next_page
                self.sleep(self.page_delay)

        return albums

    def fetch_saved_albums(self) -> FrozenSet[str]:
        """IDs of every album in the user's library."""
        saved = set()
        for page in self.client.iter_pages(self.client.saved_albums()):
            for item in page.items:
                album = item.get("album") or {}
                if album.get("id"):
                    saved.add(album["id"])
            logger.debug(f"  Fetched {_percent(len(saved), page.total):.1f}% of saved albums")
        return frozenset(saved)
