"""
Spotify client wrapper.

SpotifyClient exposes the handful of Web API calls fangirl needs and routes
every one of them through a Retrier. spotipy already retries some 429s on its
own, but Spotify also returns 502s and other errors during long runs, and
those need retrying too.

Paging is unified behind ``Page`` and ``next_page``: every paged resource
comes back as a Page, and ``next_page`` returns the following Page or None
when there are no more pages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional, Sequence

import spotipy

from .retry import Retrier

# Spotify API limits
SPOTIFY_API_PAGINATION_LIMIT = 50
SPOTIFY_API_MAX_TRACKS_PER_REQUEST = 100

ALBUM_INCLUDE_GROUPS = ("album", "single", "compilation")


@dataclass
class Page:
    """One page of a paged Spotify resource."""

    items: List[dict]
    total: int
    next: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: dict) -> "Page":
        return cls(
            items=list(raw.get("items") or []),
            total=raw.get("total") or 0,
            next=raw.get("next"),
            raw=raw,
        )


@dataclass
class CursorPage(Page):
    """A page of a cursor-paged resource (followed artists)."""

    after: Optional[str] = None

    @classmethod
    def from_api(cls, raw: dict) -> "CursorPage":
        # Followed artists come wrapped in an "artists" envelope
        body = raw.get("artists", raw)
        cursors = body.get("cursors") or {}
        return cls(
            items=list(body.get("items") or []),
            total=body.get("total") or 0,
            next=body.get("next"),
            raw=body,
            after=cursors.get("after"),
        )


class SpotifyClient:
    """
    Retrying facade over a spotipy.Spotify handle.

    Usage:
        client = SpotifyClient(spotipy.Spotify(auth_manager=...), Retrier())
        page = client.saved_albums()
        for page in client.iter_pages(page):
            ...
    """

    def __init__(self, sp: spotipy.Spotify, retrier: Optional[Retrier] = None):
        self.sp = sp
        self.retrier = retrier or Retrier()

    def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return self.retrier.call(func, *args, **kwargs)

    # ------------------ Library ------------------
    def followed_artists(self, after: Optional[str] = None) -> CursorPage:
        raw = self._call(
            self.sp.current_user_followed_artists,
            limit=SPOTIFY_API_PAGINATION_LIMIT,
            after=after,
        )
        return CursorPage.from_api(raw)

    def artist_albums(
        self,
        artist_id: str,
        market: Optional[str] = None,
        include_groups: Sequence[str] = ALBUM_INCLUDE_GROUPS,
    ) -> Page:
        raw = self._call(
            self.sp.artist_albums,
            artist_id,
            include_groups=",".join(include_groups),
            country=market,
            limit=SPOTIFY_API_PAGINATION_LIMIT,
        )
        return Page.from_api(raw)

    def saved_albums(self) -> Page:
        raw = self._call(self.sp.current_user_saved_albums, limit=SPOTIFY_API_PAGINATION_LIMIT)
        return Page.from_api(raw)

    def album_tracks(self, album_id: str) -> Page:
        raw = self._call(self.sp.album_tracks, album_id, limit=SPOTIFY_API_PAGINATION_LIMIT)
        return Page.from_api(raw)

    # ------------------ Paging ------------------
    def next_page(self, page: Page) -> Optional[Page]:
        """Fetch the page after ``page``, or None if it was the last one."""
        if not page.next:
            return None
        raw = self._call(self.sp.next, page.raw)
        if raw is None:
            return None
        return type(page).from_api(raw)

    def iter_pages(self, page: Optional[Page]) -> Iterator[Page]:
        """Yield ``page`` and every page after it."""
        while page is not None:
            yield page
            page = self.next_page(page)

    # ------------------ User & playlists ------------------
    def current_user_id(self) -> str:
        return self._call(self.sp.current_user)["id"]

    def create_playlist(
        self,
        user_id: str,
        name: str,
        description: str = "",
        public: bool = False,
    ) -> str:
        playlist = self._call(
            self.sp.user_playlist_create,
            user_id,
            name,
            public=public,
            description=description,
        )
        return playlist["id"]

    def add_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> None:
        if len(track_ids) > SPOTIFY_API_MAX_TRACKS_PER_REQUEST:
            raise ValueError(
                f"Cannot add {len(track_ids)} tracks in one request "
                f"(max {SPOTIFY_API_MAX_TRACKS_PER_REQUEST})"
            )
        self._call(self.sp.playlist_add_items, playlist_id, list(track_ids))
