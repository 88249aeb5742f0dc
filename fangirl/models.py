"""
Data model for the ingest/filter/build pipeline.

All records are immutable. Albums are identified by their Spotify ID only;
names are for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

# Earliest representable release time, used for dates Spotify reports as "0000"
EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


def parse_release_date(value: str, precision: str = "day") -> datetime:
    """
    Parse a Spotify release date into a UTC datetime.

    Spotify reports ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` depending on
    ``release_date_precision``. Missing parts default to the first day.
    Unparseable values map to EPOCH_MIN.
    """
    if not value:
        return EPOCH_MIN

    if precision == "year":
        value = value[:4]
    elif precision == "month":
        value = value[:7]

    parts = value.split("-")
    try:
        year = int(parts[0])
        month = int(parts[1]) if len(parts) > 1 else 1
        day = int(parts[2]) if len(parts) > 2 else 1
        return datetime(year, month, day, tzinfo=timezone.utc)
    except (ValueError, IndexError):
        return EPOCH_MIN


@dataclass(frozen=True)
class Artist:
    id: str
    name: str

    @classmethod
    def from_api(cls, item: dict) -> "Artist":
        return cls(id=item["id"], name=item.get("name", ""))


@dataclass(frozen=True)
class Album:
    id: str
    name: str
    artist_name: str
    release_date: datetime
    release_date_precision: str = "day"
    album_type: str = "album"

    @classmethod
    def from_api(cls, item: dict) -> "Album":
        """Build an Album from a simplified album object."""
        artists = item.get("artists") or []
        precision = item.get("release_date_precision") or "day"
        return cls(
            id=item["id"],
            name=item.get("name", ""),
            artist_name=artists[0].get("name", "") if artists else "",
            release_date=parse_release_date(item.get("release_date", ""), precision),
            release_date_precision=precision,
            album_type=item.get("album_type") or "album",
        )


def index_albums(albums: Iterable[Album]) -> Dict[str, Album]:
    """Key albums by ID. Later duplicates overwrite earlier ones."""
    return {album.id: album for album in albums}


@dataclass(frozen=True)
class IngestResult:
    """Snapshot of the user's followed artists, their albums and saved albums."""

    artists: Tuple[Artist, ...] = ()
    albums: Mapping[str, Album] = field(default_factory=dict)
    saved_album_ids: FrozenSet[str] = frozenset()

    @property
    def album_list(self) -> List[Album]:
        return list(self.albums.values())
