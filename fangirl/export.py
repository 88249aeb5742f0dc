"""Tabular export of selected albums (``--export``)."""

from __future__ import annotations
from pathlib import Path
from typing import Iterable
import pandas as pd

from .models import Album

ALBUM_COLUMNS = ["album_id", "album_name", "artist_name", "album_type", "release_date"]

_WRITERS = {
    ".parquet": lambda df, p: df.to_parquet(p, index=False),
    ".pq": lambda df, p: df.to_parquet(p, index=False),
    ".csv": lambda df, p: df.to_csv(p, index=False),
    ".json": lambda df, p: df.to_json(p, orient="records", indent=2),
}


def albums_frame(albums: Iterable[Album]) -> pd.DataFrame:
    rows = [{
        "album_id": a.id,
        "album_name": a.name,
        "artist_name": a.artist_name,
        "album_type": a.album_type,
        "release_date": a.release_date.date().isoformat(),
    } for a in albums]
    return pd.DataFrame(rows, columns=ALBUM_COLUMNS)


def export_table(df: pd.DataFrame, out: str) -> str:
    """Write ``df`` in the format named by the suffix of ``out``.

    Unknown suffixes fall back to parquet. Returns the path written.
    """
    p = Path(out)
    writer = _WRITERS.get(p.suffix.lower())
    if writer is None:
        p = p.with_suffix(".parquet")
        writer = _WRITERS[".parquet"]
    p.parent.mkdir(parents=True, exist_ok=True)
    writer(df, p)
    return str(p)
