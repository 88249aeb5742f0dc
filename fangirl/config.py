"""
Configuration for a fangirl run.

Settings come from command line flags, falling back to environment variables
(optionally loaded from a ``.env`` file), falling back to defaults.
"""

from __future__ import annotations

import argparse
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import FrozenSet, Mapping, Optional, Sequence

from dotenv import load_dotenv

from .error_handling import ConfigurationError
from .filtering import FilterMode
from .ingest import DEFAULT_MARKET, DEFAULT_PAGE_DELAY
from .retry import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY

# ============================================================================
# DEFAULTS
# ============================================================================

DEFAULT_PLAYLIST_NAME = "fangirl"
# Every month is 31 days as far as we're concerned
DEFAULT_DURATION = timedelta(days=31)
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8080/callback"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)([wdhms])")
_DURATION_UNITS = {"w": "weeks", "d": "days", "h": "hours", "m": "minutes", "s": "seconds"}


def parse_str_env(key: str, default: str = "", environ: Optional[Mapping[str, str]] = None) -> str:
    """Read a string environment variable, treating empty as unset."""
    env = os.environ if environ is None else environ
    return env.get(key) or default


def parse_int_env(key: str, default: int, environ: Optional[Mapping[str, str]] = None) -> int:
    """Parse integer environment variable."""
    value = parse_str_env(key, "", environ)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")


def parse_float_env(key: str, default: float, environ: Optional[Mapping[str, str]] = None) -> float:
    """Parse float environment variable."""
    value = parse_str_env(key, "", environ)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {value!r}")


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as ``31d``, ``744h`` or ``1d12h30m``.

    A bare number is a number of days.
    """
    text = value.strip().lower()
    if not text:
        raise ConfigurationError("Duration must not be empty")

    try:
        return timedelta(days=float(text))
    except (ValueError, OverflowError):
        pass

    pos = 0
    kwargs = {}
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        unit = _DURATION_UNITS[match.group(2)]
        kwargs[unit] = kwargs.get(unit, 0.0) + float(match.group(1))
        pos = match.end()

    if pos != len(text) or not kwargs:
        raise ConfigurationError(f"Invalid duration: {value!r} (expected e.g. 31d, 744h, 1d12h)")
    try:
        return timedelta(**kwargs)
    except OverflowError:
        raise ConfigurationError(f"Duration is too long: {value!r}")


def load_blacklist(path: Path) -> FrozenSet[str]:
    """Read artist names to skip, one exact name per line."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read blacklist file {path}: {e}")
    return frozenset(line for line in text.splitlines() if line.strip())


@dataclass(frozen=True)
class Config:
    client_id: str
    client_secret: str = field(repr=False)
    redirect_uri: str = DEFAULT_REDIRECT_URI
    refresh_token: Optional[str] = field(default=None, repr=False)

    playlist_name: str = DEFAULT_PLAYLIST_NAME
    duration: timedelta = DEFAULT_DURATION
    mode: FilterMode = FilterMode.RECENT
    blacklist: FrozenSet[str] = field(default_factory=frozenset)
    market: str = DEFAULT_MARKET

    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    page_delay: float = DEFAULT_PAGE_DELAY

    export_path: Optional[Path] = None
    dry_run: bool = False
    verbose: bool = False
    log_dir: Optional[Path] = None

    def __post_init__(self):
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ConfigurationError(f"retry_delay must be non-negative, got {self.retry_delay}")
        if self.duration <= timedelta(0):
            raise ConfigurationError(f"duration must be positive, got {self.duration}")
        if not self.playlist_name:
            raise ConfigurationError("playlist name must not be empty")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="fangirl",
        description="Collect recent albums from the artists you follow into a new playlist.",
    )
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--recent", dest="mode", action="store_const", const=FilterMode.RECENT,
                      help="Albums released within --duration (default).")
    mode.add_argument("--unliked", dest="mode", action="store_const", const=FilterMode.UNLIKED,
                      help="Unsaved albums released before now minus --duration.")

    ap.add_argument("--playlist", help=f"Playlist base name (default: {DEFAULT_PLAYLIST_NAME})")
    ap.add_argument("--duration", help="What counts as recent, e.g. 31d or 744h (default: 31d)")
    ap.add_argument("--blacklist", type=Path, help="File with artist names to skip, one per line")
    ap.add_argument("--market", help=f"Country code for album availability (default: {DEFAULT_MARKET})")
    ap.add_argument("--max-retries", type=int, help=f"Retries per API call (default: {DEFAULT_MAX_RETRIES})")
    ap.add_argument("--retry-delay", type=float,
                    help=f"Seconds between retries (default: {DEFAULT_RETRY_DELAY:g})")
    ap.add_argument("--export", type=Path, help="Also write the selected albums to a .csv, .json or .parquet file")
    ap.add_argument("--dry-run", action="store_true", help="Select albums but don't create a playlist")
    ap.add_argument("--log-dir", type=Path, help="Directory for a dated log file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def load_dotenv_file(path: Optional[Path] = None) -> bool:
    """Load ``.env`` from the working directory (or ``path``) if it exists."""
    env_path = path or Path.cwd() / ".env"
    if env_path.exists():
        return load_dotenv(env_path)
    return False


def load_config(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Build a Config from command line arguments and environment.

    Raises:
        ConfigurationError: If credentials are missing or a value is invalid
    """
    env = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)

    client_id = parse_str_env("SPOTIPY_CLIENT_ID", environ=env)
    client_secret = parse_str_env("SPOTIPY_CLIENT_SECRET", environ=env)
    if not client_id or not client_secret:
        raise ConfigurationError(
            "Missing SPOTIPY_CLIENT_ID or SPOTIPY_CLIENT_SECRET. "
            "Set them in environment variables or .env file."
        )

    duration_text = args.duration or parse_str_env("FANGIRL_DURATION", environ=env)
    duration = parse_duration(duration_text) if duration_text else DEFAULT_DURATION

    blacklist_path = args.blacklist or parse_str_env("FANGIRL_BLACKLIST", environ=env)
    blacklist = load_blacklist(Path(blacklist_path)) if blacklist_path else frozenset()

    max_retries = args.max_retries
    if max_retries is None:
        max_retries = parse_int_env("FANGIRL_MAX_RETRIES", DEFAULT_MAX_RETRIES, env)
    retry_delay = args.retry_delay
    if retry_delay is None:
        retry_delay = parse_float_env("FANGIRL_RETRY_DELAY", DEFAULT_RETRY_DELAY, env)

    return Config(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=parse_str_env("SPOTIPY_REDIRECT_URI", DEFAULT_REDIRECT_URI, env),
        refresh_token=parse_str_env("SPOTIPY_REFRESH_TOKEN", environ=env) or None,
        playlist_name=args.playlist or parse_str_env("FANGIRL_PLAYLIST", DEFAULT_PLAYLIST_NAME, env),
        duration=duration,
        mode=args.mode or FilterMode.RECENT,
        blacklist=blacklist,
        market=(args.market or parse_str_env("FANGIRL_MARKET", DEFAULT_MARKET, env)).upper(),
        max_retries=max_retries,
        retry_delay=retry_delay,
        export_path=args.export,
        dry_run=args.dry_run,
        verbose=args.verbose,
        log_dir=args.log_dir,
    )
