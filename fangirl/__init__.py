"""
fangirl - a playlist of new albums from the artists you follow.

Follows your Spotify artists, finds their recent albums you haven't saved yet,
and puts every track of them in a new private playlist.

Usage:
    from fangirl import Config, run, acquire_client

    config = Config(client_id="...", client_secret="...")
    result = run(config, acquire_client(config))
"""

from .auth import acquire_client
from .client import Page, CursorPage, SpotifyClient
from .config import Config, load_config
from .error_handling import ConfigurationError, setup_logging
from .filtering import FilterMode, filter_result, select_albums
from .ingest import Ingester
from .models import Album, Artist, IngestResult
from .playlist import BuildResult, PlaylistBuilder
from .retry import Retrier, retry_call
from .workflow import RunResult, run

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "run",
    "RunResult",
    "Ingester",
    "filter_result",
    "select_albums",
    "FilterMode",
    "PlaylistBuilder",
    "BuildResult",
    # Client
    "SpotifyClient",
    "Page",
    "CursorPage",
    "Retrier",
    "retry_call",
    "acquire_client",
    # Data model
    "Artist",
    "Album",
    "IngestResult",
    # Configuration
    "Config",
    "load_config",
    "ConfigurationError",
    "setup_logging",
]
