"""
Spotify authentication.

Uses a refresh token if one is configured (headless/CI runs), otherwise an
OAuth manager whose token is cached under the user cache directory. With no
cached token, spotipy runs the interactive login: it opens the authorize URL
and serves the redirect URI locally until the single callback arrives.

Either way the client gets an auth manager, so spotipy refreshes the access
token itself when it expires mid-run.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable

import spotipy
from spotipy.cache_handler import CacheFileHandler, MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth

from .config import Config
from .retry import Retrier

SCOPES = "user-follow-read user-library-read playlist-modify-private playlist-read-private"
# A hung request must fail so the retry layer can take over
REQUESTS_TIMEOUT = 20

logger = logging.getLogger(__name__)


def get_token_path() -> Path:
    """``$XDG_CACHE_HOME/fangirl/token.json``, defaulting to ``~/.cache``."""
    cache_root = os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache"
    cache_dir = Path(cache_root) / "fangirl"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir / "token.json"


def build_auth_manager(config: Config, cache_path: Path) -> SpotifyOAuth:
    return SpotifyOAuth(
        client_id=config.client_id,
        client_secret=config.client_secret,
        redirect_uri=config.redirect_uri,
        scope=SCOPES,
        cache_handler=CacheFileHandler(cache_path=str(cache_path)),
    )


def acquire_client(config: Config, sleep: Callable[[float], None] = time.sleep) -> spotipy.Spotify:
    """
    Get an authenticated Spotify client.

    Args:
        config: Run configuration holding the app credentials
        sleep: Wait function for retrying the logged-in user lookup

    Returns:
        Authenticated Spotify client
    """
    if config.refresh_token:
        # Headless auth using refresh token (for CI/CD)
        logger.info("Authenticating with refresh token")
        auth = SpotifyOAuth(
            client_id=config.client_id,
            client_secret=config.client_secret,
            redirect_uri=config.redirect_uri,
            scope=SCOPES,
            cache_handler=MemoryCacheHandler(),
        )
        token_info = auth.refresh_access_token(config.refresh_token)
        auth.cache_handler.save_token_to_cache(token_info)
        return spotipy.Spotify(auth_manager=auth, requests_timeout=REQUESTS_TIMEOUT)

    token_path = get_token_path()
    auth = build_auth_manager(config, token_path)
    if auth.cache_handler.get_cached_token() is None:
        logger.info("No cached token; please log in to Spotify in your browser")
    # Fetch the token now so login problems surface before the pipeline starts
    auth.get_access_token(as_dict=False)
    logger.info(f"Spotify token cached at {token_path}")
    sp = spotipy.Spotify(auth_manager=auth, requests_timeout=REQUESTS_TIMEOUT)

    retrier = Retrier(config.max_retries, config.retry_delay, sleep=sleep)
    user = retrier.call(sp.current_user)
    logger.info(f"Logged in as {user['id']}")
    return sp
