"""Test that all public exports are importable."""

import pytest


def test_import_main():
    """Test importing main module."""
    import fangirl
    assert hasattr(fangirl, 'run')
    assert hasattr(fangirl, '__version__')


def test_import_pipeline():
    """Test importing pipeline stages."""
    from fangirl import Ingester, PlaylistBuilder, filter_result, select_albums, FilterMode
    assert all([Ingester, PlaylistBuilder, filter_result, select_albums])
    assert FilterMode.RECENT.value == "recent"


def test_import_client():
    """Test importing client and retry utilities."""
    from fangirl import SpotifyClient, Page, CursorPage, Retrier, retry_call
    from fangirl.client import SPOTIFY_API_MAX_TRACKS_PER_REQUEST
    assert SpotifyClient is not None
    assert issubclass(CursorPage, Page)
    assert Retrier is not None
    assert retry_call is not None
    assert SPOTIFY_API_MAX_TRACKS_PER_REQUEST == 100


def test_import_models():
    """Test importing data model classes."""
    from fangirl import Artist, Album, IngestResult
    assert all([Artist, Album, IngestResult])


def test_import_cli():
    """Test importing the console entry point."""
    from fangirl.cli import main
    assert callable(main)
