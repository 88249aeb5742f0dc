import unittest
from unittest.mock import MagicMock

from fangirl.client import CursorPage, Page, SpotifyClient
from fangirl.retry import Retrier

from fakes import album, artist, make_spotify, server_error, track_ids, SleepRecorder


class TestSpotifyClient(unittest.TestCase):
    def setUp(self):
        self.sleep = SleepRecorder()
        self.retrier = Retrier(max_retries=3, delay=0.5, sleep=self.sleep)
        self.mock_sp = MagicMock()
        self.client = SpotifyClient(self.mock_sp, self.retrier)

    def test_default_retrier(self):
        client = SpotifyClient(self.mock_sp)
        self.assertEqual(client.retrier.max_retries, 60)
        self.assertEqual(client.retrier.delay, 30.0)

    def test_followed_artists_retries_and_parses_cursor(self):
        self.mock_sp.current_user_followed_artists.side_effect = [
            server_error(),
            {"artists": {
                "items": [artist("a1")],
                "total": 3,
                "next": "https://api.test/next",
                "cursors": {"after": "a1"},
            }},
        ]

        page = self.client.followed_artists(after="a0")

        self.assertIsInstance(page, CursorPage)
        self.assertEqual(page.total, 3)
        self.assertEqual(page.after, "a1")
        self.assertEqual([a["id"] for a in page.items], ["a1"])
        self.assertEqual(self.mock_sp.current_user_followed_artists.call_count, 2)
        self.mock_sp.current_user_followed_artists.assert_called_with(limit=50, after="a0")
        self.assertEqual(self.sleep.calls, [0.5])

    def test_artist_albums_filters_release_types_and_market(self):
        self.mock_sp.artist_albums.return_value = {"items": [], "total": 0, "next": None}

        page = self.client.artist_albums("art1", market="SE")

        self.assertEqual(page.items, [])
        self.mock_sp.artist_albums.assert_called_once_with(
            "art1", include_groups="album,single,compilation", country="SE", limit=50
        )

    def test_saved_albums_and_album_tracks_are_retried(self):
        self.mock_sp.current_user_saved_albums.side_effect = [server_error(), server_error(),
                                                              {"items": [], "total": 0, "next": None}]
        self.mock_sp.album_tracks.side_effect = [server_error(),
                                                 {"items": [{"id": "t1"}], "total": 1, "next": None}]

        self.assertEqual(self.client.saved_albums().total, 0)
        self.assertEqual(self.client.album_tracks("alb").items, [{"id": "t1"}])
        self.assertEqual(len(self.sleep.calls), 3)

    def test_exhausted_retries_raise_last_error(self):
        errors = [server_error() for _ in range(4)]
        self.mock_sp.current_user.side_effect = errors

        with self.assertRaises(Exception) as ctx:
            self.client.current_user_id()

        self.assertIs(ctx.exception, errors[-1])
        self.assertEqual(self.mock_sp.current_user.call_count, 4)

    def test_current_user_id(self):
        self.mock_sp.current_user.return_value = {"id": "test_user", "display_name": "Test"}
        self.assertEqual(self.client.current_user_id(), "test_user")

    def test_create_playlist_is_private_by_default(self):
        self.mock_sp.user_playlist_create.side_effect = [server_error(), {"id": "pl1"}]

        playlist_id = self.client.create_playlist("test_user", "fangirl", description="desc")

        self.assertEqual(playlist_id, "pl1")
        self.mock_sp.user_playlist_create.assert_called_with(
            "test_user", "fangirl", public=False, description="desc"
        )

    def test_add_tracks(self):
        self.mock_sp.playlist_add_items.side_effect = [server_error(), {"snapshot_id": "s"}]

        self.client.add_tracks("pl1", ("t1", "t2"))

        self.mock_sp.playlist_add_items.assert_called_with("pl1", ["t1", "t2"])
        self.assertEqual(self.mock_sp.playlist_add_items.call_count, 2)

    def test_add_tracks_rejects_oversized_batch(self):
        with self.assertRaises(ValueError):
            self.client.add_tracks("pl1", [f"t{i}" for i in range(101)])
        self.mock_sp.playlist_add_items.assert_not_called()

    def test_next_page_without_next_link_makes_no_call(self):
        page = Page(items=[{"id": "x"}], total=1, next=None, raw={})

        self.assertIsNone(self.client.next_page(page))
        self.mock_sp.next.assert_not_called()

    def test_next_page_is_retried(self):
        raw = {"items": [], "total": 2, "next": "https://api.test/p2"}
        self.mock_sp.next.side_effect = [server_error(), {"items": [{"id": "b"}], "total": 2, "next": None}]

        page = self.client.next_page(Page.from_api(raw))

        self.assertEqual(page.items, [{"id": "b"}])
        self.mock_sp.next.assert_called_with(raw)
        self.assertEqual(self.mock_sp.next.call_count, 2)

    def test_next_page_returns_none_when_spotipy_does(self):
        self.mock_sp.next.return_value = None
        page = Page.from_api({"items": [], "total": 0, "next": "https://api.test/p2"})
        self.assertIsNone(self.client.next_page(page))


class TestPaging(unittest.TestCase):
    def test_iter_pages_walks_every_page(self):
        sp = make_spotify(
            albums_by_artist={"a": [album(f"alb{i}", "2020-01-01") for i in range(120)]},
        )
        client = SpotifyClient(sp, Retrier(max_retries=0, delay=0))

        pages = list(client.iter_pages(client.artist_albums("a")))

        self.assertEqual([len(p.items) for p in pages], [50, 50, 20])
        self.assertEqual(sp.next.call_count, 2)

    def test_iter_pages_of_none_is_empty(self):
        client = SpotifyClient(MagicMock(), Retrier(max_retries=0, delay=0))
        self.assertEqual(list(client.iter_pages(None)), [])

    def test_album_tracks_paging(self):
        sp = make_spotify(tracks_by_album={"alb": track_ids("alb", 51)})
        client = SpotifyClient(sp, Retrier(max_retries=0, delay=0))

        ids = [t["id"] for p in client.iter_pages(client.album_tracks("alb")) for t in p.items]

        self.assertEqual(ids, track_ids("alb", 51))


if __name__ == "__main__":
    unittest.main()
