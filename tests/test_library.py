from __future__ import annotations

import pytest

from spotui.library import LibraryActions
from spotui.state import (
    ActiveBlock,
    AlbumTableContext,
    ApiError,
    ArtistBlock,
    RouteId,
    TrackTableContext,
)


class FakeSpotify:
    def __init__(self):
        self.calls = []
        self.failing = set()
        self.saved = set()
        self.responses = {}

    def _respond(self, name, *args):
        self.calls.append((name, args))
        if name in self.failing:
            raise ApiError(f"{name} failed")
        value = self.responses.get(name)
        return value(*args) if callable(value) else value

    def called(self, name):
        return [args for call, args in self.calls if call == name]

    def current_user_saved_tracks_contains(self, ids):
        self._respond("current_user_saved_tracks_contains", ids)
        return [track_id in self.saved for track_id in ids]

    def current_user_saved_tracks_add(self, ids):
        self._respond("current_user_saved_tracks_add", ids)
        self.saved.update(ids)

    def current_user_saved_tracks_delete(self, ids):
        self._respond("current_user_saved_tracks_delete", ids)
        self.saved.difference_update(ids)

    def user_playlist_tracks(self, *args):
        return self._respond("user_playlist_tracks", *args)

    def current_user_saved_tracks(self, *args):
        return self._respond("current_user_saved_tracks", *args)

    def album_track(self, *args):
        return self._respond("album_track", *args)

    def artist_albums(self, *args):
        return self._respond("artist_albums", *args)

    def artist(self, *args):
        return self._respond("artist", *args)

    def artist_top_tracks(self, *args):
        return self._respond("artist_top_tracks", *args)

    def artist_related_artists(self, *args):
        return self._respond("artist_related_artists", *args)

    def current_user_followed_artists(self, *args):
        return self._respond("current_user_followed_artists", *args)

    def current_user_saved_albums(self, *args):
        return self._respond("current_user_saved_albums", *args)

    def current_user_saved_albums_delete(self, *args):
        return self._respond("current_user_saved_albums_delete", *args)

    def current_user_saved_albums_add(self, *args):
        return self._respond("current_user_saved_albums_add", *args)

    def user_unfollow_artists(self, *args):
        return self._respond("user_unfollow_artists", *args)

    def user_follow_artists(self, *args):
        return self._respond("user_follow_artists", *args)

    def user_playlist_follow_playlist(self, *args):
        return self._respond("user_playlist_follow_playlist", *args)

    def user_playlist_unfollow(self, *args):
        return self._respond("user_playlist_unfollow", *args)

    def search_playlist(self, *args):
        return self._respond("search_playlist", *args)


@pytest.fixture
def spotify():
    return FakeSpotify()


@pytest.fixture
def actions(spotify):
    return LibraryActions(spotify, {"id": "user1", "country": "SE"})


def track(track_id):
    return {"id": track_id, "uri": f"spotify:track:{track_id}"}


def saved_page(offset, ids):
    return {"offset": offset, "limit": 2, "items": [{"track": track(i)} for i in ids]}


def test_saved_tracks_contains_adds_and_removes(actions, spotify):
    spotify.saved = {"a"}
    actions.liked_song_ids_set = {"b", "c"}
    actions.current_user_saved_tracks_contains(["a", "b"])
    assert actions.liked_song_ids_set == {"a", "c"}


def test_saved_tracks_contains_error_opens_error_route(actions, spotify):
    spotify.failing.add("current_user_saved_tracks_contains")
    actions.current_user_saved_tracks_contains(["a"])
    route = actions.navigation.current()
    assert route.id == RouteId.ERROR
    assert route.active_block == ActiveBlock.ERROR
    assert actions.api_error == "current_user_saved_tracks_contains failed"


def test_set_tracks_to_table_skips_tracks_without_id(actions, spotify):
    tracks = [track("a"), {"id": None, "uri": "local"}, track("b")]
    actions.set_tracks_to_table(tracks)
    assert actions.track_table.tracks == tracks
    assert spotify.called("current_user_saved_tracks_contains") == [(["a", "b"],)]


def test_get_playlist_tracks_opens_track_table_once(actions, spotify):
    page = {"offset": 0, "limit": 20, "items": [{"track": track("a")}]}
    spotify.responses["user_playlist_tracks"] = page
    actions.get_playlist_tracks("pl1")
    actions.get_playlist_tracks("pl1")
    assert actions.playlist_tracks is page
    assert actions.track_table.tracks == [track("a")]
    assert [r.id for r in actions.navigation] == [RouteId.HOME, RouteId.TRACK_TABLE]
    assert spotify.called("user_playlist_tracks")[0] == ("spotify", "pl1", None, 20, 0, None)


def test_get_playlist_tracks_failure_is_silent(actions, spotify):
    spotify.failing.add("user_playlist_tracks")
    actions.get_playlist_tracks("pl1")
    assert actions.navigation.current().id == RouteId.HOME
    assert actions.api_error == ""
    assert actions.playlist_tracks is None


def test_made_for_you_playlist_tracks_uses_own_offset(actions, spotify):
    actions.made_for_you_offset = 40
    page = {"offset": 40, "limit": 20, "items": [{"track": track("x")}]}
    spotify.responses["user_playlist_tracks"] = page
    actions.get_made_for_you_playlist_tracks("mfy")
    assert actions.made_for_you_tracks is page
    assert spotify.called("user_playlist_tracks")[0][4] == 40
    assert actions.navigation.current().id == RouteId.TRACK_TABLE


def test_saved_tracks_paging(actions, spotify):
    pages = {None: saved_page(0, ["a", "b"]), 2: saved_page(2, ["c", "d"])}
    spotify.responses["current_user_saved_tracks"] = lambda limit, offset: pages[offset]

    actions.get_current_user_saved_tracks(None)
    assert actions.track_table.context == TrackTableContext.SAVED_TRACKS
    assert actions.track_table.tracks == [track("a"), track("b")]

    actions.get_current_user_saved_tracks_next()
    assert actions.track_table.tracks == [track("c"), track("d")]
    assert actions.library.saved_tracks.index == 1

    actions.get_current_user_saved_tracks_previous()
    assert actions.library.saved_tracks.index == 0
    assert actions.track_table.tracks == [track("a"), track("b")]

    actions.get_current_user_saved_tracks_next()
    assert actions.library.saved_tracks.index == 1
    assert len(spotify.called("current_user_saved_tracks")) == 2


def test_saved_tracks_previous_stays_at_first_page(actions, spotify):
    spotify.responses["current_user_saved_tracks"] = saved_page(0, ["a"])
    actions.get_current_user_saved_tracks(None)
    actions.get_current_user_saved_tracks_previous()
    assert actions.library.saved_tracks.index == 0
    assert actions.track_table.tracks == [track("a")]


def test_saved_albums_empty_page_not_kept(actions, spotify):
    spotify.responses["current_user_saved_albums"] = {"offset": 0, "limit": 20, "items": []}
    actions.get_current_user_saved_albums(None)
    assert actions.library.saved_albums.pages == []


def test_saved_albums_next_and_previous(actions, spotify):
    first = {"offset": 0, "limit": 2, "items": [{"album": {"id": "al1"}}]}
    second = {"offset": 2, "limit": 2, "items": [{"album": {"id": "al2"}}]}
    pages = {None: first, 2: second}
    spotify.responses["current_user_saved_albums"] = lambda limit, offset: pages[offset]
    actions.get_current_user_saved_albums(None)
    actions.get_current_user_saved_albums_next()
    assert actions.library.saved_albums.get_results() is second
    actions.get_current_user_saved_albums_previous()
    assert actions.library.saved_albums.get_results() is first
    actions.get_current_user_saved_albums_next()
    assert actions.library.saved_albums.index == 1
    assert len(spotify.called("current_user_saved_albums")) == 2


def test_get_album_tracks_opens_album_view(actions, spotify):
    tracks = {"offset": 0, "limit": 20, "items": [track("t1")]}
    spotify.responses["album_track"] = tracks
    spotify.saved = {"t1"}
    album = {"id": "al1", "name": "Album"}
    actions.get_album_tracks(album)
    assert actions.selected_album_simplified.album is album
    assert actions.selected_album_simplified.tracks is tracks
    assert actions.selected_album_simplified.selected_index == 0
    assert actions.album_table_context == AlbumTableContext.SIMPLIFIED
    assert actions.navigation.current().id == RouteId.ALBUM_TRACKS
    assert actions.liked_song_ids_set == {"t1"}


def test_get_album_tracks_without_id_does_nothing(actions, spotify):
    actions.get_album_tracks({"id": None})
    assert spotify.calls == []
    assert actions.selected_album_simplified is None


def test_toggle_save_track_round_trip(actions, spotify):
    actions.toggle_save_track("t1")
    assert "t1" in actions.liked_song_ids_set
    assert spotify.saved == {"t1"}
    actions.toggle_save_track("t1")
    assert "t1" not in actions.liked_song_ids_set
    assert spotify.saved == set()


def test_toggle_save_track_add_error(actions, spotify):
    spotify.failing.add("current_user_saved_tracks_add")
    actions.toggle_save_track("t1")
    assert actions.liked_song_ids_set == set()
    assert actions.navigation.current().id == RouteId.ERROR


def _artist_responses(spotify):
    spotify.responses.update(
        artist_albums={"items": [{"id": "al1"}]},
        artist={"id": "ar1", "name": "Looked Up"},
        artist_top_tracks={"tracks": [track("t1")]},
        artist_related_artists={"artists": [{"id": "ar2"}]},
    )


def test_get_artist_with_given_name(actions, spotify):
    _artist_responses(spotify)
    actions.get_artist("ar1", "Given")
    artist = actions.artist
    assert artist.artist_name == "Given"
    assert artist.albums == {"items": [{"id": "al1"}]}
    assert artist.top_tracks == [track("t1")]
    assert artist.related_artists == [{"id": "ar2"}]
    assert artist.artist_hovered_block == ArtistBlock.TOP_TRACKS
    assert artist.artist_selected_block == ArtistBlock.EMPTY
    assert spotify.called("artist") == []
    assert spotify.called("artist_albums") == [("ar1", None, "SE", 20, 0)]


def test_get_artist_looks_up_name(actions, spotify):
    _artist_responses(spotify)
    actions.get_artist("ar1", "")
    assert actions.artist.artist_name == "Looked Up"


def test_get_artist_failure_leaves_artist_unset(actions, spotify):
    _artist_responses(spotify)
    spotify.failing.add("artist_top_tracks")
    actions.get_artist("ar1", "Given")
    assert actions.artist is None
    assert actions.api_error == ""


def test_get_artists_and_unfollow(actions, spotify):
    followed = {"artists": {"items": [{"id": "ar1"}, {"id": "ar2"}], "limit": 20}}
    spotify.responses["current_user_followed_artists"] = followed
    actions.get_artists(None)
    assert actions.artists == [{"id": "ar1"}, {"id": "ar2"}]
    assert actions.library.saved_artists.get_results() is followed["artists"]

    actions.artists_list_index = 1
    actions.user_unfollow_artists()
    assert spotify.called("user_unfollow_artists") == [(["ar2"],)]
    assert len(actions.library.saved_artists.pages) == 2


def test_user_follow_artists_from_search(actions, spotify):
    actions.search_results.artists = {"artists": {"items": [{"id": "ar1"}, {"id": "ar2"}]}}
    actions.search_results.selected_artists_index = 0
    actions.user_follow_artists()
    assert spotify.called("user_follow_artists") == [(["ar1"],)]
    assert actions.api_error == ""
    assert actions.navigation.current().id == RouteId.HOME


def test_user_follow_artists_error(actions, spotify):
    actions.search_results.artists = {"artists": {"items": [{"id": "ar1"}]}}
    actions.search_results.selected_artists_index = 0
    spotify.failing.add("user_follow_artists")
    actions.user_follow_artists()
    assert actions.api_error == "user_follow_artists failed"
    assert actions.navigation.current().id == RouteId.ERROR


def test_saved_album_delete_refetches(actions, spotify):
    page = {"offset": 0, "limit": 20, "items": [{"album": {"id": "al1"}}, {"album": {"id": "al2"}}]}
    spotify.responses["current_user_saved_albums"] = page
    actions.get_current_user_saved_albums(None)
    actions.album_list_index = 1
    actions.current_user_saved_album_delete()
    assert spotify.called("current_user_saved_albums_delete") == [(["al2"],)]
    assert len(actions.library.saved_albums.pages) == 2
    assert actions.library.saved_albums.index == 1
    assert actions.navigation.current().id == RouteId.HOME


def test_saved_album_delete_error(actions, spotify):
    spotify.responses["current_user_saved_albums"] = {
        "offset": 0,
        "limit": 20,
        "items": [{"album": {"id": "al1"}}],
    }
    actions.get_current_user_saved_albums(None)
    spotify.failing.add("current_user_saved_albums_delete")
    actions.current_user_saved_album_delete()
    assert actions.navigation.current().id == RouteId.ERROR
    assert len(spotify.called("current_user_saved_albums")) == 1


def test_saved_album_add_from_search(actions, spotify):
    actions.search_results.albums = {"albums": {"items": [{"id": "al1"}, {"id": "al2"}]}}
    actions.search_results.selected_album_index = 1
    actions.current_user_saved_album_add()
    assert spotify.called("current_user_saved_albums_add") == [(["al2"],)]
    assert actions.api_error == ""
    assert actions.navigation.current().id == RouteId.HOME


def test_saved_album_add_error(actions, spotify):
    actions.search_results.albums = {"albums": {"items": [{"id": "al1"}]}}
    actions.search_results.selected_album_index = 0
    spotify.failing.add("current_user_saved_albums_add")
    actions.current_user_saved_album_add()
    assert actions.api_error == "current_user_saved_albums_add failed"
    assert actions.navigation.current().id == RouteId.ERROR


def test_follow_playlist_from_search(actions, spotify):
    actions.search_results.playlists = {
        "playlists": {"items": [{"id": "pl1", "public": True, "owner": {"id": "owner1"}}]}
    }
    actions.search_results.selected_playlists_index = 0
    actions.user_follow_playlists()
    assert spotify.called("user_playlist_follow_playlist") == [("owner1", "pl1", True)]
    assert actions.api_error == ""
    assert actions.navigation.current().id == RouteId.HOME


def test_follow_playlist_error(actions, spotify):
    actions.search_results.playlists = {
        "playlists": {"items": [{"id": "pl1", "public": False, "owner": {"id": "owner1"}}]}
    }
    actions.search_results.selected_playlists_index = 0
    spotify.failing.add("user_playlist_follow_playlist")
    actions.user_follow_playlists()
    assert actions.api_error == "user_playlist_follow_playlist failed"
    assert actions.navigation.current().id == RouteId.ERROR


def test_unfollow_playlist(actions, spotify):
    actions.playlists = {"items": [{"id": "pl1"}, {"id": "pl2"}]}
    actions.selected_playlist_index = 1
    actions.user_unfollow_playlists()
    assert spotify.called("user_playlist_unfollow") == [("user1", "pl2")]
    assert actions.api_error == ""
    assert actions.navigation.current().id == RouteId.HOME


def test_unfollow_playlist_error(actions, spotify):
    actions.playlists = {"items": [{"id": "pl1"}]}
    actions.selected_playlist_index = 0
    spotify.failing.add("user_playlist_unfollow")
    actions.user_unfollow_playlists()
    assert actions.api_error == "user_playlist_unfollow failed"
    assert actions.navigation.current().id == RouteId.ERROR


def test_get_made_for_you_filters_official_playlists(actions, spotify):
    def search(query, limit, offset, country):
        return {
            "playlists": {
                "limit": limit,
                "items": [
                    {"name": query, "owner": {"id": "spotify"}},
                    {"name": query, "owner": {"id": "someone"}},
                    {"name": query + " copy", "owner": {"id": "spotify"}},
                ],
            }
        }

    spotify.responses["search_playlist"] = search
    actions.get_made_for_you()
    page = actions.library.made_for_you_playlists.get_results()
    assert [p["name"] for p in page["items"]] == [
        "Discover Weekly",
        "Release Radar",
        "On Repeat",
        "Repeat Rewind",
    ]
    assert len(actions.library.made_for_you_playlists.pages) == 1
    assert spotify.called("search_playlist")[0] == ("Discover Weekly", 20, 0, "SE")

    actions.get_made_for_you()
    assert len(spotify.called("search_playlist")) == 4


def test_without_client_nothing_changes():
    actions = LibraryActions()
    actions.get_current_user_saved_tracks(None)
    actions.toggle_save_track("t1")
    actions.get_made_for_you()
    assert actions.library.saved_tracks.pages == []
    assert actions.liked_song_ids_set == set()
    assert actions.navigation.current().id == RouteId.HOME