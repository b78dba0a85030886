"""Library actions: saved tracks, albums, followed artists and playlists.

Results from the streaming service are JSON objects as returned by its web
API. Pages are mappings with ``items``, ``offset`` and ``limit``, and tracks,
albums, artists and playlists are mappings with at least ``id``. The client
object is duck-typed. Its methods raise :class:`~spotui.state.ApiError` when a
request fails.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from .state import (
    ActiveBlock,
    AlbumTableContext,
    Artist,
    ArtistBlock,
    ApiError,
    Library,
    NavigationStack,
    RouteId,
    SearchResult,
    SelectedAlbum,
    TrackTable,
    TrackTableContext,
)

SPOTIFY_OWNER_ID = "spotify"
MADE_FOR_YOU_PLAYLISTS = (
    "Discover Weekly",
    "Release Radar",
    "On Repeat",
    "Repeat Rewind",
)

_FAILED = object()


def _attempt(call: Callable[..., Any], *args: Any) -> Any:
    """Run ``call`` and return its result, or ``_FAILED`` if the request failed."""
    try:
        return call(*args)
    except ApiError:
        return _FAILED


def _track_ids(tracks: Iterable[dict[str, Any]]) -> list[str]:
    return [track["id"] for track in tracks if track.get("id") is not None]


class LibraryActions:
    """State of the user's library and the requests that fill it in."""

    def __init__(self, spotify: Any = None, user: dict[str, Any] | None = None) -> None:
        self.spotify = spotify
        self.user = user
        self.navigation = NavigationStack()
        self.api_error = ""
        self.library = Library()
        self.track_table = TrackTable()
        self.liked_song_ids_set: set[str] = set()
        self.large_search_limit = 20
        self.small_search_limit = 4
        self.playlist_offset = 0
        self.made_for_you_offset = 0
        self.playlist_tracks: dict[str, Any] | None = None
        self.made_for_you_tracks: dict[str, Any] | None = None
        self.playlists: dict[str, Any] | None = None
        self.selected_playlist_index: int | None = None
        self.search_results = SearchResult()
        self.selected_album_simplified: SelectedAlbum | None = None
        self.album_table_context = AlbumTableContext.FULL
        self.artist: Artist | None = None
        self.artists: list[dict[str, Any]] = []
        self.album_list_index = 0
        self.artists_list_index = 0
        self.made_for_you_index = 0

    # -- helpers -----------------------------------------------------------

    def _report_error(self, error: BaseException) -> None:
        self.navigation.push(RouteId.ERROR, ActiveBlock.ERROR)
        self.api_error = str(error)

    def _user_country(self) -> str | None:
        assert self.user is not None
        return self.user.get("country") or None

    def _show_track_table(self) -> None:
        if self.navigation.current().id != RouteId.TRACK_TABLE:
            self.navigation.push(RouteId.TRACK_TABLE, ActiveBlock.TRACK_TABLE)

    def _set_wrapped_tracks_to_table(self, page: dict[str, Any]) -> None:
        self.set_tracks_to_table(item["track"] for item in page["items"])

    # -- liked tracks ------------------------------------------------------

    def current_user_saved_tracks_contains(self, ids: Iterable[str]) -> None:
        """Refresh which of ``ids`` are among the user's liked songs."""
        if self.spotify is None:
            return
        ids = list(ids)
        try:
            flags = self.spotify.current_user_saved_tracks_contains(ids)
        except ApiError as exc:
            self._report_error(exc)
            return
        for track_id, liked in zip(ids, flags):
            if liked:
                self.liked_song_ids_set.add(track_id)
            else:
                self.liked_song_ids_set.discard(track_id)

    def set_tracks_to_table(self, tracks: Iterable[dict[str, Any]]) -> None:
        """Show ``tracks`` in the track table and refresh their liked state."""
        self.track_table.tracks = list(tracks)
        self.current_user_saved_tracks_contains(_track_ids(self.track_table.tracks))

    def toggle_save_track(self, track_id: str) -> None:
        """Like the track if it is not liked yet, otherwise unlike it."""
        if self.spotify is None:
            return
        try:
            saved = self.spotify.current_user_saved_tracks_contains([track_id])
        except ApiError as exc:
            self._report_error(exc)
            return
        try:
            if saved and saved[0] is True:
                self.spotify.current_user_saved_tracks_delete([track_id])
                self.liked_song_ids_set.discard(track_id)
            else:
                self.spotify.current_user_saved_tracks_add([track_id])
                self.liked_song_ids_set.add(track_id)
        except ApiError as exc:
            self._report_error(exc)

    # -- playlists ---------------------------------------------------------

    def get_playlist_tracks(self, playlist_id: str) -> None:
        """Fetch a page of a playlist's tracks into the track table."""
        if self.spotify is None:
            return
        page = _attempt(
            self.spotify.user_playlist_tracks,
            SPOTIFY_OWNER_ID,
            playlist_id,
            None,
            self.large_search_limit,
            self.playlist_offset,
            None,
        )
        if page is _FAILED:
            return
        self._set_wrapped_tracks_to_table(page)
        self.playlist_tracks = page
        self._show_track_table()

    def get_made_for_you_playlist_tracks(self, playlist_id: str) -> None:
        """Fetch a page of a made-for-you playlist's tracks into the track table."""
        if self.spotify is None:
            return
        page = _attempt(
            self.spotify.user_playlist_tracks,
            SPOTIFY_OWNER_ID,
            playlist_id,
            None,
            self.large_search_limit,
            self.made_for_you_offset,
            None,
        )
        if page is _FAILED:
            return
        self._set_wrapped_tracks_to_table(page)
        self.made_for_you_tracks = page
        self._show_track_table()

    def user_follow_playlists(self) -> None:
        """Follow the playlist selected in the search results."""
        playlists = self.search_results.playlists
        index = self.search_results.selected_playlists_index
        if playlists is None or index is None or self.spotify is None:
            return
        selected = playlists["playlists"]["items"][index]
        try:
            self.spotify.user_playlist_follow_playlist(
                selected["owner"]["id"], selected["id"], selected.get("public")
            )
        except ApiError as exc:
            self._report_error(exc)

    def user_unfollow_playlists(self) -> None:
        """Unfollow the playlist selected in the user's playlists."""
        index = self.selected_playlist_index
        if self.playlists is None or index is None or self.user is None or self.spotify is None:
            return
        selected = self.playlists["items"][index]
        try:
            self.spotify.user_playlist_unfollow(self.user["id"], selected["id"])
        except ApiError as exc:
            self._report_error(exc)

    def get_made_for_you(self) -> None:
        """Look up the made-for-you playlists once."""
        if self.library.made_for_you_playlists.pages:
            return
        for name in MADE_FOR_YOU_PLAYLISTS:
            self._made_for_you_search_and_add(name)

    def _made_for_you_search_and_add(self, search_string: str) -> None:
        if self.spotify is None or self.user is None:
            return
        try:
            result = self.spotify.search_playlist(
                search_string, self.large_search_limit, 0, self._user_country()
            )
        except ApiError as exc:
            self._report_error(exc)
            return
        found = [
            playlist
            for playlist in result["playlists"]["items"]
            if playlist["owner"]["id"] == SPOTIFY_OWNER_ID and playlist["name"] == search_string
        ]
        pages = self.library.made_for_you_playlists
        current = pages.get_results()
        if current is not None:
            current["items"].extend(found)
        else:
            page = dict(result["playlists"])
            page["items"] = found
            pages.add_pages(page)

    # -- saved tracks ------------------------------------------------------

    def get_current_user_saved_tracks(self, offset: int | None = None) -> None:
        """Fetch a page of liked songs and show it in the track table."""
        if self.spotify is None:
            return
        try:
            saved_tracks = self.spotify.current_user_saved_tracks(self.large_search_limit, offset)
        except ApiError as exc:
            self._report_error(exc)
            return
        self._set_wrapped_tracks_to_table(saved_tracks)
        self.library.saved_tracks.add_pages(saved_tracks)
        self.track_table.context = TrackTableContext.SAVED_TRACKS

    def get_current_user_saved_tracks_next(self) -> None:
        """Show the next page of liked songs, fetching it if not fetched yet."""
        pages = self.library.saved_tracks
        cached = pages.get_results(pages.index + 1)
        if cached is not None:
            self._set_wrapped_tracks_to_table(cached)
            pages.index += 1
            return
        current = pages.get_results()
        if current is not None:
            self.get_current_user_saved_tracks(current["offset"] + current["limit"])

    def get_current_user_saved_tracks_previous(self) -> None:
        """Show the previous page of liked songs."""
        pages = self.library.saved_tracks
        if pages.index > 0:
            pages.index -= 1
        current = pages.get_results()
        if current is not None:
            self._set_wrapped_tracks_to_table(current)

    # -- albums ------------------------------------------------------------

    def get_album_tracks(self, album: dict[str, Any]) -> None:
        """Fetch the tracks of a simplified album and open the album view."""
        album_id = album.get("id")
        if album_id is None or self.spotify is None:
            return
        try:
            tracks = self.spotify.album_track(album_id, self.large_search_limit, 0)
        except ApiError as exc:
            self._report_error(exc)
            return
        self.selected_album_simplified = SelectedAlbum(album=album, tracks=tracks)
        self.current_user_saved_tracks_contains(_track_ids(tracks["items"]))
        self.album_table_context = AlbumTableContext.SIMPLIFIED
        self.navigation.push(RouteId.ALBUM_TRACKS, ActiveBlock.ALBUM_TRACKS)

    def get_current_user_saved_albums(self, offset: int | None = None) -> None:
        """Fetch a page of saved albums; empty pages are not kept."""
        if self.spotify is None:
            return
        try:
            saved_albums = self.spotify.current_user_saved_albums(self.large_search_limit, offset)
        except ApiError as exc:
            self._report_error(exc)
            return
        if saved_albums["items"]:
            self.library.saved_albums.add_pages(saved_albums)

    def get_current_user_saved_albums_next(self) -> None:
        """Go to the next page of saved albums, fetching it if needed."""
        pages = self.library.saved_albums
        if pages.get_results(pages.index + 1) is not None:
            pages.index += 1
            return
        current = pages.get_results()
        if current is not None:
            self.get_current_user_saved_albums(current["offset"] + current["limit"])

    def get_current_user_saved_albums_previous(self) -> None:
        """Go to the previous page of saved albums."""
        if self.library.saved_albums.index > 0:
            self.library.saved_albums.index -= 1

    def current_user_saved_album_delete(self) -> None:
        """Remove the selected saved album and refetch the saved albums."""
        albums = self.library.saved_albums.get_results()
        if albums is None or not 0 <= self.album_list_index < len(albums["items"]):
            return
        if self.spotify is None:
            return
        album_id = albums["items"][self.album_list_index]["album"]["id"]
        try:
            self.spotify.current_user_saved_albums_delete([album_id])
        except ApiError as exc:
            self._report_error(exc)
        else:
            self.get_current_user_saved_albums(None)

    def current_user_saved_album_add(self) -> None:
        """Save the album selected in the search results."""
        albums = self.search_results.albums
        index = self.search_results.selected_album_index
        if albums is None or index is None or self.spotify is None:
            return
        album_id = albums["albums"]["items"][index].get("id")
        if album_id is None:
            return
        try:
            self.spotify.current_user_saved_albums_add([album_id])
        except ApiError as exc:
            self._report_error(exc)

    # -- artists -----------------------------------------------------------

    def get_artist(self, artist_id: str, input_artist_name: str = "") -> None:
        """Fetch an artist's albums, top tracks and related artists.

        The artist's name is looked up only when ``input_artist_name`` is empty.
        """
        if self.spotify is None or self.user is None:
            return
        country = self._user_country()
        albums = _attempt(
            self.spotify.artist_albums, artist_id, None, country, self.large_search_limit, 0
        )
        artist_name = input_artist_name
        if not input_artist_name:
            full_artist = _attempt(self.spotify.artist, artist_id)
            artist_name = "" if full_artist is _FAILED else full_artist["name"]
        top_tracks = _attempt(self.spotify.artist_top_tracks, artist_id, country)
        related = _attempt(self.spotify.artist_related_artists, artist_id)
        if _FAILED in (albums, top_tracks, related):
            return
        self.artist = Artist(
            artist_name=artist_name,
            albums=albums,
            related_artists=list(related["artists"]),
            top_tracks=list(top_tracks["tracks"]),
            artist_hovered_block=ArtistBlock.TOP_TRACKS,
            artist_selected_block=ArtistBlock.EMPTY,
        )

    def get_artists(self, offset: str | None = None) -> None:
        """Fetch a page of followed artists; ``offset`` is the cursor to start after."""
        if self.spotify is None:
            return
        try:
            followed = self.spotify.current_user_followed_artists(self.large_search_limit, offset)
        except ApiError as exc:
            self._report_error(exc)
            return
        self.artists = list(followed["artists"]["items"])
        self.library.saved_artists.add_pages(followed["artists"])

    def user_unfollow_artists(self) -> None:
        """Unfollow the selected followed artist and refetch the followed artists."""
        artists = self.library.saved_artists.get_results()
        if artists is None or not 0 <= self.artists_list_index < len(artists["items"]):
            return
        if self.spotify is None:
            return
        artist_id = artists["items"][self.artists_list_index]["id"]
        try:
            self.spotify.user_unfollow_artists([artist_id])
        except ApiError as exc:
            self._report_error(exc)
        else:
            self.get_artists(None)

    def user_follow_artists(self) -> None:
        """Follow the artist selected in the search results."""
        artists = self.search_results.artists
        index = self.search_results.selected_artists_index
        if artists is None or index is None or self.spotify is None:
            return
        artist_id = artists["artists"]["items"][index]["id"]
        try:
            self.spotify.user_follow_artists([artist_id])
        except ApiError as exc:
            self._report_error(exc)