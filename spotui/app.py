"""The application: playback control, navigation and the library on top of it.

Results from the streaming service are JSON objects as returned by its web
API. The playback context is a mapping with ``item`` (the playing track),
``progress_ms``, ``is_playing``, ``device``, ``shuffle_state`` and
``repeat_state``. The client object is duck-typed, and its methods raise
:class:`~spotui.state.ApiError` when a request fails.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from .config import ClientConfig
from .library import LibraryActions
from .state import (
    ActiveBlock,
    ApiError,
    PlaybackParams,
    RepeatState,
    ResultAndSelectedIndex,
    Route,
    RouteId,
    SelectedFullAlbum,
    TrackTableContext,
)

OPEN_URL = "https://open.spotify.com"
POLL_INTERVAL_MS = 5_000
RESTART_THRESHOLD_MS = 3_000
MAX_VOLUME = 100

Clipboard = Callable[[str], None]


class App(LibraryActions):
    """Everything the interface shows, and the actions that change it."""

    def __init__(
        self,
        spotify: Any = None,
        client_config: ClientConfig | None = None,
        seek_milliseconds: int = 5_000,
        volume_increment: int = 10,
        clipboard: Clipboard | None = None,
    ) -> None:
        super().__init__(spotify)
        self.client_config = client_config if client_config is not None else ClientConfig()
        self.seek_milliseconds = seek_milliseconds
        self.volume_increment = volume_increment
        self.clipboard = clipboard
        self.clock: Callable[[], float] = time.monotonic
        self._last_playback_poll = self.clock()

        self.audio_analysis: dict[str, Any] | None = None
        self.home_scroll = 0
        self.selected_album_full: SelectedFullAlbum | None = None
        self.saved_album_tracks_index = 0
        self.recently_played: ResultAndSelectedIndex[Any] = ResultAndSelectedIndex()
        self.current_playback_context: dict[str, Any] | None = None
        self.devices: dict[str, Any] | None = None
        self.selected_device_index: int | None = None
        self.input: list[str] = []
        self.input_idx = 0
        self.input_cursor_position = 0
        self.recommended_tracks: list[dict[str, Any]] = []
        self.recommendations_seed = ""
        self.recommendations_context = None
        self.song_progress_ms = 0
        self.playback_params = PlaybackParams()
        self.help_docs_size = 0
        self.help_menu_page = 0
        self.help_menu_max_lines = 0
        self.help_menu_offset = 0

    # -- helpers -----------------------------------------------------------

    @property
    def _device_id(self) -> str | None:
        return self.client_config.device_id

    def _elapsed_since_poll_ms(self) -> int:
        return int((self.clock() - self._last_playback_poll) * 1000)

    def _device_call(self, method: str, *args: Any) -> None:
        """Call a player method on the selected device and refresh playback."""
        if self.spotify is None or self._device_id is None:
            return
        try:
            getattr(self.spotify, method)(*args, self._device_id)
        except ApiError as exc:
            self.handle_error(exc)
        else:
            self.get_current_playback()

    # -- user and devices --------------------------------------------------

    def get_user(self) -> None:
        """Fetch the current user's profile."""
        if self.spotify is None:
            return
        try:
            self.user = self.spotify.current_user()
        except ApiError as exc:
            self.handle_error(exc)

    def handle_get_devices(self) -> None:
        """Fetch the available devices and open the device selection."""
        if self.spotify is None:
            return
        try:
            result = self.spotify.device()
        except ApiError:
            return
        self.push_navigation_stack(RouteId.SELECTED_DEVICE, ActiveBlock.SELECT_DEVICE)
        if result["devices"]:
            self.devices = result
            self.selected_device_index = 0

    # -- playback state ----------------------------------------------------

    def get_current_playback(self) -> None:
        """Fetch what is playing now and whether it is a liked song."""
        if self.spotify is None:
            return
        try:
            context = self.spotify.current_playback(None)
        except ApiError:
            return
        if context is None:
            return
        self.current_playback_context = context
        self._last_playback_poll = self.clock()
        track = context.get("item")
        if track is not None and track.get("id") is not None:
            self.current_user_saved_tracks_contains([track["id"]])

    def _poll_current_playback(self) -> None:
        if self._elapsed_since_poll_ms() >= POLL_INTERVAL_MS:
            self.get_current_playback()

    def update_on_tick(self) -> None:
        """Refresh playback every few seconds and advance the song progress."""
        self._poll_current_playback()
        context = self.current_playback_context
        if context is None:
            return
        track = context.get("item")
        progress_ms = context.get("progress_ms")
        if track is None or progress_ms is None or not context.get("is_playing"):
            return
        elapsed = self._elapsed_since_poll_ms() + progress_ms
        self.song_progress_ms = min(elapsed, track["duration_ms"])

    # -- playback control --------------------------------------------------

    def _seek(self, position_ms: int) -> None:
        self._device_call("seek_track", position_ms)

    def seek_forwards(self) -> None:
        """Skip ahead, or go to the next track when too close to the end."""
        context = self.current_playback_context
        if context is None or context.get("item") is None:
            return
        remaining = context["item"]["duration_ms"] - self.song_progress_ms
        if remaining > self.seek_milliseconds:
            self._seek(self.song_progress_ms + self.seek_milliseconds)
        else:
            self.next_track()

    def seek_backwards(self) -> None:
        """Skip back, not before the start of the track."""
        self._seek(max(self.song_progress_ms - self.seek_milliseconds, 0))

    def pause_playback(self) -> None:
        """Pause the player."""
        self._device_call("pause_playback")

    def next_track(self) -> None:
        """Skip to the next track."""
        self._device_call("next_track")

    def previous_track(self) -> None:
        """Restart the track, or go to the previous one near its start."""
        if self.spotify is None or self._device_id is None:
            return
        if self.song_progress_ms >= RESTART_THRESHOLD_MS:
            self._seek(0)
        else:
            self._device_call("previous_track")

    def toggle_playback(self) -> None:
        """Pause if playing, resume otherwise."""
        context = self.current_playback_context
        if context is None:
            return
        if context.get("is_playing"):
            self.pause_playback()
        else:
            self.start_playback(None, None, None)

    def start_playback(
        self,
        context_uri: str | None = None,
        uris: list[str] | None = None,
        offset: int | None = None,
    ) -> None:
        """Play a context or a list of tracks; with neither, resume playback."""
        if context_uri is not None:
            uris = None
        try:
            if self._device_id is None:
                raise ApiError("No device_id selected")
            if self.spotify is None:
                raise ApiError("Spotify is not ready to be used")
            self.spotify.start_playback(self._device_id, context_uri, uris, offset, None)
        except ApiError as exc:
            self.handle_error(exc)
            return
        self.get_current_playback()
        self.song_progress_ms = 0
        self.playback_params = PlaybackParams(context_uri=context_uri, uris=uris, offset=offset)

    def start_recommendations_playback(self, offset: int | None = None) -> None:
        """Play the recommended tracks starting at ``offset``."""
        self.start_playback(None, [track["uri"] for track in self.recommended_tracks], offset)

    def _change_volume(self, volume_percent: int) -> None:
        context = self.current_playback_context
        if self.spotify is None or self._device_id is None or context is None:
            return
        try:
            self.spotify.volume(volume_percent, self._device_id)
        except ApiError as exc:
            self.handle_error(exc)
        else:
            context["device"]["volume_percent"] = volume_percent

    def increase_volume(self) -> None:
        """Raise the volume by the configured step, up to 100."""
        context = self.current_playback_context
        if context is None:
            return
        current = int(context["device"]["volume_percent"])
        target = min(current + self.volume_increment, MAX_VOLUME)
        if target != current:
            self._change_volume(target)

    def decrease_volume(self) -> None:
        """Lower the volume by the configured step, down to 0."""
        context = self.current_playback_context
        if context is None:
            return
        current = int(context["device"]["volume_percent"])
        target = max(current - self.volume_increment, 0)
        if target != current:
            self._change_volume(target)

    def shuffle(self) -> None:
        """Toggle shuffle and show the new state right away."""
        context = self.current_playback_context
        if self.spotify is None or context is None:
            return
        state = not context["shuffle_state"]
        try:
            self.spotify.shuffle(state, self._device_id)
        except ApiError as exc:
            self.handle_error(exc)
        else:
            context["shuffle_state"] = state

    def repeat(self) -> None:
        """Cycle the repeat mode: off, context, track."""
        context = self.current_playback_context
        if self.spotify is None or context is None:
            return
        state = RepeatState(context["repeat_state"]).next()
        try:
            self.spotify.repeat(state, self._device_id)
        except ApiError as exc:
            self.handle_error(exc)
        else:
            context["repeat_state"] = state.value

    # -- recommendations ---------------------------------------------------

    def _extract_recommended_tracks(self, recommendations: dict[str, Any]) -> list[Any] | None:
        if self.spotify is None:
            return None
        uris = [item["uri"] for item in recommendations["tracks"]]
        try:
            return list(self.spotify.tracks(uris, None)["tracks"])
        except ApiError:
            return None

    def get_recommendations_for_seed(
        self,
        seed_artists: list[str] | None = None,
        seed_tracks: list[str] | None = None,
        first_track: dict[str, Any] | None = None,
    ) -> None:
        """Fetch recommendations for the seeds, show them and play them."""
        if self.spotify is None or self.user is None:
            return
        try:
            result = self.spotify.recommendations(
                seed_artists, None, seed_tracks, self.large_search_limit, self._user_country(), {}
            )
        except ApiError as exc:
            self.handle_error(exc)
            return
        tracks = self._extract_recommended_tracks(result)
        if tracks is not None:
            if first_track is not None:
                tracks.insert(0, first_track)
            self.recommended_tracks = list(tracks)
            self.set_tracks_to_table(tracks)
            self.track_table.context = TrackTableContext.RECOMMENDED_TRACKS
            if self.get_current_route().id != RouteId.RECOMMENDATIONS:
                self.push_navigation_stack(RouteId.RECOMMENDATIONS, ActiveBlock.TRACK_TABLE)
        self.start_recommendations_playback(0)

    def get_recommendations_for_trackid(self, track_id: str) -> None:
        """Fetch recommendations seeded by a track, which is played first."""
        if self.spotify is None:
            return
        try:
            track = self.spotify.track(track_id)
        except ApiError:
            return
        seed = [track["id"]] if track.get("id") is not None else None
        self.get_recommendations_for_seed(None, seed, track)

    # -- errors and navigation ---------------------------------------------

    def handle_error(self, error: BaseException | str) -> None:
        """Show the error view with ``error``'s message."""
        self._report_error(error)  # type: ignore[arg-type]

    def push_navigation_stack(self, route_id: RouteId, active_block: ActiveBlock) -> None:
        """Open a route with ``active_block`` active and hovered."""
        self.navigation.push(route_id, active_block)

    def pop_navigation_stack(self) -> Route | None:
        """Leave the current route; ``None`` at the root route."""
        return self.navigation.pop()

    def get_current_route(self) -> Route:
        """The route shown now."""
        return self.navigation.current()

    def set_current_route_state(
        self,
        active_block: ActiveBlock | None = None,
        hovered_block: ActiveBlock | None = None,
    ) -> None:
        """Change the active and/or hovered block of the current route."""
        self.navigation.set_current_state(active_block, hovered_block)

    # -- clipboard ---------------------------------------------------------

    def _copy(self, url: str) -> None:
        assert self.clipboard is not None
        try:
            self.clipboard(url)
        except Exception as exc:  # clipboard backends raise all sorts of errors
            self.handle_error(f"failed to set clipboard content: {exc}")

    def copy_song_url(self) -> None:
        """Copy the link of the playing track to the clipboard."""
        if self.clipboard is None or self.current_playback_context is None:
            return
        track = self.current_playback_context.get("item")
        if track is not None and track.get("id") is not None:
            self._copy(f"{OPEN_URL}/track/{track['id']}")

    def copy_album_url(self) -> None:
        """Copy the link of the playing track's album to the clipboard."""
        if self.clipboard is None or self.current_playback_context is None:
            return
        track = self.current_playback_context.get("item")
        if track is None:
            return
        album_id = (track.get("album") or {}).get("id")
        if album_id is not None:
            self._copy(f"{OPEN_URL}/album/{album_id}")

    # -- analysis and help -------------------------------------------------

    def get_audio_analysis(self) -> None:
        """Fetch the audio analysis of the playing track and open its view."""
        context = self.current_playback_context
        if self.spotify is None or context is None or context.get("item") is None:
            return
        try:
            self.audio_analysis = self.spotify.audio_analysis(context["item"]["uri"])
        except ApiError as exc:
            self.handle_error(exc)
            return
        self.push_navigation_stack(RouteId.ANALYSIS, ActiveBlock.ANALYSIS)

    def calculate_help_menu_offset(self) -> None:
        """Scroll the help menu to its current page, stepping back past the end."""
        old_offset = self.help_menu_offset
        if self.help_menu_max_lines < self.help_docs_size:
            self.help_menu_offset = self.help_menu_page * self.help_menu_max_lines
        if self.help_menu_offset > self.help_docs_size:
            self.help_menu_offset = old_offset
            self.help_menu_page -= 1