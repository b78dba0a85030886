"""Application state: navigation routes, selection blocks and paged results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

T = TypeVar("T")

LIBRARY_OPTIONS = (
    "Made For You",
    "Recently Played",
    "Liked Songs",
    "Albums",
    "Artists",
    "Podcasts",
)


class ApiError(Exception):
    """Raised when a call to the streaming service fails."""


class SearchResultBlock(enum.Enum):
    """A block of the search results view."""

    ALBUM_SEARCH = enum.auto()
    SONG_SEARCH = enum.auto()
    ARTIST_SEARCH = enum.auto()
    PLAYLIST_SEARCH = enum.auto()
    EMPTY = enum.auto()


class ArtistBlock(enum.Enum):
    """A block of the artist view."""

    TOP_TRACKS = enum.auto()
    ALBUMS = enum.auto()
    RELATED_ARTISTS = enum.auto()
    EMPTY = enum.auto()


class ActiveBlock(enum.Enum):
    """A block of the interface that can be active or hovered."""

    ANALYSIS = enum.auto()
    PLAY_BAR = enum.auto()
    ALBUM_TRACKS = enum.auto()
    ALBUM_LIST = enum.auto()
    ARTIST_BLOCK = enum.auto()
    EMPTY = enum.auto()
    ERROR = enum.auto()
    HELP_MENU = enum.auto()
    HOME = enum.auto()
    INPUT = enum.auto()
    LIBRARY = enum.auto()
    MY_PLAYLISTS = enum.auto()
    PODCASTS = enum.auto()
    RECENTLY_PLAYED = enum.auto()
    SEARCH_RESULT_BLOCK = enum.auto()
    SELECT_DEVICE = enum.auto()
    TRACK_TABLE = enum.auto()
    MADE_FOR_YOU = enum.auto()
    ARTISTS = enum.auto()


class RouteId(enum.Enum):
    """The view shown in the main area."""

    ANALYSIS = enum.auto()
    ALBUM_TRACKS = enum.auto()
    ALBUM_LIST = enum.auto()
    ARTIST = enum.auto()
    ERROR = enum.auto()
    HOME = enum.auto()
    RECENTLY_PLAYED = enum.auto()
    SEARCH = enum.auto()
    SELECTED_DEVICE = enum.auto()
    TRACK_TABLE = enum.auto()
    MADE_FOR_YOU = enum.auto()
    ARTISTS = enum.auto()
    PODCASTS = enum.auto()
    RECOMMENDATIONS = enum.auto()


class TrackTableContext(enum.Enum):
    """Where the tracks in the track table came from."""

    MY_PLAYLISTS = enum.auto()
    ALBUM_SEARCH = enum.auto()
    PLAYLIST_SEARCH = enum.auto()
    SAVED_TRACKS = enum.auto()
    RECOMMENDED_TRACKS = enum.auto()
    MADE_FOR_YOU = enum.auto()


class AlbumTableContext(enum.Enum):
    """Whether the album table shows a simplified or a full album."""

    SIMPLIFIED = enum.auto()
    FULL = enum.auto()


class RecommendationsContext(enum.Enum):
    """What recommendations were seeded from."""

    ARTIST = enum.auto()
    SONG = enum.auto()


class RepeatState(enum.Enum):
    """Repeat mode of the player."""

    OFF = "off"
    CONTEXT = "context"
    TRACK = "track"

    def next(self) -> RepeatState:
        """The state that follows this one when repeat is toggled."""
        return _REPEAT_CYCLE[self]


_REPEAT_CYCLE = {
    RepeatState.OFF: RepeatState.CONTEXT,
    RepeatState.CONTEXT: RepeatState.TRACK,
    RepeatState.TRACK: RepeatState.OFF,
}


@dataclass
class Route:
    """An entry of the navigation stack."""

    id: RouteId
    active_block: ActiveBlock
    hovered_block: ActiveBlock


DEFAULT_ROUTE = Route(
    id=RouteId.HOME,
    active_block=ActiveBlock.EMPTY,
    hovered_block=ActiveBlock.LIBRARY,
)


@dataclass
class ScrollableResultPages(Generic[T]):
    """Pages of results fetched so far, with the one currently shown."""

    index: int = 0
    pages: list[T] = field(default_factory=list)

    def get_results(self, at_index: int | None = None) -> T | None:
        """The page at ``at_index``, or the current page; ``None`` if absent."""
        index = self.index if at_index is None else at_index
        if 0 <= index < len(self.pages):
            return self.pages[index]
        return None

    def add_pages(self, new_pages: T) -> None:
        """Append a page and make it the current one."""
        self.pages.append(new_pages)
        self.index = len(self.pages) - 1


@dataclass
class Library:
    """The user's library as fetched so far."""

    selected_index: int = 0
    saved_tracks: ScrollableResultPages[Any] = field(default_factory=ScrollableResultPages)
    made_for_you_playlists: ScrollableResultPages[Any] = field(
        default_factory=ScrollableResultPages
    )
    saved_albums: ScrollableResultPages[Any] = field(default_factory=ScrollableResultPages)
    saved_artists: ScrollableResultPages[Any] = field(default_factory=ScrollableResultPages)


@dataclass
class PlaybackParams:
    """What was last asked to play."""

    context_uri: str | None = None
    uris: list[str] | None = None
    offset: int | None = None


@dataclass
class SearchResult:
    """Results of the last search and the selection within them."""

    albums: Any = None
    artists: Any = None
    playlists: Any = None
    tracks: Any = None
    selected_album_index: int | None = None
    selected_artists_index: int | None = None
    selected_playlists_index: int | None = None
    selected_tracks_index: int | None = None
    hovered_block: SearchResultBlock = SearchResultBlock.SONG_SEARCH
    selected_block: SearchResultBlock = SearchResultBlock.EMPTY


@dataclass
class TrackTable:
    """Tracks shown in the track table."""

    tracks: list[Any] = field(default_factory=list)
    selected_index: int = 0
    context: TrackTableContext | None = None


@dataclass
class SelectedAlbum:
    """A simplified album with a page of its tracks."""

    album: Any
    tracks: Any
    selected_index: int = 0


@dataclass
class SelectedFullAlbum:
    """A full album, tracks included."""

    album: Any
    selected_index: int = 0


@dataclass
class Artist:
    """The artist view: albums, top tracks and related artists."""

    artist_name: str
    albums: Any
    related_artists: list[Any] = field(default_factory=list)
    top_tracks: list[Any] = field(default_factory=list)
    selected_album_index: int = 0
    selected_related_artist_index: int = 0
    selected_top_track_index: int = 0
    artist_hovered_block: ArtistBlock = ArtistBlock.TOP_TRACKS
    artist_selected_block: ArtistBlock = ArtistBlock.EMPTY


@dataclass
class ResultAndSelectedIndex(Generic[T]):
    """A fetched result together with the selected position in it."""

    index: int = 0
    result: T | None = None


class NavigationStack:
    """Routes of the main area; the first route is never removed."""

    def __init__(self) -> None:
        self._routes: list[Route] = [replace(DEFAULT_ROUTE)]

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self):
        return iter(self._routes)

    def push(self, route_id: RouteId, active_block: ActiveBlock) -> None:
        """Go to a new route with ``active_block`` active and hovered."""
        self._routes.append(
            Route(id=route_id, active_block=active_block, hovered_block=active_block)
        )

    def pop(self) -> Route | None:
        """Leave the current route; ``None`` if only the root route is left."""
        if len(self._routes) <= 1:
            return None
        return self._routes.pop()

    def current(self) -> Route:
        """The route currently shown."""
        return self._routes[-1] if self._routes else DEFAULT_ROUTE

    def set_current_state(
        self,
        active_block: ActiveBlock | None = None,
        hovered_block: ActiveBlock | None = None,
    ) -> None:
        """Change the active and/or hovered block of the current route."""
        route = self._routes[-1]
        if active_block is not None:
            route.active_block = active_block
        if hovered_block is not None:
            route.hovered_block = hovered_block