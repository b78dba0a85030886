# spotui

The core of a terminal music player that talks to a streaming service's
web API. It keeps the client configuration on disk, turns terminal key
presses into keys the interface can act on, produces a steady stream of
input and tick events, and holds the playback, library and navigation
state the screens are drawn from.

## Modules

- `spotui.config`: `ClientConfig` holds `client_id`, `client_secret`,
  `device_id` and `port`. `to_yaml` and `ClientConfig.from_yaml`
  write and read `client.yml`; `redirect_uri()` gives
  `http://localhost:<port>/callback`, with `effective_port()` falling
  back to 8888 when no port is set. `load_config` reads the saved file,
  or on first run prints setup instructions, asks for the client id,
  client secret and port, and saves them. `set_device_id` stores the
  chosen device both on the object and in the file.
  `build_config_paths(home)` creates `<home>/.config/spotify-tui` if
  needed and returns a `ConfigPaths` with `config_file_path`
  (`client.yml`) and `token_cache_path` (`.spotify_token_cache.json`).
  Unreadable or invalid configuration raises `ConfigError`.
- `spotui.key`: `Key` values for every key the interface knows
  (`Key.ENTER`, `Key.ESC`, `Key.PAGE_UP`, ...), function keys through
  `Key.from_f(n)` for 0 to 12, and characters with `Key.char`,
  `Key.ctrl` and `Key.alt`. `key_from_event` turns a `KeyEvent`
  (a `KeyCode`, `Modifiers` and the character or function number)
  into a `Key`; codes it does not know become `Key.UNKNOWN`.
- `spotui.events`: `Events` runs a key reader on a background thread and
  hands back `InputEvent` and `TickEvent` values from `next()`. The
  reader is a callable that is given the tick rate in seconds, waits up
  to that long and returns a `Key` or `None`; after every call a tick
  follows. `EventConfig` sets the tick rate (0.25 s by default) and the
  exit key (Ctrl-C); `Events.with_tick_rate(read_key, ms)` takes the rate
  in milliseconds. An exception from the reader is raised again by
  `next()`. `close()` stops the thread; `Events` is also a context
  manager.
- `spotui.state`: the enums for routes and blocks (`RouteId`,
  `ActiveBlock`, `SearchResultBlock`, `ArtistBlock`, ...),
  `RepeatState` with `next()` cycling off → context → track,
  `ScrollableResultPages` for paged results, the dataclasses the views
  are drawn from, `ApiError`, and `NavigationStack`.
- `spotui.library`: `LibraryActions` fetches and changes liked songs,
  saved albums, followed artists and playlists, pages through them, and
  looks up the "Made For You" playlists.
- `spotui.app`: `App` builds on `LibraryActions` with playback control
  (play, pause, next, previous, seek, volume, shuffle, repeat),
  recommendations, audio analysis, copying track and album links to a
  clipboard, the help menu offset and the navigation stack.

## Configuration

```python
from pathlib import Path

from spotui.config import ClientConfig, build_config_paths

paths = build_config_paths(Path.home())
config = ClientConfig()
config.load_config(paths)          # asks on first run, then reads client.yml
print(config.redirect_uri())       # http://localhost:8888/callback unless a port is set
```

`load_config` takes `prompt` and `output` callables (by default
`input` and `print`), so it can be driven without a terminal.

## Keys

```python
from spotui.key import Key, KeyCode, KeyEvent, Modifiers, key_from_event

assert Key.from_f(5) == Key("F5")
assert str(Key.ctrl("c")) == "Ctrl(c)"
event = KeyEvent(KeyCode.CHAR, Modifiers.CONTROL, char="c")
assert key_from_event(event) == Key.ctrl("c")
```

`Key.from_f` raises `ValueError` outside 0 to 12.

## Navigation

```python
from spotui.state import ActiveBlock, NavigationStack, RouteId

stack = NavigationStack()
stack.push(RouteId.SEARCH, ActiveBlock.SEARCH_RESULT_BLOCK)
stack.current().id            # RouteId.SEARCH
stack.pop()                   # the search route
stack.pop()                   # None: the home route is never removed
```

## The application object

```python
from spotui.app import App
from spotui.config import ClientConfig

app = App(
    spotify=client,                       # your web API client
    client_config=ClientConfig(device_id="device-1"),
    seek_milliseconds=5_000,
    volume_increment=10,
    clipboard=copy_to_clipboard,          # a callable taking the text
)
app.get_user()
app.get_current_playback()
app.toggle_playback()
```

Results are plain JSON objects as the web API returns them. The client
is any object with the methods `App` calls (`current_user`,
`current_playback`, `start_playback`, `seek_track`, ...); when a request
fails it raises `ApiError`. Failed requests do not escape: the error
route is pushed onto the navigation stack and the message is kept in
`app.api_error`.

## What the package does not do

There is no command to run and nothing is drawn on screen: the package
holds state and actions, and a front end draws from them. It does not
read the terminal itself (`Events` is given a key reader), does not
include a web API client or the OAuth sign-in, and does not store the
token cache, only its path.

## Installing for development

Install the package with its `test` extra to get pytest, then run
`pytest` from the project root.