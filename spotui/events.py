"""Background source of input and tick events."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from .key import Key

ReadKey = Callable[[float], Union[Key, None]]


@dataclass(frozen=True)
class EventConfig:
    """Configuration for event handling."""

    exit_key: Key = Key("Ctrl", "c")
    tick_rate: float = 0.25


@dataclass(frozen=True)
class InputEvent:
    """A key was pressed."""

    key: Key


@dataclass(frozen=True)
class TickEvent:
    """The tick interval elapsed."""


Event = Union[InputEvent, TickEvent]


@dataclass(frozen=True)
class _Failure:
    error: BaseException


_CLOSED = object()


class Events:
    """Reads keys on a background thread and hands out input and tick events.

    ``read_key`` is called with the tick rate in seconds; it waits up to that
    long for a key and returns it, or ``None`` if none arrived.
    """

    def __init__(self, read_key: ReadKey, config: EventConfig | None = None) -> None:
        self.config = config or EventConfig()
        self._queue: queue.Queue[object] = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(read_key,), name="spotui-events", daemon=True
        )
        self._thread.start()

    @classmethod
    def with_tick_rate(cls, read_key: ReadKey, tick_rate_ms: int) -> Events:
        """Create an event source with the default config and the given tick rate."""
        return cls(read_key, EventConfig(tick_rate=tick_rate_ms / 1000))

    def _run(self, read_key: ReadKey) -> None:
        try:
            while not self._stop.is_set():
                key = read_key(self.config.tick_rate)
                if key is not None:
                    self._queue.put(InputEvent(key))
                self._queue.put(TickEvent())
        except Exception as exc:  # handed to the consumer through next()
            self._queue.put(_Failure(exc))
        else:
            self._queue.put(_CLOSED)

    def next(self) -> Event:
        """Block until the next event arrives and return it.

        Raises the reader's exception if reading failed, and ``RuntimeError``
        once the source is closed and drained.
        """
        item = self._queue.get()
        if isinstance(item, _Failure):
            self._queue.put(item)
            raise item.error
        if item is _CLOSED:
            self._queue.put(item)
            raise RuntimeError("event source is closed")
        assert isinstance(item, (InputEvent, TickEvent))
        return item

    def close(self) -> None:
        """Stop reading keys."""
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=self.config.tick_rate + 1.0)

    def __enter__(self) -> Events:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()