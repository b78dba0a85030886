"""Keyboard keys and their translation from terminal key events."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar


class KeyCode(enum.Enum):
    """The code of a key reported by the terminal."""

    BACKSPACE = enum.auto()
    ENTER = enum.auto()
    LEFT = enum.auto()
    RIGHT = enum.auto()
    UP = enum.auto()
    DOWN = enum.auto()
    HOME = enum.auto()
    END = enum.auto()
    PAGE_UP = enum.auto()
    PAGE_DOWN = enum.auto()
    TAB = enum.auto()
    BACK_TAB = enum.auto()
    DELETE = enum.auto()
    INSERT = enum.auto()
    F = enum.auto()
    CHAR = enum.auto()
    NULL = enum.auto()
    ESC = enum.auto()


class Modifiers(enum.Flag):
    """Modifier keys held down with a key."""

    NONE = 0
    SHIFT = 1
    CONTROL = 2
    ALT = 4


@dataclass(frozen=True)
class KeyEvent:
    """A key press as reported by the terminal."""

    code: KeyCode
    modifiers: Modifiers = Modifiers.NONE
    char: str | None = None
    function: int | None = None

    def __post_init__(self) -> None:
        if self.code is KeyCode.CHAR and self.char is None:
            raise ValueError("a character key event needs a character")
        if self.code is KeyCode.F and self.function is None:
            raise ValueError("a function key event needs a number")


_FUNCTION_KEY_COUNT = 13


@dataclass(frozen=True)
class Key:
    """A key the application reacts to."""

    name: str
    value: str | None = None

    ENTER: ClassVar[Key]
    TAB: ClassVar[Key]
    BACKSPACE: ClassVar[Key]
    ESC: ClassVar[Key]
    LEFT: ClassVar[Key]
    RIGHT: ClassVar[Key]
    UP: ClassVar[Key]
    DOWN: ClassVar[Key]
    INS: ClassVar[Key]
    DELETE: ClassVar[Key]
    HOME: ClassVar[Key]
    END: ClassVar[Key]
    PAGE_UP: ClassVar[Key]
    PAGE_DOWN: ClassVar[Key]
    UNKNOWN: ClassVar[Key]

    @staticmethod
    def _check_char(c: str) -> str:
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        return c

    @classmethod
    def char(cls, c: str) -> Key:
        """A plain character key."""
        return cls("Char", cls._check_char(c))

    @classmethod
    def ctrl(cls, c: str) -> Key:
        """A character pressed with Control."""
        return cls("Ctrl", cls._check_char(c))

    @classmethod
    def alt(cls, c: str) -> Key:
        """A character pressed with Alt."""
        return cls("Alt", cls._check_char(c))

    @classmethod
    def from_f(cls, n: int) -> Key:
        """The function key numbered ``n`` (0 to 12)."""
        if not 0 <= n < _FUNCTION_KEY_COUNT:
            raise ValueError(f"unknown function key: F{n}")
        return cls(f"F{n}")

    def __str__(self) -> str:
        return self.name if self.value is None else f"{self.name}({self.value})"


Key.ENTER = Key("Enter")
Key.TAB = Key("Tab")
Key.BACKSPACE = Key("Backspace")
Key.ESC = Key("Esc")
Key.LEFT = Key("Left")
Key.RIGHT = Key("Right")
Key.UP = Key("Up")
Key.DOWN = Key("Down")
Key.INS = Key("Ins")
Key.DELETE = Key("Delete")
Key.HOME = Key("Home")
Key.END = Key("End")
Key.PAGE_UP = Key("PageUp")
Key.PAGE_DOWN = Key("PageDown")
Key.UNKNOWN = Key("Unknown")

_PLAIN_KEYS = {
    KeyCode.ESC: Key.ESC,
    KeyCode.BACKSPACE: Key.BACKSPACE,
    KeyCode.LEFT: Key.LEFT,
    KeyCode.RIGHT: Key.RIGHT,
    KeyCode.UP: Key.UP,
    KeyCode.DOWN: Key.DOWN,
    KeyCode.HOME: Key.HOME,
    KeyCode.END: Key.END,
    KeyCode.PAGE_UP: Key.PAGE_UP,
    KeyCode.PAGE_DOWN: Key.PAGE_DOWN,
    KeyCode.DELETE: Key.DELETE,
    KeyCode.INSERT: Key.INS,
    KeyCode.ENTER: Key.ENTER,
    KeyCode.TAB: Key.TAB,
}


def key_from_event(event: KeyEvent) -> Key:
    """Translate a terminal key event into a :class:`Key`."""
    if event.code in _PLAIN_KEYS:
        return _PLAIN_KEYS[event.code]
    if event.code is KeyCode.F:
        assert event.function is not None
        return Key.from_f(event.function)
    if event.code is KeyCode.CHAR:
        assert event.char is not None
        if event.modifiers == Modifiers.ALT:
            return Key.alt(event.char)
        if event.modifiers == Modifiers.CONTROL:
            return Key.ctrl(event.char)
        return Key.char(event.char)
    return Key.UNKNOWN