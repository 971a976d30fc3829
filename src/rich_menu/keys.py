"""Keyboard input helpers for rich_menu.

Raw key strings are matched against ``readchar.key`` constants;
``normalize`` turns them into ``KeyEvent`` values so views never compare
escape sequences inline. ``KeyReader`` is the non-blocking source used by
poll-driven loops.
"""

from __future__ import annotations

import logging
import os
import re
import select
import sys
from dataclasses import dataclass
from enum import Enum

import readchar

logger = logging.getLogger(__name__)

ESC_SEQUENCE_TIMEOUT = 0.025

# Characters accepted as type-to-filter input.
FILTER_CHARS = re.compile(r"[A-Za-z0-9_-]")


class Key(str, Enum):
    """Normalized key kinds."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    REFRESH = "refresh"
    CHAR = "char"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press. ``char`` is set only for ``Key.CHAR``."""

    key: Key
    char: str = ""

    @classmethod
    def of(cls, char: str) -> "KeyEvent":
        return cls(Key.CHAR, char)


def is_enter(key: str) -> bool:
    """Check if key is Enter/Return."""
    return key in (readchar.key.ENTER, "\r", "\n")


def is_escape(key: str) -> bool:
    """Check if key is Escape (handles terminal variations)."""
    return key in (readchar.key.ESC, "\x1b", "\x1b\x1b")


def is_interrupt(key: str) -> bool:
    return key == readchar.key.CTRL_C


def is_up(key: str) -> bool:
    return key in (readchar.key.UP, "\x1bOA")


def is_down(key: str) -> bool:
    return key in (readchar.key.DOWN, "\x1bOB")


def is_left(key: str) -> bool:
    return key in (readchar.key.LEFT, "\x1bOD")


def is_right(key: str) -> bool:
    return key in (readchar.key.RIGHT, "\x1bOC")


def is_backspace(key: str) -> bool:
    """Check if key is backspace (handles terminal variations)."""
    return key in (readchar.key.BACKSPACE, "\x7f", "\b")


def is_filter_char(key: str) -> bool:
    return FILTER_CHARS.fullmatch(key) is not None


def normalize(raw: str) -> KeyEvent | None:
    """Map a raw key string to a KeyEvent; unknown keys map to None."""
    if not raw:
        return None
    if is_escape(raw) or is_interrupt(raw):
        return KeyEvent(Key.ESCAPE)
    if is_up(raw):
        return KeyEvent(Key.UP)
    if is_down(raw):
        return KeyEvent(Key.DOWN)
    if is_left(raw):
        return KeyEvent(Key.LEFT)
    if is_right(raw):
        return KeyEvent(Key.RIGHT)
    if is_enter(raw):
        return KeyEvent(Key.ENTER)
    if is_backspace(raw):
        return KeyEvent(Key.BACKSPACE)
    if raw == readchar.key.CTRL_R:
        return KeyEvent(Key.REFRESH)
    if len(raw) == 1 and raw.isprintable():
        return KeyEvent.of(raw)
    logger.debug("Ignoring unmapped key %r", raw)
    return None


class KeyReader:
    """Non-blocking key source over the controlling terminal.

    Use as a context manager: the terminal is switched to cbreak mode for
    the lifetime of the block so single key presses become readable
    without waiting for Enter. Bytes are read straight from the file
    descriptor, one at a time and only after ``select`` reports them
    ready, so a poll never waits for the user.
    """

    def __init__(self, stream=None):
        self._stream = stream or sys.stdin
        self._saved_attrs = None
        self._pending: list[bytes] = []

    def __enter__(self) -> "KeyReader":
        if os.name == "posix" and self._stream.isatty():
            import termios
            import tty

            fd = self._stream.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(self, *exc) -> bool:
        if self._saved_attrs is not None:
            import termios

            termios.tcsetattr(self._stream.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
        return False

    def _read_byte(self, timeout: float) -> bytes | None:
        """One byte if it arrives within ``timeout`` seconds, else None."""
        if self._pending:
            return self._pending.pop(0)
        fd = self._stream.fileno()
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return None
        return os.read(fd, 1) or None

    def _read_escape(self) -> bytes:
        raw = b"\x1b"
        introducer = self._read_byte(ESC_SEQUENCE_TIMEOUT)
        if introducer is None:
            return raw
        if introducer not in (b"[", b"O"):
            # ESC followed by an ordinary key: report both, in order.
            self._pending.append(introducer)
            return raw
        raw += introducer
        while len(raw) < 8:
            part = self._read_byte(ESC_SEQUENCE_TIMEOUT)
            if part is None:
                break
            raw += part
            if part.isalpha() or part == b"~":
                break
        return raw

    def _read_utf8(self, lead: bytes) -> bytes:
        width = 2 if lead[0] < 0xE0 else 3 if lead[0] < 0xF0 else 4
        raw = lead
        while len(raw) < width:
            part = self._read_byte(ESC_SEQUENCE_TIMEOUT)
            if part is None:
                break
            raw += part
        return raw

    def _poll_windows(self) -> KeyEvent | None:
        import msvcrt

        if not msvcrt.kbhit():
            return None
        raw = msvcrt.getwch()
        if raw in ("\x00", "\xe0"):
            raw = "\x00" + msvcrt.getwch()
        return normalize(raw)

    def poll(self) -> KeyEvent | None:
        """Return the next key event, or None when no key is waiting."""
        if os.name == "nt":
            return self._poll_windows()
        first = self._read_byte(0)
        if first is None:
            return None
        if first == b"\x1b":
            raw = self._read_escape()
        elif first[0] >= 0xC0:
            raw = self._read_utf8(first)
        else:
            raw = first
        return normalize(raw.decode("utf-8", errors="replace"))
