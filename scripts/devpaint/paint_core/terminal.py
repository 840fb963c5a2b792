"""Terminal primitives: clear sequences, TTY checks and single-key input."""

from __future__ import annotations

import os
import select
import sys
from typing import TextIO

CLEAR_WIN32 = "\x1b[2J\x1b[0f"
CLEAR_ANSI = "\x1b[2J\x1b[3J\x1b[H"

CONFIRM_KEYS = {"\r", "\n"}


def clear_sequence(platform: str | None = None) -> str:
    platform = sys.platform if platform is None else platform
    return CLEAR_WIN32 if platform == "win32" else CLEAR_ANSI


def is_interactive(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False


class KeyReader:
    """Non-blocking single-character reads from a terminal.

    Uses termios non-canonical mode (ICANON/ECHO off, VMIN=0/VTIME=0)
    rather than raw mode so output post-processing keeps working. On
    platforms without termios, or when ``stream`` is not a TTY, ``poll``
    always returns ``None``.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self._fd: int | None = None
        self._old_settings = None

    @property
    def active(self) -> bool:
        return self._fd is not None

    def __enter__(self) -> KeyReader:
        if not is_interactive(self.stream):
            return self
        try:
            import termios
        except ImportError:
            return self

        fd = self.stream.fileno()
        try:
            old_settings = termios.tcgetattr(fd)
            new = termios.tcgetattr(fd)
            new[3] &= ~(termios.ICANON | termios.ECHO)
            new[6][termios.VMIN] = 0
            new[6][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSADRAIN, new)
        except termios.error:
            return self
        self._fd = fd
        self._old_settings = old_settings
        return self

    def __exit__(self, *exc_info) -> None:
        if self._fd is not None and self._old_settings is not None:
            import termios

            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
        self._fd = None
        self._old_settings = None

    def poll(self) -> str | None:
        if self._fd is None:
            return None
        r, _, _ = select.select([self._fd], [], [], 0)
        if not r:
            return None
        try:
            return os.read(self._fd, 1).decode("utf-8", errors="ignore")
        except OSError:
            return None
