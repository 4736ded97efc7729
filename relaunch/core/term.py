"""
Terminal helpers: screen clearing, tty state save/restore and a
best-effort drain of pending keyboard input.
"""

from __future__ import annotations

import os
import select
import sys
from typing import Callable, Optional, TextIO

try:
    import termios
except ImportError:  # not available on Windows
    termios = None  # type: ignore[assignment]


CLEAR_SEQUENCE = "\033[H\033[2J\033[3J"


def clear_screen(stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    out.write(CLEAR_SEQUENCE)
    out.flush()


def save_terminal(stream: Optional[TextIO] = None) -> Callable[[], None]:
    """Snapshot tty attributes of ``stream`` and return a restore callback.

    When ``stream`` is not a terminal the callback does nothing.
    """
    stream = stream or sys.stdin
    if termios is None:
        return lambda: None
    try:
        if not stream.isatty():
            return lambda: None
        fd = stream.fileno()
        attrs = termios.tcgetattr(fd)
    except (OSError, ValueError, termios.error):
        return lambda: None

    def restore() -> None:
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        except (OSError, ValueError, termios.error):
            pass

    return restore


def drain_input(stream: Optional[TextIO] = None, chunk: int = 1024) -> int:
    """Discard whatever input is already buffered on ``stream``.

    Reads with a zero timeout until nothing is readable. This is a
    heuristic: input typed while draining may or may not be kept.
    Returns the number of bytes discarded.
    """
    stream = stream or sys.stdin
    dropped = 0
    try:
        if not stream.isatty():
            return 0
        fd = stream.fileno()
        while True:
            readable, _, _ = select.select([fd], [], [], 0)
            if not readable:
                break
            data = os.read(fd, chunk)
            if not data:
                break
            dropped += len(data)
    except (OSError, ValueError):
        return dropped
    return dropped
