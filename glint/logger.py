"""Coloured, thread-safe console logging with levelled labels."""

from __future__ import annotations

import sys
import threading
import time
from enum import IntEnum
from typing import TextIO


class Level(IntEnum):
    """Severity of a log line."""

    DEBUG = 0
    INFO = 1
    IMPORTANT = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5
    SUCCESS = 6

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Level.DEBUG: "dbg",
    Level.INFO: "inf",
    Level.IMPORTANT: "imp",
    Level.WARNING: "war",
    Level.ERROR: "err",
    Level.FATAL: "!!!",
    Level.SUCCESS: "+++",
}

_COLOURS = {
    Level.DEBUG: "36",
    Level.INFO: "35",
    Level.IMPORTANT: "33",
    Level.WARNING: "33",
    Level.ERROR: "31",
    Level.FATAL: "31",
    Level.SUCCESS: "32",
}

_RESET = "\x1b[0m"

_lock = threading.Lock()
_output: TextIO | None = None
_debug_output = True


def debug_enable(enable: bool) -> None:
    """Turn debug lines on or off."""
    global _debug_output
    _debug_output = bool(enable)


def set_output(stream: TextIO | None) -> TextIO:
    """Send log lines to ``stream``; ``None`` restores standard output.

    Returns the stream that was in use before the change.
    """
    global _output
    if stream is not None and not callable(getattr(stream, "write", None)):
        raise TypeError("log output must have a write() method")
    with _lock:
        previous = get_output()
        _output = stream
    return previous


def get_output() -> TextIO:
    """Return the stream log lines are written to."""
    return _output if _output is not None else sys.stdout


def _render(fmt: str, args: tuple) -> str:
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError):
        return fmt + " ".join(str(arg) for arg in args)


def _paint(level: Level, text: str) -> str:
    return f"\x1b[{_COLOURS[level]}m{text}{_RESET}"


def format_msg(level: Level, fmt: str, *args) -> str:
    """Build one coloured log line: time stamp, label and message."""
    level = Level(level)
    now = time.localtime()
    stamp = _paint(level, f"\r[{now.tm_hour:02d}:{now.tm_min:02d}:{now.tm_sec:02d}]")
    sign = _paint(level, f"[{level.label}]")
    message = _paint(level, _render(fmt + "\n", args))
    return stamp + sign + message


def _emit(level: Level, fmt: str, args: tuple) -> None:
    with _lock:
        stream = get_output()
        stream.write(format_msg(level, fmt, *args))
        stream.flush()


def debug(fmt: str, *args) -> None:
    if _debug_output:
        _emit(Level.DEBUG, fmt, args)


def info(fmt: str, *args) -> None:
    _emit(Level.INFO, fmt, args)


def important(fmt: str, *args) -> None:
    _emit(Level.IMPORTANT, fmt, args)


def warning(fmt: str, *args) -> None:
    _emit(Level.WARNING, fmt, args)


def error(fmt: str, *args) -> None:
    _emit(Level.ERROR, fmt, args)


def fatal(fmt: str, *args) -> None:
    _emit(Level.FATAL, fmt, args)


def success(fmt: str, *args) -> None:
    _emit(Level.SUCCESS, fmt, args)


def printf(fmt: str, *args) -> None:
    """Write a formatted message without label, colour or newline."""
    with _lock:
        stream = get_output()
        stream.write(_render(fmt, args))
        stream.flush()