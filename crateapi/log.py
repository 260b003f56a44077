"""Logging setup for the command line."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG, TRACE)
_DEFAULT_INDEX = _LEVELS.index(logging.INFO)
_RESET = "\x1b[0m"


def _level_label(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "ERROR"
    if levelno >= logging.WARNING:
        return "WARN"
    if levelno >= logging.INFO:
        return "INFO"
    if levelno >= logging.DEBUG:
        return "DEBUG"
    return "TRACE"


@dataclass(frozen=True)
class Palette:
    """ANSI styles used for the level labels; empty strings mean unstyled."""

    error: str = ""
    warn: str = ""
    debug: str = ""
    trace: str = ""

    @classmethod
    def colored(cls) -> Palette:
        return cls(error="\x1b[1;31m", warn="\x1b[33m", debug="\x1b[34m", trace="\x1b[36m")

    @classmethod
    def plain(cls) -> Palette:
        return cls()

    def paint(self, label: str) -> str:
        style = {
            "ERROR": self.error,
            "WARN": self.warn,
            "DEBUG": self.debug,
            "TRACE": self.trace,
        }.get(label, "")
        return f"{style}{label}{_RESET}" if style else label


class LevelFormatter(logging.Formatter):
    """Prints info messages bare and others as ``LEVEL: message``.

    With ``timestamps`` every record is written as ``[time LEVEL logger] message``.
    """

    def __init__(self, palette: Palette, timestamps: bool = False) -> None:
        super().__init__()
        self.palette = palette
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        label = _level_label(record.levelno)
        if self.timestamps:
            stamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created))
            return f"[{stamp} {self.palette.paint(label)} {record.name}] {message}"
        if label == "INFO":
            return message
        return f"{self.palette.paint(label)}: {message}"


def level_for(verbosity: int) -> int | None:
    """Logging level for a verbosity offset from info; None turns logging off."""
    index = _DEFAULT_INDEX + verbosity
    if index < 0:
        return None
    return _LEVELS[min(index, len(_LEVELS) - 1)]


def init_logging(verbosity: int, colored: bool) -> logging.Handler | None:
    """Install a stderr handler on the root logger and return it.

    Returns None, with logging switched off, when verbosity is too low.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_crateapi", False):
            root.removeHandler(handler)

    level = level_for(verbosity)
    if level is None:
        root.setLevel(logging.CRITICAL + 1)
        return None

    palette = Palette.colored() if colored else Palette.plain()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LevelFormatter(palette, timestamps=level <= logging.DEBUG))
    handler._crateapi = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    return handler