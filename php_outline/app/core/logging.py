from __future__ import annotations

"""Logging setup for the outline service.

Provides a simple, colored formatter for INFO/DEBUG/ERROR, helpers to
create module loggers consistently across the codebase, and the formatting
used by request/response metric lines.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Final, TextIO

RESET: Final[str] = "\x1b[0m"
DIM: Final[str] = "\x1b[2m"
BOLD: Final[str] = "\x1b[1m"


@dataclass(frozen=True)
class _Palette:
    debug: str = "\x1b[36m"  # cyan
    info: str = "\x1b[32m"  # green
    warn: str = "\x1b[33m"  # yellow
    error: str = "\x1b[31m"  # red
    critical: str = "\x1b[41m\x1b[97m"  # white on red


class _ColorFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(fmt="%(message)s")
        self.palette = _Palette()

    def format(self, record: logging.LogRecord) -> str:
        lvl = record.levelno
        if lvl >= logging.CRITICAL:
            c = self.palette.critical
        elif lvl >= logging.ERROR:
            c = self.palette.error
        elif lvl >= logging.WARNING:
            c = self.palette.warn
        elif lvl >= logging.INFO:
            c = self.palette.info
        else:
            c = self.palette.debug

        time = self.formatTime(record, datefmt="%Y-%m-%d %H:%M:%S")
        level = f"{c}{record.levelname:<7}{RESET}"
        name = f"{DIM}{record.name}{RESET}"
        msg = super().format(record)
        return f"{DIM}[{time}]{RESET} | {level} | {name} | {msg}"


def _color_enabled(stream: TextIO) -> bool:
    # Color only in terminals; allow opt-out via NO_COLOR
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return stream.isatty()
    except Exception:
        return False


def setup_logging(level: str | None = "INFO", stream: TextIO | None = None) -> None:
    """Configure root logging with a concise, colored format.

    Parameters
    ----------
    level: Optional[str]
        Log level name, e.g., "INFO", "DEBUG".
    stream: Optional[TextIO]
        Destination; stdout by default. The CLI passes stderr so JSON on
        stdout stays clean.
    """

    # Reset existing handlers to avoid duplicate logs under reloaders
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    stream = stream if stream is not None else sys.stdout
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(root.level)
    if _color_enabled(stream):
        handler.setFormatter(_ColorFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger using the shared configuration."""
    return logging.getLogger(name)


def format_bytes(num_bytes: int) -> str:
    """Render a byte count in megabytes, e.g. ``"1.5MB"``."""
    return f"{round(num_bytes / 1024 / 1024, 2)}MB"


def format_duration(seconds: float) -> str:
    """Render a duration in seconds, e.g. ``"0.012s"``."""
    return f"{round(seconds, 3)}s"


def peak_memory_bytes() -> int:
    """Peak resident set size of this process, 0 where unavailable."""
    if sys.platform == "win32":
        return 0
    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes
    return peak if sys.platform == "darwin" else peak * 1024
