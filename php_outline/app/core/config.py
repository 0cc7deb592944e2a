from __future__ import annotations

"""Central application configuration.

This module provides a single Settings object for environment-driven
configuration. Keep it lightweight (no extra deps like pydantic-settings).
Values are read when a Settings instance is built, so ``.env`` files loaded
by ``load_env`` apply even after this module has been imported.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

PACKAGE_ROOT = Path(__file__).resolve().parents[2]


def load_env() -> None:
    """Load ``.env`` from the working directory, then the package root.

    Variables already present in the environment are never overridden.
    """
    load_dotenv(find_dotenv(usecwd=True))  # CWD
    load_dotenv(dotenv_path=PACKAGE_ROOT / ".env", override=False)


def _extensions(raw: str) -> tuple[str, ...]:
    exts = []
    for part in raw.split(","):
        part = part.strip().lower()
        if not part:
            continue
        exts.append(part if part.startswith(".") else f".{part}")
    return tuple(exts) or (".php",)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes
    ----------
    LOG_LEVEL: str
        Application log level.
    HOST: str
        Interface the HTTP server binds to.
    PORT: int
        Port the HTTP server listens on.
    PHP_EXTENSIONS: tuple[str, ...]
        File suffixes picked up when outlining a directory
        (``PHP_EXTENSIONS=".php,.inc"``).
    MAX_WORKERS: int
        Threads used to outline a directory; 1 parses files sequentially.
    JSON_INDENT: int
        Indentation of JSON responses.
    """

    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    HOST: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    PORT: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))

    PHP_EXTENSIONS: tuple[str, ...] = field(
        default_factory=lambda: _extensions(os.getenv("PHP_EXTENSIONS", ".php"))
    )
    MAX_WORKERS: int = field(default_factory=lambda: max(1, int(os.getenv("MAX_WORKERS", "1"))))

    JSON_INDENT: int = field(default_factory=lambda: int(os.getenv("JSON_INDENT", "4")))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized Settings instance.

    Returns
    -------
    Settings
        The global application settings.
    """

    return Settings()
