#!/usr/bin/env python3
from __future__ import annotations

"""CLI entrypoint for the PHP outline tool.

Usage:
    php-outline <file_or_directory_path> [--public]
    python -m php_outline.cli.outline /app/src/User/Entity/User.php
    python -m php_outline.cli.outline ./src --public
"""

import json
import sys
import time

from php_outline.app.core.config import get_settings, load_env
from php_outline.app.core.logging import (
    format_bytes,
    format_duration,
    get_logger,
    peak_memory_bytes,
    setup_logging,
)
from php_outline.outline.provider import OutlineError, OutlineProvider
from php_outline.outline.reducer import FilterMode

logger = get_logger(__name__)

OPTIONS = frozenset({"--public"})

USAGE = """Usage: php-outline <file_or_directory_path> [--public]
Example: php-outline /app/src/User/Entity/User.php"""


def main(argv: list[str] | None = None) -> int:
    """Outline a path and print the JSON result; returns the exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    load_env()
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, stream=sys.stderr)

    paths = [a for a in args if not a.startswith("--")]
    unknown = [a for a in args if a.startswith("--") and a not in OPTIONS]
    if len(paths) != 1 or unknown:
        print(USAGE)
        return 1

    started = time.perf_counter()
    filter_mode = FilterMode.PUBLIC_ONLY if "--public" in args else FilterMode.ALL
    path = paths[0]
    logger.info("[CLI] Request: path=%s, filter=%s", path, filter_mode.value)

    try:
        result = OutlineProvider(settings).outline(path, filter_mode)
    except (OutlineError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.error(
            '[CLI] Error Response: error="%s", memory=%s, duration=%s',
            e,
            format_bytes(peak_memory_bytes()),
            format_duration(time.perf_counter() - started),
        )
        return 1

    response = json.dumps(result, ensure_ascii=False, indent=settings.JSON_INDENT)
    print(response)
    logger.info(
        "[CLI] Response: tokens=%d, memory=%s, duration=%s",
        len(response),
        format_bytes(peak_memory_bytes()),
        format_duration(time.perf_counter() - started),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
