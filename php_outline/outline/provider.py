from __future__ import annotations

"""File and directory outlining.

Validates the requested path, parses each PHP file and reduces it to its
class outline. The result maps absolute file paths to an outline dict,
``None`` (no class-like declaration) or ``{"error": message}``. A failing
file never aborts a directory batch.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from php_outline.app.core.config import Settings, get_settings
from php_outline.app.core.logging import get_logger
from php_outline.outline.php_parser import PhpParseError, parse_file
from php_outline.outline.reducer import FilterMode, outline_tree

logger = get_logger(__name__)

FileOutline = dict[str, Any] | None


class OutlineError(ValueError):
    """Base class for errors reported back to the caller as-is."""


class PathNotFoundError(OutlineError):
    pass


class PathKindError(OutlineError):
    """Path exists but is not a file/directory as the operation requires."""


def _validate_path(path: Path) -> None:
    if not path.exists():
        raise PathNotFoundError(f"Path not found: {path}")


def iter_php_files(directory: Path, extensions: Iterable[str]) -> list[Path]:
    """Every file under ``directory`` with a matching suffix, sorted."""
    suffixes = {ext.lower() for ext in extensions}
    files = (p for p in directory.rglob("*") if p.is_file() and p.suffix.lower() in suffixes)
    return sorted(files, key=str)


class OutlineProvider:
    """Outline PHP files and directory trees."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def _outline_one(self, path: Path, filter_mode: FilterMode) -> FileOutline:
        try:
            tree = parse_file(path)
        except (PhpParseError, OSError) as e:
            logger.warning("Failed to outline %s: %s", path, e)
            return {"error": str(e)}
        except Exception as e:
            # a single file never takes the rest of a directory batch down
            logger.exception("Unexpected failure outlining %s", path)
            return {"error": str(e) or type(e).__name__}
        return outline_tree(tree, filter_mode)

    def parse_file(self, file_path: str | Path, filter_mode: FilterMode = FilterMode.ALL) -> dict[str, FileOutline]:
        path = Path(file_path).absolute()
        _validate_path(path)
        if not path.is_file():
            raise PathKindError(f"Path is not a file: {path}")
        return {str(path): self._outline_one(path, filter_mode)}

    def parse_directory(
        self, dir_path: str | Path, filter_mode: FilterMode = FilterMode.ALL
    ) -> dict[str, FileOutline]:
        path = Path(dir_path).absolute()
        _validate_path(path)
        if not path.is_dir():
            raise PathKindError(f"Path is not a directory: {path}")

        files = iter_php_files(path, self.settings.PHP_EXTENSIONS)
        logger.debug("Outlining %d files under %s", len(files), path)

        if self.settings.MAX_WORKERS > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.MAX_WORKERS) as pool:
                outlines = list(pool.map(lambda f: self._outline_one(f, filter_mode), files))
        else:
            outlines = [self._outline_one(f, filter_mode) for f in files]

        return {str(f): outline for f, outline in zip(files, outlines)}

    def outline(self, path: str | Path, filter_mode: FilterMode = FilterMode.ALL) -> dict[str, FileOutline]:
        """Outline a file or, when ``path`` is a directory, every PHP file in it."""
        if Path(path).is_dir():
            return self.parse_directory(path, filter_mode)
        return self.parse_file(path, filter_mode)
