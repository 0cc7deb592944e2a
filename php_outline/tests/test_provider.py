from __future__ import annotations

from pathlib import Path

import pytest

from php_outline.app.core.config import Settings
from php_outline.outline import provider as provider_module
from php_outline.outline.provider import (
    OutlineError,
    OutlineProvider,
    PathKindError,
    PathNotFoundError,
    iter_php_files,
)
from php_outline.outline.reducer import FilterMode
from php_outline.tests.samples import SHAPE_PHP, nested_functions_php


def test_parse_file_keys_by_absolute_path(php_project: Path) -> None:
    target = php_project / "Shape.php"
    result = OutlineProvider(Settings()).parse_file(target)

    assert list(result) == [str(target.absolute())]
    outline = result[str(target.absolute())]
    assert outline is not None
    assert outline["name"] == "Shape"


def test_parse_file_without_class_is_null(php_project: Path) -> None:
    result = OutlineProvider(Settings()).parse_file(php_project / "functions.php")
    assert list(result.values()) == [None]


def test_parse_failure_is_reported_per_file(php_project: Path) -> None:
    result = OutlineProvider(Settings()).parse_file(php_project / "Broken.php")
    (outline,) = result.values()
    assert set(outline) == {"error"}  # type: ignore[arg-type]
    assert "syntax error" in outline["error"]  # type: ignore[index]


def test_parse_directory_continues_past_failures(php_project: Path) -> None:
    result = OutlineProvider(Settings()).parse_directory(php_project, FilterMode.PUBLIC_ONLY)

    names = {Path(p).name: v for p, v in result.items()}
    assert set(names) == {"User.php", "Shape.php", "functions.php", "Broken.php"}
    assert names["User.php"]["name"] == "User"  # type: ignore[index]
    assert [m["name"] for m in names["Shape.php"]["methods"]] == ["describe"]  # type: ignore[index]
    assert names["functions.php"] is None
    assert "error" in names["Broken.php"]  # type: ignore[operator]
    assert list(result) == sorted(result)


def test_parse_directory_threaded_matches_sequential(php_project: Path) -> None:
    sequential = OutlineProvider(Settings(MAX_WORKERS=1)).parse_directory(php_project)
    threaded = OutlineProvider(Settings(MAX_WORKERS=4)).parse_directory(php_project)
    assert threaded == sequential
    assert list(threaded) == list(sequential)


def test_custom_extensions(php_project: Path) -> None:
    (php_project / "legacy.inc").write_text("<?php class Legacy {}\n", encoding="utf-8")
    provider = OutlineProvider(Settings(PHP_EXTENSIONS=(".php", ".inc")))
    result = provider.parse_directory(php_project)
    assert any(p.endswith("legacy.inc") for p in result)
    assert [p.name for p in iter_php_files(php_project, (".inc",))] == ["legacy.inc"]


def test_path_validation_errors(php_project: Path) -> None:
    provider = OutlineProvider(Settings())

    with pytest.raises(PathNotFoundError, match="Path not found"):
        provider.parse_file(php_project / "missing.php")
    with pytest.raises(PathKindError, match="Path is not a file"):
        provider.parse_file(php_project)
    with pytest.raises(PathKindError, match="Path is not a directory"):
        provider.parse_directory(php_project / "Shape.php")
    with pytest.raises(OutlineError):
        provider.outline(php_project / "nope")


def test_outline_dispatches_on_path_kind(php_project: Path) -> None:
    provider = OutlineProvider(Settings())
    assert len(provider.outline(php_project)) == 4
    assert len(provider.outline(php_project / "Entity" / "User.php")) == 1


def test_deeply_nested_file_does_not_abort_directory(tmp_path: Path) -> None:
    (tmp_path / "Good.php").write_text(SHAPE_PHP, encoding="utf-8")
    (tmp_path / "Deep.php").write_text(nested_functions_php(400), encoding="utf-8")

    result = OutlineProvider(Settings()).parse_directory(tmp_path)

    names = {Path(p).name: v for p, v in result.items()}
    assert names["Good.php"]["name"] == "Shape"  # type: ignore[index]
    assert names["Deep.php"]["name"] == "Inner"  # type: ignore[index]


def test_unexpected_failure_is_reported_per_file(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "Good.php").write_text(SHAPE_PHP, encoding="utf-8")
    (tmp_path / "Bad.php").write_text("<?php class Bad {}\n", encoding="utf-8")
    real_parse_file = provider_module.parse_file

    def parse_file(path):
        if Path(path).name == "Bad.php":
            raise RecursionError("maximum recursion depth exceeded")
        return real_parse_file(path)

    monkeypatch.setattr(provider_module, "parse_file", parse_file)
    result = OutlineProvider(Settings()).parse_directory(tmp_path)

    names = {Path(p).name: v for p, v in result.items()}
    assert names["Good.php"]["name"] == "Shape"  # type: ignore[index]
    assert names["Bad.php"] == {"error": "maximum recursion depth exceeded"}
