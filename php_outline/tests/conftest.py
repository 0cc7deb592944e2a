from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import php_outline.xxx` works without installing the package.
# __file__ = <repo>/php_outline/tests/conftest.py
REPO_ROOT = Path(__file__).resolve().parents[2]

repo_root_s = str(REPO_ROOT)
if repo_root_s not in sys.path:
    sys.path.insert(0, repo_root_s)

from php_outline.tests.samples import (  # noqa: E402
    BROKEN_PHP,
    FUNCTIONS_PHP,
    SHAPE_PHP,
    USER_PHP,
)


@pytest.fixture()
def php_project(tmp_path: Path) -> Path:
    """A small source tree with a valid class, an abstract class, a
    class-less file, a file with a syntax error and a non-PHP file."""
    src = tmp_path / "src"
    (src / "Entity").mkdir(parents=True)
    (src / "Entity" / "User.php").write_text(USER_PHP, encoding="utf-8")
    (src / "Shape.php").write_text(SHAPE_PHP, encoding="utf-8")
    (src / "functions.php").write_text(FUNCTIONS_PHP, encoding="utf-8")
    (src / "Broken.php").write_text(BROKEN_PHP, encoding="utf-8")
    (src / "README.md").write_text("# not php\n", encoding="utf-8")
    return src


@pytest.fixture(scope="session")
def app():
    from php_outline.main import create_app

    return create_app()
