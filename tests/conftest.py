"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from seoforge.models import Document
from tests.fixtures.generate import (
    A_ONLY_PAGE,
    BLADE_LAYOUT,
    FULL_PAGE,
    MINIMAL_HTML,
    generate_corpus,
    make_doc,
)


@pytest.fixture
def minimal_doc() -> Document:
    return make_doc(MINIMAL_HTML, "minimal.html")


@pytest.fixture
def full_doc() -> Document:
    return make_doc(FULL_PAGE, "home.blade.php")


@pytest.fixture
def blade_doc() -> Document:
    return make_doc(BLADE_LAYOUT, "layouts/app.blade.php")


@pytest.fixture
def a_only_doc() -> Document:
    return make_doc(A_ONLY_PAGE, "docs.html")


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    """A fresh views tree for tests that write to disk."""
    root = tmp_path / "views"
    generate_corpus(root)
    return root


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config that keeps backups inside the test's temp directory."""
    path = tmp_path / "seoforge.yaml"
    path.write_text(
        f"""\
fixes:
  create_backups: true
  backup_path: {(tmp_path / 'backups').as_posix()}
batch:
  workers: 2
""",
        encoding="utf-8",
    )
    return path
