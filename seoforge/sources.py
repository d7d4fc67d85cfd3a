"""Document source: finds template files and reads them as Documents."""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Iterable

from seoforge.models import Document

_COMPONENTS_DIR = "components"


def collect_paths(
    root: Path,
    patterns: Iterable[str] = ("*.blade.php",),
    exclude: Iterable[str] = (),
    *,
    ignore_components: bool = False,
) -> list[Path]:
    """Return the files under *root* matching any of *patterns*, sorted.

    *exclude* holds glob patterns matched against the POSIX path relative to
    *root* (``vendor/**``).  With *ignore_components*, files inside any
    ``components`` directory are skipped.  A *root* that is itself a file is
    returned as-is, whatever its name.
    """
    if root.is_file():
        return [root]
    if not root.is_dir():
        return []

    exclude = list(exclude)
    found: set[Path] = set()
    for pattern in patterns:
        found.update(p for p in root.rglob(pattern) if p.is_file())

    paths: list[Path] = []
    for path in sorted(found):
        relative = path.relative_to(root)
        if any(fnmatch.fnmatch(relative.as_posix(), pat) for pat in exclude):
            continue
        if ignore_components and _COMPONENTS_DIR in relative.parts[:-1]:
            continue
        paths.append(path)
    return paths


def read_document(path: Path) -> Document:
    """Read *path* as UTF-8, keeping line endings byte-for-byte."""
    return Document(path=path, raw_text=path.read_bytes().decode("utf-8"))
