"""Backup and write sinks used when fixes are persisted.

The engine itself never touches the filesystem; ``pipeline.remediate`` hands
original bytes to a ``BackupSink`` and rewritten text to a ``WriteSink``.
The file-based implementations here are what the CLI uses.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


@runtime_checkable
class BackupSink(Protocol):
    """Persists a recoverable snapshot of a document before it is changed."""

    def save_backup(self, path: Path, original: bytes) -> Path:
        """Store *original* for *path* and return where it went.

        Raises ``OSError`` (or another exception) on failure.
        """
        ...


@runtime_checkable
class WriteSink(Protocol):
    """Receives the rewritten text of a changed document."""

    def write_document(self, path: Path, text: str) -> None:
        ...


class FileBackupSink:
    """Writes backups as flat files into a single directory.

    A document at ``views/layouts/app.blade.php`` backed up at 14:03:07 on
    2026-01-15 becomes
    ``views_layouts_app.blade.php_2026-01-15_14-03-07.backup``.
    """

    def __init__(self, backup_dir: Path) -> None:
        self.backup_dir = backup_dir

    def save_backup(self, path: Path, original: bytes) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime(_TIMESTAMP_FORMAT)
        target = self.backup_dir / f"{backup_name(path)}_{stamp}.backup"
        target.write_bytes(original)
        logger.debug("Backup of %s written to %s", path, target)
        return target


class FileWriteSink:
    """Writes rewritten documents back to their own path as UTF-8."""

    def write_document(self, path: Path, text: str) -> None:
        path.write_bytes(text.encode("utf-8"))


def backup_name(path: Path) -> str:
    """Flatten *path* into a single file name."""
    return path.as_posix().replace(":", "").replace("/", "_")
