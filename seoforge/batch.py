"""Batch driver: audits or fixes a corpus of documents on a thread pool.

Every document is handled independently: workers only read their own file
and return a value, the collecting thread assembles the batch result.  A
document that cannot be read is recorded in ``failed`` and the rest of the
batch carries on.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, TypeVar

from seoforge.backup import BackupSink, WriteSink
from seoforge.classifier import audit_document
from seoforge.config import FixConfig
from seoforge.models import (
    AuditReport,
    BatchAuditResult,
    BatchFixResult,
    FixKey,
    FixOutcome,
    Tier,
)
from seoforge.pipeline import remediate
from seoforge.sources import read_document

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[Path], None]


def audit_corpus(
    paths: Iterable[Path],
    tier: Tier,
    *,
    workers: int = 1,
    on_done: ProgressCallback | None = None,
) -> BatchAuditResult:
    """Audit every document in *paths* at *tier*."""

    def task(path: Path) -> AuditReport:
        return audit_document(read_document(path), tier)

    batch = BatchAuditResult(tier=tier)
    for path, report, error in _run_all(paths, task, workers, on_done):
        if report is not None:
            batch.results.append(report)
        else:
            batch.failed.append((path, error or "unknown error"))
    return batch


def fix_corpus(
    paths: Iterable[Path],
    keys: Iterable[FixKey],
    *,
    writer: WriteSink,
    backup: BackupSink | None = None,
    settings: FixConfig | None = None,
    workers: int = 1,
    on_done: ProgressCallback | None = None,
) -> BatchFixResult:
    """Apply *keys* to every document in *paths* and write changed ones back."""
    keys = list(keys)

    def task(path: Path) -> FixOutcome:
        return remediate(
            read_document(path), keys, writer=writer, backup=backup, settings=settings
        )

    batch = BatchFixResult()
    for path, outcome, error in _run_all(paths, task, workers, on_done):
        if outcome is not None:
            batch.results.append(outcome)
        else:
            batch.failed.append((path, error or "unknown error"))
    return batch


def _run_all(
    paths: Iterable[Path],
    task: Callable[[Path], T],
    workers: int,
    on_done: ProgressCallback | None,
) -> list[tuple[Path, T | None, str | None]]:
    """Run *task* over *paths*, sequentially or on a pool; sorted by path."""
    paths = list(paths)
    done: list[tuple[Path, T | None, str | None]] = []

    if workers <= 1 or len(paths) <= 1:
        for path in paths:
            done.append(_guarded(task, path))
            if on_done is not None:
                on_done(path)
    else:
        with ThreadPoolExecutor(max_workers=min(workers, len(paths))) as pool:
            futures = [pool.submit(_guarded, task, path) for path in paths]
            for fut in as_completed(futures):
                item = fut.result()
                done.append(item)
                if on_done is not None:
                    on_done(item[0])

    done.sort(key=lambda item: str(item[0]))
    return done


def _guarded(task: Callable[[Path], T], path: Path) -> tuple[Path, T | None, str | None]:
    try:
        return path, task(path), None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return path, None, str(exc)
