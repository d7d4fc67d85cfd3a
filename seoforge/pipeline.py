"""Fix pipeline: plans and applies requested fixes to one document."""

from __future__ import annotations

import logging
from typing import Iterable

from seoforge.backup import BackupSink, WriteSink
from seoforge.config import FixConfig
from seoforge.fixes.base import Fix
from seoforge.models import Document, FixKey, FixOutcome, FixStepResult

logger = logging.getLogger(__name__)

# Fixes are registered here keyed by the issue they remedy.
_FIXES: dict[FixKey, type[Fix]] = {}
_all_registered: bool = False


def register_fix(cls: type[Fix]) -> type[Fix]:
    """Class decorator that adds a fix to the registry."""
    _FIXES.setdefault(cls.key, cls)
    return cls


def registered_fixes() -> dict[FixKey, type[Fix]]:
    """Every registered fix, keyed by fix key."""
    _ensure_registered()
    return dict(_FIXES)


def apply_fixes(
    document: Document,
    keys: Iterable[FixKey | str],
    settings: FixConfig | None = None,
) -> FixOutcome:
    """Apply the fixes named by *keys* to *document*, in the given order.

    Keys without a registered fix are skipped.  Each fix inserts at most one
    element per pass (``missing_alt`` rewrites every offending image), and is
    skipped when its markup is already present, so re-running on the output
    changes nothing.  The document itself is never modified.
    """
    _ensure_registered()
    settings = settings or FixConfig()

    text = document.raw_text
    outcome = FixOutcome(path=document.path, original_text=text, new_text=text)

    for raw_key in keys:
        fix_cls = _lookup(raw_key)
        if fix_cls is None:
            logger.debug("Skipping unknown fix key %r for %s", raw_key, document.path)
            continue
        text, step = _run_single_fix(fix_cls(settings), text)  # type: ignore[call-arg]
        outcome.step_results.append(step)

    outcome.new_text = text
    return outcome


def remediate(
    document: Document,
    keys: Iterable[FixKey | str],
    *,
    writer: WriteSink,
    backup: BackupSink | None = None,
    settings: FixConfig | None = None,
) -> FixOutcome:
    """Apply fixes and write the result back through *writer*.

    Nothing is written when the text is unchanged.  Otherwise the original
    bytes go to *backup* first (when given) and the write only happens once
    the backup succeeded.  Sink failures are recorded on the outcome.
    """
    keys = list(keys)
    outcome = apply_fixes(document, keys, settings)
    if not outcome.changed:
        return outcome

    try:
        if backup is not None:
            outcome.backup_path = backup.save_backup(
                document.path, document.raw_text.encode("utf-8")
            )
        writer.write_document(document.path, outcome.new_text)
    except Exception as exc:
        logger.error("Could not write fixes to %s: %s", document.path, exc, exc_info=True)
        outcome.error = str(exc)
        return outcome

    logger.info(
        "SEO fixes applied to %s (issues=%s, backup_created=%s)",
        document.path,
        ",".join(str(getattr(k, "value", k)) for k in keys),
        backup is not None,
    )
    return outcome


def _ensure_registered() -> None:
    # Lazy to avoid circular imports
    global _all_registered
    if not _all_registered:
        from seoforge.fixes import _register_all
        _register_all()
        _all_registered = True


def _lookup(key: FixKey | str) -> type[Fix] | None:
    try:
        return _FIXES.get(FixKey(key))
    except ValueError:
        return None


def _run_single_fix(fix: Fix, text: str) -> tuple[str, FixStepResult]:
    """Run a single fix, catching unexpected exceptions."""
    try:
        return fix.apply(text)
    except Exception as exc:
        logger.error("Fix %s failed: %s", fix.key.value, exc, exc_info=True)
        return text, FixStepResult(fix_key=fix.key, success=False, error=str(exc))
