"""Base protocol for mechanical fixes."""

from __future__ import annotations

from typing import ClassVar, Protocol, runtime_checkable

from seoforge.models import FixKey, FixStepResult


@runtime_checkable
class Fix(Protocol):
    """Interface that every fix must implement.

    Each fix addresses one fix key.  Fixes are constructed with the fix
    settings and receive document text; they never mutate anything and
    return the (possibly) rewritten text with a FixStepResult.
    """

    key: ClassVar[FixKey]

    def apply(self, text: str) -> tuple[str, FixStepResult]:
        """Rewrite *text* and describe what was done.

        A fix whose element is already present returns *text* unchanged with
        ``changes_made == 0``.  Unexpected exceptions may propagate; the
        pipeline records them against this key and moves on.
        """
        ...
