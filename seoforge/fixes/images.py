"""MissingAltFix: gives every image without alt text a generic alt value."""

from __future__ import annotations

import html

from seoforge.config import FixConfig
from seoforge.detector import alt_attribute, images_missing_alt
from seoforge.models import FixKey, FixStepResult
from seoforge.pipeline import register_fix


@register_fix
class MissingAltFix:
    """Rewrite each offending ``<img>`` in place; one change per image."""

    key = FixKey.MISSING_ALT

    def __init__(self, settings: FixConfig) -> None:
        self.settings = settings

    def apply(self, text: str) -> tuple[str, FixStepResult]:
        result = FixStepResult(fix_key=self.key)
        offenders = images_missing_alt(text)
        if not offenders:
            return text, result

        alt = html.escape(self.settings.alt_text, quote=True)
        parts: list[str] = []
        cursor = 0
        for match in offenders:
            parts.append(text[cursor: match.start()])
            parts.append(self._rewrite(match.group(0), alt))
            cursor = match.end()
        parts.append(text[cursor:])

        result.changes_made = len(offenders)
        return "".join(parts), result

    @staticmethod
    def _rewrite(tag: str, alt: str) -> str:
        existing = alt_attribute(tag)
        if existing is not None:
            # alt, alt="" or alt="  ": replace the attribute, keep only one
            return tag[: existing.start()] + f'alt="{alt}"' + tag[existing.end():]
        if tag.endswith("/>"):
            return tag[:-2].rstrip() + f' alt="{alt}" />'
        return tag[:-1].rstrip() + f' alt="{alt}">'
