"""LanguageFix: adds a ``lang`` attribute to the root ``<html>`` tag."""

from __future__ import annotations

import html
import re

from seoforge.config import FixConfig
from seoforge.detector import has_concrete_markup
from seoforge.models import FixKey, FixStepResult, RuleKey
from seoforge.pipeline import register_fix

_HTML_OPEN = re.compile(r"<html\b")


@register_fix
class LanguageFix:
    key = FixKey.LANGUAGE

    def __init__(self, settings: FixConfig) -> None:
        self.settings = settings

    def apply(self, text: str) -> tuple[str, FixStepResult]:
        result = FixStepResult(fix_key=self.key)
        if has_concrete_markup(text, RuleKey.LANGUAGE):
            return text, result

        match = _HTML_OPEN.search(text)
        if match is None:
            result.warnings.append("No <html> tag found; nothing inserted")
            return text, result

        # Existing attributes on the tag are kept as they are.
        lang = html.escape(self.settings.language, quote=True)
        result.changes_made = 1
        return text[: match.end()] + f' lang="{lang}"' + text[match.end():], result
