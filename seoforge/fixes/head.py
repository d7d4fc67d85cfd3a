"""Fixes that insert a missing element right after the opening ``<head>`` tag."""

from __future__ import annotations

import html
import logging
import re
from typing import ClassVar

from seoforge.config import FixConfig
from seoforge.detector import has_concrete_markup
from seoforge.models import FixKey, FixStepResult, RuleKey
from seoforge.pipeline import register_fix

logger = logging.getLogger(__name__)

# ``\b`` keeps <header> from being taken for the document head.
_HEAD_OPEN = re.compile(r"<head\b[^>]*>")
_INDENT = "    "


class HeadInsertionFix:
    """Insert :attr:`templates` after the first ``<head>`` opening tag.

    Each template is formatted with the escaped ``site_url`` setting.

    Skipped when the rule's concrete markup is already present.  A template
    that only carries a placeholder directive still gets the literal
    element, since the placeholder may render nothing.
    """

    key: ClassVar[FixKey]
    rule_key: ClassVar[RuleKey]
    templates: ClassVar[tuple[str, ...]]

    def __init__(self, settings: FixConfig) -> None:
        self.settings = settings

    def apply(self, text: str) -> tuple[str, FixStepResult]:
        result = FixStepResult(fix_key=self.key)
        if has_concrete_markup(text, self.rule_key):
            return text, result

        match = _HEAD_OPEN.search(text)
        if match is None:
            logger.debug("No <head> anchor for %s", self.key.value)
            result.warnings.append("No <head> tag found; nothing inserted")
            return text, result

        insertion = "".join(f"\n{_INDENT}{line}" for line in self.snippets())
        result.changes_made = 1
        return text[: match.end()] + insertion + text[match.end():], result

    def snippets(self) -> list[str]:
        site_url = html.escape(self.settings.site_url, quote=True)
        return [t.format(site_url=site_url) for t in self.templates]


@register_fix
class ViewportFix(HeadInsertionFix):
    key = FixKey.VIEWPORT
    rule_key = RuleKey.VIEWPORT
    templates = ('<meta name="viewport" content="width=device-width, initial-scale=1.0">',)


@register_fix
class MetaRobotsFix(HeadInsertionFix):
    key = FixKey.META_ROBOTS
    rule_key = RuleKey.META_ROBOTS
    templates = ('<meta name="robots" content="index, follow">',)


@register_fix
class CanonicalFix(HeadInsertionFix):
    key = FixKey.CANONICAL
    rule_key = RuleKey.CANONICAL
    templates = ('<link rel="canonical" href="{site_url}">',)


@register_fix
class FaviconFix(HeadInsertionFix):
    key = FixKey.FAVICON
    rule_key = RuleKey.FAVICON
    templates = ('<link rel="icon" type="image/x-icon" href="/favicon.ico">',)


@register_fix
class PreconnectFix(HeadInsertionFix):
    key = FixKey.PRECONNECT
    rule_key = RuleKey.PRECONNECT
    templates = (
        '<link rel="preconnect" href="{site_url}">',
        '<link rel="dns-prefetch" href="{site_url}">',
    )


@register_fix
class AppleTouchIconFix(HeadInsertionFix):
    key = FixKey.APPLE_TOUCH_ICON
    rule_key = RuleKey.APPLE_TOUCH_ICON
    templates = ('<link rel="apple-touch-icon" sizes="180x180" href="/apple-touch-icon.png">',)
