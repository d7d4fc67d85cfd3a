"""Rule detector.

Evaluates one catalog rule against the text of one document.  Detection works
on pattern-level evidence, not on a parsed DOM, and is total: any text yields
a boolean, malformed markup never raises.

Most rules are tag-presence checks that accept either the concrete markup
(``<meta name="robots" ...>``) or a named placeholder directive for the same
logical field (``@yield('meta_robots')``), since a template that defers the
value to render time is still capable of emitting the element.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterator

from seoforge.models import Document, Rule, RuleKey

logger = logging.getLogger(__name__)

# Template directives that stand in for a literal element.  ``{field}`` is
# replaced by the escaped logical field name.
PLACEHOLDER_SYNTAXES: tuple[str, ...] = (
    r"@section\(\s*['\"]{field}['\"]",
    r"@yield\(\s*['\"]{field}['\"]",
    r"@stack\(\s*['\"]{field}['\"]",
    r"\{%-?\s*block\s+{field}\b",
)

_Q = r"['\"]"


def _meta_name(value: str) -> str:
    return rf"<meta\b[^>]*name={_Q}{re.escape(value)}{_Q}[^>]*>"


def _meta_property(value: str) -> str:
    return rf"<meta\b[^>]*property={_Q}{re.escape(value)}{_Q}[^>]*>"


def _link_rel(value: str) -> str:
    return rf"<link\b[^>]*rel={_Q}{re.escape(value)}{_Q}[^>]*>"


# Concrete markup signature per rule.
_CONCRETE: dict[RuleKey, str] = {
    RuleKey.TITLE: r"<title\b[^>]*>",
    RuleKey.META_DESCRIPTION: _meta_name("description"),
    RuleKey.META_KEYWORDS: _meta_name("keywords"),
    RuleKey.META_ROBOTS: _meta_name("robots"),
    RuleKey.VIEWPORT: _meta_name("viewport"),
    RuleKey.TWITTER_CARD: _meta_name("twitter:card"),
    RuleKey.OG_TITLE: _meta_property("og:title"),
    RuleKey.OG_DESCRIPTION: _meta_property("og:description"),
    RuleKey.OG_IMAGE: _meta_property("og:image"),
    RuleKey.CANONICAL: _link_rel("canonical"),
    RuleKey.FAVICON: _link_rel("icon"),
    RuleKey.APPLE_TOUCH_ICON: _link_rel("apple-touch-icon"),
    RuleKey.PRECONNECT: _link_rel("preconnect") + "|" + _link_rel("dns-prefetch"),
    RuleKey.LANGUAGE_ALTERNATES: rf"<link\b[^>]*rel={_Q}alternate{_Q}[^>]*hreflang=",
    RuleKey.SCHEMA_JSON: rf"<script\b[^>]*type={_Q}application/ld\+json{_Q}[^>]*>",
    RuleKey.LANGUAGE: r"<html\b[^>]*\blang\s*=",
}

# Logical placeholder field per rule.  Rules absent here (viewport, language)
# are structural attributes and only count in their concrete form.
_PLACEHOLDER_FIELDS: dict[RuleKey, str] = {
    RuleKey.TITLE: "title",
    RuleKey.META_DESCRIPTION: "meta_description",
    RuleKey.META_KEYWORDS: "meta_keywords",
    RuleKey.CANONICAL: "canonical_url",
    RuleKey.META_ROBOTS: "meta_robots",
    RuleKey.OG_TITLE: "og_title",
    RuleKey.OG_DESCRIPTION: "og_description",
    RuleKey.OG_IMAGE: "og_image",
    RuleKey.TWITTER_CARD: "twitter_card",
    RuleKey.SCHEMA_JSON: "schema",
    RuleKey.FAVICON: "favicon",
    RuleKey.APPLE_TOUCH_ICON: "apple_touch_icon",
    RuleKey.PRECONNECT: "preconnect",
    RuleKey.LANGUAGE_ALTERNATES: "language_alternates",
}

_CONCRETE_RE: dict[RuleKey, re.Pattern[str]] = {
    key: re.compile(pattern) for key, pattern in _CONCRETE.items()
}


def placeholder_pattern(field: str) -> str:
    """Alternation of every placeholder directive naming *field*."""
    escaped = re.escape(field)
    return "|".join(s.replace("{field}", escaped) for s in PLACEHOLDER_SYNTAXES)


_PRESENCE_RE: dict[RuleKey, re.Pattern[str]] = {}
for _key, _pattern in _CONCRETE.items():
    if _key in _PLACEHOLDER_FIELDS:
        _pattern = f"{_pattern}|{placeholder_pattern(_PLACEHOLDER_FIELDS[_key])}"
    _PRESENCE_RE[_key] = re.compile(_pattern)

# ``{{ ... }}`` and ``{!! ... !!}`` may hold a ``>`` (PHP ``->``) that does
# not close the tag.
_TEMPLATE_EXPR = r"\{\{.*?\}\}|\{!!.*?!!\}"

# Quoted values and template expressions are consumed whole.  A ``{`` that
# opens an expression can only be matched by the expression branch.
_IMG_TAG = re.compile(
    rf"""<img\b(?:"[^"]*"|'[^']*'|{_TEMPLATE_EXPR}|[^>"'{{]|\{{(?!\{{|!!))*>""",
    re.DOTALL,
)

# One token inside a tag: a template expression or stray quoted string
# (skipped), or an attribute name with an optional value.
_TAG_TOKEN = re.compile(
    rf"""{_TEMPLATE_EXPR}|"[^"]*"|'[^']*'"""
    rf"""|(?P<name>[^\s"'<>/=]+)"""
    rf"""(?:\s*=\s*(?P<value>"[^"]*"|'[^']*'|{_TEMPLATE_EXPR}|[^\s"'=<>`]+))?""",
    re.DOTALL,
)
_IMG_PREFIX_LEN = len("<img")

_HEADING_TAG = re.compile(r"<h([1-6])\b[^>]*>")


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def has_concrete_markup(text: str, key: RuleKey) -> bool:
    """True if the literal markup for *key* appears in *text*.

    Placeholder directives are ignored.  Keys without a concrete signature
    return False.
    """
    pattern = _CONCRETE_RE.get(key)
    return pattern is not None and pattern.search(text) is not None


def alt_attribute(img_tag: str) -> re.Match[str] | None:
    """Locate the alt attribute (name and value) inside an ``<img>`` tag.

    Text inside quoted values and template expressions is never taken for an
    attribute, so ``title="alt text"`` or ``{{ $alt }}`` do not count.
    """
    for match in _TAG_TOKEN.finditer(img_tag, _IMG_PREFIX_LEN):
        name = match.group("name")
        if name is not None and name.lower() == "alt":
            return match
    return None


def alt_value(img_tag: str) -> str | None:
    """Return the alt attribute value of an ``<img>`` tag, or None if absent.

    A bare ``alt`` with no value gives an empty string.
    """
    match = alt_attribute(img_tag)
    if match is None:
        return None
    value = match.group("value")
    if value is None:
        return ""
    if value[0] in "\"'":
        return value[1:-1]
    return value


def iter_images(text: str) -> Iterator[re.Match[str]]:
    """Yield every ``<img ...>`` element in document order."""
    return _IMG_TAG.finditer(text)


def images_missing_alt(text: str) -> list[re.Match[str]]:
    """Image elements with no alt attribute or an empty one."""
    missing: list[re.Match[str]] = []
    for match in iter_images(text):
        value = alt_value(match.group(0))
        if value is None or not value.strip():
            missing.append(match)
    return missing


def heading_levels(text: str) -> list[int]:
    """Heading levels (1-6) in document order."""
    return [int(m.group(1)) for m in _HEADING_TAG.finditer(text)]


def is_valid_hierarchy(levels: list[int]) -> bool:
    """Check that no heading skips a level.

    A heading may go at most one level deeper than the deepest heading seen
    before it; going back up is always allowed.  ``[1, 2, 4]`` fails,
    ``[2, 2, 1, 3]`` passes, an empty sequence is valid.

    This is deliberately looser than comparing each heading with the one just
    before it: after ``h3`` a new section may open again at ``h3``, so
    ``[1, 2, 3, 1, 3]`` passes, while ``[1, 2, 1, 4]`` still fails.
    """
    deepest: int | None = None
    for level in levels:
        if deepest is not None and level > deepest + 1:
            return False
        deepest = level if deepest is None else max(deepest, level)
    return True


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _presence(key: RuleKey) -> Callable[[str], bool]:
    pattern = _PRESENCE_RE[key]

    def check(text: str) -> bool:
        return pattern.search(text) is not None

    return check


def _check_image_alt(text: str) -> bool:
    return not images_missing_alt(text)


def _check_headings(text: str) -> bool:
    return is_valid_hierarchy(heading_levels(text))


_DETECTORS: dict[RuleKey, Callable[[str], bool]] = {
    key: _presence(key) for key in _PRESENCE_RE
}
_DETECTORS[RuleKey.IMAGE_ALT] = _check_image_alt
_DETECTORS[RuleKey.HEADINGS_HIERARCHY] = _check_headings


def has_detector(key: RuleKey) -> bool:
    return key in _DETECTORS


def detect(document: Document, rule: Rule) -> bool:
    """Return True if *rule* is satisfied by *document*.

    Rules without a detector are treated as satisfied so that catalog entries
    can be added before their detection logic exists.
    """
    check = _DETECTORS.get(rule.key)
    if check is None:
        logger.debug("No detector for rule %s, treating as satisfied", rule.key.value)
        return True
    return check(document.raw_text)
