"""Rule catalog: the fixed table of elements checked at each compliance tier."""

from __future__ import annotations

from typing import Iterable

from seoforge.models import FixKey, Rule, RuleKey, Tier


class InvalidTierError(ValueError):
    """Raised when a compliance tier is not one of A, AA, AAA."""


class UnknownIssueError(ValueError):
    """Raised when a requested fix key is not in the fixable set."""


# Catalog order within a tier is reporting order.
_CATALOG: tuple[Rule, ...] = (
    Rule(RuleKey.TITLE, Tier.A, "Title tag"),
    Rule(RuleKey.META_DESCRIPTION, Tier.A, "Meta description"),
    Rule(RuleKey.CANONICAL, Tier.A, "Canonical URL", FixKey.CANONICAL),
    Rule(RuleKey.VIEWPORT, Tier.A, "Viewport meta tag", FixKey.VIEWPORT),
    Rule(RuleKey.LANGUAGE, Tier.A, "HTML lang attribute", FixKey.LANGUAGE),
    Rule(RuleKey.META_ROBOTS, Tier.AA, "Robots meta tag", FixKey.META_ROBOTS),
    Rule(RuleKey.OG_TITLE, Tier.AA, "Open Graph title"),
    Rule(RuleKey.OG_DESCRIPTION, Tier.AA, "Open Graph description"),
    Rule(RuleKey.OG_IMAGE, Tier.AA, "Open Graph image"),
    Rule(RuleKey.TWITTER_CARD, Tier.AA, "Twitter card"),
    Rule(RuleKey.IMAGE_ALT, Tier.AA, "Image alt attributes", FixKey.MISSING_ALT),
    Rule(RuleKey.HEADINGS_HIERARCHY, Tier.AA, "Heading hierarchy"),
    Rule(RuleKey.SCHEMA_JSON, Tier.AAA, "Schema.org JSON-LD"),
    Rule(RuleKey.META_KEYWORDS, Tier.AAA, "Meta keywords"),
    Rule(RuleKey.PRECONNECT, Tier.AAA, "Preconnect/DNS prefetch", FixKey.PRECONNECT),
    Rule(RuleKey.IMAGE_DIMENSIONS, Tier.AAA, "Image width and height attributes"),
    Rule(RuleKey.DYNAMIC_PLACEHOLDERS, Tier.AAA, "Dynamic placeholders filled"),
    Rule(RuleKey.FAVICON, Tier.AAA, "Favicon", FixKey.FAVICON),
    Rule(RuleKey.APPLE_TOUCH_ICON, Tier.AAA, "Apple touch icon", FixKey.APPLE_TOUCH_ICON),
    Rule(RuleKey.LANGUAGE_ALTERNATES, Tier.AAA, "Hreflang tags"),
)

_BY_KEY: dict[RuleKey, Rule] = {rule.key: rule for rule in _CATALOG}


def all_rules() -> tuple[Rule, ...]:
    """Every rule in the catalog, A rules first."""
    return _CATALOG


def get_rule(key: RuleKey | str) -> Rule:
    """Look up a rule by key. Raises ``KeyError`` for unknown keys."""
    try:
        return _BY_KEY[RuleKey(key)]
    except ValueError:
        raise KeyError(key) from None


def rules_for_tier(tier: Tier) -> tuple[Rule, ...]:
    """Return the rules of *tier* and every tier below it.

    Ordered A rules first, then AA, then AAA.
    """
    return tuple(
        rule
        for level in (Tier.A, Tier.AA, Tier.AAA)
        if level.rank <= tier.rank
        for rule in _CATALOG
        if rule.tier is level
    )


def parse_tier(value: str | Tier) -> Tier:
    """Parse a user-supplied tier name (case-insensitive).

    Raises ``InvalidTierError`` for anything other than A, AA or AAA.
    """
    if isinstance(value, Tier):
        return value
    normalized = str(value).strip().upper()
    try:
        return Tier(normalized)
    except ValueError:
        raise InvalidTierError(
            f"Invalid compliance level: {value!r}. Must be one of: A, AA, AAA"
        ) from None


def parse_fix_keys(values: Iterable[str | FixKey]) -> list[FixKey]:
    """Validate requested fix keys, preserving order and dropping duplicates.

    Rule keys whose rule is fixable are accepted as aliases for their fix
    (``image_alt`` selects ``missing_alt``).  Raises ``UnknownIssueError``
    for the first key that matches neither.
    """
    out: list[FixKey] = []
    for value in values:
        key = _resolve_fix_key(value)
        if key is None:
            raise UnknownIssueError(
                f"Unknown issue: {value!r}. "
                f"Available: {', '.join(k.value for k in FixKey)}"
            )
        if key not in out:
            out.append(key)
    return out


def _resolve_fix_key(value: str | FixKey) -> FixKey | None:
    if isinstance(value, FixKey):
        return value
    name = str(value).strip().lower()
    if name in _values(FixKey):
        return FixKey(name)
    if name in _values(RuleKey):
        return _BY_KEY[RuleKey(name)].fix_key
    return None


def _values(enum_cls: type[FixKey] | type[RuleKey]) -> frozenset[str]:
    return frozenset(member.value for member in enum_cls)
