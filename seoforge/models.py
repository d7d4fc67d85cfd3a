"""Shared data models used across the SEOForge engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class Tier(str, enum.Enum):
    """Compliance tier. Tiers are cumulative: AAA implies AA implies A."""

    A = "A"
    AA = "AA"
    AAA = "AAA"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {Tier.A: 1, Tier.AA: 2, Tier.AAA: 3}


class RuleKey(str, enum.Enum):
    """Identifier of every element the detector knows how to look for."""

    TITLE = "title"
    META_DESCRIPTION = "meta_description"
    CANONICAL = "canonical"
    VIEWPORT = "viewport"
    LANGUAGE = "language"
    META_ROBOTS = "meta_robots"
    OG_TITLE = "og_title"
    OG_DESCRIPTION = "og_description"
    OG_IMAGE = "og_image"
    TWITTER_CARD = "twitter_card"
    IMAGE_ALT = "image_alt"
    HEADINGS_HIERARCHY = "headings_hierarchy"
    SCHEMA_JSON = "schema_json"
    META_KEYWORDS = "meta_keywords"
    PRECONNECT = "preconnect"
    IMAGE_DIMENSIONS = "image_dimensions"
    DYNAMIC_PLACEHOLDERS = "dynamic_placeholders"
    FAVICON = "favicon"
    APPLE_TOUCH_ICON = "apple_touch_icon"
    LANGUAGE_ALTERNATES = "language_alternates"


class FixKey(str, enum.Enum):
    """Identifier of every mechanical fix the applicator can perform."""

    VIEWPORT = "viewport"
    LANGUAGE = "language"
    META_ROBOTS = "meta_robots"
    CANONICAL = "canonical"
    FAVICON = "favicon"
    PRECONNECT = "preconnect"
    APPLE_TOUCH_ICON = "apple_touch_icon"
    MISSING_ALT = "missing_alt"


class ComplianceVerdict(str, enum.Enum):
    """Per-document verdict. Ordered COMPLIANT > PARTIAL > NON_COMPLIANT."""

    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"

    @property
    def rank(self) -> int:
        return _VERDICT_RANK[self]


_VERDICT_RANK = {
    ComplianceVerdict.NON_COMPLIANT: 0,
    ComplianceVerdict.PARTIAL: 1,
    ComplianceVerdict.COMPLIANT: 2,
}


@dataclass(frozen=True)
class Rule:
    """A single catalog entry."""

    key: RuleKey
    tier: Tier
    display_name: str
    fix_key: FixKey | None = None

    @property
    def fixable(self) -> bool:
        return self.fix_key is not None


@dataclass(frozen=True)
class Document:
    """A markup document as supplied by the caller. Never mutated."""

    path: Path
    raw_text: str


@dataclass
class Finding:
    """A rule that failed for a document."""

    rule_key: RuleKey
    display_name: str
    tier: Tier
    fixable: bool

    @classmethod
    def from_rule(cls, rule: Rule) -> Finding:
        return cls(
            rule_key=rule.key,
            display_name=rule.display_name,
            tier=rule.tier,
            fixable=rule.fixable,
        )


@dataclass
class AuditReport:
    """Complete result of auditing one document at one tier."""

    path: Path
    tier: Tier
    findings: list[Finding] = field(default_factory=list)
    verdict: ComplianceVerdict = ComplianceVerdict.COMPLIANT

    @property
    def verdict_label(self) -> str:
        """Verdict as shown to users: the tier name, "AA" or "Non-compliant"."""
        if self.verdict is ComplianceVerdict.COMPLIANT:
            return self.tier.value
        if self.verdict is ComplianceVerdict.PARTIAL:
            return Tier.AA.value
        return "Non-compliant"

    @property
    def is_compliant(self) -> bool:
        return not self.findings

    @property
    def fixable_findings(self) -> list[Finding]:
        return [f for f in self.findings if f.fixable]


@dataclass
class FixStepResult:
    """Result from applying a single fix key to a document."""

    fix_key: FixKey
    success: bool = True
    changes_made: int = 0
    warnings: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class FixOutcome:
    """Aggregate result of one fix pass over one document."""

    path: Path
    original_text: str
    new_text: str
    step_results: list[FixStepResult] = field(default_factory=list)
    error: str | None = None
    backup_path: Path | None = None

    @property
    def changed(self) -> bool:
        return self.new_text != self.original_text

    @property
    def fixes_applied(self) -> int:
        return sum(r.changes_made for r in self.step_results)

    @property
    def all_succeeded(self) -> bool:
        return self.error is None and all(r.success for r in self.step_results)

    @property
    def warnings(self) -> list[str]:
        out: list[str] = []
        for r in self.step_results:
            for w in r.warnings:
                out.append(f"[{r.fix_key.value}] {w}")
        return out


@dataclass
class BatchAuditResult:
    """Aggregate result of auditing a corpus."""

    tier: Tier
    results: list[AuditReport] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.results) + len(self.failed)

    @property
    def succeeded_count(self) -> int:
        return len(self.results)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def compliant_count(self) -> int:
        return sum(1 for r in self.results if r.is_compliant)

    @property
    def issue_count(self) -> int:
        return sum(len(r.findings) for r in self.results)

    @property
    def fixable_issue_count(self) -> int:
        return sum(len(r.fixable_findings) for r in self.results)

    @property
    def compliance_score(self) -> float:
        """Percentage of audited files with no findings, one decimal place."""
        if not self.results:
            return 0.0
        return round(self.compliant_count / len(self.results) * 100, 1)


@dataclass
class BatchFixResult:
    """Aggregate result of a fix run over a corpus."""

    results: list[FixOutcome] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.results) + len(self.failed)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for r in self.results if r.error is None)

    @property
    def failed_count(self) -> int:
        return len(self.failed) + sum(1 for r in self.results if r.error is not None)

    @property
    def changed_count(self) -> int:
        return sum(1 for r in self.results if r.changed and r.error is None)

    @property
    def total_fixes(self) -> int:
        return sum(r.fixes_applied for r in self.results if r.error is None)
