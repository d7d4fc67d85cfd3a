"""Compliance classifier: turns per-rule detection into an audit report."""

from __future__ import annotations

from typing import Iterable

from seoforge.catalog import rules_for_tier
from seoforge.detector import detect
from seoforge.models import (
    AuditReport,
    ComplianceVerdict,
    Document,
    Finding,
    Rule,
    Tier,
)


def downgrade(verdict: ComplianceVerdict, failing_tier: Tier) -> ComplianceVerdict:
    """Apply one failing rule of *failing_tier* to *verdict*.

    A tier-A failure drops the verdict to NON_COMPLIANT for good.  AA and AAA
    failures only ever drop a COMPLIANT verdict to PARTIAL.  The result is
    never higher than the input.
    """
    if failing_tier is Tier.A:
        floor = ComplianceVerdict.NON_COMPLIANT
    else:
        floor = ComplianceVerdict.PARTIAL
    return floor if floor.rank < verdict.rank else verdict


def classify(document: Document, rules: Iterable[Rule], tier: Tier) -> AuditReport:
    """Run every rule in *rules* against *document* and build the report.

    Findings are recorded in rule order.  *tier* labels a compliant verdict.
    """
    report = AuditReport(path=document.path, tier=tier)
    for rule in rules:
        if detect(document, rule):
            continue
        report.findings.append(Finding.from_rule(rule))
        report.verdict = downgrade(report.verdict, rule.tier)
    return report


def audit_document(document: Document, tier: Tier) -> AuditReport:
    """Classify *document* against every rule in scope for *tier*."""
    return classify(document, rules_for_tier(tier), tier)
