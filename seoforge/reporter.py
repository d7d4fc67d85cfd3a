"""Report generation: JSON and Markdown output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from seoforge.models import AuditReport, BatchAuditResult, BatchFixResult


def score_rating(score: float) -> str:
    """Qualitative label for a compliance score in percent."""
    if score >= 90:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    return "Needs Work"


def audit_summary(batch: BatchAuditResult) -> dict[str, Any]:
    return {
        "level": batch.tier.value,
        "total_files": batch.total_files,
        "compliant_files": batch.compliant_count,
        "files_with_issues": batch.succeeded_count - batch.compliant_count,
        "failed_files": batch.failed_count,
        "total_issues": batch.issue_count,
        "fixable_issues": batch.fixable_issue_count,
        "compliance_score": batch.compliance_score,
        "rating": score_rating(batch.compliance_score),
    }


def report_to_dict(report: AuditReport) -> dict[str, Any]:
    return {
        "file": str(report.path),
        "level": report.tier.value,
        "compliance": report.verdict_label,
        "issues": [
            {
                "type": "missing_element",
                "key": f.rule_key.value,
                "element": f.display_name,
                "severity": f.tier.value,
                "fixable": f.fixable,
            }
            for f in report.findings
        ],
    }


def audit_to_dict(batch: BatchAuditResult) -> dict[str, Any]:
    return {
        "summary": audit_summary(batch),
        "files": [report_to_dict(r) for r in batch.results],
        "failed": [{"file": str(p), "error": e} for p, e in batch.failed],
    }


def write_json_report(batch: BatchAuditResult, output: Path) -> None:
    """Write an audit batch as a JSON report."""
    output.write_text(json.dumps(audit_to_dict(batch), indent=2), encoding="utf-8")


def write_markdown_report(batch: BatchAuditResult, output: Path) -> None:
    """Write an audit batch as a Markdown report."""
    summary = audit_summary(batch)
    lines: list[str] = [
        f"# SEO Audit Report ({batch.tier.value})",
        "",
        f"- **Total files:** {summary['total_files']}",
        f"- **Compliant files:** {summary['compliant_files']}",
        f"- **Files with issues:** {summary['files_with_issues']}",
        f"- **Total issues:** {summary['total_issues']}",
        f"- **Fixable issues:** {summary['fixable_issues']}",
        f"- **Compliance score:** {summary['compliance_score']}% ({summary['rating']})",
        "",
    ]

    for report in batch.results:
        if report.is_compliant:
            continue
        lines.append(f"## {report.path} ({report.verdict_label})")
        lines.append("")
        for finding in report.findings:
            fix = " (fixable)" if finding.fixable else ""
            lines.append(
                f"- **[{finding.tier.value}]** `{finding.rule_key.value}`: "
                f"{finding.display_name} missing{fix}"
            )
        lines.append("")

    if batch.failed:
        lines.append("## Failed")
        lines.append("")
        for path, error in batch.failed:
            lines.append(f"- `{path}`: {error}")
        lines.append("")

    output.write_text("\n".join(lines), encoding="utf-8")


def format_fix_summary(batch: BatchFixResult) -> str:
    """Return a human-readable summary of a fix run."""
    lines = [
        f"Fix complete: {batch.changed_count} files modified, "
        f"{batch.total_fixes} fixes applied, {batch.failed_count} errors",
    ]
    for outcome in batch.results:
        if outcome.error:
            lines.append(f"  [FAILED] {outcome.path}: {outcome.error}")
        elif outcome.changed:
            lines.append(f"  [OK] {outcome.path}: {outcome.fixes_applied} fix(es)")
            for w in outcome.warnings:
                lines.append(f"         Warning: {w}")
    for path, error in batch.failed:
        lines.append(f"  [FAILED] {path}: {error}")
    return "\n".join(lines)
