"""Command-line interface: audit, fix and rules."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from seoforge import __version__
from seoforge.catalog import (
    InvalidTierError,
    UnknownIssueError,
    all_rules,
    parse_fix_keys,
    parse_tier,
    rules_for_tier,
)
from seoforge.config import SEOForgeConfig
from seoforge.models import BatchAuditResult, FixKey, Tier

app = typer.Typer(
    name="seoforge",
    help="Audit templates for missing SEO elements and insert the fixable ones.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

_TIER_STYLE = {
    Tier.A: "[bold red]Critical[/bold red]",
    Tier.AA: "[bold yellow]Important[/bold yellow]",
    Tier.AAA: "[bold blue]Advanced[/bold blue]",
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"seoforge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(  # noqa: UP007
        None, "--version", "-V", callback=version_callback, is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    """SEOForge finds missing SEO elements; the content is up to you."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def audit(
    path: Optional[Path] = typer.Argument(  # noqa: UP007
        None, help="File or directory to scan. Defaults to scan.path from config.",
    ),
    level: Optional[str] = typer.Option(  # noqa: UP007
        None, "--level", "-l", help="Compliance level: A, AA or AAA.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    report: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--report", "-r", help="Also write a report (.json or .md).",
    ),
    config: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--config", "-c", help="Path to seoforge.yaml.",
    ),
    workers: Optional[int] = typer.Option(  # noqa: UP007
        None, "--workers", "-w", min=1, help="Documents processed in parallel.",
    ),
) -> None:
    """Scan templates for missing SEO elements (no modification)."""
    cfg = _load_config(config)
    try:
        tier = parse_tier(level or cfg.compliance.default_level)
    except InvalidTierError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    scan_path = _resolve_scan_path(path, cfg)
    paths = _collect(scan_path, cfg)

    from seoforge.batch import audit_corpus
    from seoforge.reporter import audit_to_dict

    if json_output:
        batch = audit_corpus(paths, tier, workers=workers or cfg.batch.workers)
        typer.echo(json.dumps(audit_to_dict(batch), indent=2))
    else:
        console.print(f"[dim]Auditing at[/dim] [yellow]{tier.value}[/yellow] [dim]level:[/dim] {scan_path}")
        console.print(f"[dim]Found {len(paths)} file(s) to audit[/dim]")

        from rich.progress import Progress

        with Progress(console=console) as progress:
            task = progress.add_task("Auditing...", total=len(paths))
            batch = audit_corpus(
                paths, tier,
                workers=workers or cfg.batch.workers,
                on_done=lambda _p: progress.advance(task),
            )
        _print_audit(batch)

    if report is not None:
        _write_report(batch, report, cfg)


@app.command()
def fix(
    path: Optional[Path] = typer.Argument(  # noqa: UP007
        None, help="File or directory to fix. Defaults to scan.path from config.",
    ),
    issues: Optional[list[str]] = typer.Option(  # noqa: UP007
        None, "--issues", "-i",
        help="Issue to fix (repeatable or comma separated). Defaults to all.",
    ),
    backup: Optional[bool] = typer.Option(  # noqa: UP007
        None, "--backup/--no-backup", help="Back up files before modifying them.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change, write nothing."),
    config: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--config", "-c", help="Path to seoforge.yaml.",
    ),
    workers: Optional[int] = typer.Option(  # noqa: UP007
        None, "--workers", "-w", min=1, help="Documents processed in parallel.",
    ),
) -> None:
    """Insert missing SEO elements into templates."""
    cfg = _load_config(config)

    requested = [part.strip() for item in issues or [] for part in item.split(",") if part.strip()]
    try:
        keys = parse_fix_keys(requested) if requested else list(FixKey)
    except UnknownIssueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    scan_path = _resolve_scan_path(path, cfg)
    paths = _collect(scan_path, cfg)
    console.print(f"[dim]Fixing {len(paths)} file(s):[/dim] {', '.join(k.value for k in keys)}")

    if dry_run:
        _preview_fixes(paths, keys, cfg)
        return

    from rich.progress import Progress

    from seoforge.backup import FileBackupSink, FileWriteSink
    from seoforge.batch import fix_corpus
    from seoforge.reporter import format_fix_summary

    make_backups = cfg.fixes.create_backups if backup is None else backup
    backup_sink = FileBackupSink(cfg.fixes.backup_path) if make_backups else None

    with Progress(console=console) as progress:
        task = progress.add_task("Fixing...", total=len(paths))
        batch = fix_corpus(
            paths, keys,
            writer=FileWriteSink(),
            backup=backup_sink,
            settings=cfg.fixes,
            workers=workers or cfg.batch.workers,
            on_done=lambda _p: progress.advance(task),
        )

    style = "green" if batch.failed_count == 0 else "yellow"
    console.print(f"[{style}]{escape(format_fix_summary(batch))}[/{style}]", highlight=False)
    if make_backups and batch.changed_count:
        console.print(f"[dim]Backups written to {cfg.fixes.backup_path}[/dim]")


@app.command()
def rules(
    level: Optional[str] = typer.Option(  # noqa: UP007
        None, "--level", "-l", help="Only show rules checked at this level.",
    ),
) -> None:
    """List the elements checked at each compliance level."""
    try:
        selected = rules_for_tier(parse_tier(level)) if level else all_rules()
    except InvalidTierError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="SEO Rules")
    table.add_column("Key", style="bold")
    table.add_column("Element")
    table.add_column("Level")
    table.add_column("Fix")

    for rule in selected:
        fix_key = rule.fix_key.value if rule.fix_key else "[dim]-[/dim]"
        table.add_row(rule.key.value, rule.display_name, _TIER_STYLE[rule.tier], fix_key)

    console.print(table)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(path: Path | None) -> SEOForgeConfig:
    try:
        return SEOForgeConfig.load(path)
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def _resolve_scan_path(path: Path | None, cfg: SEOForgeConfig) -> Path:
    scan_path = path or cfg.scan.path
    if not scan_path.exists():
        console.print(f"[red]Path not found:[/red] {scan_path}")
        raise typer.Exit(code=1)
    return scan_path


def _collect(scan_path: Path, cfg: SEOForgeConfig) -> list[Path]:
    from seoforge.sources import collect_paths

    return collect_paths(
        scan_path,
        cfg.scan.patterns,
        cfg.scan.exclude,
        ignore_components=cfg.scan.ignore_components,
    )


def _print_audit(batch: BatchAuditResult) -> None:
    from seoforge.reporter import score_rating

    score = batch.compliance_score
    summary = Table(title="SEO Audit Results")
    summary.add_column("Metric", style="bold")
    summary.add_column("Value")
    summary.add_row("Total files", f"[cyan]{batch.total_files}[/cyan]")
    summary.add_row("Compliant files", f"[green]{batch.compliant_count}[/green]")
    summary.add_row(
        "Files with issues",
        f"[yellow]{batch.succeeded_count - batch.compliant_count}[/yellow]",
    )
    if batch.failed_count:
        summary.add_row("Unreadable files", f"[red]{batch.failed_count}[/red]")
    summary.add_row("Total issues", f"[red]{batch.issue_count}[/red]")
    summary.add_row("Fixable issues", f"[blue]{batch.fixable_issue_count}[/blue]")
    summary.add_row("Compliance score", f"{score}% ({score_rating(score)})")
    console.print(summary)

    rows = [
        (report, finding)
        for report in batch.results
        for finding in report.findings
    ]
    if not rows:
        if batch.results:
            console.print("[bold green]All files are SEO compliant.[/bold green]")
    else:
        details = Table(title="Detailed Issues")
        details.add_column("File", style="cyan")
        details.add_column("Missing element")
        details.add_column("Level")
        details.add_column("Compliance")
        details.add_column("Fixable")
        for report, finding in rows:
            details.add_row(
                str(report.path),
                finding.display_name,
                _TIER_STYLE[finding.tier],
                report.verdict_label,
                "[green]Yes[/green]" if finding.fixable else "[dim]No[/dim]",
            )
        console.print(details)

        if batch.fixable_issue_count:
            console.print(
                f"\n[bold green]Quick fix available:[/bold green] run "
                f"[yellow]seoforge fix --backup[/yellow] to fix "
                f"{batch.fixable_issue_count} issue(s)."
            )

    for path, error in batch.failed:
        console.print(f"  [red]X[/red] {path}: {escape(error)}")


def _preview_fixes(paths: list[Path], keys: list[FixKey], cfg: SEOForgeConfig) -> None:
    from seoforge.pipeline import apply_fixes
    from seoforge.sources import read_document

    table = Table(title="Fix Preview (dry run)")
    table.add_column("File", style="cyan")
    table.add_column("Will add")
    table.add_column("Changes")

    pending = 0
    for path in paths:
        try:
            outcome = apply_fixes(read_document(path), keys, cfg.fixes)
        except (OSError, UnicodeDecodeError) as exc:
            console.print(f"  [red]X[/red] {path}: {escape(str(exc))}")
            continue
        if not outcome.changed:
            continue
        applied = [r.fix_key.value for r in outcome.step_results if r.changes_made]
        table.add_row(str(path), ", ".join(applied), str(outcome.fixes_applied))
        pending += outcome.fixes_applied

    if pending:
        console.print(table)
    console.print(f"[dim]{pending} fix(es) would be applied. No files were changed.[/dim]")


def _write_report(batch: BatchAuditResult, output: Path, cfg: SEOForgeConfig) -> None:
    from seoforge.reporter import write_json_report, write_markdown_report

    if output.suffix.lower() == ".json":
        fmt = "json"
    elif output.suffix.lower() in (".md", ".markdown"):
        fmt = "markdown"
    else:
        fmt = cfg.output.report_format

    if fmt == "json":
        write_json_report(batch, output)
    else:
        write_markdown_report(batch, output)
    err_console.print(f"[dim]Report written to {output}[/dim]")
