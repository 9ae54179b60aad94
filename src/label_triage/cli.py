"""
Label Triage CLI
=================
Command-line interface for the label compliance triage engine.

Commands:
    check             — Check label text (OCR output) for one market
    options           — List supported categories and jurisdictions
    rules             — Show the rules applied to one market
    validate-catalog  — Load and validate the rule catalog
    export-catalog    — Write the rule catalog to an Excel workbook
    summary           — Build a cross-label summary from JSON reports
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from label_triage import __version__
from label_triage.config import get_settings
from label_triage.utils.log import get_logger, set_level, setup_logging

logger = get_logger(__name__)
console = Console()

_STATUS_COLOR = {
    "compliant": "green",
    "warning": "yellow",
    "non-compliant": "red",
    "indeterminate": "dim",
}


def _load_catalog_or_exit():
    from label_triage.compliance.rules import CatalogError, load_catalog

    try:
        return load_catalog()
    except CatalogError as e:
        console.print(f"[red]Rule catalog is invalid:[/red] {e}")
        sys.exit(1)


# ═══════════════════════════════════════════════════════
#  Root group
# ═══════════════════════════════════════════════════════
@click.group()
@click.version_option(version=__version__, prog_name="label-triage")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr and the log dir.")
def main(verbose: bool):
    """Product label compliance triage (Toys, Baby Products, Cosmetics)."""
    settings = get_settings()
    if verbose:
        setup_logging("DEBUG", log_file=Path(settings.paths.log_dir) / "label-triage.log")
    else:
        set_level(settings.log_level)


# ═══════════════════════════════════════════════════════
#  CHECK - score label text against one market
# ═══════════════════════════════════════════════════════
@main.command()
@click.argument(
    "paths", nargs=-1,
    type=click.Path(exists=True, allow_dash=True, path_type=Path),
)
@click.option("--category", "-c", required=True, help="Product category, e.g. 'Toys'.")
@click.option("--jurisdiction", "-j", required=True, help="Market, e.g. 'USA'.")
@click.option("--text", "-t", default=None, help="Label text given inline instead of files.")
@click.option("--json", "as_json", is_flag=True, help="Print the reports as JSON.")
@click.option("--report/--no-report", default=False, help="Write Markdown + JSON reports.")
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Report directory. Default: config value.",
)
@click.option("--workers", "-w", type=int, default=None, help="Parallel workers. Default: config.")
@click.option(
    "--workbook", "-x",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write all results to an Excel workbook.",
)
def check(
    paths: tuple[Path, ...],
    category: str,
    jurisdiction: str,
    text: str | None,
    as_json: bool,
    report: bool,
    output_dir: Path | None,
    workers: int | None,
    workbook: Path | None,
):
    """Check label text for compliance.

    PATHS are OCR text dumps (.txt files or directories of them);
    use '-' to read from stdin.
    """
    from label_triage.compliance.checker import (
        UnsupportedMarketError,
        check_labels,
        validate_market,
    )
    from label_triage.export.report import render_json, write_report
    from label_triage.utils.helpers import (
        find_text_files,
        read_label_text,
        safe_filename,
        unique_name,
    )

    catalog = _load_catalog_or_exit()
    try:
        validate_market(category, jurisdiction, catalog)
    except UnsupportedMarketError as e:
        raise click.UsageError(str(e))

    labels: list[tuple[str, str]] = []
    if text is not None:
        labels.append(("inline", text))

    files: list[Path] = []
    for p in paths:
        if str(p) == "-":
            labels.append(("stdin", click.get_text_stream("stdin").read()))
        elif p.is_dir():
            files.extend(find_text_files(p))
        else:
            files.append(p)

    # Same-stem files from different directories get the parent as prefix.
    stems = [f.stem for f in files]
    used: set[str] = {name for name, _ in labels}
    for f in files:
        name = f.stem if stems.count(f.stem) == 1 else f"{f.parent.name}-{f.stem}"
        try:
            labels.append((unique_name(name, used), read_label_text(f)))
        except OSError as e:
            logger.error("Failed to read %s: %s", f, e, exc_info=True)
            console.print(f"  [red]✗[/red] {f.name}: {e}")

    if not labels:
        raise click.UsageError("Nothing to check. Pass text files, '-' for stdin, or --text.")

    settings = get_settings()
    results = check_labels(
        labels, category, jurisdiction,
        max_workers=workers or settings.processing.max_workers,
        catalog=catalog,
    )

    if report:
        out = output_dir or Path(settings.paths.report_dir)
        stems_used: set[str] = set()
        for r in results:
            stem = unique_name(safe_filename(r.label_name) or "label", stems_used)
            try:
                write_report(r, out, file_stem=stem)
            except OSError as e:
                logger.error("Failed to write report for %s: %s", r.label_name, e, exc_info=True)
                console.print(f"  [red]✗[/red] {r.label_name}: {e}")

    if workbook:
        from label_triage.export.workbook import export_results_workbook

        export_results_workbook(results, workbook)

    if as_json:
        payload = [render_json(r) for r in results]
        click.echo(json.dumps(payload if len(payload) > 1 else payload[0], indent=2, ensure_ascii=False))
        return

    for r in results:
        _print_label_result(r)

    if len(results) > 1:
        _print_results_table(results)

    if report:
        console.print(f"\n[bold green]Done.[/bold green] Reports in [blue]{output_dir or settings.paths.report_dir}/[/blue].\n")


def _print_label_result(result):
    """Display per-rule results and the prioritized issue list."""
    rep = result.report
    color = _STATUS_COLOR.get(rep.status, "dim")

    table = Table(title=f"{escape(result.label_name)} — {result.category} / {result.jurisdiction}", show_lines=False)
    table.add_column("Element", style="bold")
    table.add_column("Criticality")
    table.add_column("Result", justify="center")
    table.add_column("Matched", style="dim")
    for r in result.results:
        table.add_row(
            escape(r.element),
            r.criticality.value,
            "[green]PASS[/green]" if r.compliant else "[red]FAIL[/red]",
            escape(r.matched_text or ""),
        )

    console.print()
    console.print(table)
    console.print(
        f"Score: [bold]{rep.score:.2f}%[/bold]  "
        f"Status: [{color}]{rep.status}[/{color}]  "
        f"Risk: {rep.risk_level or 'n/a'}  "
        f"({rep.passed_rules}/{rep.total_rules} passed)"
    )
    if rep.is_indeterminate:
        console.print("[yellow]No rules apply to this market; the score is not a verdict.[/yellow]")

    for bucket, style in (("Critical", "red"), ("Warning", "yellow"), ("Recommendation", "cyan")):
        issues = rep.issues.as_dict()[bucket]
        if not issues:
            continue
        console.print(f"\n[bold {style}]{bucket}[/bold {style}]")
        for issue in issues:
            console.print(f"  • {escape(issue.element)}: {escape(issue.suggestion or '')}")


def _print_results_table(results):
    """Display a rich summary table of results."""
    table = Table(title="Compliance Summary", show_lines=True)
    table.add_column("Label", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Risk", justify="center")
    table.add_column("Pass", justify="right", style="green")
    table.add_column("Fail", justify="right", style="red")
    table.add_column("Critical", justify="right", style="red")

    for r in results:
        rep = r.report
        color = _STATUS_COLOR.get(rep.status, "dim")
        table.add_row(
            escape(r.label_name),
            f"[{color}]{rep.status}[/{color}]",
            f"{rep.score:.0f}%",
            rep.risk_level or "n/a",
            str(rep.passed_rules),
            str(rep.failed_rules),
            str(len(rep.issues.critical)),
        )

    console.print()
    console.print(table)


# ═══════════════════════════════════════════════════════
#  OPTIONS - supported markets
# ═══════════════════════════════════════════════════════
@main.command()
def options():
    """List supported categories, jurisdictions and markets."""
    catalog = _load_catalog_or_exit()

    console.print(f"Categories:    {', '.join(catalog.available_categories())}")
    console.print(f"Jurisdictions: {', '.join(catalog.available_jurisdictions())}")

    table = Table(title="Supported Markets")
    table.add_column("Jurisdiction", style="bold")
    table.add_column("Categories")
    for jurisdiction, categories in catalog.markets().items():
        table.add_row(jurisdiction, ", ".join(categories))
    console.print(table)


# ═══════════════════════════════════════════════════════
#  RULES - rules for one market
# ═══════════════════════════════════════════════════════
@main.command()
@click.option("--category", "-c", required=True, help="Product category.")
@click.option("--jurisdiction", "-j", required=True, help="Market.")
def rules(category: str, jurisdiction: str):
    """Show the rules applied to one market."""
    catalog = _load_catalog_or_exit()
    market_rules = catalog.lookup(category, jurisdiction)
    if not market_rules:
        console.print(f"[yellow]No rules for {category}/{jurisdiction}.[/yellow]")
        sys.exit(1)

    table = Table(title=f"Rules — {category} / {jurisdiction}", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Element", style="bold")
    table.add_column("Criticality")
    table.add_column("Family", style="cyan")
    table.add_column("Location", style="dim")
    for i, rule in enumerate(market_rules, 1):
        table.add_row(str(i), escape(rule.element), rule.criticality.value, rule.match_family.value, escape(rule.location))
    console.print(table)


# ═══════════════════════════════════════════════════════
#  VALIDATE-CATALOG
# ═══════════════════════════════════════════════════════
@main.command("validate-catalog")
def validate_catalog():
    """Load every rule file and report problems."""
    catalog = _load_catalog_or_exit()
    console.print(f"[green]✓[/green] Catalog OK: {len(catalog)} markets, {catalog.rule_count} rules")
    console.print(f"  Version:     {catalog.version}")
    console.print(f"  Fingerprint: {catalog.fingerprint[:16]}")


# ═══════════════════════════════════════════════════════
#  EXPORT-CATALOG - Excel workbook of all rules
# ═══════════════════════════════════════════════════════
@main.command("export-catalog")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("catalog.xlsx"),
    show_default=True,
    help="Workbook path.",
)
def export_catalog(output: Path):
    """Export the rule catalog to an Excel workbook."""
    from label_triage.export.workbook import export_catalog_workbook

    catalog = _load_catalog_or_exit()
    path = export_catalog_workbook(catalog, output)
    console.print(f"[bold green]Catalog exported:[/bold green] {path}")


# ═══════════════════════════════════════════════════════
#  SUMMARY - cross-label summary from JSON reports
# ═══════════════════════════════════════════════════════
@main.command()
@click.option(
    "--reports-dir", "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory of report-*.json files. Default: config value.",
)
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory for the summary report.",
)
def summary(reports_dir: Path | None, output_dir: Path | None):
    """Generate a cross-label summary report from existing check reports."""
    from label_triage.export.report import generate_summary_report

    settings = get_settings()
    src = reports_dir or Path(settings.paths.report_dir)
    json_files = sorted(src.glob("report-*.json")) if src.exists() else []
    if not json_files:
        console.print(f"[yellow]No JSON report files found in {src}[/yellow]")
        console.print("[dim]Run 'label-triage check --report' first.[/dim]")
        sys.exit(1)

    console.print(f"\n[bold]Generating summary from {len(json_files)} report(s)…[/bold]\n")
    summary_path = generate_summary_report(json_files, output_dir or src)
    console.print(f"[bold green]Summary report:[/bold green] {summary_path}\n")


if __name__ == "__main__":
    main()
