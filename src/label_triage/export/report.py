"""
Report Generator
==================
Generates Markdown and JSON compliance reports.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from label_triage.compliance.checker import LabelResult
from label_triage.config import get_settings
from label_triage.utils.helpers import safe_filename
from label_triage.utils.log import get_logger

logger = get_logger(__name__)

_STATUS_ICON = {
    "compliant": "✅",
    "warning": "⚠️",
    "non-compliant": "❌",
    "indeterminate": "❔",
}


def write_report(
    label_result: LabelResult,
    output_dir: Path | None = None,
    file_stem: str | None = None,
) -> tuple[Path, Path]:
    """
    Write Markdown + JSON compliance reports for a label.

    file_stem overrides the name derived from the label, so callers
    writing several labels can keep the files apart.

    Returns: (markdown_path, json_path)
    """
    settings = get_settings()
    if output_dir is None:
        output_dir = Path(settings.paths.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    safe_name = file_stem or safe_filename(label_result.label_name) or "label"
    md_path = output_dir / f"report-{safe_name}.md"
    json_path = output_dir / f"report-{safe_name}.json"

    md_path.write_text(render_markdown(label_result), encoding="utf-8")
    json_path.write_text(
        json.dumps(render_json(label_result), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )

    logger.info("Reports: %s, %s", md_path.name, json_path.name)
    return md_path, json_path


def render_markdown(result: LabelResult) -> str:
    """Render a detailed Markdown compliance report."""
    report = result.report
    lines: list[str] = []

    lines.append(f"# Compliance Report: {result.label_name}")
    lines.append("")
    lines.append(f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    lines.append(f"**Market:** {result.category} / {result.jurisdiction}")
    lines.append(f"**Catalog:** {result.catalog_version}")
    lines.append("")

    if report:
        lines.append("## Summary")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| **Status** | **{_STATUS_ICON.get(report.status, '')} {report.status}** |")
        lines.append(f"| Score | {report.score}% |")
        lines.append(f"| Risk level | {report.risk_level or 'n/a'} |")
        lines.append(f"| Rules checked | {report.total_rules} |")
        lines.append(f"| ✅ Passed | {report.passed_rules} |")
        lines.append(f"| ❌ Failed | {report.failed_rules} |")
        lines.append(f"| Critical issues | {len(report.issues.critical)} |")
        lines.append("")

        if report.is_indeterminate:
            lines.append("> No rules are defined for this market. The score is not a verdict.")
            lines.append("")

    lines.append("## Rule-by-Rule Results")
    lines.append("")
    lines.append("| # | Status | Element | Criticality | Matched |")
    lines.append("|---|--------|---------|-------------|---------|")
    for i, r in enumerate(result.results, 1):
        icon = "✅" if r.compliant else "❌"
        lines.append(
            f"| {i} | {icon} | {r.element} | {r.criticality.value} | {r.matched_text or '—'} |"
        )
    lines.append("")

    if report and len(report.issues):
        lines.append("## Issues")
        lines.append("")
        for bucket, issues in report.issues.as_dict().items():
            if not issues:
                continue
            lines.append(f"### {bucket} ({len(issues)})")
            lines.append("")
            for issue in issues:
                lines.append(f"- **{issue.element}**")
                if issue.suggestion:
                    lines.append(f"  - Action: {issue.suggestion}")
            lines.append("")

    if report and report.suggestions:
        lines.append("## Suggestions")
        lines.append("")
        for s in report.suggestions:
            lines.append(f"- {s}")
        lines.append("")

    return "\n".join(lines)


def render_json(result: LabelResult) -> dict:
    """Render a structured JSON compliance report."""
    report = result.report
    return {
        "label_name": result.label_name,
        "category": result.category,
        "jurisdiction": result.jurisdiction,
        "catalog_version": result.catalog_version,
        "text_length": result.text_length,
        "generated_at": datetime.now().isoformat(),
        "report": report.to_dict() if report else None,
        "results": [r.to_dict() for r in result.results],
    }


def generate_summary_report(
    json_paths: list[Path],
    output_dir: Path | None = None,
) -> Path:
    """
    Generate a cross-label summary report from per-label JSON reports.
    Shows which labels fail which elements.
    """
    settings = get_settings()
    if output_dir is None:
        output_dir = Path(settings.paths.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    reports: list[dict] = []
    for path in sorted(json_paths):
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if data.get("report") is None:
            logger.warning("Skipping %s: no report section", Path(path).name)
            continue
        reports.append(data)

    out_path = output_dir / "summary-report.md"
    lines = [
        "# Cross-Label Compliance Summary",
        "",
        f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        f"**Labels checked:** {len(reports)}",
        "",
        "## Overview",
        "",
        "| Label | Market | Status | Score | Risk | Pass | Fail | Critical |",
        "|-------|--------|--------|-------|------|------|------|----------|",
    ]

    for data in reports:
        rep = data["report"]
        lines.append(
            f"| {data['label_name'][:40]} | {data['category']}/{data['jurisdiction']} | "
            f"{rep['status']} | {rep['score']}% | {rep['risk_level'] or 'n/a'} | "
            f"{rep['passed_rules']} | {rep['failed_rules']} | {len(rep['issues']['Critical'])} |"
        )
    lines.append("")

    failing: set[str] = set()
    for data in reports:
        for r in data.get("results", []):
            if not r["compliant"]:
                failing.add(r["element"])

    if failing:
        lines.append("## Gap Matrix")
        lines.append("")
        lines.append("| Element |" + "|".join(d["label_name"][:15] for d in reports) + "|")
        lines.append("|------|" + "|".join("---" for _ in reports) + "|")

        for element in sorted(failing):
            cells = [element[:30]]
            for data in reports:
                match = next((r for r in data.get("results", []) if r["element"] == element), None)
                if match is None:
                    cells.append("—")
                elif match["compliant"]:
                    cells.append("✅")
                else:
                    cells.append("❌")
            lines.append("| " + " | ".join(cells) + " |")

    out_path.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Summary report: %s", out_path.name)
    return out_path
