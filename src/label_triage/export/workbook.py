"""
Excel export of the rule catalog and of check results, for
reviewers who maintain the rules outside of YAML.
"""

from __future__ import annotations

from pathlib import Path

import openpyxl
from openpyxl.styles import Font, PatternFill

from label_triage.compliance.checker import LabelResult
from label_triage.compliance.rules import RuleCatalog
from label_triage.utils.log import get_logger

logger = get_logger(__name__)

CATALOG_COLUMNS = [
    "Category", "Jurisdiction", "Element", "Criticality",
    "Match Family", "Location", "Details", "Suggestion",
]

RESULT_COLUMNS = [
    "Label", "Category", "Jurisdiction", "Element", "Criticality",
    "Compliant", "Matched Text", "Suggestion",
]

_HEADER_FONT = Font(bold=True)
_FAIL_FILL = PatternFill(start_color="FFF4CCCC", end_color="FFF4CCCC", fill_type="solid")


def _write_header(ws, columns: list[str]) -> None:
    ws.append(columns)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
    ws.freeze_panes = "A2"


def export_catalog_workbook(catalog: RuleCatalog, path: Path) -> Path:
    """Write every rule of the catalog to one sheet."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Rules"
    _write_header(ws, CATALOG_COLUMNS)

    for category, jurisdiction, rules in catalog:
        for rule in rules:
            ws.append([
                category,
                jurisdiction,
                rule.element,
                rule.criticality.value,
                rule.match_family.value,
                rule.location,
                rule.details,
                rule.suggestion,
            ])

    info = wb.create_sheet("Catalog")
    info.append(["Version", catalog.version])
    info.append(["Fingerprint", catalog.fingerprint])
    info.append(["Sources", ", ".join(catalog.sources)])
    info.append(["Rules", catalog.rule_count])

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info("Catalog workbook: %s (%d rules)", path.name, catalog.rule_count)
    return path


def export_results_workbook(label_results: list[LabelResult], path: Path) -> Path:
    """Write one row per rule result per label; failures are shaded."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Results"
    _write_header(ws, RESULT_COLUMNS)

    summary = wb.create_sheet("Summary")
    _write_header(summary, ["Label", "Category", "Jurisdiction", "Status", "Score", "Risk", "Passed", "Failed"])

    for lr in label_results:
        for r in lr.results:
            ws.append([
                lr.label_name,
                lr.category,
                lr.jurisdiction,
                r.element,
                r.criticality.value,
                "yes" if r.compliant else "no",
                r.matched_text or "",
                r.suggestion or "",
            ])
            if not r.compliant:
                for cell in ws[ws.max_row]:
                    cell.fill = _FAIL_FILL

        rep = lr.report
        summary.append([
            lr.label_name,
            lr.category,
            lr.jurisdiction,
            rep.status if rep else "",
            lr.score,
            (rep.risk_level or "") if rep else "",
            rep.passed_rules if rep else 0,
            rep.failed_rules if rep else 0,
        ])

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info("Results workbook: %s (%d labels)", path.name, len(label_results))
    return path
