"""Export subpackage — Markdown/JSON reports and Excel workbooks."""

from label_triage.export.report import generate_summary_report, write_report
from label_triage.export.workbook import export_catalog_workbook, export_results_workbook

__all__ = [
    "export_catalog_workbook",
    "export_results_workbook",
    "generate_summary_report",
    "write_report",
]
