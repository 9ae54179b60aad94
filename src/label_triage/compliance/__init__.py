"""Compliance engine subpackage — catalog, matching, scoring, reporting."""

from label_triage.compliance.checker import (
    check_label,
    generate_report,
    get_available_options,
    perform_compliance_check,
)
from label_triage.compliance.rules import load_catalog

__all__ = [
    "check_label",
    "generate_report",
    "get_available_options",
    "load_catalog",
    "perform_compliance_check",
]
