"""
Compliance Checker — Main Engine
==================================
Orchestrates the compliance check for label text:

1. Look up the rules for (category, jurisdiction)
2. Evaluate every rule against the text
3. Score the results
4. Assemble the report

This is the primary entry point for checking a label. Everything here
is pure over a read-only catalog, so many labels can be checked
concurrently against the same catalog.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from label_triage.compliance.evaluator import evaluate_rules
from label_triage.compliance.models import ComplianceResult, Criticality
from label_triage.compliance.report import ComplianceReport, assemble_report
from label_triage.compliance.rules import RuleCatalog, load_catalog
from label_triage.compliance.scorer import compute_score
from label_triage.config import ScoringSettings, get_settings
from label_triage.utils.log import get_logger

logger = get_logger(__name__)


class UnsupportedMarketError(ValueError):
    """Raised by validate_market for a category or jurisdiction with no rules."""


@dataclass
class LabelResult:
    """Full compliance analysis for one label text."""

    label_name: str
    category: str
    jurisdiction: str
    results: list[ComplianceResult] = field(default_factory=list)
    score: float = 0.0
    report: ComplianceReport | None = None
    catalog_version: str = ""
    text_length: int = 0

    @property
    def critical_count(self) -> int:
        return sum(
            1 for r in self.results if r.criticality is Criticality.HIGH and not r.compliant
        )


def perform_compliance_check(
    text: str | None,
    category: str,
    jurisdiction: str,
    catalog: RuleCatalog | None = None,
    policy: ScoringSettings | None = None,
) -> tuple[list[ComplianceResult], float]:
    """
    Check label text against the rules of one market.

    Unknown category/jurisdiction pairs are not errors: they yield no
    results and a score of 0, which callers must read as "nothing to
    check", not as a failing label.

    Returns:
        (results in rule order, score in [0, 100])
    """
    if catalog is None:
        catalog = load_catalog()

    rules = catalog.lookup(category, jurisdiction)
    if not rules:
        logger.warning("No rules for %s/%s — result is indeterminate", category, jurisdiction)

    results = evaluate_rules(rules, text)
    score = compute_score(results, policy)
    return results, score


def generate_report(results: list[ComplianceResult], score: float) -> ComplianceReport:
    """Assemble the report for a finished check."""
    return assemble_report(results, score)


def get_available_options(catalog: RuleCatalog | None = None) -> tuple[list[str], list[str]]:
    """Categories and jurisdictions that have at least one rule set."""
    if catalog is None:
        catalog = load_catalog()
    return catalog.available_categories(), catalog.available_jurisdictions()


def validate_market(
    category: str,
    jurisdiction: str,
    catalog: RuleCatalog | None = None,
) -> None:
    """
    Reject categories or jurisdictions the catalog does not know.

    Raises:
        UnsupportedMarketError: naming the accepted values.
    """
    categories, jurisdictions = get_available_options(catalog)
    if category not in categories:
        raise UnsupportedMarketError(
            f"Invalid category '{category}'. Must be one of: {', '.join(categories)}"
        )
    if jurisdiction not in jurisdictions:
        raise UnsupportedMarketError(
            f"Invalid jurisdiction '{jurisdiction}'. Must be one of: {', '.join(jurisdictions)}"
        )


def check_label(
    text: str | None,
    category: str,
    jurisdiction: str,
    label_name: str = "label",
    catalog: RuleCatalog | None = None,
    policy: ScoringSettings | None = None,
) -> LabelResult:
    """
    Run the full check (lookup → evaluate → score → report) on one label.
    """
    if catalog is None:
        catalog = load_catalog()

    results, score = perform_compliance_check(text, category, jurisdiction, catalog, policy)
    report = generate_report(results, score)

    result = LabelResult(
        label_name=label_name,
        category=category,
        jurisdiction=jurisdiction,
        results=results,
        score=score,
        report=report,
        catalog_version=catalog.version,
        text_length=len(text or ""),
    )

    logger.info(
        "Result: %s [%s/%s] → %s (%.2f%%) — %d passed, %d failed, %d critical",
        label_name, category, jurisdiction, report.status, score,
        report.passed_rules, report.failed_rules, len(report.issues.critical),
    )
    return result


def check_labels(
    labels: list[tuple[str, str]],
    category: str,
    jurisdiction: str,
    max_workers: int | None = None,
    catalog: RuleCatalog | None = None,
    policy: ScoringSettings | None = None,
) -> list[LabelResult]:
    """
    Check many labels concurrently against one market.

    Args:
        labels: (label_name, text) pairs.
        max_workers: Thread count. Defaults to config.
        policy: Scoring policy for every label. Defaults to config.

    Returns:
        One LabelResult per input, in input order.
    """
    if catalog is None:
        catalog = load_catalog()
    if max_workers is None:
        max_workers = get_settings().processing.max_workers

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = [
            pool.submit(check_label, text, category, jurisdiction, name, catalog, policy)
            for name, text in labels
        ]
        return [f.result() for f in futures]
