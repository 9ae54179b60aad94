"""
Report Assembler
=================
Turns per-rule results and a score into the report the presentation
layer renders: failing rules bucketed by severity, a flat remediation
list, and an overall status and risk level.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from label_triage.compliance.models import ComplianceResult, Criticality
from label_triage.config import ReportSettings, get_settings

BUCKET_FOR = {
    Criticality.HIGH: "Critical",
    Criticality.MEDIUM: "Warning",
    Criticality.LOW: "Recommendation",
}

STATUS_INDETERMINATE = "indeterminate"
STATUS_NON_COMPLIANT = "non-compliant"
STATUS_WARNING = "warning"
STATUS_COMPLIANT = "compliant"


@dataclass(frozen=True)
class IssueBuckets:
    """Failing results partitioned by severity, in evaluation order."""

    critical: tuple[ComplianceResult, ...] = ()
    warning: tuple[ComplianceResult, ...] = ()
    recommendation: tuple[ComplianceResult, ...] = ()

    def as_dict(self) -> dict[str, list[ComplianceResult]]:
        return {
            "Critical": list(self.critical),
            "Warning": list(self.warning),
            "Recommendation": list(self.recommendation),
        }

    def __len__(self) -> int:
        return len(self.critical) + len(self.warning) + len(self.recommendation)


@dataclass(frozen=True)
class ComplianceReport:
    """Aggregate of one evaluation run."""

    score: float
    total_rules: int
    passed_rules: int
    failed_rules: int
    issues: IssueBuckets = field(default_factory=IssueBuckets)
    suggestions: tuple[str, ...] = ()
    risk_level: str | None = "Low"  # None when no rules applied

    @property
    def is_indeterminate(self) -> bool:
        """True when no rules applied; the 0 score then means nothing."""
        return self.total_rules == 0

    @property
    def status(self) -> str:
        if self.is_indeterminate:
            return STATUS_INDETERMINATE
        if self.issues.critical:
            return STATUS_NON_COMPLIANT
        if self.issues.warning or self.issues.recommendation:
            return STATUS_WARNING
        return STATUS_COMPLIANT

    @property
    def recommendations(self) -> dict[str, list[str]]:
        """Suggestions grouped by urgency (Critical → immediate, etc.)."""
        def _collect(bucket: tuple[ComplianceResult, ...]) -> list[str]:
            return [r.suggestion for r in bucket if r.suggestion]

        return {
            "immediate": _collect(self.issues.critical),
            "recommended": _collect(self.issues.warning),
            "optional": _collect(self.issues.recommendation),
        }

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "status": self.status,
            "risk_level": self.risk_level,
            "total_rules": self.total_rules,
            "passed_rules": self.passed_rules,
            "failed_rules": self.failed_rules,
            "issues": {
                name: [r.to_dict() for r in bucket]
                for name, bucket in self.issues.as_dict().items()
            },
            "suggestions": list(self.suggestions),
            "recommendations": self.recommendations,
        }


def risk_level_for(score: float, settings: ReportSettings) -> str:
    if score < settings.risk_high_below:
        return "High"
    if score < settings.risk_medium_below:
        return "Medium"
    return "Low"


def assemble_report(
    results: list[ComplianceResult],
    score: float,
    dedupe_suggestions: bool | None = None,
    report_settings: ReportSettings | None = None,
) -> ComplianceReport:
    """
    Build a ComplianceReport from evaluation results.

    Suggestions keep evaluation order. Duplicates (the same remediation
    text on several rules) are kept unless deduplication is switched on,
    in which case the first occurrence wins.
    """
    if report_settings is None:
        report_settings = get_settings().report
    if dedupe_suggestions is None:
        dedupe_suggestions = report_settings.dedupe_suggestions

    buckets: dict[str, list[ComplianceResult]] = {
        "Critical": [], "Warning": [], "Recommendation": [],
    }
    suggestions: list[str] = []
    passed = 0
    failed = 0

    for result in results:
        if result.compliant:
            passed += 1
            continue

        failed += 1
        buckets[BUCKET_FOR[result.criticality]].append(result)
        if result.suggestion:
            suggestions.append(result.suggestion)

    if dedupe_suggestions:
        suggestions = list(dict.fromkeys(suggestions))

    return ComplianceReport(
        score=score,
        total_rules=len(results),
        passed_rules=passed,
        failed_rules=failed,
        issues=IssueBuckets(
            critical=tuple(buckets["Critical"]),
            warning=tuple(buckets["Warning"]),
            recommendation=tuple(buckets["Recommendation"]),
        ),
        suggestions=tuple(suggestions),
        risk_level=risk_level_for(score, report_settings) if results else None,
    )
