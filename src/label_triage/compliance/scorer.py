"""
Compliance Scorer
==================
Aggregates per-rule results into one severity-weighted percentage.

Scoring:
- Each rule contributes its tier weight (High=0.5, Medium=0.3, Low=0.2
  by default); passed rules earn it, failed rules do not.
- raw = earned / total * 100 (0 when there is nothing to weigh)
- Floors keyed on High rules only:
    every High rule passed          → at least 60
    some High rules passed, not all → at least 30
    otherwise                       → raw score
"""

from __future__ import annotations

from label_triage.compliance.models import ComplianceResult, Criticality
from label_triage.config import ScoringSettings, get_settings
from label_triage.utils.log import get_logger

logger = get_logger(__name__)


def raw_score(results: list[ComplianceResult], policy: ScoringSettings) -> float:
    """Weighted pass percentage without any floor."""
    total_weight = 0.0
    earned_weight = 0.0
    for result in results:
        weight = policy.weight_for(result.criticality.value)
        total_weight += weight
        if result.compliant:
            earned_weight += weight
    return earned_weight / total_weight * 100 if total_weight > 0 else 0.0


def apply_floor(score: float, results: list[ComplianceResult], policy: ScoringSettings) -> float:
    critical_total = sum(1 for r in results if r.criticality is Criticality.HIGH)
    critical_failed = sum(
        1 for r in results if r.criticality is Criticality.HIGH and not r.compliant
    )

    if critical_total > 0 and critical_failed == 0:
        return max(score, policy.full_pass_floor)
    if critical_failed < critical_total:
        return max(score, policy.partial_pass_floor)
    return score


def compute_score(
    results: list[ComplianceResult],
    policy: ScoringSettings | None = None,
) -> float:
    """
    Compute the compliance score for a set of rule results.

    Args:
        results: Output of evaluate_rules.
        policy: Weights and floors. Defaults to config.

    Returns:
        Score in [0, 100], rounded to the policy precision.
    """
    if policy is None:
        policy = get_settings().scoring

    base = raw_score(results, policy)
    final = apply_floor(base, results, policy)
    score = round(min(max(final, 0.0), 100.0), policy.precision)

    if final != base:
        logger.debug("Score floor applied: %.2f → %.2f", base, final)
    return score
