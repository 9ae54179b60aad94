"""
Rule Evaluator
===============
Runs every selected rule against one label text.

When the text is blank (typically an OCR failure) nothing can be
matched. Instead, rules naming a "basic requirement" are presumed
present and everything else fails. This keeps a failed extraction
from reading as a 0% label, at the cost of overstating compliance.
"""

from __future__ import annotations

from label_triage.compliance.matcher import match_rule
from label_triage.compliance.models import ComplianceResult, ComplianceRule
from label_triage.config import EvaluationSettings, get_settings


def is_blank(text: str | None) -> bool:
    return not text or not text.strip()


def is_basic_requirement(element: str, basic_requirements: list[str]) -> bool:
    name = element.lower()
    return any(req.lower() in name for req in basic_requirements)


def evaluate_rules(
    rules: list[ComplianceRule],
    text: str | None,
    basic_requirements: list[str] | None = None,
    evaluation: EvaluationSettings | None = None,
) -> list[ComplianceResult]:
    """
    Evaluate rules against label text, one result per rule in order.

    Args:
        rules: Rules selected for the label's category and jurisdiction.
        text: Extracted label text; may be empty or None.
        basic_requirements: Element substrings presumed present on blank
            text. Defaults to config.
        evaluation: Matching knobs. Defaults to config.
    """
    if evaluation is None:
        evaluation = get_settings().evaluation
    if basic_requirements is None:
        basic_requirements = evaluation.basic_requirements

    if is_blank(text):
        results = []
        for rule in rules:
            presumed = is_basic_requirement(rule.element, basic_requirements)
            results.append(ComplianceResult(
                element=rule.element,
                criticality=rule.criticality,
                compliant=presumed,
                suggestion=None if presumed else rule.suggestion,
            ))
        return results

    return [
        match_rule(
            rule,
            text,
            min_keyword_length=evaluation.min_keyword_length,
            overlap_ratio=evaluation.keyword_overlap_ratio,
        )
        for rule in rules
    ]
