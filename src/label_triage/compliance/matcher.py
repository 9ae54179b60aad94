"""
Pattern Matcher
================
Decides whether a label text satisfies a rule.

Every rule carries a detection family. Pattern families are ordered
lists of case-insensitive regexes: the rule passes as soon as one of
them matches, and that first span becomes the matched excerpt.

Rules without a dedicated family fall back to keyword overlap against
the rule's own details text. That fallback is deliberately loose and
produces false positives (any long-enough word shared with the
requirement text counts); treat its passes as "probably present".

No locale normalization happens. German requirement text checked
against an English label, or the reverse, under-matches.
"""

from __future__ import annotations

import math
import re

from label_triage.compliance.models import ComplianceResult, ComplianceRule, MatchFamily

_I = re.IGNORECASE

PATTERN_FAMILIES: dict[MatchFamily, tuple[re.Pattern, ...]] = {
    MatchFamily.HAZARD_WARNING: (
        re.compile(r"choking\s+hazard", _I),
        re.compile(r"small\s+parts", _I),
        re.compile(r"not\s+for\s+children\s+under\s+3", _I),
        re.compile(r"age\s+3\+", _I),
        re.compile(r"warning.*choking", _I),
        re.compile(r"choking", _I),
        re.compile(r"age\s+restriction", _I),
        re.compile(r"not\s+suitable\s+for\s+children", _I),
    ),
    MatchFamily.MANUFACTURER: (
        re.compile(r"manufacturer", _I),
        re.compile(r"made\s+by", _I),
        re.compile(r"produced\s+by", _I),
        re.compile(r"company\s+name", _I),
        re.compile(r"address", _I),
        re.compile(r"distributed\s+by", _I),
        re.compile(r"imported\s+by", _I),
        re.compile(r"company", _I),
        re.compile(r"inc\.?", _I),
        re.compile(r"ltd\.?", _I),
        re.compile(r"llc", _I),
        re.compile(r"corp\.?", _I),
    ),
    MatchFamily.MARKING: (
        re.compile(r"ce\s+mark", _I),
        re.compile(r"ukca", _I),
        re.compile(r"conformité\s+européenne", _I),
        re.compile(r"\bce\b", _I),
        re.compile(r"ce\s+symbol", _I),
        re.compile(r"conformity\s+mark", _I),
    ),
    MatchFamily.INGREDIENTS: (
        re.compile(r"ingredients?", _I),
        re.compile(r"contains?", _I),
        re.compile(r"active\s+ingredients?", _I),
        re.compile(r"composition", _I),
        re.compile(r"formula", _I),
        re.compile(r"contents", _I),
        re.compile(r"made\s+with", _I),
    ),
    MatchFamily.GENERAL_WARNING: (
        re.compile(r"warning", _I),
        re.compile(r"caution", _I),
        re.compile(r"danger", _I),
        re.compile(r"keep\s+out\s+of\s+reach", _I),
        re.compile(r"external\s+use\s+only", _I),
        re.compile(r"for\s+external\s+use", _I),
        re.compile(r"avoid\s+contact", _I),
        re.compile(r"safety\s+warning", _I),
        re.compile(r"precaution", _I),
    ),
    MatchFamily.BATCH_NUMBER: (
        re.compile(r"batch\s*#?", _I),
        re.compile(r"lot\s*#?", _I),
        re.compile(r"serial\s*#?", _I),
        re.compile(r"model\s*#?", _I),
        re.compile(r"exp\s*date", _I),
        re.compile(r"expiry", _I),
        re.compile(r"code", _I),
        re.compile(r"ref", _I),
    ),
    MatchFamily.QUANTITY: (
        re.compile(r"net\s*weight", _I),
        re.compile(r"net\s*wt", _I),
        re.compile(r"volume", _I),
        re.compile(r"contents", _I),
        re.compile(r"\d+\s*(?:g|grams?|kg|kilograms?|oz|ounces?|ml|milliliters?|l|liters?)", _I),
    ),
    MatchFamily.IDENTITY: (
        re.compile(r"shampoo", _I),
        re.compile(r"conditioner", _I),
        re.compile(r"lotion", _I),
        re.compile(r"cream", _I),
        re.compile(r"soap", _I),
        re.compile(r"toy", _I),
        re.compile(r"game", _I),
        re.compile(r"baby", _I),
        re.compile(r"infant", _I),
        re.compile(r"child", _I),
    ),
}

# Element-name keywords → family, checked in order; first hit wins.
# Plain substring tests: "ce" also hits "Reference" and "Certificate",
# which therefore land in the marking family.
_ELEMENT_DISPATCH: tuple[tuple[MatchFamily, tuple[str, ...]], ...] = (
    (MatchFamily.HAZARD_WARNING, ("choking", "warning")),
    (MatchFamily.MANUFACTURER, ("producer", "identification", "manufacturer", "responsible person")),
    (MatchFamily.MARKING, ("ce", "ukca")),
    (MatchFamily.INGREDIENTS, ("ingredients",)),
    (MatchFamily.GENERAL_WARNING, ("precaution",)),
    (MatchFamily.BATCH_NUMBER, ("tracking", "batch", "lot", "serial")),
    (MatchFamily.QUANTITY, ("weight", "volume", "content", "quantity")),
    (MatchFamily.IDENTITY, ("display panel", "product identity")),
)


def classify_element(element: str) -> MatchFamily:
    """Infer the detection family from a rule's element name."""
    name = element.lower()
    for family, keywords in _ELEMENT_DISPATCH:
        if any(k in name for k in keywords):
            return family
    return MatchFamily.KEYWORD_OVERLAP


def match_patterns(family: MatchFamily, text: str) -> str | None:
    """Return the first span matched by a family's patterns, or None."""
    for pattern in PATTERN_FAMILIES.get(family, ()):
        m = pattern.search(text)
        if m:
            return m.group(0)
    return None


def keyword_overlap(
    details: str,
    text: str,
    min_length: int = 4,
    ratio: float = 0.5,
) -> bool:
    """
    Loose presence check based on the requirement's own wording.

    The details text is split on whitespace and words of at least
    `min_length` characters are kept (punctuation included). The rule
    passes when at least ceil(len(words) * ratio) of them occur
    anywhere in the text, or when the whole details string does.
    A details text with no qualifying words always passes.
    """
    text_lower = text.lower()
    details_lower = details.lower()
    keywords = [w for w in details_lower.split() if len(w) >= min_length]
    found = [k for k in keywords if k in text_lower]
    return len(found) >= math.ceil(len(keywords) * ratio) or details_lower in text_lower


def match_rule(
    rule: ComplianceRule,
    text: str,
    min_keyword_length: int = 4,
    overlap_ratio: float = 0.5,
) -> ComplianceResult:
    """
    Match a single rule against label text.
    """
    matched_text = None
    if rule.match_family is MatchFamily.KEYWORD_OVERLAP:
        compliant = keyword_overlap(rule.details, text, min_keyword_length, overlap_ratio)
    else:
        matched_text = match_patterns(rule.match_family, text)
        compliant = matched_text is not None

    return ComplianceResult(
        element=rule.element,
        criticality=rule.criticality,
        compliant=compliant,
        suggestion=None if compliant else rule.suggestion,
        matched_text=matched_text or None,
    )
