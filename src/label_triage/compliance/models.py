"""
Compliance data model — rules, per-rule results, and the closed
sets of severity tiers and detection families they refer to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Criticality(str, Enum):
    """Severity tier of a labeling requirement."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value: str) -> "Criticality":
        """Parse a tier name, accepting the legacy 'Med' spelling."""
        key = str(value).strip().lower()
        if key == "med":
            key = "medium"
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown criticality: {value!r}")


class MatchFamily(str, Enum):
    """Detection strategy used to decide whether a rule is satisfied."""

    HAZARD_WARNING = "hazard_warning"
    MANUFACTURER = "manufacturer"
    MARKING = "marking"
    INGREDIENTS = "ingredients"
    GENERAL_WARNING = "general_warning"
    BATCH_NUMBER = "batch_number"
    QUANTITY = "quantity"
    IDENTITY = "identity"
    KEYWORD_OVERLAP = "keyword_overlap"


@dataclass(frozen=True)
class ComplianceRule:
    """One mandatory or recommended labeling requirement."""

    element: str
    details: str
    criticality: Criticality
    suggestion: str
    match_family: MatchFamily
    location: str = ""

    def to_dict(self) -> dict:
        return {
            "element": self.element,
            "details": self.details,
            "location": self.location,
            "criticality": self.criticality.value,
            "match_family": self.match_family.value,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class ComplianceResult:
    """Outcome of evaluating one rule against one label text."""

    element: str
    criticality: Criticality
    compliant: bool
    suggestion: str | None = None
    matched_text: str | None = None

    def to_dict(self) -> dict:
        data = {
            "element": self.element,
            "criticality": self.criticality.value,
            "compliant": self.compliant,
        }
        if self.suggestion:
            data["suggestion"] = self.suggestion
        if self.matched_text:
            data["matched_text"] = self.matched_text
        return data
