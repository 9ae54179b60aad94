"""
Rule Catalog
=============
Loads labeling rules from data/rules/*.yaml files.

Each file covers one product category and lists its rules per
jurisdiction. Files are validated on load; anything malformed raises
CatalogError instead of being skipped, because a silently dropped
jurisdiction would be indistinguishable from "no rules apply".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import yaml

from label_triage.compliance.matcher import classify_element
from label_triage.compliance.models import ComplianceRule, Criticality, MatchFamily
from label_triage.config import get_settings
from label_triage.utils.helpers import files_hash
from label_triage.utils.log import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("element", "details", "criticality", "suggestion")


class CatalogError(ValueError):
    """Raised when a rule file is missing or malformed."""


@dataclass(frozen=True)
class RuleCatalog:
    """Read-only index of rules keyed by (category, jurisdiction)."""

    entries: dict[tuple[str, str], tuple[ComplianceRule, ...]] = field(default_factory=dict)
    version: str = ""
    fingerprint: str = ""
    sources: tuple[str, ...] = ()

    def lookup(self, category: str, jurisdiction: str) -> list[ComplianceRule]:
        """Ordered rules for a market, or [] when the pair is unknown."""
        return list(self.entries.get((category, jurisdiction), ()))

    def available_categories(self) -> list[str]:
        return list(dict.fromkeys(cat for cat, _ in self.entries))

    def available_jurisdictions(self) -> list[str]:
        return list(dict.fromkeys(jur for _, jur in self.entries))

    def markets(self) -> dict[str, list[str]]:
        """Map each jurisdiction to the categories that have rules there."""
        out: dict[str, list[str]] = {}
        for cat, jur in self.entries:
            out.setdefault(jur, []).append(cat)
        return out

    @property
    def rule_count(self) -> int:
        return sum(len(rules) for rules in self.entries.values())

    def __iter__(self) -> Iterator[tuple[str, str, tuple[ComplianceRule, ...]]]:
        for (cat, jur), rules in self.entries.items():
            yield cat, jur, rules

    def __len__(self) -> int:
        return len(self.entries)


_catalog_cache: dict[tuple[str, ...], RuleCatalog] = {}


def parse_rule(raw: dict, where: str) -> ComplianceRule:
    """
    Build a ComplianceRule from one YAML mapping.

    Args:
        raw: The rule mapping as read from YAML.
        where: Human-readable position, used in error messages.

    Raises:
        CatalogError: On missing fields, unknown criticality or family.
    """
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: rule must be a mapping, got {type(raw).__name__}")

    missing = [k for k in REQUIRED_FIELDS if not str(raw.get(k) or "").strip()]
    if missing:
        raise CatalogError(f"{where}: missing required field(s): {', '.join(missing)}")

    try:
        criticality = Criticality.parse(raw["criticality"])
    except ValueError as e:
        raise CatalogError(f"{where}: {e}") from e

    element = str(raw["element"]).strip()
    family_raw = raw.get("match_family")
    if family_raw:
        try:
            family = MatchFamily(str(family_raw).strip())
        except ValueError as e:
            raise CatalogError(f"{where}: unknown match_family {family_raw!r}") from e
    else:
        family = classify_element(element)
        logger.debug("%s: inferred match_family=%s for '%s'", where, family.value, element)

    return ComplianceRule(
        element=element,
        details=str(raw["details"]).strip(),
        location=str(raw.get("location") or "").strip(),
        criticality=criticality,
        suggestion=str(raw["suggestion"]).strip(),
        match_family=family,
    )


def _load_file(path: Path) -> tuple[str, str, dict[str, tuple[ComplianceRule, ...]]]:
    """Load one category file → (category, version, {jurisdiction: rules})."""
    if not path.exists():
        raise CatalogError(f"Rule file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"{path.name}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"{path.name}: expected a mapping at top level")

    category = str(data.get("category") or "").strip()
    if not category:
        raise CatalogError(f"{path.name}: missing 'category'")

    jurisdictions = data.get("jurisdictions")
    if not isinstance(jurisdictions, dict) or not jurisdictions:
        raise CatalogError(f"{path.name}: 'jurisdictions' must be a non-empty mapping")

    version = str(data.get("version") or "unversioned")
    parsed: dict[str, tuple[ComplianceRule, ...]] = {}

    for jurisdiction, raw_rules in jurisdictions.items():
        jurisdiction = str(jurisdiction).strip()
        if not isinstance(raw_rules, list):
            raise CatalogError(f"{path.name}: {category}/{jurisdiction} must be a list of rules")

        rules: list[ComplianceRule] = []
        seen: set[str] = set()
        for i, raw in enumerate(raw_rules, 1):
            rule = parse_rule(raw, f"{path.name} {category}/{jurisdiction} rule #{i}")
            if rule.element in seen:
                raise CatalogError(
                    f"{path.name}: duplicate element '{rule.element}' in {category}/{jurisdiction}"
                )
            seen.add(rule.element)
            rules.append(rule)

        parsed[jurisdiction] = tuple(rules)

    return category, version, parsed


def load_catalog(
    rule_files: list[str] | None = None,
    rules_dir: Path | None = None,
) -> RuleCatalog:
    """
    Load and validate the rule catalog.

    Args:
        rule_files: Specific rule files to load. Defaults to config list.
        rules_dir: Directory holding the files. Defaults to config path.

    Returns:
        A RuleCatalog shared by every caller with the same file list.
    """
    settings = get_settings()
    if rules_dir is None:
        rules_dir = Path(settings.paths.rules_dir)
    if rule_files is None:
        rule_files = settings.compliance.rule_files

    cache_key = (str(rules_dir), *rule_files)
    if cache_key in _catalog_cache:
        return _catalog_cache[cache_key]

    entries: dict[tuple[str, str], tuple[ComplianceRule, ...]] = {}
    versions: list[str] = []
    paths: list[Path] = []

    for filename in rule_files:
        path = Path(rules_dir) / filename
        category, version, by_jurisdiction = _load_file(path)

        for jurisdiction, rules in by_jurisdiction.items():
            key = (category, jurisdiction)
            if key in entries:
                raise CatalogError(
                    f"{filename}: {category}/{jurisdiction} is already defined by another file"
                )
            entries[key] = rules

        versions.append(f"{category}@{version}")
        paths.append(path)
        logger.info(
            "Loaded %d rules for %s across %d jurisdiction(s) from %s",
            sum(len(r) for r in by_jurisdiction.values()), category, len(by_jurisdiction), filename,
        )

    catalog = RuleCatalog(
        entries=entries,
        version=";".join(versions),
        fingerprint=files_hash(paths) if paths else "",
        sources=tuple(rule_files),
    )
    _catalog_cache[cache_key] = catalog
    logger.info("Catalog ready: %d markets, %d rules", len(catalog), catalog.rule_count)
    return catalog


def reload_catalog() -> RuleCatalog:
    """Force reload of the catalog (clears cache)."""
    global _catalog_cache
    _catalog_cache = {}
    return load_catalog()
