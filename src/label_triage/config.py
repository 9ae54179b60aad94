"""
Configuration loader.

Loads settings from config/settings.yaml and .env,
merges them, and provides a typed Settings object
accessible everywhere via `get_settings()`.

The scoring policy (severity weights, score floors) and the
empty-text allowlist live here rather than in code so they can
be tuned without touching the engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Project root = 2 levels up from src/label_triage/ (the repo checkout)
ROOT = Path(__file__).resolve().parent.parent.parent
PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_RULES_DIR = PACKAGE_DIR / "data" / "rules"

DEFAULT_RULE_FILES = ["toys.yaml", "baby_products.yaml", "cosmetics.yaml"]

DEFAULT_BASIC_REQUIREMENTS = [
    "producer marking",
    "identification",
    "amazon fba label",
    "information panel",
    "nominal content & durability",
]

CRITICALITY_TIERS = ("High", "Medium", "Low")


def _config_dir() -> Path:
    return Path(os.getenv("LT_CONFIG_DIR", str(ROOT / "config")))


@dataclass
class PathSettings:
    rules_dir: Path = field(default_factory=lambda: DEFAULT_RULES_DIR)
    report_dir: Path = field(default_factory=lambda: ROOT / "outputs" / "reports")
    log_dir: Path = field(default_factory=lambda: ROOT / "outputs" / "logs")


@dataclass
class ComplianceSettings:
    rule_files: list[str] = field(default_factory=lambda: list(DEFAULT_RULE_FILES))


@dataclass
class ScoringSettings:
    """Weights and floors applied by the score calculator."""

    weights: dict[str, float] = field(
        default_factory=lambda: {"High": 0.5, "Medium": 0.3, "Low": 0.2}
    )
    full_pass_floor: float = 60.0  # every High rule passed
    partial_pass_floor: float = 30.0  # some, but not all, High rules failed
    precision: int = 2

    def weight_for(self, criticality: str) -> float:
        return self.weights[criticality]

    def validate(self) -> None:
        missing = [t for t in CRITICALITY_TIERS if t not in self.weights]
        if missing:
            raise ValueError(f"Scoring weights missing tiers: {', '.join(missing)}")
        negative = [t for t, w in self.weights.items() if w < 0]
        if negative:
            raise ValueError(f"Scoring weights must be >= 0: {', '.join(negative)}")
        for name in ("full_pass_floor", "partial_pass_floor"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be within [0, 100], got {value}")


@dataclass
class EvaluationSettings:
    basic_requirements: list[str] = field(
        default_factory=lambda: list(DEFAULT_BASIC_REQUIREMENTS)
    )
    min_keyword_length: int = 4
    keyword_overlap_ratio: float = 0.5


@dataclass
class ReportSettings:
    dedupe_suggestions: bool = False
    risk_high_below: float = 50.0
    risk_medium_below: float = 80.0


@dataclass
class ProcessingSettings:
    max_workers: int = 4


@dataclass
class Settings:
    """Top-level settings object."""

    paths: PathSettings = field(default_factory=PathSettings)
    compliance: ComplianceSettings = field(default_factory=ComplianceSettings)
    scoring: ScoringSettings = field(default_factory=ScoringSettings)
    evaluation: EvaluationSettings = field(default_factory=EvaluationSettings)
    report: ReportSettings = field(default_factory=ReportSettings)
    processing: ProcessingSettings = field(default_factory=ProcessingSettings)
    log_level: str = "INFO"

    def ensure_dirs(self) -> None:
        """Create all output directories if they don't exist."""
        for p in [self.paths.report_dir, self.paths.log_dir]:
            p.mkdir(parents=True, exist_ok=True)


# ── Singleton ─────────────────────────────────────────

_settings: Settings | None = None


def _load_yaml() -> dict:
    """Load the YAML config file."""
    settings_file = _config_dir() / "settings.yaml"
    if settings_file.exists():
        with open(settings_file, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def _resolve_path(value: str | None, default: Path) -> Path:
    if not value:
        return default
    p = Path(value)
    return p if p.is_absolute() else ROOT / p


def get_settings() -> Settings:
    """Get the global Settings instance (lazy-loaded singleton)."""
    global _settings
    if _settings is not None:
        return _settings

    load_dotenv(ROOT / ".env")

    raw = _load_yaml()

    paths_raw = raw.get("paths", {})
    paths = PathSettings(
        rules_dir=_resolve_path(
            os.getenv("LT_RULES_DIR", paths_raw.get("rules_dir")), DEFAULT_RULES_DIR
        ),
        report_dir=_resolve_path(
            os.getenv("LT_REPORT_DIR", paths_raw.get("report_dir")),
            ROOT / "outputs" / "reports",
        ),
        log_dir=_resolve_path(paths_raw.get("log_dir"), ROOT / "outputs" / "logs"),
    )

    comp_raw = raw.get("compliance", {})
    compliance = ComplianceSettings(
        rule_files=comp_raw.get("rule_files", list(DEFAULT_RULE_FILES)),
    )

    score_raw = raw.get("scoring", {})
    floors = score_raw.get("floors", {})
    scoring = ScoringSettings(
        weights={k: float(v) for k, v in score_raw.get("weights", {"High": 0.5, "Medium": 0.3, "Low": 0.2}).items()},
        full_pass_floor=float(floors.get("all_critical_passed", 60.0)),
        partial_pass_floor=float(floors.get("some_critical_passed", 30.0)),
        precision=int(score_raw.get("precision", 2)),
    )
    scoring.validate()

    eval_raw = raw.get("evaluation", {})
    evaluation = EvaluationSettings(
        basic_requirements=eval_raw.get("basic_requirements", list(DEFAULT_BASIC_REQUIREMENTS)),
        min_keyword_length=eval_raw.get("min_keyword_length", 4),
        keyword_overlap_ratio=eval_raw.get("keyword_overlap_ratio", 0.5),
    )

    report_raw = raw.get("report", {})
    risk = report_raw.get("risk_levels", {})
    report = ReportSettings(
        dedupe_suggestions=report_raw.get("dedupe_suggestions", False),
        risk_high_below=float(risk.get("high_below", 50.0)),
        risk_medium_below=float(risk.get("medium_below", 80.0)),
    )

    proc_raw = raw.get("processing", {})
    processing = ProcessingSettings(
        max_workers=int(os.getenv("MAX_WORKERS", proc_raw.get("max_workers", 4))),
    )

    log_raw = raw.get("logging", {})

    _settings = Settings(
        paths=paths,
        compliance=compliance,
        scoring=scoring,
        evaluation=evaluation,
        report=report,
        processing=processing,
        log_level=os.getenv("LOG_LEVEL", log_raw.get("level", "INFO")),
    )

    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads YAML and env."""
    global _settings
    _settings = None
