"""Tests for the configuration module."""

from pathlib import Path

import pytest


def test_settings_loads():
    """Settings singleton loads without error."""
    from label_triage.config import get_settings

    s = get_settings()
    assert s is not None
    assert s.paths.rules_dir is not None
    assert s is get_settings()


def test_settings_defaults():
    """Default scoring policy and allowlist are in place."""
    from label_triage.config import get_settings

    s = get_settings()
    assert s.scoring.weights == {"High": 0.5, "Medium": 0.3, "Low": 0.2}
    assert s.scoring.full_pass_floor == 60.0
    assert s.scoring.partial_pass_floor == 30.0
    assert "producer marking" in s.evaluation.basic_requirements
    assert s.evaluation.min_keyword_length == 4
    assert s.report.dedupe_suggestions is False
    assert s.processing.max_workers >= 1


def test_default_rules_dir_holds_rule_files():
    """The packaged rules directory contains every configured file."""
    from label_triage.config import get_settings

    s = get_settings()
    for name in s.compliance.rule_files:
        assert (Path(s.paths.rules_dir) / name).exists()


def test_env_overrides(tmp_path, monkeypatch, fresh_settings):
    """Environment variables win over YAML values."""
    from label_triage.config import get_settings

    monkeypatch.setenv("LT_RULES_DIR", str(tmp_path / "rules"))
    monkeypatch.setenv("LT_REPORT_DIR", str(tmp_path / "reports"))
    monkeypatch.setenv("MAX_WORKERS", "2")

    s = get_settings()
    assert s.paths.rules_dir == tmp_path / "rules"
    assert s.paths.report_dir == tmp_path / "reports"
    assert s.processing.max_workers == 2


def test_yaml_overrides(tmp_path, monkeypatch, fresh_settings):
    """A settings.yaml in LT_CONFIG_DIR replaces the defaults."""
    from label_triage.config import get_settings

    (tmp_path / "settings.yaml").write_text(
        "scoring:\n"
        "  weights: {High: 1.0, Medium: 1.0, Low: 1.0}\n"
        "  floors: {all_critical_passed: 0, some_critical_passed: 0}\n"
        "report:\n"
        "  dedupe_suggestions: true\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("LT_CONFIG_DIR", str(tmp_path))

    s = get_settings()
    assert s.scoring.weights["High"] == 1.0
    assert s.scoring.full_pass_floor == 0.0
    assert s.report.dedupe_suggestions is True
    # Untouched sections keep their defaults
    assert s.evaluation.keyword_overlap_ratio == 0.5


def test_invalid_scoring_rejected(tmp_path, monkeypatch, fresh_settings):
    """A weight table missing a tier fails at load time."""
    from label_triage.config import get_settings

    (tmp_path / "settings.yaml").write_text(
        "scoring:\n  weights: {High: 0.5, Low: 0.2}\n", encoding="utf-8"
    )
    monkeypatch.setenv("LT_CONFIG_DIR", str(tmp_path))

    with pytest.raises(ValueError, match="Medium"):
        get_settings()


def test_ensure_dirs(tmp_path):
    """ensure_dirs creates output directories."""
    from label_triage.config import Settings

    s = Settings()
    s.paths.report_dir = tmp_path / "out" / "reports"
    s.paths.log_dir = tmp_path / "out" / "logs"

    s.ensure_dirs()
    assert s.paths.report_dir.exists()
    assert s.paths.log_dir.exists()
