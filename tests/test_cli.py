"""Tests for the command-line interface."""

import json

from click.testing import CliRunner


def _invoke(*args, **kwargs):
    from label_triage.cli import main

    return CliRunner().invoke(main, list(args), **kwargs)


def test_version():
    result = _invoke("--version")
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_options():
    result = _invoke("options")
    assert result.exit_code == 0
    assert "Toys, Baby Products, Cosmetics" in result.output
    assert "USA, UK, Germany" in result.output


def test_check_inline_json():
    result = _invoke("check", "--text", "", "-c", "Toys", "-j", "USA", "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["report"]["score"] == 30.0
    assert data["report"]["status"] == "non-compliant"


def test_check_stdin():
    result = _invoke(
        "check", "-", "-c", "Toys", "-j", "USA", "--json",
        input="WARNING: CHOKING HAZARD - Small parts",
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    choking = next(r for r in data["results"] if r["element"] == "Choking Hazard Warning")
    assert choking["matched_text"] == "CHOKING HAZARD"


def test_check_files_with_reports(tmp_path, toys_usa_text):
    labels = tmp_path / "labels"
    labels.mkdir()
    (labels / "a.txt").write_text(toys_usa_text, encoding="utf-8")
    (labels / "b.txt").write_text("", encoding="utf-8")
    out = tmp_path / "reports"

    result = _invoke("check", str(labels), "-c", "Toys", "-j", "USA", "--report", "-o", str(out))
    assert result.exit_code == 0, result.output
    assert "Score" in result.output
    assert (out / "report-a.json").exists()
    assert (out / "report-b.md").exists()

    result = _invoke("summary", "-r", str(out))
    assert result.exit_code == 0, result.output
    assert (out / "summary-report.md").exists()


def test_check_multiple_json_is_list(tmp_path):
    (tmp_path / "a.txt").write_text("Manufacturer: Acme", encoding="utf-8")
    (tmp_path / "b.txt").write_text("", encoding="utf-8")

    result = _invoke("check", str(tmp_path), "-c", "Cosmetics", "-j", "UK", "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert [d["label_name"] for d in data] == ["a", "b"]


def test_check_unknown_market():
    result = _invoke("check", "--text", "x", "-c", "Cosmetics", "-j", "Mars")
    assert result.exit_code == 2
    assert "Invalid jurisdiction" in result.output


def test_check_without_input():
    result = _invoke("check", "-c", "Toys", "-j", "USA")
    assert result.exit_code == 2
    assert "Nothing to check" in result.output


def test_rules():
    result = _invoke("rules", "-c", "Cosmetics", "-j", "UK")
    assert result.exit_code == 0
    assert "Cosmetics / UK" in result.output

    assert _invoke("rules", "-c", "Cosmetics", "-j", "Mars").exit_code == 1


def test_validate_catalog():
    result = _invoke("validate-catalog")
    assert result.exit_code == 0
    assert "Catalog OK" in result.output
    assert "91 rules" in result.output


def test_export_catalog(tmp_path):
    path = tmp_path / "rules.xlsx"
    result = _invoke("export-catalog", "-o", str(path))
    assert result.exit_code == 0, result.output
    assert path.exists()


def test_summary_without_reports(tmp_path):
    result = _invoke("summary", "-r", str(tmp_path))
    assert result.exit_code == 1
    assert "No JSON report files" in result.output


def test_check_writes_workbook(tmp_path):
    path = tmp_path / "results.xlsx"
    result = _invoke("check", "--text", "Net Wt 8 oz", "-c", "Toys", "-j", "UK", "--json", "-x", str(path))
    assert result.exit_code == 0, result.output
    assert path.exists()


def test_check_same_stem_reports_do_not_collide(tmp_path, toys_usa_text):
    """Files sharing a name in different directories each get their own report."""
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    (tmp_path / "a" / "label.txt").write_text(toys_usa_text, encoding="utf-8")
    (tmp_path / "b" / "label.txt").write_text("", encoding="utf-8")
    out = tmp_path / "out"

    result = _invoke(
        "check", str(tmp_path / "a"), str(tmp_path / "b"),
        "-c", "Toys", "-j", "USA", "--report", "-o", str(out),
    )
    assert result.exit_code == 0, result.output
    reports = sorted(p.name for p in out.glob("report-*.json"))
    assert reports == ["report-a-label.json", "report-b-label.json"]

    scores = {
        p.name: json.loads(p.read_text(encoding="utf-8"))["report"]["score"]
        for p in out.glob("report-*.json")
    }
    assert scores["report-b-label.json"] == 30.0
    assert scores["report-a-label.json"] != 30.0
