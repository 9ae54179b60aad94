"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add project root and src to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

# Set config path for tests
os.environ.setdefault("LT_CONFIG_DIR", str(ROOT / "config"))


@pytest.fixture
def project_root():
    return ROOT


@pytest.fixture
def fresh_settings():
    """Drop cached settings before and after a test that changes env or YAML."""
    from label_triage.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def catalog():
    """The packaged rule catalog."""
    from label_triage.compliance.rules import load_catalog

    return load_catalog()


@pytest.fixture
def write_rules(tmp_path):
    """Write a rule file into a temp rules dir and return its filename."""

    def _write(filename: str, content: str) -> str:
        (tmp_path / filename).write_text(content, encoding="utf-8")
        return filename

    return _write


@pytest.fixture
def toys_usa_text():
    """OCR-style dump of a compliant-looking toy label sold in the USA."""
    return (
        "SUPER BUILDER BLOCKS\n"
        "WARNING: CHOKING HAZARD - Small parts. Not for children under 3 yrs.\n"
        "Manufacturer: Acme Toys LLC, 12 Main St, Springfield\n"
        "Batch: 2024-117  Made in China\n"
        "Net Wt 450 g\n"
    )
