"""
Shared helper functions.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path


def safe_filename(name: str) -> str:
    """Convert an arbitrary string to a filesystem-safe filename."""
    return re.sub(r"[^\w\-]", "_", name).strip("_")


def files_hash(paths: list[Path], algo: str = "sha256") -> str:
    """Compute one digest over several files, in the given order."""
    h = hashlib.new(algo)
    for path in paths:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                h.update(chunk)
    return h.hexdigest()


def find_text_files(directory: Path, pattern: str = "*.txt") -> list[Path]:
    """Recursively find OCR text dumps in a directory."""
    return sorted(directory.rglob(pattern))


def read_label_text(path: Path) -> str:
    """Read an OCR text dump, tolerating stray bytes from the extractor."""
    return path.read_text(encoding="utf-8", errors="replace")


def unique_name(name: str, used: set[str]) -> str:
    """Return name, or name-2, name-3, … if already taken; records the result in used."""
    candidate, n = name, 2
    while candidate in used:
        candidate = f"{name}-{n}"
        n += 1
    used.add(candidate)
    return candidate
