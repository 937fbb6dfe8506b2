"""Locations of checked-in test fixtures."""

from __future__ import annotations

from pathlib import Path

FIXTURES_ROOT = Path(__file__).resolve().parent / "fixtures"


def fixture_path(relative_path: str) -> Path:
    """Return the absolute path of a file under tests/fixtures."""
    return FIXTURES_ROOT / relative_path


def register_extract(file_name: str) -> str:
    """Return a register CSV fixture as a source URI string."""
    return str(FIXTURES_ROOT / "registers" / file_name)
