"""Shared pytest configuration and fixtures for register tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from core.config import RegisterConfig

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def pytest_sessionstart() -> None:
    """Put src and the project root on sys.path for test imports."""
    for import_root in (_PROJECT_ROOT / "src", _PROJECT_ROOT):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _isolate_register_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ICO_* variables so host settings never leak into tests."""
    for name in list(os.environ):
        if name.startswith("ICO_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def register_config(tmp_path: Path) -> RegisterConfig:
    """Config rooted in a per-test temporary directory."""
    from core.config import RegisterConfig

    return RegisterConfig(data_root=tmp_path, database_path=tmp_path / "ico.db")
