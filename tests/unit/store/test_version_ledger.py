"""Unit tests for the data version ledger."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import DuplicateVersionError
from store.registry_store import RegistryStore
from store.version_ledger import VersionLedger


def _ledger(tmp_path: Path) -> VersionLedger:
    store = RegistryStore(tmp_path / "ico.db")
    store.open()
    return VersionLedger(store)


def test_record_version_marks_new_version_active(tmp_path: Path) -> None:
    """The first recorded version should be active."""
    ledger = _ledger(tmp_path)

    version_id = ledger.record_version("a" * 64, 100, 3, "local-csv-file")
    active = ledger.get_active_version()

    assert active is not None and active.version_id == version_id
    assert active.status == "active" and active.record_count == 3


def test_record_version_archives_previous_active(tmp_path: Path) -> None:
    """A new version should archive the old one and list newest first."""
    ledger = _ledger(tmp_path)

    first_id = ledger.record_version("a" * 64, 100, 3, "first")
    second_id = ledger.record_version("b" * 64, 200, 4, "second")
    versions = ledger.list_versions()

    assert [version.version_id for version in versions] == [second_id, first_id]
    assert [version.status for version in versions] == ["active", "archived"]


def test_record_version_rejects_duplicate_fingerprint(tmp_path: Path) -> None:
    """A fingerprint can be recorded only once."""
    ledger = _ledger(tmp_path)
    ledger.record_version("a" * 64, 100, 3, "first")

    with pytest.raises(DuplicateVersionError):
        ledger.record_version("a" * 64, 100, 3, "again")

    assert len(ledger.list_versions()) == 1


def test_find_version_returns_none_for_unknown_fingerprint(tmp_path: Path) -> None:
    """Unknown fingerprints should not resolve to a version."""
    ledger = _ledger(tmp_path)

    assert ledger.find_version("c" * 64) is None


def test_imported_at_is_timezone_aware(tmp_path: Path) -> None:
    """Recorded timestamps should round-trip with a UTC offset."""
    ledger = _ledger(tmp_path)
    ledger.record_version("a" * 64, 100, 3, "first")

    version = ledger.find_version("a" * 64)

    assert version is not None and version.imported_at.tzinfo is not None
