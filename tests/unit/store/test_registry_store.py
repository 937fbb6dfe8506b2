"""Unit tests for the SQLite register store."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import StoreNotInitializedError
from store.registry_store import RegistryStore


def test_open_creates_database_and_tables(tmp_path: Path) -> None:
    """Opening a fresh store should create both tables."""
    store = RegistryStore(tmp_path / "nested" / "ico.db")

    store.open()
    with store.connection() as connection:
        tables = {
            row["name"]
            for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }

    assert {"ico_registrations", "data_versions"} <= tables


def test_open_enables_wal_mode(tmp_path: Path) -> None:
    """The database should use write-ahead logging."""
    store = RegistryStore(tmp_path / "ico.db")

    store.open()
    with store.connection() as connection:
        journal_mode = connection.execute("PRAGMA journal_mode").fetchone()[0]

    assert journal_mode == "wal"


def test_open_is_idempotent(tmp_path: Path) -> None:
    """Opening twice should leave the store usable."""
    store = RegistryStore(tmp_path / "ico.db")

    store.open()
    store.open()

    assert store.is_open


def test_reopen_keeps_existing_rows(tmp_path: Path) -> None:
    """A second store instance should see rows written by the first."""
    database_path = tmp_path / "ico.db"
    first = RegistryStore(database_path)
    first.open()
    with first.connection() as connection:
        connection.execute(
            "INSERT INTO ico_registrations (registration_number, organisation_name) "
            "VALUES ('Z1', 'Acme')"
        )

    second = RegistryStore(database_path)
    second.open()
    with second.connection() as connection:
        count = connection.execute("SELECT COUNT(*) FROM ico_registrations").fetchone()[0]

    assert count == 1


def test_connect_before_open_raises(tmp_path: Path) -> None:
    """Using an unopened store should raise a typed error."""
    store = RegistryStore(tmp_path / "ico.db")

    with pytest.raises(StoreNotInitializedError):
        store.connect()

    assert store.is_open is False
