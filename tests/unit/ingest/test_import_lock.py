"""Unit tests for the advisory import lock."""

from __future__ import annotations

import os
from pathlib import Path
import time

import pytest

from core.errors import RegisterLockError
from ingest.import_lock import ImportLock


def test_acquire_writes_process_id(tmp_path: Path) -> None:
    """Acquired lock file should hold the owner pid."""
    lock = ImportLock(tmp_path / "update.lock", max_age_seconds=60)

    lock.acquire()

    assert (tmp_path / "update.lock").read_text(encoding="utf-8") == str(os.getpid())
    lock.release()


def test_second_acquire_fails_while_lock_is_fresh(tmp_path: Path) -> None:
    """A fresh lock held elsewhere should block acquisition."""
    lock_path = tmp_path / "update.lock"

    with ImportLock(lock_path, max_age_seconds=60):
        with pytest.raises(RegisterLockError):
            ImportLock(lock_path, max_age_seconds=60).acquire()

    assert lock_path.exists() is False


def test_stale_lock_is_replaced(tmp_path: Path) -> None:
    """A lock older than the max age should be removed and reacquired."""
    lock_path = tmp_path / "update.lock"
    lock_path.write_text("12345", encoding="utf-8")
    old_time = time.time() - 3600
    os.utime(lock_path, (old_time, old_time))

    lock = ImportLock(lock_path, max_age_seconds=60)
    lock.acquire()

    assert lock.held and lock_path.read_text(encoding="utf-8") == str(os.getpid())
    lock.release()


def test_release_without_acquire_leaves_foreign_lock(tmp_path: Path) -> None:
    """Releasing an unheld lock must not delete another owner's file."""
    lock_path = tmp_path / "update.lock"
    lock_path.write_text("12345", encoding="utf-8")

    ImportLock(lock_path, max_age_seconds=60).release()

    assert lock_path.exists()
