"""Advisory lock file guarding import runs.

Scheduled and manual imports take this lock so two loaders never
replace the registration table at the same time. A lock older than
the configured maximum age is treated as abandoned and removed.
"""

from __future__ import annotations

import os
from pathlib import Path
import time
from types import TracebackType
from typing import Any

from core.errors import RegisterLockError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class ImportLock:
    """Lock file holding the owner process id."""

    def __init__(self, lock_path: Path, max_age_seconds: int, logger: Any | None = None) -> None:
        self._lock_path = lock_path
        self._max_age_seconds = max_age_seconds
        self._logger = logger or _LOGGER
        self._held = False

    @property
    def lock_path(self) -> Path:
        """Lock file location."""
        return self._lock_path

    @property
    def held(self) -> bool:
        """Whether this instance currently owns the lock."""
        return self._held

    def acquire(self) -> None:
        """Create the lock file, clearing a stale one first.

        Raises:
            RegisterLockError: If a fresh lock is held by another run.
        """
        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        self._remove_if_stale()
        try:
            descriptor = os.open(self._lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as error:
            raise RegisterLockError(
                f"Another import holds the lock at {self._lock_path}. "
                f"Wait for it to finish or remove the lock after {self._max_age_seconds}s."
            ) from error
        with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
            handle.write(str(os.getpid()))
        self._held = True
        self._logger.info("import_lock_acquired", lock_path=str(self._lock_path))

    def release(self) -> None:
        """Remove the lock file if this instance owns it."""
        if not self._held:
            return
        self._lock_path.unlink(missing_ok=True)
        self._held = False
        self._logger.info("import_lock_released", lock_path=str(self._lock_path))

    def __enter__(self) -> "ImportLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()

    def _remove_if_stale(self) -> None:
        try:
            modified_at = self._lock_path.stat().st_mtime
        except FileNotFoundError:
            return
        age_seconds = time.time() - modified_at
        if age_seconds <= self._max_age_seconds:
            return
        self._lock_path.unlink(missing_ok=True)
        self._logger.warning(
            "import_lock_stale_removed",
            lock_path=str(self._lock_path),
            age_seconds=int(age_seconds),
        )
