"""SQLite storage engine for the register.

This module opens the database, applies schema and journal settings,
and hands out independent connections. It holds no business logic.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import sqlite3
from typing import Any, Iterator

from core.constants import SQLITE_BUSY_TIMEOUT_SECONDS, SQLITE_CACHE_SIZE
from core.errors import RegisterStoreError, StoreNotInitializedError
from core.logging_config import get_logger
from store.schema import schema_statements

_LOGGER = get_logger(__name__)


class RegistryStore:
    """Database handle for registrations and the version ledger.

    The store runs in write-ahead journal mode: one writer and many
    concurrent readers. Each ``connect`` call returns a new connection
    in autocommit mode, so callers own their transaction boundaries.
    """

    def __init__(self, database_path: Path, logger: Any | None = None) -> None:
        self._database_path = database_path
        self._logger = logger or _LOGGER
        self._opened = False

    @property
    def database_path(self) -> Path:
        """SQLite database file."""
        return self._database_path

    @property
    def is_open(self) -> bool:
        """Whether ``open`` has completed."""
        return self._opened

    def open(self) -> None:
        """Create the database, schema, and indexes if needed.

        Calling ``open`` again is a no-op.

        Raises:
            RegisterStoreError: If the database cannot be created.
        """
        if self._opened:
            return
        try:
            self._database_path.parent.mkdir(parents=True, exist_ok=True)
            connection = self._raw_connect()
            try:
                connection.execute("PRAGMA journal_mode = WAL")
                for statement in schema_statements():
                    connection.execute(statement)
            finally:
                connection.close()
        except (OSError, sqlite3.Error) as error:
            raise RegisterStoreError(
                f"Failed to open register database at {self._database_path}: {error}. "
                "Check the path and directory permissions."
            ) from error
        self._opened = True
        self._logger.info("store_opened", database_path=str(self._database_path))

    def connect(self) -> sqlite3.Connection:
        """Return a new autocommit connection.

        Raises:
            StoreNotInitializedError: If the store has not been opened.
            RegisterStoreError: If SQLite cannot connect.
        """
        if not self._opened:
            raise StoreNotInitializedError(
                f"Register store at {self._database_path} is not initialized. "
                "Call open() before reading or writing."
            )
        try:
            return self._raw_connect()
        except sqlite3.Error as error:
            raise RegisterStoreError(
                f"Failed to connect to register database at {self._database_path}: {error}."
            ) from error

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that is closed on exit."""
        connection = self.connect()
        try:
            yield connection
        finally:
            connection.close()

    def _raw_connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            str(self._database_path),
            timeout=SQLITE_BUSY_TIMEOUT_SECONDS,
            isolation_level=None,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA synchronous = NORMAL")
        connection.execute(f"PRAGMA cache_size = {SQLITE_CACHE_SIZE}")
        connection.execute("PRAGMA temp_store = MEMORY")
        return connection
