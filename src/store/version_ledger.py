"""Content-addressed version ledger.

This module records one data version per imported source fingerprint
and keeps exactly one version active. Archiving the previous version
and inserting the new one happen in a single write transaction.
"""

from __future__ import annotations

from datetime import datetime, timezone
import sqlite3
from typing import Any, Callable, TypeVar

from core.constants import VERSION_STATUS_ACTIVE, VERSION_STATUS_ARCHIVED
from core.errors import DuplicateVersionError, RegisterStoreError
from core.logging_config import get_logger
from core.types import DataVersion
from store.record_payload import data_version_from_row
from store.registry_store import RegistryStore
from store.schema import SELECT_VERSIONS, VERSION_ORDER, VERSIONS_TABLE

_LOGGER = get_logger(__name__)
_T = TypeVar("_T")


class VersionLedger:
    """Version history for register imports."""

    def __init__(self, store: RegistryStore, logger: Any | None = None) -> None:
        self._store = store
        self._logger = logger or _LOGGER

    def record_version(
        self,
        file_sha256: str,
        file_size: int,
        record_count: int,
        provenance: str,
    ) -> int:
        """Record a new active version and archive the previous one.

        Args:
            file_sha256: Source fingerprint.
            file_size: Source size in bytes.
            record_count: Rows accepted by the loader.
            provenance: Origin of the source file.

        Returns:
            Ledger id of the new version.

        Raises:
            DuplicateVersionError: If the fingerprint is already recorded.
            RegisterStoreError: If the ledger write fails.
        """
        imported_at = datetime.now(timezone.utc).isoformat()
        with self._store.connection() as connection:
            try:
                connection.execute("BEGIN IMMEDIATE")
                if _find_version_row(connection, file_sha256) is not None:
                    connection.execute("ROLLBACK")
                    raise DuplicateVersionError(
                        f"Source fingerprint {file_sha256} is already recorded. "
                        "The import is a no-op."
                    )
                connection.execute(
                    f"UPDATE {VERSIONS_TABLE} SET status = ? WHERE status = ?",
                    (VERSION_STATUS_ARCHIVED, VERSION_STATUS_ACTIVE),
                )
                cursor = connection.execute(
                    f"INSERT INTO {VERSIONS_TABLE} "
                    "(imported_at, file_sha256, file_size, record_count, provenance, status) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        imported_at,
                        file_sha256,
                        file_size,
                        record_count,
                        provenance,
                        VERSION_STATUS_ACTIVE,
                    ),
                )
                connection.execute("COMMIT")
            except sqlite3.IntegrityError as error:
                _rollback(connection)
                raise DuplicateVersionError(
                    f"Source fingerprint {file_sha256} is already recorded. "
                    "The import is a no-op."
                ) from error
            except sqlite3.Error as error:
                _rollback(connection)
                raise RegisterStoreError(
                    f"Failed to record data version {file_sha256}: {error}. "
                    "Previous versions are unchanged."
                ) from error
        version_id = int(cursor.lastrowid or 0)
        self._logger.info(
            "data_version_recorded",
            version_id=version_id,
            file_sha256=file_sha256,
            file_size=file_size,
            record_count=record_count,
            provenance=provenance,
        )
        return version_id

    def find_version(self, file_sha256: str) -> DataVersion | None:
        """Return the version recorded for a fingerprint, if any."""
        with self._store.connection() as connection:
            row = _run_read(lambda: _find_version_row(connection, file_sha256))
        return data_version_from_row(row) if row is not None else None

    def get_active_version(self) -> DataVersion | None:
        """Return the active version, if any import has completed."""
        with self._store.connection() as connection:
            row = _run_read(
                lambda: connection.execute(
                    f"{SELECT_VERSIONS} WHERE status = ? {VERSION_ORDER} LIMIT 1",
                    (VERSION_STATUS_ACTIVE,),
                ).fetchone(),
            )
        return data_version_from_row(row) if row is not None else None

    def list_versions(self) -> list[DataVersion]:
        """Return every recorded version, newest first."""
        with self._store.connection() as connection:
            rows = _run_read(
                lambda: connection.execute(f"{SELECT_VERSIONS} {VERSION_ORDER}").fetchall(),
            )
        return [data_version_from_row(row) for row in rows]


def _find_version_row(connection: sqlite3.Connection, file_sha256: str) -> sqlite3.Row | None:
    return connection.execute(
        f"{SELECT_VERSIONS} WHERE file_sha256 = ?",
        (file_sha256,),
    ).fetchone()


def _run_read(query: Callable[[], _T]) -> _T:
    try:
        return query()
    except sqlite3.Error as error:
        raise RegisterStoreError(f"Failed to read version ledger: {error}.") from error


def _rollback(connection: sqlite3.Connection) -> None:
    if connection.in_transaction:
        connection.execute("ROLLBACK")
