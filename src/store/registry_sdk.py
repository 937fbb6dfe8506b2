"""Python SDK for register imports and queries.

This module exposes the operations presentation adapters build on:
import, search, key lookup, statistics, and version history.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.config import RegisterConfig
from core.run_spec_execution import execute_run_spec_file
from core.types import (
    DataVersion,
    ImportOptions,
    ImportResult,
    Registration,
    SearchFilter,
    StoreStats,
)
from ingest.batch_loader import RegistrationLoader
from ingest.import_lock import ImportLock
from store.query_service import RegistrationQueryService
from store.registry_store import RegistryStore
from store.version_ledger import VersionLedger


class RegisterClient:
    """Primary SDK entry point for register workflows."""

    def __init__(self, config: RegisterConfig | None = None, logger: Any | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            logger: Optional logger shared by the loader and query service.
        """
        self._config = config or RegisterConfig.from_env()
        self._logger = logger
        self._store = RegistryStore(self._config.database_path, logger)
        self._ledger = VersionLedger(self._store, logger)
        self._queries = RegistrationQueryService(self._store, self._ledger, logger)

    @property
    def config(self) -> RegisterConfig:
        """Runtime configuration used by this client."""
        return self._config

    def open(self) -> "RegisterClient":
        """Open the store, creating schema on first use.

        Returns:
            This client, for chaining.
        """
        self._store.open()
        return self

    def import_file(self, options: ImportOptions) -> ImportResult:
        """Import a register extract with full table replacement.

        Args:
            options: Import options.

        Returns:
            Import result summary.

        Raises:
            RegisterIngestError: If the source cannot be read.
            RegisterTransactionError: If a batch fails to commit.
        """
        loader = RegistrationLoader(self._config, self._store, self._ledger, self._logger)
        return loader.run(options)

    def import_lock(self) -> ImportLock:
        """Return the advisory lock schedulers hold around imports."""
        return ImportLock(self._config.lock_path, self._config.lock_max_age_seconds, self._logger)

    def search(self, filter_spec: SearchFilter) -> list[Registration]:
        """Search registrations; see ``RegistrationQueryService.search``."""
        return self._queries.search(filter_spec)

    def get_by_key(self, registration_number: str) -> Registration | None:
        """Return one registration by number, or None when absent."""
        return self._queries.get_by_key(registration_number)

    def get_stats(self) -> StoreStats:
        """Return record count and the active data version."""
        return self._queries.get_stats()

    def list_versions(self) -> list[DataVersion]:
        """Return data version history, newest first."""
        return self._queries.list_versions()

    def with_data_root(self, data_root: str) -> "RegisterClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance.
        """
        return RegisterClient(self._config.with_data_root(Path(data_root)), self._logger)

    def with_database_path(self, database_path: str) -> "RegisterClient":
        """Clone the client with a different SQLite database file."""
        return RegisterClient(self._config.with_database_path(Path(database_path)), self._logger)

    def run_spec(self, spec_file: str) -> tuple[str, ...]:
        """Execute a YAML run-spec through the shared execution engine.

        Args:
            spec_file: Path to YAML run-spec file.

        Returns:
            Ordered command output lines.
        """
        return execute_run_spec_file(self, spec_file)
