"""Batch import orchestration for register extracts.

This module fingerprints a source extract, skips already-recorded
versions, replaces the registration table in fixed-size committed
batches, and records the new version in the ledger.

The table is cleared before new rows stream in. A failure mid-file
leaves every batch committed so far in place and records no version;
rerunning the import restores a complete table.
"""

from __future__ import annotations

from dataclasses import dataclass
import sqlite3
import time
from typing import Any, Iterator
from uuid import uuid4

from core.config import RegisterConfig
from core.constants import PROGRESS_LOG_INTERVAL
from core.errors import DuplicateVersionError, RegisterTransactionError
from core.logging_config import get_logger
from core.types import ImportOptions, ImportResult
from ingest.field_parser import parse_delimited_line
from ingest.input_reader import (
    SourceFingerprint,
    fingerprint_source,
    iter_source_lines,
    resolve_source_path,
)
from ingest.row_mapping import HeaderMap, build_header_map, map_registration
from store.record_payload import registration_to_params
from store.registry_store import RegistryStore
from store.schema import DELETE_REGISTRATIONS, UPSERT_REGISTRATION
from store.version_ledger import VersionLedger

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class LoadCounts:
    """Row accounting for one streamed load."""

    records_imported: int
    records_skipped: int
    batches_committed: int


class RegistrationLoader:
    """Sequential full-replace loader for registration extracts."""

    def __init__(
        self,
        config: RegisterConfig,
        store: RegistryStore | None = None,
        ledger: VersionLedger | None = None,
        logger: Any | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or _LOGGER
        self._store = store or RegistryStore(config.database_path, self._logger)
        self._ledger = ledger or VersionLedger(self._store, self._logger)

    def run(self, options: ImportOptions) -> ImportResult:
        """Import one source extract.

        Args:
            options: Source URI and provenance.

        Returns:
            Import counts, duration, and the resulting version id.

        Raises:
            RegisterIngestError: If the source is missing or unreadable.
            RegisterTransactionError: If clearing or a batch commit fails.
            RegisterStoreError: If the store or ledger cannot be used.
        """
        started_at = time.perf_counter()
        run_logger = self._logger.bind(run_id=uuid4().hex[:12], source_uri=options.source_uri)
        source_path = resolve_source_path(options.source_uri, self._config)
        fingerprint = fingerprint_source(source_path)
        run_logger.info(
            "import_source_fingerprinted",
            source_path=str(source_path),
            file_sha256=fingerprint.file_sha256,
            file_size=fingerprint.file_size,
        )
        self._store.open()
        existing_version = self._ledger.find_version(fingerprint.file_sha256)
        if existing_version is not None:
            run_logger.info(
                "import_skipped_already_recorded",
                version_id=existing_version.version_id,
                file_sha256=fingerprint.file_sha256,
            )
            return ImportResult(
                records_imported=0,
                records_skipped=0,
                duration_ms=_elapsed_ms(started_at),
                version_id=existing_version.version_id,
                file_sha256=fingerprint.file_sha256,
                already_imported=True,
            )
        with self._store.connection() as connection:
            _clear_registrations(connection)
            run_logger.info("import_registrations_cleared")
            counts = self._load_lines(connection, iter_source_lines(source_path), run_logger)
        version_id = self._record_version(fingerprint, counts, options, run_logger)
        result = ImportResult(
            records_imported=counts.records_imported,
            records_skipped=counts.records_skipped,
            duration_ms=_elapsed_ms(started_at),
            version_id=version_id,
            file_sha256=fingerprint.file_sha256,
        )
        _log_import_completion(run_logger, result, counts.batches_committed)
        return result

    def _load_lines(
        self,
        connection: sqlite3.Connection,
        lines: Iterator[str],
        run_logger: Any,
    ) -> LoadCounts:
        header_line = next(lines, None)
        if header_line is None:
            run_logger.warning("import_source_empty")
            return LoadCounts(records_imported=0, records_skipped=0, batches_committed=0)
        header_map = build_header_map(parse_delimited_line(header_line))
        _log_header(run_logger, header_map)
        batch: list[tuple[str | None, ...]] = []
        imported = 0
        skipped = 0
        batches_committed = 0
        for row_number, line in enumerate(lines, start=1):
            registration = map_registration(parse_delimited_line(line), header_map)
            if registration is None:
                skipped += 1
                if skipped <= self._config.skip_log_limit:
                    run_logger.warning(
                        "import_row_skipped",
                        row_number=row_number,
                        reason="missing registration number or organisation name",
                    )
                continue
            batch.append(registration_to_params(registration))
            imported += 1
            if len(batch) >= self._config.batch_size:
                _commit_batch(connection, batch, batches_committed)
                batches_committed += 1
                batch = []
            if imported % PROGRESS_LOG_INTERVAL == 0:
                run_logger.info("import_progress", records_imported=imported)
        if batch:
            _commit_batch(connection, batch, batches_committed)
            batches_committed += 1
        if skipped > self._config.skip_log_limit:
            run_logger.warning("import_rows_skipped_total", records_skipped=skipped)
        return LoadCounts(
            records_imported=imported,
            records_skipped=skipped,
            batches_committed=batches_committed,
        )

    def _record_version(
        self,
        fingerprint: SourceFingerprint,
        counts: LoadCounts,
        options: ImportOptions,
        run_logger: Any,
    ) -> int | None:
        try:
            return self._ledger.record_version(
                file_sha256=fingerprint.file_sha256,
                file_size=fingerprint.file_size,
                record_count=counts.records_imported,
                provenance=options.resolved_provenance(),
            )
        except DuplicateVersionError:
            existing_version = self._ledger.find_version(fingerprint.file_sha256)
            run_logger.info(
                "import_version_already_recorded",
                file_sha256=fingerprint.file_sha256,
            )
            return existing_version.version_id if existing_version else None


def import_registrations(
    options: ImportOptions,
    config: RegisterConfig,
    logger: Any | None = None,
) -> ImportResult:
    """Run one full-replace import of a register extract.

    Args:
        options: Import request options.
        config: Runtime configuration.
        logger: Optional logger scoped to the caller.

    Returns:
        Import result summary.

    Raises:
        RegisterIngestError: If the source cannot be read.
        RegisterTransactionError: If a batch fails to commit.
        RegisterStoreError: If store or ledger persistence fails.
    """
    loader = RegistrationLoader(config, logger=logger)
    return loader.run(options)


def _clear_registrations(connection: sqlite3.Connection) -> None:
    try:
        connection.execute(DELETE_REGISTRATIONS)
    except sqlite3.Error as error:
        raise RegisterTransactionError(
            f"Failed to clear registrations before import: {error}. "
            "The store is unchanged; retry the import."
        ) from error


def _commit_batch(
    connection: sqlite3.Connection,
    rows: list[tuple[str | None, ...]],
    batch_index: int,
) -> None:
    """Write one batch inside its own transaction.

    Raises:
        RegisterTransactionError: If the batch fails; the batch is rolled back.
    """
    try:
        connection.execute("BEGIN")
        connection.executemany(UPSERT_REGISTRATION, rows)
        connection.execute("COMMIT")
    except sqlite3.Error as error:
        if connection.in_transaction:
            connection.execute("ROLLBACK")
        raise RegisterTransactionError(
            f"Failed to commit batch {batch_index} ({len(rows)} rows): {error}. "
            "Earlier batches remain committed; rerun the import to restore a full table."
        ) from error


def _log_header(run_logger: Any, header_map: HeaderMap) -> None:
    run_logger.info(
        "import_header_parsed",
        mapped_fields=len(header_map.positions),
        missing_fields=list(header_map.missing_fields),
    )
    if not header_map.has_required_fields():
        run_logger.warning(
            "import_header_missing_required_columns",
            missing_fields=list(header_map.missing_fields),
        )


def _elapsed_ms(started_at: float) -> int:
    return int((time.perf_counter() - started_at) * 1000)


def _log_import_completion(run_logger: Any, result: ImportResult, batches: int) -> None:
    duration_seconds = result.duration_ms / 1000
    records_per_second = (
        int(result.records_imported / duration_seconds) if duration_seconds > 0 else None
    )
    run_logger.info(
        "import_completed",
        records_imported=result.records_imported,
        records_skipped=result.records_skipped,
        batches_committed=batches,
        duration_ms=result.duration_ms,
        records_per_second=records_per_second,
        version_id=result.version_id,
    )
