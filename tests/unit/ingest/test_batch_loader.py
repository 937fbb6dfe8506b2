"""Unit tests for the batch import loader."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from core.config import RegisterConfig
from core.errors import RegisterIngestError, RegisterTransactionError
from core.types import ImportOptions, ImportResult, SearchFilter
from ingest.batch_loader import RegistrationLoader, import_registrations
from store.query_service import RegistrationQueryService
from store.registry_store import RegistryStore
from store.version_ledger import VersionLedger
from tests.fixture_paths import register_extract


def _config(tmp_path: Path, batch_size: int = 1000) -> RegisterConfig:
    return RegisterConfig(
        data_root=tmp_path,
        database_path=tmp_path / "ico.db",
        batch_size=batch_size,
    )


def _import(config: RegisterConfig, fixture_name: str) -> ImportResult:
    options = ImportOptions(source_uri=register_extract(fixture_name))
    return import_registrations(options, config)


def _queries(config: RegisterConfig) -> RegistrationQueryService:
    store = RegistryStore(config.database_path)
    store.open()
    return RegistrationQueryService(store)


def test_import_counts_skipped_rows(tmp_path: Path) -> None:
    """Rows with an empty registration number should be skipped and counted."""
    config = _config(tmp_path)

    result = _import(config, "skip_rows.csv")

    assert (result.records_imported, result.records_skipped) == (2, 1)
    assert _queries(config).get_stats().record_count == 2


def test_import_maps_quoted_fields(tmp_path: Path) -> None:
    """Quoted commas and doubled quotes should survive into stored values."""
    config = _config(tmp_path)

    _import(config, "quoted_fields.csv")
    registration = _queries(config).get_by_key("Z5555555")

    assert registration is not None
    assert registration.organisation_name == 'Smith "The Baker" & Sons'
    assert registration.trading_names == "Smith Bakery, Smith Cakes"


def test_import_stores_full_record_from_crlf_source(tmp_path: Path) -> None:
    """CRLF extracts should load every mapped column."""
    config = _config(tmp_path)

    _import(config, "skip_rows.csv")
    registration = _queries(config).get_by_key("Z1234567")

    assert registration is not None
    assert registration.organisation_name == "Acme Widgets, Ltd"
    assert registration.dpo_email == "dpo@acme.example"
    assert registration.public_register_entry_url.endswith("/Z1234567")


def test_import_same_file_twice_is_idempotent(tmp_path: Path) -> None:
    """Second import of identical content should short-circuit."""
    config = _config(tmp_path)

    first = _import(config, "pagination.csv")
    second = _import(config, "pagination.csv")

    assert second.already_imported and second.records_imported == 0
    assert second.version_id == first.version_id
    queries = _queries(config)
    assert len(queries.list_versions()) == 1 and queries.get_stats().record_count == 5


def test_import_duplicate_keys_last_write_wins(tmp_path: Path) -> None:
    """Repeated registration numbers should keep the last row."""
    config = _config(tmp_path)

    result = _import(config, "duplicate_keys.csv")
    queries = _queries(config)
    registration = queries.get_by_key("Z3333333")

    assert registration is not None and registration.organisation_name == "Second Name Ltd"
    assert queries.get_stats().record_count == 2
    assert result.records_imported == 3


def test_import_reordered_columns_maps_by_header(tmp_path: Path) -> None:
    """Column order should not affect mapping."""
    config = _config(tmp_path)

    _import(config, "reordered_columns.csv")
    registration = _queries(config).get_by_key("Z2222222")

    assert registration is not None
    assert registration.organisation_name == "Reordered Records Ltd"
    assert registration.organisation_postcode == "M1 1AE"


def test_import_missing_key_column_skips_every_row(tmp_path: Path) -> None:
    """A header without the key column should skip all rows."""
    config = _config(tmp_path)

    result = _import(config, "missing_key_column.csv")

    assert (result.records_imported, result.records_skipped) == (0, 2)


def test_import_replaces_previous_records(tmp_path: Path) -> None:
    """A new extract should fully replace the prior table contents."""
    config = _config(tmp_path)

    _import(config, "pagination.csv")
    _import(config, "updated_extract.csv")
    queries = _queries(config)

    assert queries.get_stats().record_count == 2
    assert queries.get_by_key("Z0000005") is None


def test_import_small_batches_commit_every_row(tmp_path: Path) -> None:
    """Batch size smaller than the file should still load all rows."""
    config = _config(tmp_path, batch_size=2)

    result = _import(config, "pagination.csv")

    assert result.records_imported == 5
    assert len(_queries(config).search(SearchFilter(limit=10))) == 5


def test_import_header_only_file_records_empty_version(tmp_path: Path) -> None:
    """A header-only extract should clear the table and record zero rows."""
    config = _config(tmp_path)
    source = tmp_path / "header_only.csv"
    source.write_text("Registration_number,Organisation_name\n", encoding="utf-8")

    result = import_registrations(ImportOptions(source_uri=str(source)), config)
    versions = _queries(config).list_versions()

    assert result.records_imported == 0 and versions[0].record_count == 0


def test_import_records_provenance(tmp_path: Path) -> None:
    """Explicit provenance should be stored on the version."""
    config = _config(tmp_path)
    options = ImportOptions(
        source_uri=register_extract("pagination.csv"),
        provenance="manual-upload",
    )

    import_registrations(options, config)

    assert _queries(config).list_versions()[0].provenance == "manual-upload"


def test_import_missing_source_raises_ingest_error(tmp_path: Path) -> None:
    """Missing source should fail before touching the store."""
    config = _config(tmp_path)

    with pytest.raises(RegisterIngestError):
        import_registrations(ImportOptions(source_uri=str(tmp_path / "nope.csv")), config)

    assert config.database_path.exists() is False


def test_failed_batch_keeps_earlier_batches_and_records_no_version(tmp_path: Path) -> None:
    """A failing batch should roll back alone and leave no version recorded."""
    config = _config(tmp_path, batch_size=2)
    store = RegistryStore(config.database_path)
    store.open()
    with store.connection() as connection:
        connection.execute(
            "CREATE TRIGGER reject_bad BEFORE INSERT ON ico_registrations "
            "WHEN NEW.registration_number = 'Z0000001' "
            "BEGIN SELECT RAISE(ABORT, 'rejected'); END;"
        )
    loader = RegistrationLoader(config, store, VersionLedger(store))
    options = ImportOptions(source_uri=register_extract("pagination.csv"))

    with pytest.raises(RegisterTransactionError):
        loader.run(options)
    queries = RegistrationQueryService(store)

    assert queries.get_stats().record_count == 2
    assert queries.list_versions() == []


class _RecordingLogger:
    """Logger double that keeps every bound context and emitted event."""

    def __init__(self) -> None:
        self.bound: list[dict[str, object]] = []
        self.events: list[tuple[str, str, dict[str, object]]] = []

    def bind(self, **fields: object) -> "_RecordingLogger":
        self.bound.append(fields)
        return self

    def debug(self, event: str, **fields: object) -> None:
        self.events.append(("debug", event, fields))

    def info(self, event: str, **fields: object) -> None:
        self.events.append(("info", event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self.events.append(("warning", event, fields))

    def error(self, event: str, **fields: object) -> None:
        self.events.append(("error", event, fields))

    def named(self, event: str) -> list[dict[str, object]]:
        return [fields for _, name, fields in self.events if name == event]


def _write_keyless_extract(tmp_path: Path, bad_rows: int) -> str:
    source = tmp_path / "keyless.csv"
    lines = ["Registration_number,Organisation_name", "Z1,Kept Ltd"]
    lines.extend(f",Keyless {index} Ltd" for index in range(bad_rows))
    source.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(source)


def test_loader_binds_run_context(tmp_path: Path) -> None:
    """The loader should bind a run id and source uri on its logger."""
    logger = _RecordingLogger()
    options = ImportOptions(source_uri=register_extract("skip_rows.csv"))

    RegistrationLoader(_config(tmp_path), logger=logger).run(options)

    assert len(logger.bound) == 1 and len(str(logger.bound[0]["run_id"])) == 12
    assert logger.bound[0]["source_uri"] == options.source_uri


def test_skipped_rows_log_only_up_to_limit(tmp_path: Path) -> None:
    """Only the first skip_log_limit rows are logged, then one total."""
    logger = _RecordingLogger()
    config = replace(_config(tmp_path), skip_log_limit=2)
    options = ImportOptions(source_uri=_write_keyless_extract(tmp_path, bad_rows=5))

    result = RegistrationLoader(config, logger=logger).run(options)

    row_events = logger.named("import_row_skipped")
    assert result.records_skipped == 5
    assert [fields["row_number"] for fields in row_events] == [2, 3]
    assert logger.named("import_rows_skipped_total") == [{"records_skipped": 5}]


def test_skipped_rows_within_limit_log_no_total(tmp_path: Path) -> None:
    """Skips at or under the limit are each logged without a total event."""
    logger = _RecordingLogger()
    config = replace(_config(tmp_path), skip_log_limit=2)
    options = ImportOptions(source_uri=_write_keyless_extract(tmp_path, bad_rows=2))

    RegistrationLoader(config, logger=logger).run(options)

    assert len(logger.named("import_row_skipped")) == 2
    assert logger.named("import_rows_skipped_total") == []


def test_zero_skip_log_limit_logs_only_total(tmp_path: Path) -> None:
    """A zero limit suppresses per-row events but keeps the total."""
    logger = _RecordingLogger()
    config = replace(_config(tmp_path), skip_log_limit=0)
    options = ImportOptions(source_uri=register_extract("skip_rows.csv"))

    RegistrationLoader(config, logger=logger).run(options)

    assert logger.named("import_row_skipped") == []
    assert logger.named("import_rows_skipped_total") == [{"records_skipped": 1}]
