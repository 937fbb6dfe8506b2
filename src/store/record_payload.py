"""Row and JSON conversion for registrations and data versions.

This module centralizes translation between SQLite rows, statement
parameters, typed models, and JSON-safe payloads for adapters.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
import json
import sqlite3
from typing import cast

from core.types import DataVersion, ImportResult, Registration, StoreStats, VersionStatus
from store.schema import REGISTRATION_COLUMNS


def registration_to_params(registration: Registration) -> tuple[str | None, ...]:
    """Return statement parameters in schema column order."""
    return tuple(getattr(registration, column) for column in REGISTRATION_COLUMNS)


def registration_from_row(row: sqlite3.Row) -> Registration:
    """Build a registration from a selected row.

    Args:
        row: Row selected with every registration column.

    Returns:
        Typed registration.
    """
    values = {column: row[column] for column in REGISTRATION_COLUMNS}
    return Registration(**values)


def data_version_from_row(row: sqlite3.Row) -> DataVersion:
    """Build a data version from a ledger row.

    Args:
        row: Row selected from the version ledger.

    Returns:
        Typed data version.
    """
    return DataVersion(
        version_id=int(row["id"]),
        imported_at=datetime.fromisoformat(str(row["imported_at"])),
        file_sha256=str(row["file_sha256"]),
        file_size=int(row["file_size"]),
        record_count=int(row["record_count"]),
        provenance=str(row["provenance"]),
        status=cast(VersionStatus, row["status"]),
    )


def registration_to_payload(registration: Registration) -> dict[str, object]:
    """Serialize a registration into a JSON-safe payload."""
    return asdict(registration)


def data_version_to_payload(version: DataVersion) -> dict[str, object]:
    """Serialize a data version into a JSON-safe payload."""
    payload = asdict(version)
    payload["imported_at"] = version.imported_at.isoformat()
    return payload


def stats_to_payload(stats: StoreStats) -> dict[str, object]:
    """Serialize store statistics into a JSON-safe payload."""
    active_version = stats.active_version
    return {
        "record_count": stats.record_count,
        "active_version": data_version_to_payload(active_version) if active_version else None,
    }


def import_result_to_payload(result: ImportResult) -> dict[str, object]:
    """Serialize an import result into a JSON-safe payload."""
    return asdict(result)


def to_json_line(payload: dict[str, object]) -> str:
    """Render a payload as one compact, key-sorted JSON line."""
    return json.dumps(payload, sort_keys=True, ensure_ascii=False)
