"""SQLite schema for registrations and the version ledger.

This module owns table and index definitions plus the fixed,
parameterized statements shared by the loader, ledger, and queries.
"""

from __future__ import annotations

from dataclasses import fields

from core.types import Registration

REGISTRATIONS_TABLE = "ico_registrations"
VERSIONS_TABLE = "data_versions"

REGISTRATION_COLUMNS: tuple[str, ...] = tuple(field.name for field in fields(Registration))

_OPTIONAL_COLUMN_DDL = ",\n".join(
    f"    {column} TEXT" for column in REGISTRATION_COLUMNS[2:]
)

CREATE_REGISTRATIONS_TABLE = f"""
CREATE TABLE IF NOT EXISTS {REGISTRATIONS_TABLE} (
    registration_number TEXT PRIMARY KEY NOT NULL,
    organisation_name TEXT NOT NULL,
{_OPTIONAL_COLUMN_DDL}
);
"""

CREATE_VERSIONS_TABLE = f"""
CREATE TABLE IF NOT EXISTS {VERSIONS_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    imported_at TEXT NOT NULL,
    file_sha256 TEXT NOT NULL UNIQUE,
    file_size INTEGER NOT NULL,
    record_count INTEGER NOT NULL,
    provenance TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'archived'))
);
"""

CREATE_INDEXES: tuple[str, ...] = (
    f"CREATE INDEX IF NOT EXISTS idx_organisation_name "
    f"ON {REGISTRATIONS_TABLE}(organisation_name)",
    f"CREATE INDEX IF NOT EXISTS idx_registration_number "
    f"ON {REGISTRATIONS_TABLE}(registration_number)",
    f"CREATE INDEX IF NOT EXISTS idx_postcode ON {REGISTRATIONS_TABLE}(organisation_postcode)",
    f"CREATE INDEX IF NOT EXISTS idx_end_date ON {REGISTRATIONS_TABLE}(end_date_of_registration)",
    f"CREATE INDEX IF NOT EXISTS idx_imported_at ON {VERSIONS_TABLE}(imported_at)",
    f"CREATE INDEX IF NOT EXISTS idx_sha256 ON {VERSIONS_TABLE}(file_sha256)",
    f"CREATE INDEX IF NOT EXISTS idx_status ON {VERSIONS_TABLE}(status)",
)

UPSERT_REGISTRATION = (
    f"INSERT OR REPLACE INTO {REGISTRATIONS_TABLE} ({', '.join(REGISTRATION_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in REGISTRATION_COLUMNS)})"
)

DELETE_REGISTRATIONS = f"DELETE FROM {REGISTRATIONS_TABLE}"

COUNT_REGISTRATIONS = f"SELECT COUNT(*) FROM {REGISTRATIONS_TABLE}"

SELECT_REGISTRATIONS = f"SELECT {', '.join(REGISTRATION_COLUMNS)} FROM {REGISTRATIONS_TABLE}"

VERSION_COLUMNS = "id, imported_at, file_sha256, file_size, record_count, provenance, status"

SELECT_VERSIONS = f"SELECT {VERSION_COLUMNS} FROM {VERSIONS_TABLE}"

VERSION_ORDER = "ORDER BY imported_at DESC, id DESC"


def schema_statements() -> tuple[str, ...]:
    """Return DDL statements in execution order."""
    return (CREATE_REGISTRATIONS_TABLE, CREATE_VERSIONS_TABLE, *CREATE_INDEXES)
