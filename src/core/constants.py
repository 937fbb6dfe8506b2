"""Core constants used across ICO register modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".ico-register")
DATABASE_FILE_NAME = "ico.db"
DOWNLOADS_DIR_NAME = "downloads"
LOCK_FILE_NAME = "update.lock"
DEFAULT_BATCH_SIZE = 1000
DEFAULT_LOCK_MAX_AGE_SECONDS = 2 * 60 * 60
DEFAULT_SKIP_LOG_LIMIT = 5
PROGRESS_LOG_INTERVAL = 10_000
HASH_ALGORITHM = "sha256"
HASH_CHUNK_SIZE = 1024 * 1024
SOURCE_ENCODING = "utf-8-sig"
DEFAULT_DELIMITER = ","
DEFAULT_QUOTE_CHAR = '"'
DEFAULT_SEARCH_LIMIT = 10
DEFAULT_SEARCH_OFFSET = 0
DEFAULT_PROVENANCE = "local-csv-file"
VERSION_STATUS_ACTIVE = "active"
VERSION_STATUS_ARCHIVED = "archived"
SQLITE_CACHE_SIZE = 10000
SQLITE_BUSY_TIMEOUT_SECONDS = 30.0
SQLITE_MAX_INTEGER = 2**63 - 1
