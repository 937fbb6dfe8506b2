"""Runtime configuration model for the ICO register.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path

from core.constants import (
    DATABASE_FILE_NAME,
    DEFAULT_BATCH_SIZE,
    DEFAULT_DATA_ROOT,
    DEFAULT_LOCK_MAX_AGE_SECONDS,
    DEFAULT_SKIP_LOG_LIMIT,
    DOWNLOADS_DIR_NAME,
    LOCK_FILE_NAME,
)
from core.errors import RegisterConfigError


@dataclass(frozen=True)
class RegisterConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for the database, lock, and downloads.
        database_path: SQLite database file.
        batch_size: Rows committed per load transaction.
        lock_max_age_seconds: Age after which an import lock is stale.
        skip_log_limit: Number of skipped rows logged individually per import.
        s3_region: Optional default AWS region for S3 sources.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    data_root: Path
    database_path: Path
    batch_size: int = DEFAULT_BATCH_SIZE
    lock_max_age_seconds: int = DEFAULT_LOCK_MAX_AGE_SECONDS
    skip_log_limit: int = DEFAULT_SKIP_LOG_LIMIT
    s3_region: str | None = None
    s3_profile: str | None = None

    @classmethod
    def from_env(cls) -> "RegisterConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RegisterConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("ICO_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        data_root = Path(data_root_value).expanduser().resolve()
        database_value = os.getenv("ICO_DB_PATH")
        database_path = (
            Path(database_value).expanduser().resolve()
            if database_value
            else data_root / DATABASE_FILE_NAME
        )
        return cls(
            data_root=data_root,
            database_path=database_path,
            batch_size=_parse_int_setting("ICO_BATCH_SIZE", DEFAULT_BATCH_SIZE, minimum=1),
            lock_max_age_seconds=_parse_int_setting(
                "ICO_LOCK_MAX_AGE_SECONDS", DEFAULT_LOCK_MAX_AGE_SECONDS, minimum=1
            ),
            skip_log_limit=_parse_int_setting(
                "ICO_SKIP_LOG_LIMIT", DEFAULT_SKIP_LOG_LIMIT, minimum=0
            ),
            s3_region=os.getenv("ICO_S3_REGION"),
            s3_profile=os.getenv("ICO_S3_PROFILE"),
        )

    def with_data_root(self, data_root: Path) -> "RegisterConfig":
        """Return a copy rooted at a new directory, moving a default database with it."""
        resolved_root = data_root.expanduser().resolve()
        database_path = self.database_path
        if database_path == self.data_root / DATABASE_FILE_NAME:
            database_path = resolved_root / DATABASE_FILE_NAME
        return replace(self, data_root=resolved_root, database_path=database_path)

    def with_database_path(self, database_path: Path) -> "RegisterConfig":
        """Return a copy writing to a different SQLite database file."""
        return replace(self, database_path=database_path.expanduser().resolve())

    @property
    def lock_path(self) -> Path:
        """Advisory lock file guarding import runs."""
        return self.data_root / LOCK_FILE_NAME

    @property
    def downloads_dir(self) -> Path:
        """Directory for source files fetched from object storage."""
        return self.data_root / DOWNLOADS_DIR_NAME


def _parse_int_setting(env_name: str, default_value: int, minimum: int) -> int:
    """Parse an integer environment value with a lower bound.

    Args:
        env_name: Environment variable name.
        default_value: Value used when the variable is unset.
        minimum: Smallest accepted value.

    Returns:
        Parsed integer.

    Raises:
        RegisterConfigError: If value is not an integer or below minimum.
    """
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default_value
    try:
        parsed_value = int(raw_value)
    except ValueError as error:
        raise RegisterConfigError(
            f"Invalid {env_name} value: expected integer, got '{raw_value}'. "
            f"Set {env_name} to a numeric value."
        ) from error
    if parsed_value < minimum:
        raise RegisterConfigError(
            f"Invalid {env_name} value: expected integer >= {minimum}, got {parsed_value}. "
            f"Set {env_name} to a larger value."
        )
    return parsed_value
