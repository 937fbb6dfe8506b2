"""ICO register exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RegisterError(Exception):
    """Base exception for all register failures."""


class RegisterConfigError(RegisterError):
    """Raised for invalid runtime configuration."""


class RegisterIngestError(RegisterError):
    """Raised when a source extract is missing, unreadable, or misconfigured."""


class RegisterTransactionError(RegisterError):
    """Raised when a load batch fails to commit and is rolled back."""


class RegisterStoreError(RegisterError):
    """Raised for storage engine and version ledger failures."""


class DuplicateVersionError(RegisterStoreError):
    """Raised when a source fingerprint is already recorded in the ledger."""


class StoreNotInitializedError(RegisterStoreError):
    """Raised when the store is used before it has been opened."""


class RegisterQueryError(RegisterError):
    """Raised for invalid search filters and failed read queries."""


class RegisterLockError(RegisterError):
    """Raised when the import lock is held by another run."""


class RegisterDependencyError(RegisterError):
    """Raised when an optional runtime dependency is missing."""


class RegisterRunSpecError(RegisterError):
    """Raised for invalid or unsupported run-spec configuration."""
