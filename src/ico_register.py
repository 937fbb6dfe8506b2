"""Public SDK surface for the ICO register.

This module provides a stable import path for register users.
It re-exports the primary client and typed option models.
"""

from __future__ import annotations

from core.config import RegisterConfig
from core.types import (
    DataVersion,
    ImportOptions,
    ImportResult,
    Registration,
    SearchFilter,
    StoreStats,
)
from ingest.batch_loader import import_registrations
from store.registry_sdk import RegisterClient

__all__ = [
    "DataVersion",
    "ImportOptions",
    "ImportResult",
    "RegisterClient",
    "RegisterConfig",
    "Registration",
    "SearchFilter",
    "StoreStats",
    "import_registrations",
]
