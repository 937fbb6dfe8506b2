"""Read contract over the register store.

This module implements filtered search, key lookup, and statistics.
It is safe for concurrent readers: every call uses its own connection.
Failures surface as typed register errors, never raw SQLite exceptions.
"""

from __future__ import annotations

from dataclasses import replace
import sqlite3
from typing import Any

from core.constants import DEFAULT_SEARCH_LIMIT, SQLITE_MAX_INTEGER
from core.errors import RegisterQueryError
from core.logging_config import get_logger
from core.types import DataVersion, Registration, SearchFilter, StoreStats
from store.record_payload import registration_from_row
from store.registry_store import RegistryStore
from store.schema import COUNT_REGISTRATIONS, SELECT_REGISTRATIONS
from store.version_ledger import VersionLedger

_LOGGER = get_logger(__name__)

_LIKE_ESCAPE = "\\"


class RegistrationQueryService:
    """Search and statistics over registrations."""

    def __init__(
        self,
        store: RegistryStore,
        ledger: VersionLedger | None = None,
        logger: Any | None = None,
    ) -> None:
        self._store = store
        self._logger = logger or _LOGGER
        self._ledger = ledger or VersionLedger(store, self._logger)

    def search(self, filter_spec: SearchFilter) -> list[Registration]:
        """Return registrations matching every set filter option.

        Unset or blank options add no constraint. Results are ordered by
        organisation name, then registration number, for stable paging.

        Args:
            filter_spec: Search constraints and pagination.

        Returns:
            Matching registrations for the requested page.

        Raises:
            StoreNotInitializedError: If the store has not been opened.
            RegisterQueryError: If the filter is invalid or the query fails.
        """
        _validate_pagination(filter_spec)
        where_sql, params = build_search_predicates(filter_spec)
        query = (
            f"{SELECT_REGISTRATIONS}{where_sql} "
            "ORDER BY organisation_name, registration_number LIMIT ? OFFSET ?"
        )
        with self._store.connection() as connection:
            rows = self._fetch_all(
                connection, query, (*params, filter_spec.limit, filter_spec.offset)
            )
        self._logger.debug("registrations_searched", result_count=len(rows))
        return [registration_from_row(row) for row in rows]

    def get_by_key(self, registration_number: str) -> Registration | None:
        """Return one registration by business key, or None when absent."""
        if not registration_number.strip():
            raise RegisterQueryError("Registration number lookup requires a non-empty key.")
        results = self.search(SearchFilter(registration_number=registration_number, limit=1))
        return results[0] if results else None

    def search_by_organisation(
        self,
        organisation_name: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[Registration]:
        """Return registrations whose name contains the given text."""
        return self.search(SearchFilter(organisation_name=organisation_name, limit=limit))

    def search_by_postcode(
        self,
        postcode: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[Registration]:
        """Return registrations whose postcode contains the given text."""
        return self.search(SearchFilter(postcode=postcode, limit=limit))

    def get_stats(self) -> StoreStats:
        """Return the registration count and the active data version."""
        with self._store.connection() as connection:
            rows = self._fetch_all(connection, COUNT_REGISTRATIONS, ())
        record_count = int(rows[0][0]) if rows else 0
        return StoreStats(record_count=record_count, active_version=self._active_version())

    def list_versions(self) -> list[DataVersion]:
        """Return every recorded data version, newest first."""
        return self._ledger.list_versions()

    def _active_version(self) -> DataVersion | None:
        return self._ledger.get_active_version()

    def _fetch_all(
        self,
        connection: sqlite3.Connection,
        query: str,
        params: tuple[object, ...],
    ) -> list[sqlite3.Row]:
        try:
            return connection.execute(query, params).fetchall()
        except sqlite3.Error as error:
            self._logger.error("registration_query_failed", error=str(error))
            raise RegisterQueryError(
                f"Register query failed: {error}. Retry once any running import commits."
            ) from error


def build_search_predicates(filter_spec: SearchFilter) -> tuple[str, list[object]]:
    """Build a WHERE clause and parameters for set filter options.

    Args:
        filter_spec: Search constraints.

    Returns:
        Clause text (empty when unconstrained) and bound parameters.
    """
    normalized = _normalize_filter(filter_spec)
    clauses: list[str] = []
    params: list[object] = []
    if normalized.registration_number:
        clauses.append("registration_number = ?")
        params.append(normalized.registration_number)
    if normalized.organisation_name:
        clauses.append(f"organisation_name LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append(_contains_pattern(normalized.organisation_name))
    if normalized.postcode:
        clauses.append(f"organisation_postcode LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append(_contains_pattern(normalized.postcode))
    if normalized.public_authority:
        clauses.append("public_authority = ?")
        params.append(normalized.public_authority)
    if normalized.payment_tier:
        clauses.append("payment_tier = ?")
        params.append(normalized.payment_tier)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _normalize_filter(filter_spec: SearchFilter) -> SearchFilter:
    return replace(
        filter_spec,
        registration_number=_blank_to_none(filter_spec.registration_number),
        organisation_name=_blank_to_none(filter_spec.organisation_name),
        postcode=_blank_to_none(filter_spec.postcode),
        public_authority=_blank_to_none(filter_spec.public_authority),
        payment_tier=_blank_to_none(filter_spec.payment_tier),
    )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _contains_pattern(text: str) -> str:
    escaped = (
        text.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def _validate_pagination(filter_spec: SearchFilter) -> None:
    _require_bounded_int("limit", filter_spec.limit, minimum=1)
    _require_bounded_int("offset", filter_spec.offset, minimum=0)


def _require_bounded_int(name: str, value: object, minimum: int) -> None:
    # SQLite binds integers as signed 64-bit.
    if isinstance(value, bool) or not isinstance(value, int):
        raise RegisterQueryError(f"Invalid search {name} {value!r}: expected an integer.")
    if not minimum <= value <= SQLITE_MAX_INTEGER:
        raise RegisterQueryError(
            f"Invalid search {name} {value}: expected an integer from {minimum} "
            f"to {SQLITE_MAX_INTEGER}."
        )
