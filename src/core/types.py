"""Shared typed models.

This module defines immutable data models used by ingest, store,
SDK, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from core.constants import DEFAULT_PROVENANCE, DEFAULT_SEARCH_LIMIT, DEFAULT_SEARCH_OFFSET

VersionStatus = Literal["active", "archived"]


@dataclass(frozen=True)
class Registration:
    """One entry of the register of data controllers.

    Attributes:
        registration_number: Register's own identifier, the store primary key.
        organisation_name: Registered organisation name.
        public_authority: Authority flag as published (``Y``/``N``).
        payment_tier: Fee tier classification.
        start_date_of_registration: Validity start date as published.
        end_date_of_registration: Validity end date as published.
        public_register_entry_url: Link to the public register entry.

    Remaining attributes hold organisation and responsible-contact
    address details. Every optional field is ``None`` when absent.
    """

    registration_number: str
    organisation_name: str
    organisation_address_line_1: str | None = None
    organisation_address_line_2: str | None = None
    organisation_address_line_3: str | None = None
    organisation_address_line_4: str | None = None
    organisation_address_line_5: str | None = None
    organisation_postcode: str | None = None
    public_authority: str | None = None
    start_date_of_registration: str | None = None
    end_date_of_registration: str | None = None
    trading_names: str | None = None
    payment_tier: str | None = None
    dpo_title: str | None = None
    dpo_first_name: str | None = None
    dpo_last_name: str | None = None
    dpo_organisation: str | None = None
    dpo_email: str | None = None
    dpo_phone: str | None = None
    dpo_address_line_1: str | None = None
    dpo_address_line_2: str | None = None
    dpo_address_line_3: str | None = None
    dpo_address_line_4: str | None = None
    dpo_address_line_5: str | None = None
    dpo_postcode: str | None = None
    public_register_entry_url: str | None = None


@dataclass(frozen=True)
class DataVersion:
    """Ledger row describing one completed import.

    Attributes:
        version_id: Monotonic ledger identifier.
        imported_at: UTC import timestamp.
        file_sha256: Content fingerprint of the source file.
        file_size: Source file size in bytes.
        record_count: Rows accepted by the loader.
        provenance: Origin of the source file.
        status: ``active`` for the authoritative version, else ``archived``.
    """

    version_id: int
    imported_at: datetime
    file_sha256: str
    file_size: int
    record_count: int
    provenance: str
    status: VersionStatus


@dataclass(frozen=True)
class SearchFilter:
    """Search constraints for registrations.

    Attributes:
        registration_number: Optional exact business key.
        organisation_name: Optional case-insensitive substring of the name.
        postcode: Optional case-insensitive substring of the postcode.
        public_authority: Optional exact authority flag.
        payment_tier: Optional exact tier classification.
        limit: Maximum number of rows returned.
        offset: Number of rows skipped before returning results.
    """

    registration_number: str | None = None
    organisation_name: str | None = None
    postcode: str | None = None
    public_authority: str | None = None
    payment_tier: str | None = None
    limit: int = DEFAULT_SEARCH_LIMIT
    offset: int = DEFAULT_SEARCH_OFFSET


@dataclass(frozen=True)
class ImportOptions:
    """Import command options.

    Attributes:
        source_uri: Local CSV path or ``s3://bucket/key`` URI.
        provenance: Origin recorded on the data version; source URI when omitted.
    """

    source_uri: str
    provenance: str | None = None

    def resolved_provenance(self) -> str:
        """Return provenance text recorded in the version ledger."""
        return self.provenance or self.source_uri or DEFAULT_PROVENANCE


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one import run.

    Attributes:
        records_imported: Rows accepted and written to the store.
        records_skipped: Rows discarded for missing key or name.
        duration_ms: Wall-clock duration of the run.
        version_id: Ledger id of the new or already-recorded version.
        file_sha256: Source fingerprint.
        already_imported: True when the fingerprint was already recorded.
    """

    records_imported: int
    records_skipped: int
    duration_ms: int
    version_id: int | None
    file_sha256: str
    already_imported: bool = False


@dataclass(frozen=True)
class StoreStats:
    """Store statistics for adapters.

    Attributes:
        record_count: Current number of registrations.
        active_version: Authoritative data version, if any import completed.
    """

    record_count: int
    active_version: DataVersion | None
