"""Header-driven mapping from parsed fields to registrations.

Fields are located by header name rather than position so extracts
with reordered columns still load. Header names are compared after
trimming whitespace and ignoring case.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from core.types import Registration

KEY_FIELD = "registration_number"
NAME_FIELD = "organisation_name"

_DPO_PREFIX = "DPO_or_Person_responsible_for_DP_"

REGISTRATION_SOURCE_HEADERS: tuple[tuple[str, str], ...] = (
    ("registration_number", "Registration_number"),
    ("organisation_name", "Organisation_name"),
    ("organisation_address_line_1", "Organisation_address_line_1"),
    ("organisation_address_line_2", "Organisation_address_line_2"),
    ("organisation_address_line_3", "Organisation_address_line_3"),
    ("organisation_address_line_4", "Organisation_address_line_4"),
    ("organisation_address_line_5", "Organisation_address_line_5"),
    ("organisation_postcode", "Organisation_postcode"),
    ("public_authority", "Public_authority"),
    ("start_date_of_registration", "Start_date_of_registration"),
    ("end_date_of_registration", "End_date_of_registration"),
    ("trading_names", "Trading_names"),
    ("payment_tier", "Payment_tier"),
    ("dpo_title", f"{_DPO_PREFIX}Title"),
    ("dpo_first_name", f"{_DPO_PREFIX}First_name"),
    ("dpo_last_name", f"{_DPO_PREFIX}Last_name"),
    ("dpo_organisation", f"{_DPO_PREFIX}Organisation"),
    ("dpo_email", f"{_DPO_PREFIX}Email"),
    ("dpo_phone", f"{_DPO_PREFIX}Phone"),
    ("dpo_address_line_1", f"{_DPO_PREFIX}Address_line_1"),
    ("dpo_address_line_2", f"{_DPO_PREFIX}Address_line_2"),
    ("dpo_address_line_3", f"{_DPO_PREFIX}Address_line_3"),
    ("dpo_address_line_4", f"{_DPO_PREFIX}Address_line_4"),
    ("dpo_address_line_5", f"{_DPO_PREFIX}Address_line_5"),
    ("dpo_postcode", f"{_DPO_PREFIX}Postcode"),
    ("public_register_entry_url", "Public_register_entry_URL"),
)


@dataclass(frozen=True)
class HeaderMap:
    """Resolved positions of known registration fields in a header line.

    Attributes:
        positions: Registration field name to column index.
        missing_fields: Known fields absent from the header.
    """

    positions: Mapping[str, int]
    missing_fields: tuple[str, ...]

    def has_required_fields(self) -> bool:
        """Return whether both the business key and name columns exist."""
        return KEY_FIELD in self.positions and NAME_FIELD in self.positions


def build_header_map(header_fields: list[str]) -> HeaderMap:
    """Build a header map from parsed header fields.

    When a header name repeats, the last occurrence wins.

    Args:
        header_fields: Parsed header line.

    Returns:
        Header map for known registration fields.
    """
    column_index = {
        _normalize_header(name): position for position, name in enumerate(header_fields)
    }
    positions: dict[str, int] = {}
    missing: list[str] = []
    for field_name, header_name in REGISTRATION_SOURCE_HEADERS:
        position = column_index.get(_normalize_header(header_name))
        if position is None:
            missing.append(field_name)
        else:
            positions[field_name] = position
    return HeaderMap(positions=positions, missing_fields=tuple(missing))


def map_registration(fields: list[str], header_map: HeaderMap) -> Registration | None:
    """Map parsed fields onto a registration.

    Args:
        fields: Parsed data line.
        header_map: Positions resolved from the header line.

    Returns:
        Registration, or None when the business key or name is empty.
    """
    values = {
        field_name: _field_value(fields, position)
        for field_name, position in header_map.positions.items()
    }
    registration_number = values.pop(KEY_FIELD, None)
    organisation_name = values.pop(NAME_FIELD, None)
    if not registration_number or not organisation_name:
        return None
    return Registration(
        registration_number=registration_number,
        organisation_name=organisation_name,
        **values,
    )


def _field_value(fields: list[str], position: int) -> str | None:
    if position >= len(fields):
        return None
    value = fields[position].strip()
    return value or None


def _normalize_header(name: str) -> str:
    return name.strip().lower()
