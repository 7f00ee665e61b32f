"""
Logical field id -> storage field normalization.

Import records, dedup configuration and campaign rules address contact
fields by logical id (e.g. "phoneNumber"). Standard ids resolve to their
column; any other id is a custom field and passes through unchanged.
"""
from typing import Any, Dict, List, Optional

# Each standard column has a list of accepted logical ids (matched case-insensitively)
STANDARD_FIELD_ALIASES: Dict[str, List[str]] = {
    "phone_number": ["phoneNumber", "phone_number", "phone"],
    "first_name": ["firstName", "first_name"],
    "last_name": ["lastName", "last_name"],
    "postal_code": ["postalCode", "postal_code"],
}


def _build_alias_lookup() -> Dict[str, str]:
    """Build a reverse lookup: normalized alias -> storage field."""
    lookup: Dict[str, str] = {}
    for storage_field, aliases in STANDARD_FIELD_ALIASES.items():
        for alias in aliases:
            lookup[alias.lower().strip()] = storage_field
    return lookup


_ALIAS_LOOKUP = _build_alias_lookup()


def standard_field_for(field_id: str) -> Optional[str]:
    """Return the storage column for a standard field id, else None."""
    return _ALIAS_LOOKUP.get(str(field_id).lower().strip())


def to_storage_field(field_id: str) -> str:
    """Map a logical field id to its storage field; custom ids are unchanged."""
    return standard_field_for(field_id) or field_id


def is_standard_field(field_id: str) -> bool:
    return standard_field_for(field_id) is not None


def get_field_value(values: Dict[str, Any], field_id: str) -> Any:
    """Read a logical field from a flat map of storage-named values."""
    return values.get(to_storage_field(field_id))
