"""
Deduplication engine: record normalization, phone validation, dedup keys and
per-record classification.

Everything here is pure; persistence lives in import_service.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from ..exceptions import InvalidContactFieldError
from ..schemas.contact import DedupConfig, Rejection
from .field_mapping import get_field_value, standard_field_for

INVALID_PHONE_REASON = "invalid phone number"
INVALID_CUSTOM_FIELDS_REASON = "invalid custom fields"
DUPLICATE_REASON = "duplicate"

DEFAULT_KEY_SEPARATOR = "||"

_PHONE_PATTERN = re.compile(r"[0-9]+")

# Record keys that carry metadata rather than contact fields
_RESERVED_KEYS = {
    "id", "campaignId", "campaign_id", "status",
    "customFields", "custom_fields", "originalRow", "original_row",
}


@dataclass
class NormalizedRecord:
    """An import record split into standard columns and custom fields."""
    standard: Dict[str, Any]
    custom_fields: Dict[str, Any]
    original_row: Dict[str, Any]

    @property
    def phone_number(self) -> Optional[str]:
        return self.standard.get("phone_number")

    def field_values(self) -> Dict[str, Any]:
        values = dict(self.custom_fields)
        values.update(self.standard)
        return values


@dataclass
class StagedContact:
    """A record accepted by classification, waiting to be inserted."""
    record: NormalizedRecord
    input_index: int


@dataclass
class Classification:
    staged: List[StagedContact] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)


def _clean(storage_field: str, value: Any) -> Any:
    if isinstance(value, str):
        # Phone numbers are validated as supplied, surrounding spaces included
        if storage_field != "phone_number":
            value = value.strip()
        return value or None
    return value


def original_row_of(record: Dict[str, Any]) -> Dict[str, Any]:
    """The row reported back on rejection: originalRow when supplied, else the record."""
    return dict(record.get("originalRow") or record.get("original_row") or record)


def normalize_record(record: Dict[str, Any]) -> NormalizedRecord:
    """
    Split a record keyed by logical field ids into standard and custom fields.

    Standard keys never stay inside custom fields: a standard key found in
    customFields is promoted when the standard field is unset, otherwise dropped.

    Raises:
        InvalidContactFieldError: if customFields is not a mapping
    """
    standard: Dict[str, Any] = {}
    custom: Dict[str, Any] = {}

    for key, value in record.items():
        if key in _RESERVED_KEYS:
            continue
        storage_field = standard_field_for(key)
        if storage_field:
            if standard.get(storage_field) is None:
                standard[storage_field] = _clean(storage_field, value)
        else:
            custom[key] = value

    raw_custom = record.get("customFields", record.get("custom_fields"))
    if raw_custom is None:
        raw_custom = {}
    elif not isinstance(raw_custom, Mapping):
        raise InvalidContactFieldError(f"customFields must be an object, got {type(raw_custom).__name__}")

    for key, value in raw_custom.items():
        storage_field = standard_field_for(key)
        if storage_field:
            if standard.get(storage_field) is None:
                standard[storage_field] = _clean(storage_field, value)
            continue
        custom[key] = value

    if standard.get("phone_number") is not None:
        standard["phone_number"] = str(standard["phone_number"])

    return NormalizedRecord(standard=standard, custom_fields=custom, original_row=original_row_of(record))


def is_valid_phone_number(value: Any) -> bool:
    """Phone numbers are required and must contain ASCII digits only."""
    if value is None:
        return False
    return _PHONE_PATTERN.fullmatch(str(value)) is not None


def build_dedup_key(
    values: Dict[str, Any],
    field_ids: Iterable[str],
    separator: str = DEFAULT_KEY_SEPARATOR,
) -> Optional[str]:
    """
    Composite key over the configured fields (trimmed, case-insensitive).

    Missing values count as empty strings, so records blank on every field
    share one key. Only the empty key of a single blank field is None.
    """
    parts = []
    for field_id in field_ids:
        value = get_field_value(values, field_id)
        parts.append("" if value is None else str(value).strip().lower())
    return separator.join(parts) or None


def classify_records(
    records: List[Dict[str, Any]],
    dedup_config: DedupConfig,
    existing_keys: Set[str],
    separator: str = DEFAULT_KEY_SEPARATOR,
) -> Classification:
    """
    Classify records in input order.

    A record is rejected when its customFields is not an object, when its
    phone number is missing or malformed, or, with deduplication active,
    when its key was already seen among stored contacts or earlier records
    of the same batch.
    """
    result = Classification()
    seen = set(existing_keys)

    for index, record in enumerate(records):
        try:
            normalized = normalize_record(record)
        except InvalidContactFieldError:
            result.rejected.append(Rejection(row=original_row_of(record), reason=INVALID_CUSTOM_FIELDS_REASON))
            continue

        if not is_valid_phone_number(normalized.phone_number):
            result.rejected.append(Rejection(row=normalized.original_row, reason=INVALID_PHONE_REASON))
            continue

        if dedup_config.is_active:
            key = build_dedup_key(normalized.field_values(), dedup_config.field_ids, separator)
            if key is not None:
                if key in seen:
                    result.rejected.append(Rejection(row=normalized.original_row, reason=DUPLICATE_REASON))
                    continue
                seen.add(key)

        result.staged.append(StagedContact(record=normalized, input_index=index))

    return result
