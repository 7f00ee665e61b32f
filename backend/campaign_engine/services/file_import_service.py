"""
Contact file parsing for imports.

Reads CSV (.csv) and Excel (.xlsx) files into rows, auto-detects which
column feeds which contact field, and maps rows into import records for
ContactImporter. Each record keeps its originalRow so rejections report the
row as it appeared in the file.
"""
import csv
import io
import logging
from typing import Any, Dict, List, Tuple

import openpyxl

from ..exceptions import ContactFileError
from .field_mapping import standard_field_for

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".csv", ".xlsx")

# ---------------------------------------------------------------------------
# Flexible column mapping
# Each field id has a list of possible column headers (matched case-insensitively).
# ---------------------------------------------------------------------------
COLUMN_ALIASES: Dict[str, List[str]] = {
    "phoneNumber": [
        "phonenumber", "phone_number", "phone number", "phone", "telephone",
        "téléphone", "tel", "numero", "numéro", "mobile",
    ],
    "firstName": [
        "firstname", "first_name", "first name", "first", "prenom", "prénom",
    ],
    "lastName": [
        "lastname", "last_name", "last name", "last", "nom", "surname",
    ],
    "postalCode": [
        "postalcode", "postal_code", "postal code", "postal", "cp", "zip", "zipcode",
        "code postal",
    ],
}


def _build_alias_lookup() -> Dict[str, str]:
    """Build a reverse lookup: normalized header -> field id."""
    lookup: Dict[str, str] = {}
    for field_id, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            lookup[alias.lower().strip()] = field_id
    return lookup


_ALIAS_LOOKUP = _build_alias_lookup()


def detect_column_mapping(columns: List[str]) -> Dict[str, str]:
    """
    Auto-detect column mapping based on file headers.
    Returns {column_name: field_id}; each field is mapped at most once.
    """
    mapping: Dict[str, str] = {}
    used_fields: set = set()

    for column in columns:
        normalized = column.lower().strip()
        field_id = _ALIAS_LOOKUP.get(normalized)
        if field_id and field_id not in used_fields:
            mapping[column] = field_id
            used_fields.add(field_id)

    return mapping


def parse_contact_file(filename: str, content: bytes) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Parse CSV or Excel file content into (columns, rows)."""
    lower = filename.lower()

    if lower.endswith(".csv"):
        return _parse_csv(content)
    if lower.endswith(".xlsx"):
        return _parse_xlsx(content)

    raise ContactFileError(f"Unsupported file format: {filename}")


def _parse_csv(content: bytes) -> Tuple[List[str], List[Dict[str, Any]]]:
    try:
        text = content.decode("utf-8-sig")  # Handle BOM
    except UnicodeDecodeError as e:
        raise ContactFileError("File encoding not supported. Please use UTF-8.") from e

    try:
        sample = text[:4096]
        dialect = csv.Sniffer().sniff(sample, delimiters=",;\t") if sample.strip() else csv.excel
    except csv.Error:
        dialect = csv.excel

    try:
        reader = csv.DictReader(io.StringIO(text), dialect=dialect)
        columns = [c.strip() for c in (reader.fieldnames or [])]
        rows = []
        for raw in reader:
            row = {
                (key or "").strip(): (value or "").strip() if isinstance(value, str) else ""
                for key, value in raw.items()
                if key is not None
            }
            if any(row.values()):
                rows.append(row)
    except csv.Error as e:
        raise ContactFileError(f"Invalid CSV format: {e}") from e

    return columns, rows


def _parse_xlsx(content: bytes) -> Tuple[List[str], List[Dict[str, Any]]]:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ContactFileError(f"Could not open Excel file: {e}") from e

    try:
        ws = wb.active
        if ws is None:
            raise ContactFileError("Excel file has no active worksheet")
        all_rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()

    if not all_rows:
        raise ContactFileError("Excel file is empty")

    # First row = headers
    columns = [
        str(c).strip() if c is not None else f"Column_{i}"
        for i, c in enumerate(all_rows[0])
    ]

    rows: List[Dict[str, Any]] = []
    for data_row in all_rows[1:]:
        row: Dict[str, Any] = {}
        for i, column in enumerate(columns):
            value = data_row[i] if i < len(data_row) else None
            row[column] = _cell_to_text(value)
        # Skip completely empty rows
        if any(v for v in row.values()):
            rows.append(row)

    return columns, rows


def _cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    # Phone numbers typed into numeric cells come back as int/float
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def map_rows_to_records(
    rows: List[Dict[str, Any]],
    column_mapping: Dict[str, str],
) -> List[Dict[str, Any]]:
    """
    Turn file rows into import records keyed by field id.

    Standard fields become top-level keys; every other mapped field goes
    into customFields. Unmapped columns are ignored.
    """
    records = []
    for row in rows:
        record: Dict[str, Any] = {"customFields": {}, "originalRow": dict(row)}
        for column, field_id in column_mapping.items():
            value = row.get(column, "")
            if isinstance(value, str):
                value = value.strip()
            if value in ("", None):
                continue
            storage_field = standard_field_for(field_id)
            if storage_field:
                if storage_field == "phone_number":
                    # Formatting spaces are dropped before validation
                    value = "".join(str(value).split())
                record[field_id] = value
            else:
                record["customFields"][field_id] = value
        records.append(record)
    return records


def load_contact_file(filename: str, content: bytes) -> Tuple[Dict[str, str], List[Dict[str, Any]]]:
    """Parse a file and map it with the detected columns. Returns (mapping, records)."""
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise ContactFileError("File must be a CSV or Excel file (.csv, .xlsx)")

    columns, rows = parse_contact_file(filename, content)
    if not rows:
        raise ContactFileError("File is empty or contains no data rows")

    mapping = detect_column_mapping(columns)
    logger.info(f"[Import] Parsed {filename}: {len(rows)} rows, mapping {mapping}")
    return mapping, map_rows_to_records(rows, mapping)
