"""
Structured documents stored in JSON columns (quota rules, filter rules, custom fields).

Each document is tagged with its kind and a schema version so that stored
values can be validated and migrated when read back.
"""
from enum import Enum
from typing import Any, ClassVar, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .base import CamelModel

SCHEMA_VERSION = 1


class RuleOperator(str, Enum):
    """Comparison applied between a contact field and a rule value."""
    EQUALS = "equals"
    STARTS_WITH = "starts_with"
    CONTAINS = "contains"
    IS_NOT_EMPTY = "is_not_empty"


class FilterType(str, Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


class FilterRule(CamelModel):
    """Restricts which pending contacts of a campaign may be dialed."""
    id: str
    type: FilterType
    contact_field: str
    operator: RuleOperator
    value: Optional[str] = None


class QuotaRule(CamelModel):
    """Caps the number of positively qualified contacts in a segment."""
    id: str
    contact_field: str
    operator: RuleOperator
    value: Optional[str] = None
    limit: int = Field(..., ge=0)


class StoredDocument(BaseModel):
    """Common envelope for versioned documents."""

    # Name of the field holding the document body, used to wrap legacy rows
    payload_field: ClassVar[str]

    schema_version: int = SCHEMA_VERSION

    @field_validator("schema_version")
    @classmethod
    def check_schema_version(cls, value: int) -> int:
        if value < 1 or value > SCHEMA_VERSION:
            raise ValueError(f"Unsupported document schema version: {value}")
        return value

    @classmethod
    def from_storage(cls, raw: Any) -> "StoredDocument":
        """Validate a stored value, wrapping bare (unversioned) payloads."""
        if isinstance(raw, dict) and ("kind" in raw or "schema_version" in raw):
            return cls.model_validate(raw)
        return cls.model_validate({cls.payload_field: raw or cls._empty_payload()})

    @classmethod
    def _empty_payload(cls) -> Any:
        return []

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class QuotaRulesDocument(StoredDocument):
    payload_field: ClassVar[str] = "rules"

    kind: Literal["quota_rules"] = "quota_rules"
    rules: List[QuotaRule] = Field(default_factory=list)


class FilterRulesDocument(StoredDocument):
    payload_field: ClassVar[str] = "rules"

    kind: Literal["filter_rules"] = "filter_rules"
    rules: List[FilterRule] = Field(default_factory=list)


class CustomFieldsDocument(StoredDocument):
    """Open key/value map of contact fields outside the standard columns."""
    payload_field: ClassVar[str] = "values"

    kind: Literal["custom_fields"] = "custom_fields"
    values: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def _empty_payload(cls) -> Any:
        return {}
