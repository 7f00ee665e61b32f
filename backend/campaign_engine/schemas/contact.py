"""
Contact and import schemas for the engine boundary.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel
from .documents import CustomFieldsDocument


class ContactResponse(CamelModel):
    """Contact as returned to callers."""
    id: str
    campaign_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: str
    postal_code: Optional[str] = None
    status: str
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("custom_fields", mode="before")
    @classmethod
    def unwrap_document(cls, value: Any) -> Any:
        if isinstance(value, CustomFieldsDocument):
            return dict(value.values)
        return value or {}


class ContactUpdate(CamelModel):
    """
    Patch of editable contact fields.

    Only the fields actually supplied are written. Status is not editable
    here; it only moves through leasing and qualification.
    """
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    postal_code: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None


class DedupConfig(CamelModel):
    """Deduplication settings of one import call."""
    enabled: bool = False
    field_ids: List[str] = Field(default_factory=list)

    @field_validator("field_ids", mode="before")
    @classmethod
    def unique_fields(cls, value: Any) -> Any:
        # Ordered set: keep the first occurrence of each id
        if not value:
            return []
        return list(dict.fromkeys(value))

    @property
    def is_active(self) -> bool:
        return self.enabled and len(self.field_ids) > 0


class Rejection(CamelModel):
    """An import row that was not stored, with the reason."""
    row: Dict[str, Any]
    reason: str


class ImportOutcome(CamelModel):
    """Result of one import call. Not persisted."""
    accepted: List[ContactResponse] = Field(default_factory=list)
    rejected: List[Rejection] = Field(default_factory=list)
