"""
Campaign schemas for the engine boundary.
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import CamelModel
from .documents import FilterRule, QuotaRule, StoredDocument


class DialingMode(str, Enum):
    MANUAL = "MANUAL"
    PROGRESSIVE = "PROGRESSIVE"
    PREDICTIVE = "PREDICTIVE"


def _unwrap_rules(value: Any) -> Any:
    if isinstance(value, StoredDocument):
        return value.rules
    return value or []


class CampaignPayload(CamelModel):
    """Full campaign state supplied on save (insert or update)."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    script_id: Optional[str] = None
    qualification_group_id: Optional[str] = None
    caller_id: Optional[str] = None
    is_active: bool = True
    dialing_mode: DialingMode = DialingMode.PROGRESSIVE
    priority: Optional[int] = Field(None, ge=1, le=10)
    wrap_up_time: Optional[int] = Field(None, ge=0)
    quota_rules: List[QuotaRule] = Field(default_factory=list)
    filter_rules: List[FilterRule] = Field(default_factory=list)
    assigned_user_ids: List[str] = Field(default_factory=list)

    @field_validator("quota_rules", "filter_rules", mode="before")
    @classmethod
    def default_rules(cls, value: Any) -> Any:
        return value or []

    @field_validator("assigned_user_ids", mode="before")
    @classmethod
    def unique_agents(cls, value: Any) -> Any:
        """The assignment set holds each agent once, in first-seen order."""
        if not value:
            return []
        return list(dict.fromkeys(value))


class CampaignResponse(CamelModel):
    """Persisted campaign plus its assignment set (never its contacts)."""
    id: str
    name: str
    description: Optional[str] = None
    script_id: Optional[str] = None
    qualification_group_id: Optional[str] = None
    caller_id: Optional[str] = None
    is_active: bool
    dialing_mode: DialingMode
    priority: int
    wrap_up_time: int
    quota_rules: List[QuotaRule] = Field(default_factory=list)
    filter_rules: List[FilterRule] = Field(default_factory=list)
    assigned_user_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("quota_rules", "filter_rules", mode="before")
    @classmethod
    def unwrap_documents(cls, value: Any) -> Any:
        return _unwrap_rules(value)
