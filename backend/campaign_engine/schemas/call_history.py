"""
Call history schemas.
"""
from datetime import datetime
from typing import Optional

from .base import CamelModel


class CallHistoryResponse(CamelModel):
    """Immutable call history record."""
    id: str
    start_time: datetime
    end_time: datetime
    duration: int
    billable_duration: int
    direction: str
    call_status: str
    source: Optional[str] = None
    destination: Optional[str] = None
    agent_id: Optional[str] = None
    contact_id: Optional[str] = None
    campaign_id: Optional[str] = None
    qualification_id: Optional[str] = None
