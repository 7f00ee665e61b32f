"""
Call history model - immutable record of a call or qualification event.
"""
import uuid
from enum import Enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey

from ..database import Base


class CallDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class CallStatus(str, Enum):
    ANSWERED = "answered"
    NO_ANSWER = "no_answer"
    BUSY = "busy"
    FAILED = "failed"


class CallHistory(Base):
    """Append-only call fact. Never updated or deleted by the engine."""

    __tablename__ = "call_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Timing
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer, default=0, nullable=False)  # seconds
    billable_duration = Column(Integer, default=0, nullable=False)  # seconds

    # Call info
    direction = Column(String(10), default=CallDirection.OUTBOUND.value, nullable=False)
    call_status = Column(String(20), default=CallStatus.ANSWERED.value, nullable=False)
    source = Column(String(100), nullable=True)  # Agent login id
    destination = Column(String(100), nullable=True)  # Dialed number

    # References
    agent_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=True, index=True)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=True, index=True)
    qualification_id = Column(String(36), ForeignKey("qualifications.id"), nullable=True)

    def __repr__(self):
        return f"<CallHistory {self.source} -> {self.destination} {self.call_status}>"
