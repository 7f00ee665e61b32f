"""
Qualification model - the outcomes an agent can record for a contact.
"""
import uuid
from enum import Enum
from sqlalchemy import Column, String, Text

from ..database import Base


class QualificationType(str, Enum):
    """Polarity of a qualification. Quotas count positive outcomes."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Qualification(Base):
    """A qualification code belonging to a qualification group."""

    __tablename__ = "qualifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    group_id = Column(String(36), nullable=True, index=True)
    code = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), default=QualificationType.NEUTRAL.value, nullable=False)

    def __repr__(self):
        return f"<Qualification {self.code} ({self.type})>"
