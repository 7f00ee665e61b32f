"""
Contact model - a person to be called within a campaign.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Index
from sqlalchemy.orm import relationship

from ..database import Base
from ..schemas.documents import CustomFieldsDocument
from .document_type import VersionedDocument


class ContactStatus(str, Enum):
    """Contact lifecycle: pending -> called -> qualified."""
    PENDING = "pending"
    CALLED = "called"
    QUALIFIED = "qualified"
    INVALID = "invalid"  # Excluded at import, never stored as dialable


# Standard columns addressable by logical field id
STANDARD_FIELDS = ("first_name", "last_name", "phone_number", "postal_code")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(Base):
    """Contact row - created only through import."""

    __tablename__ = "contacts"
    __table_args__ = (
        Index("ix_contacts_campaign_status_queue", "campaign_id", "status", "created_at", "import_rank"),
    )

    # Primary key
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Owning campaign (immutable after creation)
    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    campaign = relationship("Campaign", back_populates="contacts")

    # Personal info
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone_number = Column(String(50), nullable=False)  # Digits only
    postal_code = Column(String(20), nullable=True)

    # Queue state
    status = Column(String(20), default=ContactStatus.PENDING.value, nullable=False)
    import_rank = Column(Integer, default=0, nullable=False)  # Position within its import batch

    # Open key/value fields, disjoint from the standard columns
    custom_fields = Column(VersionedDocument(CustomFieldsDocument), nullable=False,
                           default=lambda: CustomFieldsDocument())

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<Contact {self.phone_number} [{self.status}]>"

    def field_values(self) -> dict:
        """Standard fields plus custom fields, keyed by storage name."""
        values = dict(self.custom_fields.values) if self.custom_fields else {}
        for name in STANDARD_FIELDS:
            values[name] = getattr(self, name)
        return values
