"""
Campaign model - an outbound dialing campaign and its agent assignments.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship

from ..database import Base
from ..schemas.documents import QuotaRulesDocument, FilterRulesDocument
from .document_type import VersionedDocument


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Campaign(Base):
    """Outbound campaign - owns its contacts and its agent assignment set."""

    __tablename__ = "campaigns"

    # Primary key (supplied by the caller on creation)
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Campaign info
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # References to collaborators managed elsewhere
    script_id = Column(String(36), nullable=True)
    qualification_group_id = Column(String(36), nullable=True)
    caller_id = Column(String(50), nullable=True)

    # Dialing configuration
    is_active = Column(Boolean, default=True, nullable=False)
    dialing_mode = Column(String(20), default="PROGRESSIVE", nullable=False)
    priority = Column(Integer, default=5, nullable=False)
    wrap_up_time = Column(Integer, default=15, nullable=False)  # seconds

    # Structured documents
    quota_rules = Column(VersionedDocument(QuotaRulesDocument), nullable=False,
                         default=lambda: QuotaRulesDocument())
    filter_rules = Column(VersionedDocument(FilterRulesDocument), nullable=False,
                          default=lambda: FilterRulesDocument())

    # Relationships (child rows are removed by ON DELETE CASCADE)
    contacts = relationship("Contact", back_populates="campaign", lazy="dynamic", passive_deletes=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<Campaign {self.name}>"


class CampaignAgent(Base):
    """Junction row assigning an agent to a campaign."""

    __tablename__ = "campaign_agents"

    campaign_id = Column(String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    def __repr__(self):
        return f"<CampaignAgent {self.campaign_id}:{self.user_id}>"
