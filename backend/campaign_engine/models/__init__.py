"""
SQLAlchemy models for the campaign engine.
"""
from .user import User
from .qualification import Qualification, QualificationType
from .campaign import Campaign, CampaignAgent
from .contact import Contact, ContactStatus, STANDARD_FIELDS
from .call_history import CallHistory, CallDirection, CallStatus

__all__ = [
    "User",
    "Qualification",
    "QualificationType",
    "Campaign",
    "CampaignAgent",
    "Contact",
    "ContactStatus",
    "STANDARD_FIELDS",
    "CallHistory",
    "CallDirection",
    "CallStatus",
]
