"""
Campaign engine services.
"""
from .capabilities import AllowAllCapabilities, CapabilityChecker, OperationKind
from .campaign_service import CampaignStore
from .contact_service import ContactEditor
from .import_service import ContactImporter
from .lease_service import ContactLeaseQueue
from .qualification_service import QualificationRecorder

__all__ = [
    "AllowAllCapabilities",
    "CapabilityChecker",
    "OperationKind",
    "CampaignStore",
    "ContactEditor",
    "ContactImporter",
    "ContactLeaseQueue",
    "QualificationRecorder",
]
