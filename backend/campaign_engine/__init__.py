"""
Campaign Engine - contact distribution, deduplicated import and qualification
for outbound call-center campaigns.
"""
from .config import Settings, get_settings, configure_logging
from .database import RowStore, create_store_engine, init_db
from .services import (
    CampaignStore,
    ContactEditor,
    ContactImporter,
    ContactLeaseQueue,
    QualificationRecorder,
)

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "RowStore",
    "create_store_engine",
    "init_db",
    "CampaignStore",
    "ContactEditor",
    "ContactImporter",
    "ContactLeaseQueue",
    "QualificationRecorder",
]
