"""
Lease result schema.
"""
from typing import Optional

from .base import CamelModel
from .campaign import CampaignResponse
from .contact import ContactResponse


class LeaseResult(CamelModel):
    """A leased contact with its campaign snapshot, or both empty on a miss."""
    contact: Optional[ContactResponse] = None
    campaign: Optional[CampaignResponse] = None

    @property
    def is_empty(self) -> bool:
        return self.contact is None
