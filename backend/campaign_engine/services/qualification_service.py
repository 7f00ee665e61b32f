"""
Qualification recorder - finalizes a worked contact and appends its call history.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from ..database import RowStore
from ..exceptions import ContactCampaignMismatchError, InvalidTransitionError, NotFoundError
from ..models.call_history import CallHistory, CallDirection, CallStatus
from ..models.contact import Contact, ContactStatus
from ..models.user import User
from .capabilities import AllowAllCapabilities, CapabilityChecker, OperationKind, ensure_permitted

logger = logging.getLogger(__name__)

# Statuses from which a contact may be qualified. Re-qualifying appends history.
QUALIFIABLE_STATUSES = (ContactStatus.CALLED.value, ContactStatus.QUALIFIED.value)


class QualificationRecorder:
    """Records the qualification outcome of a contact atomically."""

    def __init__(self, store: RowStore, capabilities: Optional[CapabilityChecker] = None):
        self.store = store
        self.capabilities = capabilities or AllowAllCapabilities()

    def qualify_contact(
        self,
        contact_id: str,
        qualification_id: str,
        campaign_id: str,
        agent_id: str,
    ) -> None:
        """
        Mark a contact qualified and append one call history record.

        The record stands for the qualification event rather than a live
        call trace: start and end are the current instant and durations are 0.

        Raises:
            NotFoundError: if the contact or the agent does not exist
            ContactCampaignMismatchError: if the contact belongs to another campaign
            InvalidTransitionError: if the contact was never leased
        """
        ensure_permitted(self.capabilities, OperationKind.QUALIFY_CONTACT)

        with self.store.transaction("qualify_contact") as db:
            contact = (
                db.query(Contact)
                .filter(Contact.id == contact_id)
                .with_for_update()
                .first()
            )
            if contact is None:
                raise NotFoundError("Contact", contact_id)

            if contact.campaign_id != campaign_id:
                raise ContactCampaignMismatchError(contact_id, campaign_id)

            agent = db.get(User, agent_id)
            if agent is None:
                raise NotFoundError("Agent", agent_id)

            if contact.status not in QUALIFIABLE_STATUSES:
                raise InvalidTransitionError(contact_id, contact.status, ContactStatus.QUALIFIED.value)

            contact.status = ContactStatus.QUALIFIED.value

            now = datetime.now(timezone.utc)
            db.add(CallHistory(
                start_time=now,
                end_time=now,
                duration=0,
                billable_duration=0,
                direction=CallDirection.OUTBOUND.value,
                call_status=CallStatus.ANSWERED.value,
                source=agent.login_id,
                destination=contact.phone_number,
                agent_id=agent.id,
                contact_id=contact.id,
                campaign_id=contact.campaign_id,
                qualification_id=qualification_id,
            ))

        logger.info(
            f"[Qualification] Contact {contact_id} qualified as {qualification_id} by agent {agent_id}"
        )
