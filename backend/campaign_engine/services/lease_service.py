"""
Contact lease queue.

A lease picks a pending contact inside a transaction using
SELECT ... FOR UPDATE SKIP LOCKED, so concurrent callers never wait on each
other's rows. The claim itself is a conditional UPDATE (status still
pending); a caller that loses the race moves on to the next contact, which
keeps each contact with a single holder on databases without row locks.
"""
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..database import RowStore
from ..exceptions import NotFoundError
from ..models.campaign import Campaign, CampaignAgent
from ..models.contact import Contact, ContactStatus
from ..schemas.contact import ContactResponse
from ..schemas.lease import LeaseResult
from .campaign_service import build_campaign_response
from .capabilities import AllowAllCapabilities, CapabilityChecker, OperationKind, ensure_permitted
from .rules import QuotaCounter, is_contact_allowed, is_quota_reached

logger = logging.getLogger(__name__)


class ContactLeaseQueue:
    """Hands out pending contacts to agents, exactly one holder per contact."""

    def __init__(self, store: RowStore, capabilities: Optional[CapabilityChecker] = None):
        self.store = store
        self.capabilities = capabilities or AllowAllCapabilities()

    def _pending_query(self, db: Session, campaign_id: str):
        # FIFO by import time, then position within the import batch
        return (
            db.query(Contact)
            .filter(
                Contact.campaign_id == campaign_id,
                Contact.status == ContactStatus.PENDING.value,
            )
            .order_by(Contact.created_at, Contact.import_rank, Contact.id)
        )

    def lease_next_contact(self, campaign_id: str) -> LeaseResult:
        """
        Lease the next pending contact of a campaign.

        Returns an empty LeaseResult when no pending contact is available
        (not an error). Raises NotFoundError for an unknown campaign.
        """
        ensure_permitted(self.capabilities, OperationKind.LEASE_CONTACT)

        with self.store.transaction(
            "lease_next_contact", lock_timeout_ms=self.store.settings.lease_lock_timeout_ms
        ) as db:
            campaign = db.get(Campaign, campaign_id)
            if campaign is None:
                raise NotFoundError("Campaign", campaign_id)

            result = self._claim_first_pending(db, campaign)
            if result is None:
                logger.debug(f"[LeaseQueue] No pending contact in campaign {campaign_id}")
                return LeaseResult()

        logger.info(f"[LeaseQueue] Leased contact {result.contact.id} from campaign {campaign_id}")
        return result

    def lease_next_contact_for_agent(self, agent_id: str) -> LeaseResult:
        """
        Lease the next contact from the agent's assigned active campaigns.

        Campaigns are visited by priority (highest first) then name. Within
        a campaign, contacts excluded by filter rules or falling in a full
        quota segment are skipped; the first remaining pending contact that
        is not locked by another lease is claimed.
        """
        ensure_permitted(self.capabilities, OperationKind.LEASE_CONTACT)

        with self.store.transaction(
            "lease_next_contact_for_agent", lock_timeout_ms=self.store.settings.lease_lock_timeout_ms
        ) as db:
            campaigns = (
                db.query(Campaign)
                .join(CampaignAgent, CampaignAgent.campaign_id == Campaign.id)
                .filter(CampaignAgent.user_id == agent_id, Campaign.is_active.is_(True))
                .order_by(Campaign.priority.desc(), Campaign.name)
                .all()
            )
            if not campaigns:
                logger.debug(f"[LeaseQueue] Agent {agent_id} has no active campaign")
                return LeaseResult()

            for campaign in campaigns:
                result = self._lease_with_rules(db, campaign)
                if result is not None:
                    logger.info(
                        f"[LeaseQueue] Leased contact {result.contact.id} "
                        f"from campaign {campaign.id} for agent {agent_id}"
                    )
                    return result

        logger.debug(f"[LeaseQueue] No contact available for agent {agent_id}")
        return LeaseResult()

    def _lease_with_rules(self, db: Session, campaign: Campaign) -> Optional[LeaseResult]:
        filter_rules = campaign.filter_rules.rules if campaign.filter_rules else []
        quota_rules = campaign.quota_rules.rules if campaign.quota_rules else []

        if not filter_rules and not quota_rules:
            return self._claim_first_pending(db, campaign)

        counts = QuotaCounter(db).count(campaign.id, campaign.qualification_group_id, quota_rules)

        for candidate in self._pending_query(db, campaign.id).all():
            values = candidate.field_values()
            if not is_contact_allowed(values, filter_rules):
                continue
            if quota_rules and is_quota_reached(values, quota_rules, counts):
                continue

            # Re-select the candidate under lock; another lease may hold or have taken it
            locked = (
                db.query(Contact)
                .filter(Contact.id == candidate.id, Contact.status == ContactStatus.PENDING.value)
                .with_for_update(skip_locked=True)
                .populate_existing()
                .first()
            )
            if locked is not None:
                result = self._claim(db, locked, campaign)
                if result is not None:
                    return result

        return None

    def _claim_first_pending(self, db: Session, campaign: Campaign) -> Optional[LeaseResult]:
        """Claim the first pending contact in FIFO order, moving past rows taken meanwhile."""
        taken = []
        while True:
            query = self._pending_query(db, campaign.id)
            if taken:
                query = query.filter(Contact.id.notin_(taken))
            contact = query.with_for_update(skip_locked=True).first()
            if contact is None:
                return None

            result = self._claim(db, contact, campaign)
            if result is not None:
                return result
            taken.append(contact.id)

    @staticmethod
    def _claim(db: Session, contact: Contact, campaign: Campaign) -> Optional[LeaseResult]:
        """
        Move a contact from pending to called.

        The update only matches a row that is still pending, so a contact
        claimed by a concurrent lease yields None even where the database
        ignores row locks (SQLite).
        """
        claimed = db.execute(
            update(Contact)
            .where(Contact.id == contact.id, Contact.status == ContactStatus.PENDING.value)
            .values(status=ContactStatus.CALLED.value)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            logger.debug(f"[LeaseQueue] Contact {contact.id} was claimed by another lease")
            return None

        db.refresh(contact)
        return LeaseResult(
            contact=ContactResponse.model_validate(contact),
            campaign=build_campaign_response(db, campaign),
        )
