"""
Campaign aggregate persistence.

A save upserts the campaign row and replaces its whole agent assignment set
inside one transaction.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

from ..database import RowStore
from ..exceptions import NotFoundError
from ..models.campaign import Campaign, CampaignAgent
from ..models.contact import Contact
from ..schemas.campaign import CampaignPayload, CampaignResponse
from ..schemas.contact import ContactResponse
from ..schemas.documents import FilterRulesDocument, QuotaRulesDocument
from .capabilities import AllowAllCapabilities, CapabilityChecker, OperationKind, ensure_permitted

logger = logging.getLogger(__name__)


def load_assigned_user_ids(db: Session, campaign_id: str) -> List[str]:
    rows = (
        db.query(CampaignAgent.user_id)
        .filter(CampaignAgent.campaign_id == campaign_id)
        .order_by(CampaignAgent.user_id)
        .all()
    )
    return [row.user_id for row in rows]


def build_campaign_response(
    db: Session,
    campaign: Campaign,
    assigned_user_ids: Optional[List[str]] = None,
) -> CampaignResponse:
    """Campaign snapshot with its assignment set. Contacts are never included."""
    response = CampaignResponse.model_validate(campaign)
    if assigned_user_ids is None:
        assigned_user_ids = load_assigned_user_ids(db, campaign.id)
    response.assigned_user_ids = list(assigned_user_ids)
    return response


class CampaignStore:
    """Upserts campaigns and resynchronizes their agent assignments."""

    def __init__(self, store: RowStore, capabilities: Optional[CapabilityChecker] = None):
        self.store = store
        self.capabilities = capabilities or AllowAllCapabilities()

    def save_campaign(
        self,
        campaign: Union[CampaignPayload, Dict[str, Any]],
        existing_id: Optional[str] = None,
    ) -> CampaignResponse:
        """
        Insert (no existing_id) or update (existing_id) a campaign.

        The assignment set is fully replaced: every existing assignment row
        is deleted and one row per supplied agent is inserted. Any failure
        rolls back both the upsert and the assignment replacement.
        """
        ensure_permitted(self.capabilities, OperationKind.SAVE_CAMPAIGN)
        payload = campaign if isinstance(campaign, CampaignPayload) else CampaignPayload.model_validate(campaign)
        fields = self._campaign_fields(payload)

        with self.store.transaction("save_campaign") as db:
            if existing_id:
                db_campaign = (
                    db.query(Campaign)
                    .filter(Campaign.id == existing_id)
                    .with_for_update()
                    .first()
                )
                if db_campaign is None:
                    raise NotFoundError("Campaign", existing_id)
                for key, value in fields.items():
                    setattr(db_campaign, key, value)
            else:
                db_campaign = Campaign(id=payload.id or str(uuid.uuid4()), **fields)
                db.add(db_campaign)

            db.flush()
            self._replace_assignments(db, db_campaign.id, payload.assigned_user_ids)
            db.refresh(db_campaign)
            response = build_campaign_response(db, db_campaign, payload.assigned_user_ids)

        action = "Updated" if existing_id else "Created"
        logger.info(
            f"[Campaigns] {action} campaign {response.id} "
            f"with {len(response.assigned_user_ids)} assigned agents"
        )
        return response

    def _campaign_fields(self, payload: CampaignPayload) -> Dict[str, Any]:
        settings = self.store.settings
        return {
            "name": payload.name,
            "description": payload.description,
            "script_id": payload.script_id,
            "qualification_group_id": payload.qualification_group_id,
            "caller_id": payload.caller_id,
            "is_active": payload.is_active,
            "dialing_mode": payload.dialing_mode.value,
            "priority": payload.priority or settings.default_campaign_priority,
            "wrap_up_time": (
                payload.wrap_up_time if payload.wrap_up_time is not None
                else settings.default_wrap_up_time
            ),
            "quota_rules": QuotaRulesDocument(rules=payload.quota_rules),
            "filter_rules": FilterRulesDocument(rules=payload.filter_rules),
        }

    @staticmethod
    def _replace_assignments(db: Session, campaign_id: str, user_ids: List[str]) -> None:
        db.execute(delete(CampaignAgent).where(CampaignAgent.campaign_id == campaign_id))
        if user_ids:
            db.execute(
                insert(CampaignAgent),
                [{"campaign_id": campaign_id, "user_id": user_id} for user_id in user_ids],
            )

    def get_campaign(self, campaign_id: str) -> Optional[CampaignResponse]:
        with self.store.transaction("get_campaign") as db:
            campaign = db.get(Campaign, campaign_id)
            if campaign is None:
                return None
            return build_campaign_response(db, campaign)

    def list_campaigns(self) -> List[CampaignResponse]:
        """All campaigns ordered by name, each with its assignment set."""
        with self.store.transaction("list_campaigns") as db:
            campaigns = db.query(Campaign).order_by(Campaign.name).all()

            assignments: Dict[str, List[str]] = {c.id: [] for c in campaigns}
            for row in db.query(CampaignAgent).order_by(CampaignAgent.user_id).all():
                assignments.setdefault(row.campaign_id, []).append(row.user_id)

            return [build_campaign_response(db, c, assignments[c.id]) for c in campaigns]

    def delete_campaign(self, campaign_id: str) -> bool:
        """Delete a campaign with its assignments and contacts. False if absent."""
        with self.store.transaction("delete_campaign") as db:
            result = db.execute(delete(Campaign).where(Campaign.id == campaign_id))
            deleted = result.rowcount > 0

        if deleted:
            logger.info(f"[Campaigns] Deleted campaign {campaign_id}")
        return deleted

    def list_contacts(self, campaign_id: str, status: Optional[str] = None) -> List[ContactResponse]:
        """Contacts of a campaign in queue order, optionally by status."""
        with self.store.transaction("list_contacts") as db:
            query = db.query(Contact).filter(Contact.campaign_id == campaign_id)
            if status:
                query = query.filter(Contact.status == status)
            contacts = query.order_by(Contact.created_at, Contact.import_rank).all()
            return [ContactResponse.model_validate(c) for c in contacts]
