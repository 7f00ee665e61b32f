"""
Deduplicated contact import pipeline.

One import call runs in a single transaction:
1. lock the campaign row so concurrent imports into it serialize,
2. preload the dedup keys of already-stored contacts,
3. classify the records in memory (dedup_service),
4. insert every accepted record with one bulk statement.

The returned accepted list is read back from the store after commit.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Union

from sqlalchemy import insert
from sqlalchemy.orm import Session

from ..database import RowStore
from ..exceptions import NotFoundError
from ..models.campaign import Campaign
from ..models.contact import Contact, ContactStatus
from ..schemas.contact import ContactResponse, DedupConfig, ImportOutcome
from ..schemas.documents import CustomFieldsDocument
from .capabilities import AllowAllCapabilities, CapabilityChecker, OperationKind, ensure_permitted
from .dedup_service import StagedContact, build_dedup_key, classify_records

logger = logging.getLogger(__name__)

# Max identifiers per IN (...) clause when reading back accepted rows
READ_BACK_CHUNK_SIZE = 500


class ContactImporter:
    """Bulk contact import with validation and deduplication."""

    def __init__(self, store: RowStore, capabilities: Optional[CapabilityChecker] = None):
        self.store = store
        self.capabilities = capabilities or AllowAllCapabilities()
        self.separator = store.settings.dedup_key_separator

    def import_contacts(
        self,
        campaign_id: str,
        records: List[Dict[str, Any]],
        dedup_config: Union[DedupConfig, Dict[str, Any], None] = None,
    ) -> ImportOutcome:
        """
        Import records into a campaign.

        Row-level problems (bad phone number, duplicate) are reported in
        `rejected`; they never raise. Any statement failure rolls back the
        whole import and propagates.
        """
        ensure_permitted(self.capabilities, OperationKind.IMPORT_CONTACTS)
        config = self._coerce_config(dedup_config)

        with self.store.transaction("import_contacts") as db:
            self._lock_campaign(db, campaign_id)

            existing_keys: Set[str] = set()
            if config.is_active:
                existing_keys = self._load_existing_keys(db, campaign_id, config)

            classification = classify_records(records, config, existing_keys, self.separator)
            rows = self._build_rows(campaign_id, classification.staged)
            if rows:
                db.execute(insert(Contact), rows)

        accepted = self._read_back([row["id"] for row in rows])

        logger.info(
            f"[Import] Campaign {campaign_id}: {len(records)} records, "
            f"{len(accepted)} accepted, {len(classification.rejected)} rejected"
        )
        return ImportOutcome(accepted=accepted, rejected=classification.rejected)

    @staticmethod
    def _coerce_config(dedup_config: Union[DedupConfig, Dict[str, Any], None]) -> DedupConfig:
        if dedup_config is None:
            return DedupConfig()
        if isinstance(dedup_config, DedupConfig):
            return dedup_config
        return DedupConfig.model_validate(dedup_config)

    @staticmethod
    def _lock_campaign(db: Session, campaign_id: str) -> None:
        campaign = (
            db.query(Campaign.id)
            .filter(Campaign.id == campaign_id)
            .with_for_update()
            .first()
        )
        if campaign is None:
            raise NotFoundError("Campaign", campaign_id)

    def _load_existing_keys(self, db: Session, campaign_id: str, config: DedupConfig) -> Set[str]:
        """Dedup keys of every contact already stored in the campaign."""
        keys: Set[str] = set()
        query = db.query(Contact).filter(Contact.campaign_id == campaign_id)
        for contact in query.yield_per(1000):
            key = build_dedup_key(contact.field_values(), config.field_ids, self.separator)
            if key is not None:
                keys.add(key)
        logger.debug(f"[Import] Preloaded {len(keys)} dedup keys for campaign {campaign_id}")
        return keys

    @staticmethod
    def _build_rows(campaign_id: str, staged: List[StagedContact]) -> List[Dict[str, Any]]:
        now = datetime.now(timezone.utc)
        rows = []
        for item in staged:
            standard = item.record.standard
            rows.append({
                "id": str(uuid.uuid4()),
                "campaign_id": campaign_id,
                "first_name": standard.get("first_name"),
                "last_name": standard.get("last_name"),
                "phone_number": standard["phone_number"],
                "postal_code": standard.get("postal_code"),
                "status": ContactStatus.PENDING.value,
                "import_rank": item.input_index,
                "custom_fields": CustomFieldsDocument(values=item.record.custom_fields),
                "created_at": now,
                "updated_at": now,
            })
        return rows

    def _read_back(self, contact_ids: List[str]) -> List[ContactResponse]:
        """Load committed contacts, preserving the given (input) order."""
        if not contact_ids:
            return []

        found: Dict[str, Contact] = {}
        with self.store.transaction("import_contacts.read_back") as db:
            for start in range(0, len(contact_ids), READ_BACK_CHUNK_SIZE):
                chunk = contact_ids[start:start + READ_BACK_CHUNK_SIZE]
                for contact in db.query(Contact).filter(Contact.id.in_(chunk)).all():
                    found[contact.id] = contact

            return [ContactResponse.model_validate(found[cid]) for cid in contact_ids if cid in found]
