"""
Contact field edits and read access.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from ..database import RowStore
from ..exceptions import InvalidContactFieldError, NotFoundError
from ..models.call_history import CallHistory
from ..models.contact import Contact
from ..schemas.call_history import CallHistoryResponse
from ..schemas.contact import ContactResponse, ContactUpdate
from ..schemas.documents import CustomFieldsDocument
from .dedup_service import is_valid_phone_number, normalize_record

logger = logging.getLogger(__name__)


class ContactEditor:
    """Edits contact fields. Never changes a contact's status or campaign."""

    def __init__(self, store: RowStore):
        self.store = store

    def update_contact(
        self,
        contact_id: str,
        patch: Union[ContactUpdate, Dict[str, Any]],
    ) -> ContactResponse:
        """Write only the fields present in the patch."""
        if not isinstance(patch, ContactUpdate):
            patch = ContactUpdate.model_validate(patch)

        update_data = patch.model_dump(exclude_unset=True)

        if "phone_number" in update_data:
            phone_number = update_data["phone_number"]
            if not is_valid_phone_number(phone_number):
                raise InvalidContactFieldError(f"Invalid phone number: {phone_number!r}")
            update_data["phone_number"] = str(phone_number)

        if "custom_fields" in update_data:
            # Drop standard keys so custom fields stay disjoint from the columns
            custom = normalize_record({"customFields": update_data["custom_fields"] or {}}).custom_fields
            update_data["custom_fields"] = CustomFieldsDocument(values=custom)

        with self.store.transaction("update_contact") as db:
            contact = db.query(Contact).filter(Contact.id == contact_id).with_for_update().first()
            if contact is None:
                raise NotFoundError("Contact", contact_id)

            for key, value in update_data.items():
                setattr(contact, key, value)

            db.flush()
            response = ContactResponse.model_validate(contact)

        logger.info(f"[Contacts] Updated contact {contact_id}: {sorted(update_data)}")
        return response

    def get_contact(self, contact_id: str) -> Optional[ContactResponse]:
        with self.store.transaction("get_contact") as db:
            contact = db.get(Contact, contact_id)
            return ContactResponse.model_validate(contact) if contact else None

    def get_contact_history(self, contact_id: str) -> List[CallHistoryResponse]:
        """Call history of a contact, newest first."""
        with self.store.transaction("get_contact_history") as db:
            records = (
                db.query(CallHistory)
                .filter(CallHistory.contact_id == contact_id)
                .order_by(CallHistory.start_time.desc())
                .all()
            )
            return [CallHistoryResponse.model_validate(r) for r in records]
