"""
Campaign filter and quota rules.

Matching is pure and works on a flat map of contact values keyed by storage
field name (see Contact.field_values). Quota counts are computed from the
call history of positively qualified contacts.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.call_history import CallHistory
from ..models.contact import Contact
from ..models.qualification import Qualification, QualificationType
from ..schemas.documents import FilterRule, FilterType, QuotaRule, RuleOperator
from .field_mapping import get_field_value

logger = logging.getLogger(__name__)


def match_rule(values: Dict[str, Any], rule) -> bool:
    """Check a contact against one filter or quota rule."""
    contact_value = get_field_value(values, rule.contact_field)
    if contact_value is None:
        return False

    contact_string = str(contact_value).strip().lower()
    rule_string = str(rule.value if rule.value is not None else "").strip().lower()

    if rule.operator == RuleOperator.EQUALS:
        return contact_string == rule_string
    if rule.operator == RuleOperator.STARTS_WITH:
        return contact_string.startswith(rule_string)
    if rule.operator == RuleOperator.CONTAINS:
        return rule_string in contact_string
    if rule.operator == RuleOperator.IS_NOT_EMPTY:
        return contact_string != ""
    return False


def is_contact_allowed(values: Dict[str, Any], filter_rules: List[FilterRule]) -> bool:
    """
    A contact passes when it matches at least one include rule (if any
    exist) and no exclude rule.
    """
    if not filter_rules:
        return True

    includes = [r for r in filter_rules if r.type == FilterType.INCLUDE]
    excludes = [r for r in filter_rules if r.type == FilterType.EXCLUDE]

    if includes and not any(match_rule(values, rule) for rule in includes):
        return False
    return not any(match_rule(values, rule) for rule in excludes)


def is_quota_reached(
    values: Dict[str, Any],
    quota_rules: List[QuotaRule],
    counts: Dict[str, int],
) -> bool:
    """True when the contact falls in a segment whose quota is already full."""
    for rule in quota_rules:
        if match_rule(values, rule) and counts.get(rule.id, 0) >= rule.limit:
            return True
    return False


class QuotaCounter:
    """Counts positively qualified contacts per quota segment of a campaign."""

    def __init__(self, db: Session):
        self.db = db

    def count(
        self,
        campaign_id: str,
        qualification_group_id: Optional[str],
        quota_rules: List[QuotaRule],
    ) -> Dict[str, int]:
        if not quota_rules or not qualification_group_id:
            return {}

        positive_ids = [
            row.id for row in self.db.query(Qualification.id).filter(
                Qualification.group_id == qualification_group_id,
                Qualification.type == QualificationType.POSITIVE.value,
            )
        ]
        if not positive_ids:
            return {}

        qualified_ids = (
            select(CallHistory.contact_id)
            .where(
                CallHistory.campaign_id == campaign_id,
                CallHistory.qualification_id.in_(positive_ids),
            )
            .distinct()
        )
        qualified_contacts = self.db.query(Contact).filter(Contact.id.in_(qualified_ids)).all()

        counts = {rule.id: 0 for rule in quota_rules}
        for contact in qualified_contacts:
            values = contact.field_values()
            for rule in quota_rules:
                if match_rule(values, rule):
                    counts[rule.id] += 1

        logger.debug(f"[Rules] Quota counts for campaign {campaign_id}: {counts}")
        return counts
