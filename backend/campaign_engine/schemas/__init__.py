"""
Pydantic schemas for the engine boundary.
"""
from .base import CamelModel
from .documents import (
    RuleOperator, FilterType, FilterRule, QuotaRule,
    QuotaRulesDocument, FilterRulesDocument, CustomFieldsDocument,
)
from .campaign import DialingMode, CampaignPayload, CampaignResponse
from .contact import ContactResponse, ContactUpdate, DedupConfig, Rejection, ImportOutcome
from .call_history import CallHistoryResponse
from .lease import LeaseResult

__all__ = [
    "CamelModel",
    "RuleOperator", "FilterType", "FilterRule", "QuotaRule",
    "QuotaRulesDocument", "FilterRulesDocument", "CustomFieldsDocument",
    "DialingMode", "CampaignPayload", "CampaignResponse",
    "ContactResponse", "ContactUpdate", "DedupConfig", "Rejection", "ImportOutcome",
    "CallHistoryResponse",
    "LeaseResult",
]
