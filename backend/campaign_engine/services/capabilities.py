"""
Capability check collaborator.

License and trial gating is owned by an external subsystem; the engine only
asks whether an operation is permitted before opening a transaction.
"""
import logging
from enum import Enum
from typing import Optional, Protocol

from ..exceptions import OperationNotPermittedError

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    IMPORT_CONTACTS = "import_contacts"
    LEASE_CONTACT = "lease_contact"
    SAVE_CAMPAIGN = "save_campaign"
    QUALIFY_CONTACT = "qualify_contact"


class CapabilityChecker(Protocol):
    def is_operation_permitted(self, kind: OperationKind) -> bool:
        ...


class AllowAllCapabilities:
    """Used when the host does not provide a capability checker."""

    def is_operation_permitted(self, kind: OperationKind) -> bool:
        return True


def ensure_permitted(checker: Optional[CapabilityChecker], kind: OperationKind) -> None:
    """Raise OperationNotPermittedError when the checker denies the operation."""
    if checker is None or checker.is_operation_permitted(kind):
        return
    logger.warning(f"[Capabilities] Operation denied: {kind.value}")
    raise OperationNotPermittedError(kind.value)
